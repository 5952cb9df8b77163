import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from lkbb.core.database import Base


class Participant(Base):
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    event_category_id = Column(Integer, ForeignKey("event_categories.id"), nullable=True)
    team_name = Column(String, nullable=False)
    representative_name = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    user = relationship("User", back_populates="registrations")
    event = relationship("Event")
    event_category = relationship("EventCategory", back_populates="participants")
    details = relationship("ParticipantDetail", back_populates="participant", cascade="all, delete-orphan")
    scores = relationship("Score", back_populates="participant", cascade="all, delete-orphan")
    winners = relationship("Winner", back_populates="participant", cascade="all, delete-orphan")
    participations = relationship("Participation", back_populates="participant", cascade="all, delete-orphan")


class ParticipantDetail(Base):
    __tablename__ = "participant_details"

    id = Column(Integer, primary_key=True, index=True)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    member_name = Column(String, nullable=False)
    birth_date = Column(Date, nullable=True)
    age = Column(Integer, nullable=True)
    identifier = Column(String, nullable=True)
    address = Column(String, nullable=True)

    participant = relationship("Participant", back_populates="details")
