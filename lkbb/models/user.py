import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from lkbb.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    username = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="participant")  # admin, operator, judge, participant
    is_active = Column(Boolean, nullable=False, default=True)
    nisn_nta = Column(String, nullable=True)
    address = Column(String, nullable=True)
    # Only meaningful for operators: the single event they may administer
    focus_event_id = Column(Integer, ForeignKey("events.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    focus_event = relationship("Event", foreign_keys=[focus_event_id])
    registrations = relationship("Participant", back_populates="user")
