from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from lkbb.core.database import Base


class Participation(Base):
    __tablename__ = "participations"

    id = Column(Integer, primary_key=True, index=True)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    winner_id = Column(Integer, ForeignKey("winners.id", ondelete="SET NULL"), nullable=True)
    documentation_link = Column(String, nullable=True)

    event = relationship("Event")
    participant = relationship("Participant", back_populates="participations")
    winner = relationship("Winner")
