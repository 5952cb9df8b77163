from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from lkbb.core.database import Base


class Winner(Base):
    __tablename__ = "winners"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False, index=True)
    rank = Column(String, nullable=False)  # e.g. "Juara 1"
    category = Column(String, nullable=True)
    evidence_link = Column(String, nullable=True)
    set_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    event = relationship("Event")
    participant = relationship("Participant", back_populates="winners")
    set_by_user = relationship("User")
