from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from lkbb.core.database import Base


class Score(Base):
    __tablename__ = "scores"
    # A judge scores a given participant in a given event at most once
    __table_args__ = (
        UniqueConstraint("event_id", "participant_id", "judge_id", name="uq_score_event_participant_judge"),
    )

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False, index=True)
    judge_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    nilai = Column(Integer, nullable=True)
    use_manual_nilai = Column(Boolean, nullable=False, default=False)
    catatan = Column(Text, nullable=True)

    event = relationship("Event")
    participant = relationship("Participant", back_populates="scores")
    judge = relationship("User")
    details = relationship(
        "ScoreDetail",
        back_populates="score",
        cascade="all, delete-orphan",
        order_by="ScoreDetail.id",
    )


class ScoreDetail(Base):
    __tablename__ = "score_details"

    id = Column(Integer, primary_key=True, index=True)
    score_id = Column(Integer, ForeignKey("scores.id", ondelete="CASCADE"), nullable=False, index=True)
    kriteria = Column(String, nullable=False)
    nilai = Column(Float, nullable=False)
    bobot = Column(Float, nullable=True)
    catatan = Column(Text, nullable=True)

    score = relationship("Score", back_populates="details")
