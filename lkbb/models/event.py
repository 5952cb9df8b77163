from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from lkbb.core.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(DateTime, nullable=False)
    location = Column(String, nullable=False)
    venue = Column(String, nullable=True)
    status = Column(String, nullable=True)  # e.g. "draft", "open", "ongoing", "closed"
    quota = Column(Integer, nullable=True)
    fee = Column(Float, nullable=True)
    rules_link = Column(String, nullable=True)
    is_featured = Column(Boolean, nullable=False, default=False)

    categories = relationship(
        "EventCategory",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="EventCategory.name",
    )


class EventCategory(Base):
    __tablename__ = "event_categories"
    __table_args__ = (UniqueConstraint("event_id", "name", name="uq_event_category_name"),)

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    quota = Column(Integer, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    event = relationship("Event", back_populates="categories")
    participants = relationship("Participant", back_populates="event_category")
