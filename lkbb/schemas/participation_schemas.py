from typing import Optional

from pydantic import BaseModel

from .participant_schemas import ParticipantSummary
from .user_schemas import EventSummary


class ParticipationCreate(BaseModel):
    participant_id: int
    event_id: int
    winner_id: Optional[int] = None
    documentation_link: Optional[str] = None


class ParticipationUpdate(BaseModel):
    participant_id: Optional[int] = None
    event_id: Optional[int] = None
    winner_id: Optional[int] = None
    documentation_link: Optional[str] = None


class ParticipationRead(BaseModel):
    id: int
    participant_id: int
    event_id: int
    winner_id: Optional[int] = None
    documentation_link: Optional[str] = None
    event: Optional[EventSummary] = None
    participant: Optional[ParticipantSummary] = None

    class Config:
        from_attributes = True
