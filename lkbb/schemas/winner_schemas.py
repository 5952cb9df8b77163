from typing import Optional

from pydantic import BaseModel, Field

from .participant_schemas import ParticipantSummary
from .user_schemas import EventSummary, UserSummary


class WinnerCreate(BaseModel):
    event_id: int
    participant_id: int
    rank: str = Field(..., min_length=1)
    category: Optional[str] = None
    evidence_link: Optional[str] = None


class WinnerUpdate(BaseModel):
    event_id: Optional[int] = None
    participant_id: Optional[int] = None
    rank: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    evidence_link: Optional[str] = None


class WinnerRead(BaseModel):
    id: int
    event_id: int
    participant_id: int
    rank: str
    category: Optional[str] = None
    evidence_link: Optional[str] = None
    set_by_user_id: int
    event: Optional[EventSummary] = None
    participant: Optional[ParticipantSummary] = None
    set_by_user: Optional[UserSummary] = None

    class Config:
        from_attributes = True
