from typing import List, Literal, Optional
from datetime import date, datetime

from pydantic import BaseModel, Field

from .event_schemas import EventCategoryRead
from .user_schemas import EventSummary, UserSummary

ParticipantStatus = Literal["pending", "approved", "rejected", "unregistered"]


class ParticipantDetailBase(BaseModel):
    member_name: str = Field(..., min_length=1)
    birth_date: Optional[date] = None
    age: Optional[int] = None
    identifier: Optional[str] = None
    address: Optional[str] = None


class ParticipantDetailRead(ParticipantDetailBase):
    id: int

    class Config:
        from_attributes = True


class ParticipantCreate(BaseModel):
    event_id: int
    team_name: str = Field(..., min_length=1)
    representative_name: Optional[str] = None
    event_category_id: Optional[int] = None
    # Ignored for participants registering themselves
    user_id: Optional[int] = None
    status: Optional[ParticipantStatus] = None
    details: List[ParticipantDetailBase] = []


class ParticipantUpdate(BaseModel):
    team_name: Optional[str] = Field(None, min_length=1)
    representative_name: Optional[str] = None
    status: Optional[ParticipantStatus] = None
    event_category_id: Optional[int] = None


class ParticipantStatusUpdate(BaseModel):
    status: ParticipantStatus


class ParticipantSummary(BaseModel):
    id: int
    user_id: int
    event_id: int
    team_name: str
    status: str

    class Config:
        from_attributes = True


class ParticipantRead(ParticipantSummary):
    event_category_id: Optional[int] = None
    representative_name: Optional[str] = None
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    event: Optional[EventSummary] = None
    event_category: Optional[EventCategoryRead] = None
    details: List[ParticipantDetailRead] = []


class ParticipantStatusResponse(BaseModel):
    message: str
    participant: ParticipantRead


class ParticipantDetailCreate(ParticipantDetailBase):
    participant_id: int


class ParticipantDetailUpdate(BaseModel):
    member_name: Optional[str] = Field(None, min_length=1)
    birth_date: Optional[date] = None
    age: Optional[int] = None
    identifier: Optional[str] = None
    address: Optional[str] = None


class ParticipantDetailWithParticipant(ParticipantDetailRead):
    participant_id: int
    participant: Optional[ParticipantSummary] = None
