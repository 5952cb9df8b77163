from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, Field


class EventCategoryBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    quota: Optional[int] = None


class EventCategoryCreate(EventCategoryBase):
    event_id: int


class EventCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    quota: Optional[int] = None


class EventCategoryRead(EventCategoryBase):
    id: int
    event_id: int

    class Config:
        from_attributes = True


class EventBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    event_date: datetime
    location: str = Field(..., min_length=1)
    venue: Optional[str] = None
    status: Optional[str] = None
    quota: Optional[int] = None
    fee: Optional[float] = None
    rules_link: Optional[str] = None


class EventCreate(EventBase):
    pass


class EventUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    event_date: Optional[datetime] = None
    location: Optional[str] = Field(None, min_length=1)
    venue: Optional[str] = None
    status: Optional[str] = None
    quota: Optional[int] = None
    fee: Optional[float] = None
    rules_link: Optional[str] = None


class EventRead(EventBase):
    id: int
    is_featured: bool
    categories: List[EventCategoryRead] = []

    class Config:
        from_attributes = True
