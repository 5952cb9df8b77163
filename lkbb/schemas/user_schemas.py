from typing import Optional
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from lkbb.services.access_policy import Role


class EventSummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    id: int
    email: EmailStr
    username: str
    role: Role

    class Config:
        from_attributes = True


class UserBase(BaseModel):
    email: EmailStr
    username: str
    role: Role
    is_active: bool = True
    nisn_nta: Optional[str] = None
    address: Optional[str] = None
    focus_event_id: Optional[int] = None


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)


class UserRead(UserBase):
    id: int
    created_at: Optional[datetime] = None
    focus_event: Optional[EventSummary] = None

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    username: Optional[str] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    nisn_nta: Optional[str] = None
    address: Optional[str] = None
    focus_event_id: Optional[int] = None


class UserStatusResponse(BaseModel):
    message: str
    user: UserRead
