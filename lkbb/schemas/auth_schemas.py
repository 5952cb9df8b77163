from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .user_schemas import UserRead


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    user_id: Optional[int] = None
    role: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(Token):
    user: UserRead


class RegisterRequest(BaseModel):
    email: EmailStr
    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=8)


class RegisterResponse(BaseModel):
    message: str
    user: UserRead


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3)
    nisn_nta: Optional[str] = None
    address: Optional[str] = None
    focus_event_id: Optional[int] = None


class PasswordChange(BaseModel):
    new_password: str = Field(..., min_length=8)
