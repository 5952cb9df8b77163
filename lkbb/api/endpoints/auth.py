from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lkbb.api.dependencies import get_current_user, get_db, get_settings
from lkbb.core.config import Settings
from lkbb.models import User
from lkbb.schemas import auth_schemas, common, user_schemas
from lkbb.services import auth_service

router = APIRouter()


@router.post("/login", response_model=auth_schemas.LoginResponse)
def login_endpoint(
    login_in: auth_schemas.LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return auth_service.login(db, settings, login_in)


@router.post("/register", response_model=auth_schemas.RegisterResponse, status_code=status.HTTP_201_CREATED)
def register_endpoint(
    register_in: auth_schemas.RegisterRequest,
    db: Session = Depends(get_db),
):
    user = auth_service.register(db, register_in)
    return {"message": "Registration received; an administrator will activate the account", "user": user}


@router.get("/me", response_model=user_schemas.UserRead)
def read_me_endpoint(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=user_schemas.UserRead)
def update_me_endpoint(
    profile_in: auth_schemas.ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return auth_service.update_profile(db, current_user, profile_in)


@router.put("/me/password", response_model=common.Message)
def change_password_endpoint(
    password_in: auth_schemas.PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    auth_service.change_password(db, current_user, password_in.new_password)
    return {"message": "Password updated"}


@router.post("/logout", response_model=common.Message)
def logout_endpoint():
    # Tokens are stateless; the client discards its copy
    return {"message": "Logged out"}
