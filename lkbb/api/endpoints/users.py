from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lkbb.api.dependencies import get_db, get_settings, require_roles
from lkbb.core.config import Settings
from lkbb.schemas import common, user_schemas
from lkbb.services import user_service
from lkbb.services.access_policy import Principal, Role

router = APIRouter()

staff = require_roles(Role.ADMIN, Role.OPERATOR)


@router.get("/", response_model=List[user_schemas.UserRead])
def list_users_endpoint(
    role: Optional[Role] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    return user_service.list_users(db, role=role)


@router.get("/{user_id}", response_model=user_schemas.UserRead)
def get_user_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    return user_service.get_user(db, user_id)


@router.post("/", response_model=user_schemas.UserRead, status_code=status.HTTP_201_CREATED)
def create_user_endpoint(
    user_in: user_schemas.UserCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    return user_service.create_user(db, principal, user_in)


@router.put("/{user_id}", response_model=user_schemas.UserRead)
def update_user_endpoint(
    user_id: int,
    user_in: user_schemas.UserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    return user_service.update_user(db, principal, user_id, user_in)


@router.patch("/{user_id}/activate", response_model=user_schemas.UserStatusResponse)
def activate_user_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    user = user_service.set_active(db, principal, user_id, True)
    return {"message": "User activated", "user": user}


@router.patch("/{user_id}/deactivate", response_model=user_schemas.UserStatusResponse)
def deactivate_user_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    user = user_service.set_active(db, principal, user_id, False)
    return {"message": "User deactivated", "user": user}


@router.patch("/{user_id}/reset-password", response_model=common.Message)
def reset_password_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(staff),
):
    user_service.reset_password(db, principal, user_id, settings.DEFAULT_RESET_PASSWORD)
    return {"message": "Password reset to the default password"}


@router.delete("/{user_id}", response_model=common.Message)
def delete_user_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    user_service.delete_user(db, principal, user_id)
    return {"message": "User deleted"}
