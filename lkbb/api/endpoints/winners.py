from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lkbb.api.dependencies import get_db, get_principal, require_roles
from lkbb.schemas import common, winner_schemas
from lkbb.services import winner_service
from lkbb.services.access_policy import Principal, Role

router = APIRouter()

staff = require_roles(Role.ADMIN, Role.OPERATOR)


@router.get("/", response_model=List[winner_schemas.WinnerRead])
def list_winners_endpoint(
    event_id: Optional[int] = None,
    participant_id: Optional[int] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return winner_service.list_winners(db, principal, event_id=event_id, participant_id=participant_id)


@router.get("/{winner_id}", response_model=winner_schemas.WinnerRead)
def get_winner_endpoint(
    winner_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return winner_service.get_winner(db, principal, winner_id)


@router.post("/", response_model=winner_schemas.WinnerRead, status_code=status.HTTP_201_CREATED)
def create_winner_endpoint(
    winner_in: winner_schemas.WinnerCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    return winner_service.create_winner(db, principal, winner_in)


@router.put("/{winner_id}", response_model=winner_schemas.WinnerRead)
def update_winner_endpoint(
    winner_id: int,
    winner_in: winner_schemas.WinnerUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    return winner_service.update_winner(db, principal, winner_id, winner_in)


@router.delete("/{winner_id}", response_model=common.Message)
def delete_winner_endpoint(
    winner_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    winner_service.delete_winner(db, principal, winner_id)
    return {"message": "Winner deleted"}
