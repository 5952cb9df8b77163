from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lkbb.api.dependencies import get_db, get_principal, require_roles
from lkbb.schemas import common, participation_schemas
from lkbb.services import participation_service
from lkbb.services.access_policy import Principal, Role

router = APIRouter()

staff = require_roles(Role.ADMIN, Role.OPERATOR)


@router.get("/", response_model=List[participation_schemas.ParticipationRead])
def list_participations_endpoint(
    event_id: Optional[int] = None,
    participant_id: Optional[int] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return participation_service.list_participations(
        db, principal, event_id=event_id, participant_id=participant_id
    )


@router.get("/{participation_id}", response_model=participation_schemas.ParticipationRead)
def get_participation_endpoint(
    participation_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return participation_service.get_participation(db, principal, participation_id)


@router.post("/", response_model=participation_schemas.ParticipationRead, status_code=status.HTTP_201_CREATED)
def create_participation_endpoint(
    participation_in: participation_schemas.ParticipationCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    return participation_service.create_participation(db, principal, participation_in)


@router.put("/{participation_id}", response_model=participation_schemas.ParticipationRead)
def update_participation_endpoint(
    participation_id: int,
    participation_in: participation_schemas.ParticipationUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(Role.ADMIN, Role.OPERATOR, Role.PARTICIPANT)),
):
    return participation_service.update_participation(db, principal, participation_id, participation_in)


@router.delete("/{participation_id}", response_model=common.Message)
def delete_participation_endpoint(
    participation_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    participation_service.delete_participation(db, principal, participation_id)
    return {"message": "Participation deleted"}
