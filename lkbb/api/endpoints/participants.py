from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lkbb.api.dependencies import get_current_user, get_db, get_principal
from lkbb.models import User
from lkbb.schemas import common, participant_schemas
from lkbb.services import participant_service
from lkbb.services.access_policy import Principal

router = APIRouter()


@router.get("/", response_model=List[participant_schemas.ParticipantRead])
def list_participants_endpoint(
    event_id: Optional[int] = None,
    status: Optional[participant_schemas.ParticipantStatus] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return participant_service.list_participants(db, principal, event_id=event_id, status=status)


@router.get("/me", response_model=List[participant_schemas.ParticipantRead])
def list_my_registrations_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return participant_service.list_own_registrations(db, current_user.id)


@router.get("/{participant_id}", response_model=participant_schemas.ParticipantRead)
def get_participant_endpoint(
    participant_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return participant_service.get_participant(db, principal, participant_id)


@router.post("/", response_model=participant_schemas.ParticipantRead, status_code=status.HTTP_201_CREATED)
def create_participant_endpoint(
    participant_in: participant_schemas.ParticipantCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return participant_service.create_participant(db, principal, participant_in)


@router.put("/{participant_id}", response_model=participant_schemas.ParticipantRead)
def update_participant_endpoint(
    participant_id: int,
    participant_in: participant_schemas.ParticipantUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return participant_service.update_participant(db, principal, participant_id, participant_in)


@router.patch("/{participant_id}/status", response_model=participant_schemas.ParticipantStatusResponse)
def set_participant_status_endpoint(
    participant_id: int,
    status_in: participant_schemas.ParticipantStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    participant = participant_service.set_status(db, principal, participant_id, status_in.status)
    return {"message": f"Registration marked {status_in.status}", "participant": participant}


@router.patch("/{participant_id}/approve", response_model=participant_schemas.ParticipantStatusResponse)
def approve_participant_endpoint(
    participant_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    participant = participant_service.set_status(db, principal, participant_id, "approved")
    return {"message": "Registration approved", "participant": participant}


@router.patch("/{participant_id}/reject", response_model=participant_schemas.ParticipantStatusResponse)
def reject_participant_endpoint(
    participant_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    participant = participant_service.set_status(db, principal, participant_id, "rejected")
    return {"message": "Registration rejected", "participant": participant}


@router.delete("/{participant_id}", response_model=common.Message)
def delete_participant_endpoint(
    participant_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    participant_service.delete_participant(db, principal, participant_id)
    return {"message": "Participant deleted"}
