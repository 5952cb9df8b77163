from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lkbb.api.dependencies import get_db, get_principal
from lkbb.schemas import common, participant_schemas
from lkbb.services import participant_service
from lkbb.services.access_policy import Principal

router = APIRouter()


@router.get("/", response_model=List[participant_schemas.ParticipantDetailWithParticipant])
def list_participant_details_endpoint(
    participant_id: Optional[int] = None,
    event_id: Optional[int] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return participant_service.list_participant_details(
        db, principal, participant_id=participant_id, event_id=event_id
    )


@router.get("/{detail_id}", response_model=participant_schemas.ParticipantDetailWithParticipant)
def get_participant_detail_endpoint(
    detail_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return participant_service.get_participant_detail(db, principal, detail_id)


@router.post(
    "/", response_model=participant_schemas.ParticipantDetailWithParticipant, status_code=status.HTTP_201_CREATED
)
def create_participant_detail_endpoint(
    detail_in: participant_schemas.ParticipantDetailCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return participant_service.create_participant_detail(db, principal, detail_in)


@router.put("/{detail_id}", response_model=participant_schemas.ParticipantDetailWithParticipant)
def update_participant_detail_endpoint(
    detail_id: int,
    detail_in: participant_schemas.ParticipantDetailUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return participant_service.update_participant_detail(db, principal, detail_id, detail_in)


@router.delete("/{detail_id}", response_model=common.Message)
def delete_participant_detail_endpoint(
    detail_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    participant_service.delete_participant_detail(db, principal, detail_id)
    return {"message": "Participant detail deleted"}
