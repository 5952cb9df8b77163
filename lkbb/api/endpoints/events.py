from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lkbb.api.dependencies import get_db, require_roles
from lkbb.schemas import common, event_schemas
from lkbb.services import event_service
from lkbb.services.access_policy import Principal, Role

router = APIRouter()

staff = require_roles(Role.ADMIN, Role.OPERATOR)


@router.get("/", response_model=List[event_schemas.EventRead])
def list_events_endpoint(db: Session = Depends(get_db)):
    return event_service.list_events(db)


@router.get("/{event_id}", response_model=event_schemas.EventRead)
def get_event_endpoint(event_id: int, db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id)


@router.post("/", response_model=event_schemas.EventRead, status_code=status.HTTP_201_CREATED)
def create_event_endpoint(
    event_in: event_schemas.EventCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    return event_service.create_event(db, event_in)


@router.put("/{event_id}", response_model=event_schemas.EventRead)
def update_event_endpoint(
    event_id: int,
    event_in: event_schemas.EventUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    return event_service.update_event(db, event_id, event_in)


@router.delete("/{event_id}", response_model=common.Message)
def delete_event_endpoint(
    event_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    event_service.delete_event(db, event_id)
    return {"message": "Event deleted"}


@router.post("/{event_id}/feature", response_model=event_schemas.EventRead)
def feature_event_endpoint(
    event_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(Role.ADMIN)),
):
    return event_service.set_featured(db, event_id)
