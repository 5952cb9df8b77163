from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lkbb.api.dependencies import get_db, require_roles
from lkbb.schemas import common, event_schemas
from lkbb.services import event_service
from lkbb.services.access_policy import Principal, Role

router = APIRouter()

staff = require_roles(Role.ADMIN, Role.OPERATOR)


@router.get("/", response_model=List[event_schemas.EventCategoryRead])
def list_categories_endpoint(event_id: Optional[int] = None, db: Session = Depends(get_db)):
    return event_service.list_categories(db, event_id=event_id)


@router.get("/{category_id}", response_model=event_schemas.EventCategoryRead)
def get_category_endpoint(category_id: int, db: Session = Depends(get_db)):
    return event_service.get_category(db, category_id)


@router.post("/", response_model=event_schemas.EventCategoryRead, status_code=status.HTTP_201_CREATED)
def create_category_endpoint(
    category_in: event_schemas.EventCategoryCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    return event_service.create_category(db, principal, category_in)


@router.put("/{category_id}", response_model=event_schemas.EventCategoryRead)
def update_category_endpoint(
    category_id: int,
    category_in: event_schemas.EventCategoryUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    return event_service.update_category(db, principal, category_id, category_in)


@router.delete("/{category_id}", response_model=common.Message)
def delete_category_endpoint(
    category_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(staff),
):
    event_service.delete_category(db, principal, category_id)
    return {"message": "Event category deleted"}
