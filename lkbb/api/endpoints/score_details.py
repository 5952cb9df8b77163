from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lkbb.api.dependencies import get_db, get_principal, get_settings
from lkbb.core.config import Settings
from lkbb.schemas import score_schemas
from lkbb.services import score_service
from lkbb.services.access_policy import Principal

router = APIRouter()


@router.get("/", response_model=List[score_schemas.ScoreDetailWithScore])
def list_score_details_endpoint(
    score_id: Optional[int] = None,
    event_id: Optional[int] = None,
    participant_id: Optional[int] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return score_service.list_score_details(
        db, principal, score_id=score_id, event_id=event_id, participant_id=participant_id
    )


@router.get("/{detail_id}", response_model=score_schemas.ScoreDetailWithScore)
def get_score_detail_endpoint(
    detail_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return score_service.get_score_detail(db, principal, detail_id)


@router.post("/", response_model=score_schemas.ScoreDetailWithScore, status_code=status.HTTP_201_CREATED)
def create_score_detail_endpoint(
    detail_in: score_schemas.ScoreDetailCreate,
    recompute: bool = False,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    settings: Settings = Depends(get_settings),
):
    return score_service.create_score_detail(db, principal, detail_in, recompute=recompute, settings=settings)


@router.put("/{detail_id}", response_model=score_schemas.ScoreDetailWithScore)
def update_score_detail_endpoint(
    detail_id: int,
    detail_in: score_schemas.ScoreDetailUpdate,
    recompute: bool = False,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    settings: Settings = Depends(get_settings),
):
    return score_service.update_score_detail(
        db, principal, detail_id, detail_in, recompute=recompute, settings=settings
    )


@router.delete("/{detail_id}", response_model=score_schemas.ScoreRead)
def delete_score_detail_endpoint(
    detail_id: int,
    recompute: bool = False,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    settings: Settings = Depends(get_settings),
):
    """Remove a criterion row and return the parent score as it now stands."""
    return score_service.delete_score_detail(db, principal, detail_id, recompute=recompute, settings=settings)
