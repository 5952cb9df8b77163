from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from lkbb.api.dependencies import get_db, get_principal, get_settings
from lkbb.core.config import Settings
from lkbb.schemas import score_schemas
from lkbb.services import score_service
from lkbb.services.access_policy import Principal

router = APIRouter()


@router.get("/", response_model=List[score_schemas.ScoreRead])
def list_scores_endpoint(
    event_id: Optional[int] = None,
    participant_id: Optional[int] = None,
    judge_id: Optional[int] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return score_service.list_scores(
        db, principal, event_id=event_id, participant_id=participant_id, judge_id=judge_id
    )


# Declared before "/{score_id}" so the literal path wins
@router.delete("/by-participant", response_model=score_schemas.BulkDeleteResult)
def delete_scores_by_participant_endpoint(
    event_id: int,
    participant_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    deleted = score_service.delete_scores_by_participant(db, principal, event_id, participant_id)
    return {"message": f"{deleted} scores deleted", "deleted_count": deleted}


@router.get("/{score_id}", response_model=score_schemas.ScoreRead)
def get_score_endpoint(
    score_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return score_service.get_score(db, principal, score_id)


@router.post("/", response_model=score_schemas.ScoreRead, status_code=status.HTTP_201_CREATED)
def create_score_endpoint(
    score_in: score_schemas.ScoreCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    settings: Settings = Depends(get_settings),
):
    return score_service.create_score(db, principal, score_in, settings=settings)


@router.put("/{score_id}", response_model=score_schemas.ScoreRead)
def update_score_endpoint(
    score_id: int,
    score_in: score_schemas.ScoreUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    settings: Settings = Depends(get_settings),
):
    return score_service.update_score(db, principal, score_id, score_in, settings=settings)


@router.post("/{score_id}/recompute", response_model=score_schemas.ScoreRead)
def recompute_score_endpoint(
    score_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    settings: Settings = Depends(get_settings),
):
    return score_service.recompute_score(db, principal, score_id, settings=settings)


@router.delete("/{score_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_score_endpoint(
    score_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    score_service.delete_score(db, principal, score_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
