from typing import List, Optional

from sqlalchemy.orm import Session

from lkbb.core.config import Settings, get_settings
from lkbb.core.errors import NotFoundError, ValidationError
from lkbb.models import Score, ScoreDetail
from lkbb.repositories.score_repository import ScoreRepository
from lkbb.schemas import score_schemas
from lkbb.services.access_policy import (
    Action,
    ListingFilter,
    Principal,
    Resource,
    Role,
    Target,
    authorize,
    enforce,
    scope_listing,
)
from lkbb.services.scoring_engine import ScoreEngine


def _engine(db: Session, settings: Optional[Settings] = None) -> ScoreEngine:
    settings = settings or get_settings()
    return ScoreEngine(ScoreRepository(db), weight_tolerance=settings.SCORE_WEIGHT_TOLERANCE)


def _score_target(score: Score) -> Target:
    return Target(
        event_id=score.event_id,
        participant_user_id=score.participant.user_id if score.participant else None,
        judge_id=score.judge_id,
    )


def _requested_filter(
    repo: ScoreRepository,
    principal: Principal,
    event_id: Optional[int],
    participant_id: Optional[int],
    judge_id: Optional[int] = None,
) -> Optional[ListingFilter]:
    participant_user_id = None
    if participant_id is not None and principal.role is Role.PARTICIPANT:
        participant = repo.get_participant(participant_id)
        if participant is None:
            return None
        participant_user_id = participant.user_id
    return ListingFilter(event_id=event_id, judge_id=judge_id, participant_user_id=participant_user_id)


def _load_score(repo: ScoreRepository, score_id: int) -> Score:
    score = repo.get(score_id)
    if score is None:
        raise NotFoundError("Score not found")
    return score


def _load_detail(repo: ScoreRepository, detail_id: int) -> ScoreDetail:
    detail = repo.get_detail(detail_id)
    if detail is None:
        raise NotFoundError("Score detail not found")
    return detail


# --- scores ---

def list_scores(
    db: Session,
    principal: Principal,
    event_id: Optional[int] = None,
    participant_id: Optional[int] = None,
    judge_id: Optional[int] = None,
) -> List[Score]:
    repo = ScoreRepository(db)
    requested = _requested_filter(repo, principal, event_id, participant_id, judge_id)
    if requested is None:
        return []
    decision, scoped = scope_listing(principal, Resource.SCORE, requested)
    enforce(decision)
    return repo.list(scoped, participant_id=participant_id)


def get_score(db: Session, principal: Principal, score_id: int) -> Score:
    score = _load_score(ScoreRepository(db), score_id)
    authorize(principal, Action.READ, Resource.SCORE, _score_target(score))
    return score


def create_score(
    db: Session, principal: Principal, score_in: score_schemas.ScoreCreate, settings: Optional[Settings] = None
) -> Score:
    judge_id = score_in.judge_id
    if principal.role is Role.JUDGE and judge_id is None:
        judge_id = principal.id
    authorize(
        principal,
        Action.WRITE,
        Resource.SCORE,
        Target(event_id=score_in.event_id, judge_id=judge_id),
    )
    if judge_id is None:
        raise ValidationError("judge_id is required", field="judge_id")

    engine = _engine(db, settings)
    score = engine.create_score(
        event_id=score_in.event_id,
        participant_id=score_in.participant_id,
        judge_id=judge_id,
        use_manual_nilai=score_in.use_manual_nilai,
        nilai=score_in.nilai,
        catatan=score_in.catatan,
        details=score_in.details,
    )
    return engine.repository.get(score.id)


def update_score(
    db: Session,
    principal: Principal,
    score_id: int,
    score_in: score_schemas.ScoreUpdate,
    settings: Optional[Settings] = None,
) -> Score:
    engine = _engine(db, settings)
    score = _load_score(engine.repository, score_id)
    authorize(principal, Action.WRITE, Resource.SCORE, _score_target(score))
    return engine.update_score(score, score_in.model_dump(exclude_unset=True))


def recompute_score(db: Session, principal: Principal, score_id: int, settings: Optional[Settings] = None) -> Score:
    engine = _engine(db, settings)
    score = _load_score(engine.repository, score_id)
    authorize(principal, Action.WRITE, Resource.SCORE, _score_target(score))
    return engine.recompute(score)


def delete_score(db: Session, principal: Principal, score_id: int) -> None:
    engine = _engine(db)
    score = _load_score(engine.repository, score_id)
    authorize(principal, Action.WRITE, Resource.SCORE, _score_target(score))
    engine.delete_score(score)


def delete_scores_by_participant(db: Session, principal: Principal, event_id: int, participant_id: int) -> int:
    # judge_id=None: only roles allowed to reset every judge's scores pass
    authorize(principal, Action.WRITE, Resource.SCORE, Target(event_id=event_id))
    return _engine(db).delete_scores_by_participant(event_id, participant_id)


# --- score details ---

def list_score_details(
    db: Session,
    principal: Principal,
    score_id: Optional[int] = None,
    event_id: Optional[int] = None,
    participant_id: Optional[int] = None,
) -> List[ScoreDetail]:
    repo = ScoreRepository(db)
    requested = _requested_filter(repo, principal, event_id, participant_id)
    if requested is None:
        return []
    decision, scoped = scope_listing(principal, Resource.SCORE_DETAIL, requested)
    enforce(decision)
    return repo.list_details(scoped, score_id=score_id, participant_id=participant_id)


def get_score_detail(db: Session, principal: Principal, detail_id: int) -> ScoreDetail:
    detail = _load_detail(ScoreRepository(db), detail_id)
    authorize(principal, Action.READ, Resource.SCORE_DETAIL, _score_target(detail.score))
    return detail


def create_score_detail(
    db: Session,
    principal: Principal,
    detail_in: score_schemas.ScoreDetailCreate,
    recompute: bool = False,
    settings: Optional[Settings] = None,
) -> ScoreDetail:
    engine = _engine(db, settings)
    score = _load_score(engine.repository, detail_in.score_id)
    authorize(principal, Action.WRITE, Resource.SCORE_DETAIL, _score_target(score))
    return engine.add_detail(score, detail_in, recompute=recompute)


def update_score_detail(
    db: Session,
    principal: Principal,
    detail_id: int,
    detail_in: score_schemas.ScoreDetailUpdate,
    recompute: bool = False,
    settings: Optional[Settings] = None,
) -> ScoreDetail:
    engine = _engine(db, settings)
    detail = _load_detail(engine.repository, detail_id)
    authorize(principal, Action.WRITE, Resource.SCORE_DETAIL, _score_target(detail.score))
    return engine.update_detail(detail, detail_in.model_dump(exclude_unset=True), recompute=recompute)


def delete_score_detail(
    db: Session,
    principal: Principal,
    detail_id: int,
    recompute: bool = False,
    settings: Optional[Settings] = None,
) -> Score:
    engine = _engine(db, settings)
    detail = _load_detail(engine.repository, detail_id)
    authorize(principal, Action.WRITE, Resource.SCORE_DETAIL, _score_target(detail.score))
    return engine.remove_detail(detail, recompute=recompute)
