"""
Score/ScoreDetail persistence.

The repository wraps one SQLAlchemy session. Mutations go through
``transaction()`` so a Score and its ScoreDetail children are always written
in the same commit, and a constraint violation raised at flush or commit is
surfaced as the same API error the pre-checks raise.
"""
import logging
from contextlib import contextmanager
from typing import FrozenSet, Iterator, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from lkbb.core.errors import from_integrity_error
from lkbb.models import Event, Participant, Score, ScoreDetail, User
from lkbb.services.access_policy import ListingFilter

logger = logging.getLogger(__name__)

DUPLICATE_SCORE = "Score already exists for this event, participant and judge combination; use update instead"


class ScoreRepository:
    def __init__(self, session: Session):
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    @contextmanager
    def transaction(self, conflict_detail: str = DUPLICATE_SCORE) -> Iterator[Session]:
        try:
            yield self._session
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            logger.info("Constraint violation rolled back: %s", exc.orig)
            raise from_integrity_error(exc, conflict_detail) from exc
        except Exception:
            self._session.rollback()
            raise

    # --- collaborator lookups ---

    def event_exists(self, event_id: int) -> bool:
        return self._session.get(Event, event_id) is not None

    def get_participant(self, participant_id: int) -> Optional[Participant]:
        return self._session.get(Participant, participant_id)

    def get_user_role(self, user_id: int) -> Optional[str]:
        user = self._session.get(User, user_id)
        return user.role if user else None

    def judged_event_ids(self, judge_id: int) -> FrozenSet[int]:
        rows = self._session.execute(
            select(Score.event_id).where(Score.judge_id == judge_id).distinct()
        ).scalars()
        return frozenset(event_id for event_id in rows if event_id)

    # --- scores ---

    def get(self, score_id: int) -> Optional[Score]:
        stmt = (
            select(Score)
            .where(Score.id == score_id)
            .options(
                selectinload(Score.details),
                selectinload(Score.participant),
                selectinload(Score.event),
                selectinload(Score.judge),
            )
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def list(self, flt: ListingFilter, participant_id: Optional[int] = None) -> List[Score]:
        stmt = select(Score).options(
            selectinload(Score.details),
            selectinload(Score.participant),
            selectinload(Score.event),
            selectinload(Score.judge),
        )
        stmt = self._apply_score_filter(stmt, flt, participant_id)
        return list(self._session.execute(stmt.order_by(Score.id)).scalars().all())

    def exists_for_triple(self, event_id: int, participant_id: int, judge_id: int) -> bool:
        stmt = select(Score.id).where(
            Score.event_id == event_id,
            Score.participant_id == participant_id,
            Score.judge_id == judge_id,
        )
        return self._session.execute(stmt).first() is not None

    def add(self, score: Score) -> Score:
        self._session.add(score)
        self._session.flush()
        return score

    def delete(self, score: Score) -> None:
        # ORM cascade removes the ScoreDetail children in the same flush
        self._session.delete(score)
        self._session.flush()

    def delete_by_participant(self, event_id: int, participant_id: int) -> int:
        score_ids = list(
            self._session.execute(
                select(Score.id).where(Score.event_id == event_id, Score.participant_id == participant_id)
            ).scalars()
        )
        if not score_ids:
            return 0
        self._session.query(ScoreDetail).filter(ScoreDetail.score_id.in_(score_ids)).delete(
            synchronize_session=False
        )
        deleted = self._session.query(Score).filter(Score.id.in_(score_ids)).delete(synchronize_session=False)
        self._session.flush()
        self._session.expire_all()
        return deleted

    # --- score details ---

    def get_detail(self, detail_id: int) -> Optional[ScoreDetail]:
        stmt = (
            select(ScoreDetail)
            .where(ScoreDetail.id == detail_id)
            .options(selectinload(ScoreDetail.score).selectinload(Score.participant))
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def list_details(
        self,
        flt: ListingFilter,
        score_id: Optional[int] = None,
        participant_id: Optional[int] = None,
    ) -> List[ScoreDetail]:
        stmt = (
            select(ScoreDetail)
            .join(Score, ScoreDetail.score_id == Score.id)
            .options(
                selectinload(ScoreDetail.score).selectinload(Score.participant),
                selectinload(ScoreDetail.score).selectinload(Score.event),
                selectinload(ScoreDetail.score).selectinload(Score.judge),
            )
        )
        if score_id is not None:
            stmt = stmt.where(ScoreDetail.score_id == score_id)
        stmt = self._apply_score_filter(stmt, flt, participant_id)
        return list(self._session.execute(stmt.order_by(ScoreDetail.id)).scalars().all())

    def add_detail(self, score: Score, detail: ScoreDetail) -> ScoreDetail:
        score.details.append(detail)
        self._session.flush()
        return detail

    def delete_detail(self, detail: ScoreDetail) -> None:
        score = detail.score
        if score is not None and detail in score.details:
            score.details.remove(detail)
        else:
            self._session.delete(detail)
        self._session.flush()

    @staticmethod
    def _apply_score_filter(stmt, flt: ListingFilter, participant_id: Optional[int]):
        if flt.event_id is not None:
            stmt = stmt.where(Score.event_id == flt.event_id)
        if flt.event_ids is not None:
            stmt = stmt.where(Score.event_id.in_(sorted(flt.event_ids)))
        if flt.judge_id is not None:
            stmt = stmt.where(Score.judge_id == flt.judge_id)
        if participant_id is not None:
            stmt = stmt.where(Score.participant_id == participant_id)
        if flt.participant_user_id is not None:
            stmt = stmt.join(Participant, Score.participant_id == Participant.id).where(
                Participant.user_id == flt.participant_user_id
            )
        return stmt
