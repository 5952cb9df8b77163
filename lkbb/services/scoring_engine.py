"""
Score aggregation engine.

A Score's effective ``nilai`` is either a manually entered value or the
weighted sum of its ScoreDetail sub-scores::

    nilai = round_half_up(sum(detail.nilai * (detail.bobot or 0)))

The sum is deliberately NOT a weighted average. Weights are trusted to add up
to 1 when a percentage is wanted; the engine never normalises them and only
logs a warning when they drift from 1 by more than the configured tolerance.

Detail-driven scores are created with ``nilai = None``. The value is filled
in by an explicit aggregation pass (``recompute`` or a detail mutation asked
to recompute), inside the same transaction as the detail change.
"""
import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, Optional, Sequence

from lkbb.core.errors import ConflictError, NotFoundError, ValidationError
from lkbb.models import Score, ScoreDetail
from lkbb.repositories.score_repository import DUPLICATE_SCORE, ScoreRepository
from lkbb.services.access_policy import Role

logger = logging.getLogger(__name__)

MIN_NILAI = 0
MAX_NILAI = 100
MANUAL_VALUE_REQUIRED = "Manual value required when use_manual_nilai is true"
NILAI_REQUIRES_MANUAL = "nilai can only be set directly when use_manual_nilai is true"


def round_half_up(value) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _as_number(value, field: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number", field=field)
    if not math.isfinite(number):
        raise ValidationError(f"{field} must be a finite number", field=field)
    return number


def validate_nilai(value, field: str = "nilai") -> float:
    number = _as_number(value, field)
    if number < MIN_NILAI or number > MAX_NILAI:
        raise ValidationError(f"{field} must be between {MIN_NILAI} and {MAX_NILAI}", field=field)
    return number


def manual_nilai(value) -> int:
    return round_half_up(validate_nilai(value))


def weighted_sum(details: Iterable[ScoreDetail]) -> Decimal:
    total = Decimal(0)
    for detail in details:
        if detail.bobot is None:
            continue
        total += Decimal(str(detail.nilai)) * Decimal(str(detail.bobot))
    return total


def aggregate(details: Sequence[ScoreDetail], weight_tolerance: float = 0.001) -> Optional[int]:
    """Weighted sum of the details, rounded half-up; None when there are none."""
    if not details:
        return None
    weight_total = sum((Decimal(str(d.bobot)) for d in details if d.bobot is not None), Decimal(0))
    if abs(weight_total - Decimal(1)) > Decimal(str(weight_tolerance)):
        logger.warning(
            "Score detail weights sum to %s instead of 1; nilai is a plain weighted sum", weight_total
        )
    return round_half_up(weighted_sum(details))


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def build_detail(kriteria, nilai, bobot=None, catatan=None) -> ScoreDetail:
    label = _clean_text(kriteria)
    if not label:
        raise ValidationError("kriteria is required", field="kriteria")
    return ScoreDetail(
        kriteria=label,
        nilai=validate_nilai(nilai),
        bobot=None if bobot is None else _as_number(bobot, "bobot"),
        catatan=_clean_text(catatan),
    )


class ScoreEngine:
    """Create/update lifecycle of Score records and their computed nilai."""

    def __init__(self, repository: ScoreRepository, weight_tolerance: float = 0.001):
        self.repository = repository
        self.weight_tolerance = weight_tolerance

    def create_score(
        self,
        event_id: int,
        participant_id: int,
        judge_id: int,
        use_manual_nilai: bool = False,
        nilai=None,
        catatan: Optional[str] = None,
        details: Optional[Iterable[Any]] = None,
    ) -> Score:
        repo = self.repository
        if not repo.event_exists(event_id):
            raise NotFoundError("Event not found")
        participant = repo.get_participant(participant_id)
        if participant is None:
            raise NotFoundError("Participant not found")
        if participant.event_id != event_id:
            raise ValidationError("Participant is not registered for this event", field="participant_id")
        judge_role = repo.get_user_role(judge_id)
        if judge_role is None:
            raise NotFoundError("Judge user not found")
        if judge_role != Role.JUDGE.value:
            raise ValidationError("judge_id must reference a user with the judge role", field="judge_id")

        if use_manual_nilai:
            if nilai is None:
                raise ValidationError(MANUAL_VALUE_REQUIRED, field="nilai")
            stored_nilai = manual_nilai(nilai)
        else:
            if nilai is not None:
                raise ValidationError(NILAI_REQUIRES_MANUAL, field="nilai")
            stored_nilai = None

        detail_rows = [
            build_detail(d.kriteria, d.nilai, getattr(d, "bobot", None), getattr(d, "catatan", None))
            for d in details or []
        ]

        if repo.exists_for_triple(event_id, participant_id, judge_id):
            raise ConflictError(DUPLICATE_SCORE)

        score = Score(
            event_id=event_id,
            participant_id=participant_id,
            judge_id=judge_id,
            use_manual_nilai=bool(use_manual_nilai),
            nilai=stored_nilai,
            catatan=_clean_text(catatan),
            details=detail_rows,
        )
        with repo.transaction():
            repo.add(score)
        logger.info(
            "Score %s created for event=%s participant=%s judge=%s (manual=%s)",
            score.id, event_id, participant_id, judge_id, score.use_manual_nilai,
        )
        return score

    def update_score(self, score: Score, changes: Dict[str, Any]) -> Score:
        """Apply a partial update; keys absent from ``changes`` are left alone."""
        if not changes:
            raise ValidationError("No fields to update")

        manual = changes.get("use_manual_nilai", score.use_manual_nilai)
        if manual is None:
            raise ValidationError("use_manual_nilai cannot be null", field="use_manual_nilai")

        new_nilai = score.nilai
        if "nilai" in changes:
            if not manual:
                raise ValidationError(NILAI_REQUIRES_MANUAL, field="nilai")
            if changes["nilai"] is None:
                raise ValidationError(MANUAL_VALUE_REQUIRED, field="nilai")
            new_nilai = manual_nilai(changes["nilai"])
        elif manual and not (score.use_manual_nilai and score.nilai is not None):
            raise ValidationError(MANUAL_VALUE_REQUIRED, field="nilai")
        elif not manual and score.use_manual_nilai:
            # Left for the next aggregation pass over the existing details
            new_nilai = None

        with self.repository.transaction():
            score.use_manual_nilai = bool(manual)
            score.nilai = new_nilai
            if "catatan" in changes:
                score.catatan = _clean_text(changes["catatan"])
        logger.info("Score %s updated (manual=%s, nilai=%s)", score.id, score.use_manual_nilai, score.nilai)
        return score

    def recompute(self, score: Score) -> Score:
        with self.repository.transaction():
            self._apply_aggregate(score)
        return score

    def delete_score(self, score: Score) -> None:
        score_id = score.id
        with self.repository.transaction():
            self.repository.delete(score)
        logger.info("Score %s deleted with its details", score_id)

    def delete_scores_by_participant(self, event_id: int, participant_id: int) -> int:
        with self.repository.transaction():
            deleted = self.repository.delete_by_participant(event_id, participant_id)
        logger.info("Deleted %s scores for event=%s participant=%s", deleted, event_id, participant_id)
        return deleted

    # --- details ---

    def add_detail(self, score: Score, detail_in: Any, recompute: bool = False) -> ScoreDetail:
        self._check_recompute_allowed(score, recompute)
        detail = build_detail(
            detail_in.kriteria, detail_in.nilai, getattr(detail_in, "bobot", None), getattr(detail_in, "catatan", None)
        )
        with self.repository.transaction():
            self.repository.add_detail(score, detail)
            if recompute:
                self._apply_aggregate(score)
        return detail

    def update_detail(self, detail: ScoreDetail, changes: Dict[str, Any], recompute: bool = False) -> ScoreDetail:
        if not changes:
            raise ValidationError("No fields to update")
        score = detail.score
        self._check_recompute_allowed(score, recompute)

        values = {}
        if "kriteria" in changes:
            label = _clean_text(changes["kriteria"])
            if not label:
                raise ValidationError("kriteria is required", field="kriteria")
            values["kriteria"] = label
        if "nilai" in changes:
            if changes["nilai"] is None:
                raise ValidationError("nilai is required", field="nilai")
            values["nilai"] = validate_nilai(changes["nilai"])
        if "bobot" in changes:
            values["bobot"] = None if changes["bobot"] is None else _as_number(changes["bobot"], "bobot")
        if "catatan" in changes:
            values["catatan"] = _clean_text(changes["catatan"])

        with self.repository.transaction():
            for key, value in values.items():
                setattr(detail, key, value)
            self.repository.session.flush()
            if recompute:
                self._apply_aggregate(score)
        return detail

    def remove_detail(self, detail: ScoreDetail, recompute: bool = False) -> Score:
        score = detail.score
        self._check_recompute_allowed(score, recompute)
        with self.repository.transaction():
            self.repository.delete_detail(detail)
            if recompute:
                self._apply_aggregate(score)
        return score

    def _check_recompute_allowed(self, score: Score, recompute: bool) -> None:
        if recompute and score.use_manual_nilai:
            raise ValidationError(
                "Score uses a manual nilai; switch use_manual_nilai off before recomputing from details"
            )

    def _apply_aggregate(self, score: Score) -> None:
        self._check_recompute_allowed(score, True)
        score.nilai = aggregate(score.details, self.weight_tolerance)
        logger.info("Score %s recomputed from %s details: nilai=%s", score.id, len(score.details), score.nilai)
