import logging
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from lkbb.core.database import commit
from lkbb.core.errors import NotFoundError, ValidationError
from lkbb.models import Event, Participant, Winner
from lkbb.schemas import winner_schemas
from lkbb.services.access_policy import (
    Action,
    ListingFilter,
    Principal,
    Resource,
    Target,
    authorize,
    enforce,
    scope_listing,
)

logger = logging.getLogger(__name__)


def _target(winner: Winner) -> Target:
    return Target(event_id=winner.event_id, participant_user_id=winner.participant.user_id)


def _load_participant_for_event(db: Session, event_id: int, participant_id: int) -> Participant:
    if db.get(Event, event_id) is None:
        raise NotFoundError("Event not found")
    participant = db.get(Participant, participant_id)
    if participant is None:
        raise NotFoundError("Participant not found")
    if participant.event_id != event_id:
        raise ValidationError("Participant is not registered for this event", field="participant_id")
    return participant


def list_winners(
    db: Session,
    principal: Principal,
    event_id: Optional[int] = None,
    participant_id: Optional[int] = None,
) -> List[Winner]:
    decision, scoped = scope_listing(principal, Resource.WINNER, ListingFilter(event_id=event_id))
    enforce(decision)

    query = db.query(Winner).options(
        selectinload(Winner.event), selectinload(Winner.participant), selectinload(Winner.set_by_user)
    )
    if scoped.event_id is not None:
        query = query.filter(Winner.event_id == scoped.event_id)
    if scoped.event_ids is not None:
        query = query.filter(Winner.event_id.in_(sorted(scoped.event_ids)))
    if participant_id is not None:
        query = query.filter(Winner.participant_id == participant_id)
    if scoped.participant_user_id is not None:
        query = query.join(Participant, Winner.participant_id == Participant.id).filter(
            Participant.user_id == scoped.participant_user_id
        )
    return query.order_by(Winner.event_id, Winner.rank, Winner.id).all()


def get_winner(db: Session, principal: Principal, winner_id: int) -> Winner:
    winner = db.get(Winner, winner_id)
    if winner is None:
        raise NotFoundError("Winner not found")
    authorize(principal, Action.READ, Resource.WINNER, _target(winner))
    return winner


def create_winner(db: Session, principal: Principal, winner_in: winner_schemas.WinnerCreate) -> Winner:
    authorize(principal, Action.WRITE, Resource.WINNER, Target(event_id=winner_in.event_id))
    _load_participant_for_event(db, winner_in.event_id, winner_in.participant_id)

    winner = Winner(**winner_in.model_dump(), set_by_user_id=principal.id)
    db.add(winner)
    commit(db)
    db.refresh(winner)
    logger.info(
        "Winner %s (%s) recorded for event=%s participant=%s",
        winner.id, winner.rank, winner.event_id, winner.participant_id,
    )
    return winner


def update_winner(db: Session, principal: Principal, winner_id: int, winner_in: winner_schemas.WinnerUpdate) -> Winner:
    winner = get_winner(db, principal, winner_id)
    authorize(principal, Action.WRITE, Resource.WINNER, _target(winner))

    changes = winner_in.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")
    for field in ("event_id", "participant_id", "rank"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null", field=field)

    event_id = changes.get("event_id", winner.event_id)
    if event_id != winner.event_id:
        authorize(principal, Action.WRITE, Resource.WINNER, Target(event_id=event_id))
    if "event_id" in changes or "participant_id" in changes:
        _load_participant_for_event(db, event_id, changes.get("participant_id", winner.participant_id))

    for key, value in changes.items():
        setattr(winner, key, value)
    winner.set_by_user_id = principal.id
    commit(db)
    db.refresh(winner)
    return winner


def delete_winner(db: Session, principal: Principal, winner_id: int) -> None:
    winner = get_winner(db, principal, winner_id)
    authorize(principal, Action.WRITE, Resource.WINNER, _target(winner))
    db.delete(winner)
    commit(db)
    logger.info("Winner %s deleted by %s", winner_id, principal.id)
