import logging
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from lkbb.core.database import commit
from lkbb.core.errors import AuthorizationError, NotFoundError, ValidationError
from lkbb.models import Event, Participant, Participation, Winner
from lkbb.schemas import participation_schemas
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

logger = logging.getLogger(__name__)

PARTICIPANT_EDITABLE = {"documentation_link"}


def _target(participation: Participation) -> Target:
    return Target(event_id=participation.event_id, participant_user_id=participation.participant.user_id)


def _check_references(db: Session, event_id: int, participant_id: int, winner_id: Optional[int]) -> None:
    if db.get(Event, event_id) is None:
        raise NotFoundError("Event not found")
    participant = db.get(Participant, participant_id)
    if participant is None:
        raise NotFoundError("Participant not found")
    if participant.event_id != event_id:
        raise ValidationError("Participant is not registered for this event", field="participant_id")
    if winner_id is not None:
        winner = db.get(Winner, winner_id)
        if winner is None:
            raise NotFoundError("Winner not found")
        if winner.participant_id != participant_id:
            raise ValidationError("Winner record belongs to another participant", field="winner_id")


def list_participations(
    db: Session,
    principal: Principal,
    event_id: Optional[int] = None,
    participant_id: Optional[int] = None,
) -> List[Participation]:
    decision, scoped = scope_listing(principal, Resource.PARTICIPATION, ListingFilter(event_id=event_id))
    enforce(decision)

    query = db.query(Participation).options(
        selectinload(Participation.event), selectinload(Participation.participant)
    )
    if scoped.event_id is not None:
        query = query.filter(Participation.event_id == scoped.event_id)
    if scoped.event_ids is not None:
        query = query.filter(Participation.event_id.in_(sorted(scoped.event_ids)))
    if participant_id is not None:
        query = query.filter(Participation.participant_id == participant_id)
    if scoped.participant_user_id is not None:
        query = query.join(Participant, Participation.participant_id == Participant.id).filter(
            Participant.user_id == scoped.participant_user_id
        )
    return query.order_by(Participation.id.desc()).all()


def get_participation(db: Session, principal: Principal, participation_id: int) -> Participation:
    participation = db.get(Participation, participation_id)
    if participation is None:
        raise NotFoundError("Participation not found")
    authorize(principal, Action.READ, Resource.PARTICIPATION, _target(participation))
    return participation


def create_participation(
    db: Session, principal: Principal, participation_in: participation_schemas.ParticipationCreate
) -> Participation:
    authorize(principal, Action.WRITE, Resource.PARTICIPATION, Target(event_id=participation_in.event_id))
    _check_references(db, participation_in.event_id, participation_in.participant_id, participation_in.winner_id)

    participation = Participation(**participation_in.model_dump())
    db.add(participation)
    commit(db)
    db.refresh(participation)
    return participation


def update_participation(
    db: Session,
    principal: Principal,
    participation_id: int,
    participation_in: participation_schemas.ParticipationUpdate,
) -> Participation:
    participation = get_participation(db, principal, participation_id)
    authorize(principal, Action.WRITE, Resource.PARTICIPATION, _target(participation))

    changes = participation_in.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")
    if principal.role is Role.PARTICIPANT and set(changes) - PARTICIPANT_EDITABLE:
        raise AuthorizationError("Participants may only update the documentation link")
    for field in ("event_id", "participant_id"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null", field=field)

    event_id = changes.get("event_id", participation.event_id)
    if event_id != participation.event_id:
        authorize(principal, Action.WRITE, Resource.PARTICIPATION, Target(event_id=event_id))
    if {"event_id", "participant_id", "winner_id"} & set(changes):
        _check_references(
            db,
            event_id,
            changes.get("participant_id", participation.participant_id),
            changes.get("winner_id", participation.winner_id),
        )

    for key, value in changes.items():
        setattr(participation, key, value)
    commit(db)
    db.refresh(participation)
    return participation


def delete_participation(db: Session, principal: Principal, participation_id: int) -> None:
    participation = get_participation(db, principal, participation_id)
    authorize(principal, Action.WRITE, Resource.PARTICIPATION, _target(participation))
    db.delete(participation)
    commit(db)
    logger.info("Participation %s deleted by %s", participation_id, principal.id)
