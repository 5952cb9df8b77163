"""
Participant (team registration) management.

Every read and write is gated by the access policy with the registration's
event and owning user as the target, so operators stay inside their focus
event, judges only see events they have scored and participants only their
own registrations.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from lkbb.core.database import commit, commit_delete
from lkbb.core.errors import AuthorizationError, NotFoundError, ValidationError
from lkbb.models import Event, EventCategory, Participant, ParticipantDetail, User
from lkbb.schemas import participant_schemas
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

INVALID_CATEGORY = "Event category is not valid for the selected event"


def _target(participant: Participant) -> Target:
    return Target(event_id=participant.event_id, participant_user_id=participant.user_id)


def _with_relations(query):
    return query.options(
        selectinload(Participant.details),
        selectinload(Participant.user),
        selectinload(Participant.event),
        selectinload(Participant.event_category),
    )


def resolve_category(db: Session, event_id: int, category_id: Optional[int]) -> Optional[int]:
    """A category is mandatory once the event defines any, and must belong to it."""
    has_categories = db.query(EventCategory.id).filter(EventCategory.event_id == event_id).first() is not None
    if category_id is None:
        if has_categories:
            raise ValidationError("Choose an event category before registering", field="event_category_id")
        return None
    category = db.get(EventCategory, category_id)
    if category is None or category.event_id != event_id:
        raise ValidationError(INVALID_CATEGORY, field="event_category_id")
    return category.id


def list_participants(
    db: Session,
    principal: Principal,
    event_id: Optional[int] = None,
    status: Optional[str] = None,
) -> List[Participant]:
    decision, scoped = scope_listing(principal, Resource.PARTICIPANT, ListingFilter(event_id=event_id))
    enforce(decision)

    query = _with_relations(db.query(Participant))
    if scoped.event_id is not None:
        query = query.filter(Participant.event_id == scoped.event_id)
    if scoped.event_ids is not None:
        query = query.filter(Participant.event_id.in_(sorted(scoped.event_ids)))
    if scoped.participant_user_id is not None:
        query = query.filter(Participant.user_id == scoped.participant_user_id)
    if status is not None:
        query = query.filter(Participant.status == status)
    return query.order_by(Participant.created_at.desc(), Participant.id.desc()).all()


def list_own_registrations(db: Session, user_id: int) -> List[Participant]:
    query = _with_relations(db.query(Participant)).filter(Participant.user_id == user_id)
    return query.order_by(Participant.created_at.desc(), Participant.id.desc()).all()


def get_participant(db: Session, principal: Principal, participant_id: int) -> Participant:
    participant = _with_relations(db.query(Participant)).filter(Participant.id == participant_id).first()
    if participant is None:
        raise NotFoundError("Participant not found")
    authorize(principal, Action.READ, Resource.PARTICIPANT, _target(participant))
    return participant


def create_participant(
    db: Session, principal: Principal, participant_in: participant_schemas.ParticipantCreate
) -> Participant:
    if principal.role is Role.PARTICIPANT:
        user_id = principal.id
        status = "pending"
    else:
        user_id = participant_in.user_id
        status = participant_in.status or "approved"

    authorize(
        principal,
        Action.WRITE,
        Resource.PARTICIPANT,
        Target(event_id=participant_in.event_id, participant_user_id=user_id),
    )
    if user_id is None:
        raise ValidationError("user_id is required", field="user_id")
    if db.get(Event, participant_in.event_id) is None:
        raise NotFoundError("Event not found")
    if db.get(User, user_id) is None:
        raise NotFoundError("User not found")
    category_id = resolve_category(db, participant_in.event_id, participant_in.event_category_id)

    team_name = participant_in.team_name.strip()
    if not team_name:
        raise ValidationError("team_name cannot be empty", field="team_name")

    participant = Participant(
        user_id=user_id,
        event_id=participant_in.event_id,
        event_category_id=category_id,
        team_name=team_name,
        representative_name=participant_in.representative_name,
        status=status,
        details=[ParticipantDetail(**detail.model_dump()) for detail in participant_in.details],
    )
    db.add(participant)
    commit(db)
    logger.info(
        "Participant %s registered for event %s by user %s (%s)",
        participant.id, participant.event_id, principal.id, status,
    )
    return get_participant(db, principal, participant.id)


def update_participant(
    db: Session,
    principal: Principal,
    participant_id: int,
    participant_in: participant_schemas.ParticipantUpdate,
) -> Participant:
    participant = get_participant(db, principal, participant_id)
    authorize(principal, Action.WRITE, Resource.PARTICIPANT, _target(participant))

    changes = participant_in.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")
    if "status" in changes and principal.role is Role.PARTICIPANT:
        raise AuthorizationError("Participants may not change their registration status")
    if "status" in changes and changes["status"] is None:
        raise ValidationError("status cannot be null", field="status")
    if "team_name" in changes:
        team_name = (changes["team_name"] or "").strip()
        if not team_name:
            raise ValidationError("team_name cannot be empty", field="team_name")
        changes["team_name"] = team_name
    if "event_category_id" in changes:
        changes["event_category_id"] = resolve_category(db, participant.event_id, changes["event_category_id"])

    for key, value in changes.items():
        setattr(participant, key, value)
    commit(db)
    db.refresh(participant)
    return participant


def set_status(db: Session, principal: Principal, participant_id: int, status: str) -> Participant:
    participant = get_participant(db, principal, participant_id)
    if principal.role not in (Role.ADMIN, Role.OPERATOR):
        raise AuthorizationError("Only admins and operators can change registration status")
    authorize(principal, Action.WRITE, Resource.PARTICIPANT, _target(participant))
    participant.status = status
    commit(db)
    db.refresh(participant)
    logger.info("Participant %s status set to %s by %s", participant.id, status, principal.id)
    return participant


def delete_participant(db: Session, principal: Principal, participant_id: int) -> None:
    participant = get_participant(db, principal, participant_id)
    authorize(principal, Action.WRITE, Resource.PARTICIPANT, _target(participant))
    # details, scores (with their details), winners and participations go with it
    db.delete(participant)
    commit_delete(db, "Participant is still referenced")
    logger.info("Participant %s deleted by %s", participant_id, principal.id)


# --- member details ---

def _load_detail(db: Session, detail_id: int) -> ParticipantDetail:
    detail = (
        db.query(ParticipantDetail)
        .options(selectinload(ParticipantDetail.participant))
        .filter(ParticipantDetail.id == detail_id)
        .first()
    )
    if detail is None:
        raise NotFoundError("Participant detail not found")
    return detail


def list_participant_details(
    db: Session,
    principal: Principal,
    participant_id: Optional[int] = None,
    event_id: Optional[int] = None,
) -> List[ParticipantDetail]:
    requested = ListingFilter(event_id=event_id)
    if participant_id is not None:
        participant = db.get(Participant, participant_id)
        if participant is None or (event_id is not None and participant.event_id != event_id):
            return []
        # Naming a registration scopes the listing to its event and owner
        requested = ListingFilter(event_id=participant.event_id, participant_user_id=participant.user_id)
    decision, scoped = scope_listing(principal, Resource.PARTICIPANT, requested)
    enforce(decision)

    query = (
        db.query(ParticipantDetail)
        .join(ParticipantDetail.participant)
        .options(selectinload(ParticipantDetail.participant))
    )
    if participant_id is not None:
        query = query.filter(ParticipantDetail.participant_id == participant_id)
    if scoped.event_id is not None:
        query = query.filter(Participant.event_id == scoped.event_id)
    if scoped.event_ids is not None:
        query = query.filter(Participant.event_id.in_(sorted(scoped.event_ids)))
    if scoped.participant_user_id is not None:
        query = query.filter(Participant.user_id == scoped.participant_user_id)
    return query.order_by(ParticipantDetail.id).all()


def get_participant_detail(db: Session, principal: Principal, detail_id: int) -> ParticipantDetail:
    detail = _load_detail(db, detail_id)
    authorize(principal, Action.READ, Resource.PARTICIPANT, _target(detail.participant))
    return detail


def create_participant_detail(
    db: Session, principal: Principal, detail_in: participant_schemas.ParticipantDetailCreate
) -> ParticipantDetail:
    participant = db.get(Participant, detail_in.participant_id)
    if participant is None:
        raise NotFoundError("Participant not found")
    authorize(principal, Action.WRITE, Resource.PARTICIPANT, _target(participant))

    values = detail_in.model_dump(exclude={"participant_id"})
    values["member_name"] = values["member_name"].strip()
    if not values["member_name"]:
        raise ValidationError("member_name cannot be empty", field="member_name")

    detail = ParticipantDetail(participant_id=participant.id, **values)
    db.add(detail)
    commit(db)
    db.refresh(detail)
    logger.info("Member %s added to participant %s by %s", detail.id, participant.id, principal.id)
    return detail


def update_participant_detail(
    db: Session,
    principal: Principal,
    detail_id: int,
    detail_in: participant_schemas.ParticipantDetailUpdate,
) -> ParticipantDetail:
    detail = _load_detail(db, detail_id)
    authorize(principal, Action.WRITE, Resource.PARTICIPANT, _target(detail.participant))

    changes = detail_in.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")
    if "member_name" in changes:
        member_name = (changes["member_name"] or "").strip()
        if not member_name:
            raise ValidationError("member_name cannot be empty", field="member_name")
        changes["member_name"] = member_name

    for key, value in changes.items():
        setattr(detail, key, value)
    commit(db)
    db.refresh(detail)
    return detail


def delete_participant_detail(db: Session, principal: Principal, detail_id: int) -> None:
    detail = _load_detail(db, detail_id)
    authorize(principal, Action.WRITE, Resource.PARTICIPANT, _target(detail.participant))
    participant_id = detail.participant_id
    db.delete(detail)
    commit(db)
    logger.info("Member %s removed from participant %s by %s", detail_id, participant_id, principal.id)
