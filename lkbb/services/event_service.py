import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from lkbb.core.database import commit, commit_delete
from lkbb.core.errors import ConflictError, NotFoundError, ValidationError
from lkbb.models import Event, EventCategory
from lkbb.schemas import event_schemas
from lkbb.services.access_policy import Action, Principal, Resource, Target, authorize

logger = logging.getLogger(__name__)

DUPLICATE_CATEGORY = "A category with this name already exists for the event"


def list_events(db: Session) -> List[Event]:
    return (
        db.query(Event)
        .options(selectinload(Event.categories))
        .order_by(Event.is_featured.desc(), Event.event_date.desc(), Event.id.desc())
        .all()
    )


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found")
    return event


def get_featured_event(db: Session) -> Optional[Event]:
    return db.query(Event).filter(Event.is_featured.is_(True)).first()


def create_event(db: Session, event_in: event_schemas.EventCreate) -> Event:
    event = Event(**event_in.model_dump(), is_featured=False)
    db.add(event)
    commit(db)
    db.refresh(event)
    logger.info("Event %s created", event.id)
    return event


def update_event(db: Session, event_id: int, event_in: event_schemas.EventUpdate) -> Event:
    event = get_event(db, event_id)
    changes = event_in.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")
    for field in ("name", "event_date", "location"):
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null", field=field)
    for key, value in changes.items():
        setattr(event, key, value)
    commit(db)
    db.refresh(event)
    return event


def delete_event(db: Session, event_id: int) -> None:
    event = get_event(db, event_id)
    db.delete(event)
    commit_delete(db, "Event still has participants, scores or winners")
    logger.info("Event %s deleted", event_id)


def set_featured(db: Session, event_id: int) -> Event:
    """Make ``event_id`` the only featured event."""
    event = get_event(db, event_id)
    try:
        db.execute(update(Event).where(Event.is_featured.is_(True)).values(is_featured=False))
        event.is_featured = True
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(event)
    logger.info("Event %s is now the featured event", event.id)
    return event


# --- categories ---

def list_categories(db: Session, event_id: Optional[int] = None) -> List[EventCategory]:
    query = db.query(EventCategory)
    if event_id is not None:
        query = query.filter(EventCategory.event_id == event_id)
    return query.order_by(EventCategory.event_id, EventCategory.name).all()


def get_category(db: Session, category_id: int) -> EventCategory:
    category = db.get(EventCategory, category_id)
    if category is None:
        raise NotFoundError("Event category not found")
    return category


def _name_taken(db: Session, event_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(EventCategory).filter(EventCategory.event_id == event_id, EventCategory.name == name)
    if exclude_id is not None:
        query = query.filter(EventCategory.id != exclude_id)
    return query.first() is not None


def create_category(db: Session, principal: Principal, category_in: event_schemas.EventCategoryCreate) -> EventCategory:
    authorize(principal, Action.WRITE, Resource.EVENT_CATEGORY, Target(event_id=category_in.event_id))
    get_event(db, category_in.event_id)

    name = category_in.name.strip()
    if not name:
        raise ValidationError("name cannot be empty", field="name")
    if _name_taken(db, category_in.event_id, name):
        raise ConflictError(DUPLICATE_CATEGORY)

    category = EventCategory(
        event_id=category_in.event_id,
        name=name,
        description=category_in.description,
        quota=category_in.quota,
        created_by=principal.id,
        updated_by=principal.id,
    )
    db.add(category)
    commit(db, DUPLICATE_CATEGORY)
    db.refresh(category)
    return category


def update_category(
    db: Session, principal: Principal, category_id: int, category_in: event_schemas.EventCategoryUpdate
) -> EventCategory:
    category = get_category(db, category_id)
    authorize(principal, Action.WRITE, Resource.EVENT_CATEGORY, Target(event_id=category.event_id))

    changes = category_in.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")
    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("name cannot be empty", field="name")
        if _name_taken(db, category.event_id, name, exclude_id=category.id):
            raise ConflictError(DUPLICATE_CATEGORY)
        changes["name"] = name

    for key, value in changes.items():
        setattr(category, key, value)
    category.updated_by = principal.id
    commit(db, DUPLICATE_CATEGORY)
    db.refresh(category)
    return category


def delete_category(db: Session, principal: Principal, category_id: int) -> None:
    category = get_category(db, category_id)
    authorize(principal, Action.WRITE, Resource.EVENT_CATEGORY, Target(event_id=category.event_id))
    if category.participants:
        raise ConflictError("Category is still used by registered participants")
    db.delete(category)
    commit_delete(db, "Category is still referenced")
