import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from lkbb.core import security
from lkbb.core.database import commit, commit_delete
from lkbb.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from lkbb.models import Event, User
from lkbb.schemas import user_schemas
from lkbb.services.access_policy import Principal, Role

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email is already registered"
OPERATOR_MANAGES_JUDGES = "Operators may only manage judge accounts"


def _ensure_can_manage(principal: Principal, target_role: str) -> None:
    if principal.role is Role.OPERATOR and target_role != Role.JUDGE.value:
        raise AuthorizationError(OPERATOR_MANAGES_JUDGES)


def _check_focus_event(db: Session, role: str, focus_event_id: Optional[int]) -> None:
    if focus_event_id is None:
        return
    if role != Role.OPERATOR.value:
        raise ValidationError("focus_event_id can only be set on operator accounts", field="focus_event_id")
    if db.get(Event, focus_event_id) is None:
        raise NotFoundError("Event not found")


def _email_taken(db: Session, email: str, exclude_user_id: Optional[int] = None) -> bool:
    query = db.query(User).filter(User.email == email)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def list_users(db: Session, role: Optional[Role] = None) -> List[User]:
    query = db.query(User)
    if role is not None:
        query = query.filter(User.role == role.value)
    return query.order_by(User.id).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def create_user(db: Session, principal: Principal, user_in: user_schemas.UserCreate) -> User:
    role = user_in.role.value
    _ensure_can_manage(principal, role)
    _check_focus_event(db, role, user_in.focus_event_id)

    email = user_in.email.lower()
    if _email_taken(db, email):
        raise ConflictError(EMAIL_TAKEN)

    data = user_in.model_dump(exclude={"password", "email", "role"})
    user = User(
        **data,
        email=email,
        role=role,
        password_hash=security.get_password_hash(user_in.password),
    )
    db.add(user)
    commit(db, EMAIL_TAKEN)
    db.refresh(user)
    logger.info("User %s (%s) created by %s", user.id, user.role, principal.id)
    return user


def update_user(db: Session, principal: Principal, user_id: int, user_in: user_schemas.UserUpdate) -> User:
    user = get_user(db, user_id)
    _ensure_can_manage(principal, user.role)

    changes = user_in.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")
    if "role" in changes:
        if changes["role"] is None:
            raise ValidationError("role cannot be null", field="role")
        changes["role"] = changes["role"].value
        _ensure_can_manage(principal, changes["role"])
    if "email" in changes:
        if changes["email"] is None:
            raise ValidationError("email cannot be null", field="email")
        changes["email"] = changes["email"].lower()
        if _email_taken(db, changes["email"], exclude_user_id=user.id):
            raise ConflictError(EMAIL_TAKEN)

    new_role = changes.get("role", user.role)
    if "focus_event_id" in changes:
        _check_focus_event(db, new_role, changes["focus_event_id"])
    elif new_role != Role.OPERATOR.value:
        # Demoted operators lose their focus event
        changes["focus_event_id"] = None

    for key, value in changes.items():
        setattr(user, key, value)
    commit(db, EMAIL_TAKEN)
    db.refresh(user)
    return user


def set_active(db: Session, principal: Principal, user_id: int, active: bool) -> User:
    user = get_user(db, user_id)
    _ensure_can_manage(principal, user.role)
    if not active and user.id == principal.id:
        raise ValidationError("You cannot deactivate your own account")
    user.is_active = active
    commit(db)
    db.refresh(user)
    logger.info("User %s %s by %s", user.id, "activated" if active else "deactivated", principal.id)
    return user


def reset_password(db: Session, principal: Principal, user_id: int, default_password: str) -> User:
    user = get_user(db, user_id)
    _ensure_can_manage(principal, user.role)
    user.password_hash = security.get_password_hash(default_password)
    commit(db)
    logger.info("Password of user %s reset by %s", user.id, principal.id)
    return user


def delete_user(db: Session, principal: Principal, user_id: int) -> None:
    user = get_user(db, user_id)
    _ensure_can_manage(principal, user.role)
    if user.id == principal.id:
        raise ValidationError("You cannot delete your own account")
    db.delete(user)
    commit_delete(db, "User is still referenced by registrations, scores or winners")
    logger.info("User %s deleted by %s", user_id, principal.id)
