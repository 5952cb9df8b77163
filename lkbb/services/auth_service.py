import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from lkbb.core import security
from lkbb.core.config import Settings
from lkbb.core.database import commit
from lkbb.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from lkbb.models import Event, User
from lkbb.schemas import auth_schemas
from lkbb.services.access_policy import Role

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email is already registered"


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email.lower()).first()


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if not user or not security.verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise AuthorizationError("Account is not active yet")
    return user


def login(db: Session, settings: Settings, login_in: auth_schemas.LoginRequest) -> dict:
    user = authenticate(db, login_in.email, login_in.password)
    access_token = security.create_access_token(data={"sub": str(user.id), "role": user.role}, settings=settings)
    logger.info("User %s logged in as %s", user.id, user.role)
    return {"access_token": access_token, "token_type": "bearer", "user": user}


def register(db: Session, register_in: auth_schemas.RegisterRequest) -> User:
    """Self-registration creates a participant account that an admin activates later."""
    email = register_in.email.lower()
    if get_user_by_email(db, email):
        raise ConflictError(EMAIL_TAKEN)

    user = User(
        email=email,
        username=register_in.username.strip(),
        password_hash=security.get_password_hash(register_in.password),
        role=Role.PARTICIPANT.value,
        is_active=False,
    )
    db.add(user)
    commit(db, EMAIL_TAKEN)
    db.refresh(user)
    logger.info("Registered participant account %s", user.id)
    return user


def update_profile(db: Session, user: User, profile_in: auth_schemas.ProfileUpdate) -> User:
    changes = profile_in.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")

    if "focus_event_id" in changes:
        if user.role != Role.OPERATOR.value:
            raise ValidationError("Only operators can choose a focus event", field="focus_event_id")
        focus_event_id = changes["focus_event_id"]
        if focus_event_id is not None and db.get(Event, focus_event_id) is None:
            raise NotFoundError("Event not found")

    if "username" in changes:
        if not changes["username"] or not changes["username"].strip():
            raise ValidationError("username cannot be empty", field="username")
        changes["username"] = changes["username"].strip()

    for key, value in changes.items():
        setattr(user, key, value)
    commit(db)
    db.refresh(user)
    return user


def change_password(db: Session, user: User, new_password: str) -> None:
    user.password_hash = security.get_password_hash(new_password)
    commit(db)
    logger.info("User %s changed their password", user.id)
