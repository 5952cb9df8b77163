from typing import Iterator, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from lkbb.core import security
from lkbb.core.config import Settings
from lkbb.core.errors import AuthorizationError
from lkbb.models import User
from lkbb.repositories.score_repository import ScoreRepository
from lkbb.services.access_policy import ROLE_NOT_PERMITTED, Principal, Role, parse_role


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(
    token: Optional[str] = Depends(security.oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    token_data = security.verify_token(token, settings, credentials_exception)

    user = db.get(User, token_data.user_id)
    if user is None or not user.is_active:
        raise credentials_exception
    return user


def resolve_principal(user: User, db: Session) -> Principal:
    role = parse_role(user.role)
    if role is None:
        raise AuthorizationError(ROLE_NOT_PERMITTED)
    judged_event_ids = frozenset()
    if role is Role.JUDGE:
        judged_event_ids = ScoreRepository(db).judged_event_ids(user.id)
    return Principal(
        id=user.id,
        role=role,
        focus_event_id=user.focus_event_id if role is Role.OPERATOR else None,
        judged_event_ids=judged_event_ids,
    )


def get_principal(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Principal:
    return resolve_principal(current_user, db)


def require_roles(*roles: Role):
    """Dependency factory rejecting callers whose role is not listed."""

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in roles:
            raise AuthorizationError(ROLE_NOT_PERMITTED)
        return principal

    return dependency
