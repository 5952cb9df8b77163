import datetime
import itertools

import pytest
from fastapi.testclient import TestClient

from lkbb.api.dependencies import resolve_principal
from lkbb.core import security
from lkbb.core.config import Settings
from lkbb.core.database import Database
from lkbb.main import create_app
from lkbb.models import Event, EventCategory, Participant, Score, ScoreDetail, User

TEST_PASSWORD = "password123"
# Hashing once keeps bcrypt out of every factory call
TEST_PASSWORD_HASH = security.get_password_hash(TEST_PASSWORD)


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret-key",
        LOG_LEVEL="WARNING",
        DEFAULT_RESET_PASSWORD="reset-pass-123",
    )


@pytest.fixture
def database():
    database = Database("sqlite://")
    database.create_all()
    yield database
    database.drop_all()
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


class Factory:
    """Creates committed rows with sensible defaults."""

    def __init__(self, session):
        self.db = session
        self._seq = itertools.count(1)

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def user(self, role="participant", email=None, is_active=True, focus_event_id=None, username=None):
        n = next(self._seq)
        return self._save(
            User(
                email=email or f"{role}{n}@example.com",
                username=username or f"{role}{n}",
                password_hash=TEST_PASSWORD_HASH,
                role=role,
                is_active=is_active,
                focus_event_id=focus_event_id,
            )
        )

    def event(self, name=None, is_featured=False):
        n = next(self._seq)
        return self._save(
            Event(
                name=name or f"LKBB Open {n}",
                event_date=datetime.datetime(2025, 8, 17, 8, 0),
                location="Bandung",
                is_featured=is_featured,
            )
        )

    def category(self, event, name="SMA"):
        return self._save(EventCategory(event_id=event.id, name=name))

    def participant(self, user, event, team_name=None, status="approved", category=None):
        n = next(self._seq)
        return self._save(
            Participant(
                user_id=user.id,
                event_id=event.id,
                event_category_id=category.id if category else None,
                team_name=team_name or f"Team {n}",
                status=status,
            )
        )

    def score(self, event, participant, judge, nilai=None, use_manual_nilai=False, details=()):
        return self._save(
            Score(
                event_id=event.id,
                participant_id=participant.id,
                judge_id=judge.id,
                nilai=nilai,
                use_manual_nilai=use_manual_nilai,
                details=[ScoreDetail(kriteria=k, nilai=v, bobot=w) for k, v, w in details],
            )
        )

    def principal(self, user):
        return resolve_principal(user, self.db)


@pytest.fixture
def make(db):
    return Factory(db)


# --- HTTP level ---

@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def app_db(app):
    session = app.state.database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app_make(app_db):
    return Factory(app_db)


@pytest.fixture
def auth_headers(settings):
    def _headers(user):
        token = security.create_access_token({"sub": str(user.id), "role": user.role}, settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def test_password():
    return TEST_PASSWORD
