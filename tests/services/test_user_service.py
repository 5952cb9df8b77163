import pytest

from lkbb.core import security
from lkbb.core.errors import AuthorizationError, ConflictError, ValidationError
from lkbb.schemas import user_schemas
from lkbb.services import user_service
from lkbb.services.access_policy import Role


class TestUserService:

    def test_operator_creates_judge(self, db, make):
        operator = make.principal(make.user(role="operator"))
        judge = user_service.create_user(
            db,
            operator,
            user_schemas.UserCreate(email="Juri@Example.com", username="juri", role=Role.JUDGE, password="rahasia123"),
        )
        assert judge.email == "juri@example.com"
        assert security.verify_password("rahasia123", judge.password_hash)

    def test_operator_cannot_create_admin(self, db, make):
        operator = make.principal(make.user(role="operator"))
        with pytest.raises(AuthorizationError):
            user_service.create_user(
                db,
                operator,
                user_schemas.UserCreate(email="boss@example.com", username="boss", role=Role.ADMIN, password="rahasia123"),
            )

    def test_operator_cannot_promote_judge(self, db, make):
        operator = make.principal(make.user(role="operator"))
        judge = make.user(role="judge")
        with pytest.raises(AuthorizationError):
            user_service.update_user(db, operator, judge.id, user_schemas.UserUpdate(role=Role.ADMIN))

    def test_duplicate_email_conflicts(self, db, make):
        make.user(email="taken@example.com")
        admin = make.principal(make.user(role="admin"))
        with pytest.raises(ConflictError):
            user_service.create_user(
                db,
                admin,
                user_schemas.UserCreate(email="taken@example.com", username="dup", role=Role.JUDGE, password="rahasia123"),
            )

    def test_focus_event_only_on_operators(self, db, make):
        event = make.event()
        admin = make.principal(make.user(role="admin"))
        judge = make.user(role="judge")
        with pytest.raises(ValidationError):
            user_service.update_user(db, admin, judge.id, user_schemas.UserUpdate(focus_event_id=event.id))

        operator = make.user(role="operator")
        updated = user_service.update_user(db, admin, operator.id, user_schemas.UserUpdate(focus_event_id=event.id))
        assert updated.focus_event_id == event.id

    def test_demoting_operator_drops_focus(self, db, make):
        event = make.event()
        admin = make.principal(make.user(role="admin"))
        operator = make.user(role="operator", focus_event_id=event.id)
        updated = user_service.update_user(db, admin, operator.id, user_schemas.UserUpdate(role=Role.JUDGE))
        assert updated.focus_event_id is None

    def test_deactivate_and_reset_password(self, db, make):
        admin = make.principal(make.user(role="admin"))
        judge = make.user(role="judge")
        assert user_service.set_active(db, admin, judge.id, False).is_active is False
        user_service.reset_password(db, admin, judge.id, "default-pass")
        assert security.verify_password("default-pass", judge.password_hash)

    def test_referenced_user_cannot_be_deleted(self, db, make):
        admin = make.principal(make.user(role="admin"))
        user = make.user()
        make.participant(user, make.event())
        with pytest.raises(ConflictError):
            user_service.delete_user(db, admin, user.id)

    def test_cannot_delete_self(self, db, make):
        admin_user = make.user(role="admin")
        with pytest.raises(ValidationError):
            user_service.delete_user(db, make.principal(admin_user), admin_user.id)
