import pytest

from lkbb.core.errors import AuthorizationError, ConfigurationError, ConflictError, NotFoundError
from lkbb.models import Event, User
from lkbb.schemas import event_schemas
from lkbb.services import event_service


class TestFeaturedEvent:

    def test_only_one_event_is_featured(self, db, make):
        first = make.event(is_featured=True)
        second = make.event()

        event_service.set_featured(db, second.id)

        featured = db.query(Event).filter(Event.is_featured.is_(True)).all()
        assert [event.id for event in featured] == [second.id]
        db.refresh(first)
        assert first.is_featured is False

    def test_featuring_twice_is_idempotent(self, db, make):
        event = make.event()
        event_service.set_featured(db, event.id)
        event_service.set_featured(db, event.id)
        assert event_service.get_featured_event(db).id == event.id

    def test_unknown_event(self, db):
        with pytest.raises(NotFoundError):
            event_service.set_featured(db, 9999)


class TestEvents:

    def test_delete_event_with_registrations_conflicts(self, db, make):
        event = make.event()
        make.participant(make.user(), event)
        with pytest.raises(ConflictError):
            event_service.delete_event(db, event.id)
        assert db.get(Event, event.id) is not None

    def test_delete_event_clears_operator_focus(self, db, make):
        event = make.event()
        operator = make.user(role="operator", focus_event_id=event.id)
        event_service.delete_event(db, event.id)
        db.expire_all()
        assert db.get(User, operator.id).focus_event_id is None


class TestCategories:

    def test_operator_creates_category_in_focus_event(self, db, make):
        event = make.event()
        operator = make.principal(make.user(role="operator", focus_event_id=event.id))
        category = event_service.create_category(
            db, operator, event_schemas.EventCategoryCreate(event_id=event.id, name=" SMP ")
        )
        assert category.name == "SMP"
        assert category.created_by == operator.id

    def test_operator_outside_focus_is_forbidden(self, db, make):
        event = make.event()
        other = make.event()
        operator = make.principal(make.user(role="operator", focus_event_id=event.id))
        with pytest.raises(AuthorizationError):
            event_service.create_category(db, operator, event_schemas.EventCategoryCreate(event_id=other.id, name="SMP"))

    def test_operator_without_focus(self, db, make):
        event = make.event()
        operator = make.principal(make.user(role="operator"))
        with pytest.raises(ConfigurationError):
            event_service.create_category(db, operator, event_schemas.EventCategoryCreate(event_id=event.id, name="SMP"))

    def test_duplicate_name_conflicts(self, db, make):
        event = make.event()
        make.category(event, name="SMA")
        admin = make.principal(make.user(role="admin"))
        with pytest.raises(ConflictError):
            event_service.create_category(db, admin, event_schemas.EventCategoryCreate(event_id=event.id, name="SMA"))

    def test_same_name_in_other_event_is_fine(self, db, make):
        make.category(make.event(), name="SMA")
        event = make.event()
        admin = make.principal(make.user(role="admin"))
        category = event_service.create_category(
            db, admin, event_schemas.EventCategoryCreate(event_id=event.id, name="SMA")
        )
        assert category.event_id == event.id

    def test_rename_onto_existing_name_conflicts(self, db, make):
        event = make.event()
        make.category(event, name="SMA")
        smp = make.category(event, name="SMP")
        admin = make.principal(make.user(role="admin"))
        with pytest.raises(ConflictError):
            event_service.update_category(db, admin, smp.id, event_schemas.EventCategoryUpdate(name="SMA"))

    def test_category_in_use_cannot_be_deleted(self, db, make):
        event = make.event()
        category = make.category(event)
        make.participant(make.user(), event, category=category)
        admin = make.principal(make.user(role="admin"))
        with pytest.raises(ConflictError):
            event_service.delete_category(db, admin, category.id)
