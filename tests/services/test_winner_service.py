import pytest

from lkbb.core.errors import AuthorizationError, ValidationError
from lkbb.models import Participation, Winner
from lkbb.schemas import participation_schemas, winner_schemas
from lkbb.services import participation_service, winner_service


@pytest.fixture
def podium(make, db):
    event = make.event()
    owner = make.user()
    team = make.participant(owner, event)
    admin_user = make.user(role="admin")
    winner = Winner(event_id=event.id, participant_id=team.id, rank="Juara 1", set_by_user_id=admin_user.id)
    db.add(winner)
    db.commit()
    participation = Participation(participant_id=team.id, event_id=event.id, winner_id=winner.id)
    db.add(participation)
    db.commit()
    return {"event": event, "owner": owner, "team": team, "winner": winner, "participation": participation}


class TestWinners:

    def test_operator_records_winner_in_focus_event(self, db, make):
        event = make.event()
        team = make.participant(make.user(), event)
        operator_user = make.user(role="operator", focus_event_id=event.id)
        winner = winner_service.create_winner(
            db,
            make.principal(operator_user),
            winner_schemas.WinnerCreate(event_id=event.id, participant_id=team.id, rank="Juara 2"),
        )
        assert winner.set_by_user_id == operator_user.id

    def test_winner_participant_must_belong_to_event(self, db, make):
        event = make.event()
        team = make.participant(make.user(), make.event())
        admin = make.principal(make.user(role="admin"))
        with pytest.raises(ValidationError):
            winner_service.create_winner(
                db, admin, winner_schemas.WinnerCreate(event_id=event.id, participant_id=team.id, rank="Juara 1")
            )

    def test_participant_sees_own_wins_only(self, db, make, podium):
        other = make.participant(make.user(), podium["event"])
        db.add(
            Winner(
                event_id=podium["event"].id,
                participant_id=other.id,
                rank="Juara 2",
                set_by_user_id=podium["winner"].set_by_user_id,
            )
        )
        db.commit()
        listed = winner_service.list_winners(db, make.principal(podium["owner"]))
        assert [w.id for w in listed] == [podium["winner"].id]

    def test_participant_cannot_edit_winner(self, db, make, podium):
        with pytest.raises(AuthorizationError):
            winner_service.update_winner(
                db, make.principal(podium["owner"]), podium["winner"].id, winner_schemas.WinnerUpdate(rank="Juara 0")
            )


class TestParticipations:

    def test_participant_updates_documentation_link(self, db, make, podium):
        updated = participation_service.update_participation(
            db,
            make.principal(podium["owner"]),
            podium["participation"].id,
            participation_schemas.ParticipationUpdate(documentation_link="https://example.com/video"),
        )
        assert updated.documentation_link == "https://example.com/video"

    def test_participant_cannot_relink_winner(self, db, make, podium):
        with pytest.raises(AuthorizationError):
            participation_service.update_participation(
                db,
                make.principal(podium["owner"]),
                podium["participation"].id,
                participation_schemas.ParticipationUpdate(winner_id=None),
            )

    def test_stranger_cannot_read_participation(self, db, make, podium):
        with pytest.raises(AuthorizationError):
            participation_service.get_participation(db, make.principal(make.user()), podium["participation"].id)

    def test_deleting_winner_unlinks_participation(self, db, make, podium):
        admin = make.principal(make.user(role="admin"))
        winner_service.delete_winner(db, admin, podium["winner"].id)
        db.expire_all()
        assert db.get(Participation, podium["participation"].id).winner_id is None
