import logging

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def arena(app_make):
    event = app_make.event()
    other_event = app_make.event()
    judge = app_make.user(role="judge")
    team = app_make.participant(app_make.user(), event)
    far_team = app_make.participant(app_make.user(), other_event)
    return {
        "event": event,
        "other_event": other_event,
        "judge": judge,
        "team": team,
        "far_team": far_team,
        "admin": app_make.user(role="admin"),
        "operator": app_make.user(role="operator", focus_event_id=event.id),
    }


def _create_payload(arena, **overrides):
    payload = {
        "event_id": arena["event"].id,
        "participant_id": arena["team"].id,
        "judge_id": arena["judge"].id,
        "details": [
            {"kriteria": "PBB", "nilai": 85, "bobot": 0.3},
            {"kriteria": "Variasi", "nilai": 88, "bobot": 0.3},
            {"kriteria": "Formasi", "nilai": 82, "bobot": 0.2},
            {"kriteria": "Kekompakan", "nilai": 90, "bobot": 0.2},
        ],
    }
    payload.update(overrides)
    return payload


class TestScoreRoutes:

    def test_requires_authentication(self, client: TestClient):
        response = client.get("/api/scores/")
        assert response.status_code == 401

    def test_create_then_recompute(self, client: TestClient, arena, auth_headers):
        headers = auth_headers(arena["admin"])
        response = client.post("/api/scores/", json=_create_payload(arena), headers=headers)
        assert response.status_code == 201
        created = response.json()
        assert created["nilai"] is None
        assert len(created["details"]) == 4
        assert created["judge"]["id"] == arena["judge"].id

        response = client.post(f"/api/scores/{created['id']}/recompute", headers=headers)
        assert response.status_code == 200
        assert response.json()["nilai"] == 86

    def test_duplicate_is_conflict(self, client: TestClient, arena, auth_headers):
        headers = auth_headers(arena["admin"])
        assert client.post("/api/scores/", json=_create_payload(arena), headers=headers).status_code == 201
        response = client.post("/api/scores/", json=_create_payload(arena), headers=headers)
        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    def test_manual_out_of_range(self, client: TestClient, arena, auth_headers):
        payload = _create_payload(arena, use_manual_nilai=True, nilai=150, details=None)
        response = client.post("/api/scores/", json=payload, headers=auth_headers(arena["admin"]))
        assert response.status_code == 400
        assert response.json()["field"] == "nilai"

    def test_operator_outside_focus_gets_403(self, client: TestClient, arena, auth_headers):
        response = client.get(
            "/api/scores/", params={"event_id": arena["other_event"].id}, headers=auth_headers(arena["operator"])
        )
        assert response.status_code == 403

    def test_operator_without_focus_gets_configuration_error(self, client: TestClient, app_make, auth_headers):
        operator = app_make.user(role="operator")
        response = client.get("/api/scores/", headers=auth_headers(operator))
        assert response.status_code == 400
        assert response.json()["code"] == "configuration_error"

    def test_judge_scores_for_self(self, client: TestClient, arena, auth_headers):
        payload = _create_payload(arena, judge_id=None, use_manual_nilai=True, nilai=95.6, details=None)
        response = client.post("/api/scores/", json=payload, headers=auth_headers(arena["judge"]))
        assert response.status_code == 201
        body = response.json()
        assert body["judge_id"] == arena["judge"].id
        assert body["nilai"] == 96

        listed = client.get("/api/scores/", headers=auth_headers(arena["judge"])).json()
        assert [score["id"] for score in listed] == [body["id"]]

    def test_update_switches_modes(self, client: TestClient, arena, auth_headers):
        headers = auth_headers(arena["admin"])
        score_id = client.post("/api/scores/", json=_create_payload(arena), headers=headers).json()["id"]

        response = client.put(f"/api/scores/{score_id}", json={"use_manual_nilai": True}, headers=headers)
        assert response.status_code == 400

        response = client.put(f"/api/scores/{score_id}", json={"use_manual_nilai": True, "nilai": 70}, headers=headers)
        assert response.json()["nilai"] == 70

        response = client.put(f"/api/scores/{score_id}", json={"use_manual_nilai": False}, headers=headers)
        assert response.json()["nilai"] is None

    def test_bulk_delete_by_participant(self, client: TestClient, arena, app_make, auth_headers):
        headers = auth_headers(arena["operator"])
        second_judge = app_make.user(role="judge")
        client.post("/api/scores/", json=_create_payload(arena), headers=headers)
        client.post("/api/scores/", json=_create_payload(arena, judge_id=second_judge.id), headers=headers)

        response = client.delete(
            "/api/scores/by-participant",
            params={"event_id": arena["event"].id, "participant_id": arena["team"].id},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["deleted_count"] == 2
        assert client.get("/api/scores/", headers=headers).json() == []

    def test_delete_score(self, client: TestClient, arena, auth_headers):
        headers = auth_headers(arena["admin"])
        score_id = client.post("/api/scores/", json=_create_payload(arena), headers=headers).json()["id"]
        assert client.delete(f"/api/scores/{score_id}", headers=headers).status_code == 204
        assert client.get(f"/api/scores/{score_id}", headers=headers).status_code == 404


class TestScoreDetailRoutes:

    def test_detail_lifecycle_with_recompute(self, client: TestClient, arena, auth_headers):
        headers = auth_headers(arena["judge"])
        payload = _create_payload(arena, judge_id=None, details=[{"kriteria": "PBB", "nilai": 80, "bobot": 0.5}])
        score_id = client.post("/api/scores/", json=payload, headers=headers).json()["id"]

        response = client.post(
            "/api/score-details/",
            params={"recompute": "true"},
            json={"score_id": score_id, "kriteria": "Variasi", "nilai": 90, "bobot": 0.5},
            headers=headers,
        )
        assert response.status_code == 201
        detail = response.json()
        assert detail["score"]["nilai"] == 85

        response = client.put(
            f"/api/score-details/{detail['id']}", params={"recompute": "true"}, json={"nilai": 70}, headers=headers
        )
        assert response.json()["score"]["nilai"] == 75

        response = client.delete(f"/api/score-details/{detail['id']}", params={"recompute": "true"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["nilai"] == 40
        assert len(response.json()["details"]) == 1

    def test_participant_cannot_add_details(self, client: TestClient, arena, app_make, auth_headers):
        score_id = client.post(
            "/api/scores/", json=_create_payload(arena), headers=auth_headers(arena["admin"])
        ).json()["id"]
        owner = arena["team"].user
        response = client.post(
            "/api/score-details/",
            json={"score_id": score_id, "kriteria": "Bonus", "nilai": 100},
            headers=auth_headers(owner),
        )
        assert response.status_code == 403


class TestAppWeightTolerance:

    @pytest.fixture
    def settings(self, settings):
        return settings.model_copy(update={"SCORE_WEIGHT_TOLERANCE": 0.6})

    def test_recompute_uses_app_settings(self, client: TestClient, arena, auth_headers, caplog):
        headers = auth_headers(arena["admin"])
        payload = _create_payload(arena, details=[{"kriteria": "PBB", "nilai": 80, "bobot": 0.5}])
        score_id = client.post("/api/scores/", json=payload, headers=headers).json()["id"]

        with caplog.at_level(logging.WARNING, logger="lkbb.services.scoring_engine"):
            response = client.post(f"/api/scores/{score_id}/recompute", headers=headers)
        assert response.json()["nilai"] == 40
        assert "instead of 1" not in caplog.text
