from fastapi.testclient import TestClient


class TestParticipantRoutes:

    def test_self_registration_and_approval(self, client: TestClient, app_make, auth_headers):
        event = app_make.event()
        category = app_make.category(event, name="SMA")
        user = app_make.user()
        operator = app_make.user(role="operator", focus_event_id=event.id)

        response = client.post(
            "/api/participants/",
            json={
                "event_id": event.id,
                "event_category_id": category.id,
                "team_name": "Paskibra Garuda",
                "details": [{"member_name": "Ayu", "age": 16}],
            },
            headers=auth_headers(user),
        )
        assert response.status_code == 201
        registration = response.json()
        assert registration["status"] == "pending"
        assert registration["event_category"]["name"] == "SMA"

        response = client.patch(f"/api/participants/{registration['id']}/approve", headers=auth_headers(user))
        assert response.status_code == 403

        response = client.patch(f"/api/participants/{registration['id']}/approve", headers=auth_headers(operator))
        assert response.status_code == 200
        assert response.json()["participant"]["status"] == "approved"

        mine = client.get("/api/participants/me", headers=auth_headers(user)).json()
        assert [p["id"] for p in mine] == [registration["id"]]

    def test_status_filter_is_validated(self, client: TestClient, app_make, auth_headers):
        admin = app_make.user(role="admin")
        response = client.get("/api/participants/", params={"status": "menang"}, headers=auth_headers(admin))
        assert response.status_code == 422


class TestUserRoutes:

    def test_operator_manages_judges_only(self, client: TestClient, app_make, auth_headers):
        operator = app_make.user(role="operator")
        admin = app_make.user(role="admin")
        headers = auth_headers(operator)

        response = client.post(
            "/api/users/",
            json={"email": "juri.baru@example.com", "username": "juri", "role": "judge", "password": "rahasia123"},
            headers=headers,
        )
        assert response.status_code == 201

        response = client.patch(f"/api/users/{admin.id}/deactivate", headers=headers)
        assert response.status_code == 403

    def test_participants_cannot_list_users(self, client: TestClient, app_make, auth_headers):
        response = client.get("/api/users/", headers=auth_headers(app_make.user()))
        assert response.status_code == 403


class TestParticipantDetailRoutes:

    def test_owner_manages_members(self, client: TestClient, app_make, auth_headers):
        user = app_make.user()
        team = app_make.participant(user, app_make.event())
        headers = auth_headers(user)

        response = client.post(
            "/api/participant-details/",
            json={"participant_id": team.id, "member_name": "Ayu", "birth_date": "2009-03-01"},
            headers=headers,
        )
        assert response.status_code == 201
        detail = response.json()
        assert detail["participant"]["id"] == team.id

        response = client.put(f"/api/participant-details/{detail['id']}", json={"age": 16}, headers=headers)
        assert response.status_code == 200
        assert response.json()["age"] == 16

        listed = client.get("/api/participant-details/", params={"participant_id": team.id}, headers=headers)
        assert [d["id"] for d in listed.json()] == [detail["id"]]

        response = client.delete(f"/api/participant-details/{detail['id']}", headers=headers)
        assert response.status_code == 200
        assert client.get(f"/api/participant-details/{detail['id']}", headers=headers).status_code == 404

    def test_other_participant_is_forbidden(self, client: TestClient, app_make, auth_headers):
        team = app_make.participant(app_make.user(), app_make.event())
        response = client.post(
            "/api/participant-details/",
            json={"participant_id": team.id, "member_name": "Budi"},
            headers=auth_headers(app_make.user()),
        )
        assert response.status_code == 403
