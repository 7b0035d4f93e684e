"""
API tests for training sessions, the dashboard and the trainer profile.
"""

from uuid import uuid4

import pytest


@pytest.fixture
def alex(client, headers):
    response = client.post(
        "/api/clients", json={"name": "Alex", "sessionCost": 50}, headers=headers
    )
    return response.json()


def log_session(client, headers, client_id, date="2026-03-02T09:30:00Z", **extra):
    body = {"clientId": client_id, "date": date, **extra}
    response = client.post("/api/sessions", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateSession:

    def test_defaults(self, client, headers, alex):
        body = log_session(client, headers, alex["id"])

        assert body["id"]
        assert body["clientId"] == alex["id"]
        assert body["trainerId"] == "trainer-1"
        assert body["duration"] == 60
        assert body["paid"] is False
        assert body["notes"] is None
        assert body["date"].startswith("2026-03-02T09:30:00")

    def test_explicit_fields(self, client, headers, alex):
        body = log_session(
            client, headers, alex["id"], duration=45, notes="Hill sprints", paid=True
        )

        assert body["duration"] == 45
        assert body["notes"] == "Hill sprints"
        assert body["paid"] is True

    def test_unknown_client_is_400(self, client, headers):
        response = client.post(
            "/api/sessions",
            json={"clientId": str(uuid4()), "date": "2026-03-02T09:30:00Z"},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Client not found", "field": "clientId"}

    def test_other_trainers_client_is_400(self, client, other_headers, alex):
        response = client.post(
            "/api/sessions",
            json={"clientId": alex["id"], "date": "2026-03-02T09:30:00Z"},
            headers=other_headers,
        )

        assert response.status_code == 400

    def test_negative_duration_is_400(self, client, headers, alex):
        response = client.post(
            "/api/sessions",
            json={"clientId": alex["id"], "date": "2026-03-02T09:30:00Z", "duration": -30},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["field"] == "duration"

    def test_bad_date_is_400(self, client, headers, alex):
        response = client.post(
            "/api/sessions",
            json={"clientId": alex["id"], "date": "next tuesday"},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["field"] == "date"


class TestListSessions:

    def test_newest_first_and_scoped(self, client, headers, other_headers, alex):
        older = log_session(client, headers, alex["id"], date="2026-02-23T09:30:00Z")
        newer = log_session(client, headers, alex["id"], date="2026-03-02T09:30:00Z")
        cal = client.post("/api/clients", json={"name": "Cal"}, headers=other_headers).json()
        log_session(client, other_headers, cal["id"])

        response = client.get("/api/sessions", headers=headers)

        assert response.status_code == 200
        assert [s["id"] for s in response.json()] == [newer["id"], older["id"]]

    def test_dates_without_offset_are_utc(self, client, headers, alex):
        """Dates with and without an offset sort together."""
        utc = log_session(client, headers, alex["id"], date="2026-03-02T09:30:00Z")
        naive = log_session(client, headers, alex["id"], date="2026-03-03T09:30:00")

        assert naive["date"] in ("2026-03-03T09:30:00Z", "2026-03-03T09:30:00+00:00")

        response = client.get("/api/sessions", headers=headers)

        assert response.status_code == 200
        assert [s["id"] for s in response.json()] == [naive["id"], utc["id"]]
        assert client.get("/api/dashboard", headers=headers).status_code == 200


class TestUpdatePaid:

    def test_marking_paid_is_idempotent(self, client, headers, alex):
        session = log_session(client, headers, alex["id"])
        url = f"/api/sessions/{session['id']}/paid"

        first = client.patch(url, json={"paid": True}, headers=headers)
        second = client.patch(url, json={"paid": True}, headers=headers)

        assert first.status_code == second.status_code == 200
        assert first.json() == second.json()
        assert second.json()["paid"] is True

    def test_can_mark_unpaid_again(self, client, headers, alex):
        session = log_session(client, headers, alex["id"], paid=True)

        response = client.patch(
            f"/api/sessions/{session['id']}/paid", json={"paid": False}, headers=headers
        )

        assert response.json()["paid"] is False

    def test_non_boolean_is_400(self, client, headers, alex):
        session = log_session(client, headers, alex["id"])

        response = client.patch(
            f"/api/sessions/{session['id']}/paid", json={"paid": "yes"}, headers=headers
        )

        assert response.status_code == 400
        assert response.json()["field"] == "paid"

    def test_missing_session_is_404(self, client, headers):
        response = client.patch(
            f"/api/sessions/{uuid4()}/paid", json={"paid": True}, headers=headers
        )

        assert response.status_code == 404
        assert response.json() == {"message": "Session not found"}

    def test_other_trainers_session_is_404(self, client, headers, other_headers, alex):
        session = log_session(client, headers, alex["id"])

        response = client.patch(
            f"/api/sessions/{session['id']}/paid", json={"paid": True}, headers=other_headers
        )

        assert response.status_code == 404


class TestDashboard:

    def test_outstanding_balance(self, client, headers, alex):
        bea = client.post(
            "/api/clients", json={"name": "Bea", "sessionCost": 80}, headers=headers
        ).json()
        client.post("/api/clients", json={"name": "Cal"}, headers=headers)
        log_session(client, headers, alex["id"])
        log_session(client, headers, alex["id"], paid=True)
        log_session(client, headers, bea["id"])

        response = client.get("/api/dashboard", headers=headers)

        assert response.status_code == 200
        assert response.json() == {
            "activeClients": 3,
            "totalSessions": 3,
            "unpaidSessions": 2,
            "outstandingBalance": 130,
            "allPaid": False,
        }

    def test_empty_practice(self, client, headers):
        body = client.get("/api/dashboard", headers=headers).json()

        assert body["outstandingBalance"] == 0
        assert body["allPaid"] is True


class TestMe:

    def test_syncs_profile_from_claims(self, client, make_headers):
        headers = make_headers("trainer-1", email="sam@example.com", first_name="Sam")

        response = client.get("/api/me", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == "trainer-1"
        assert body["email"] == "sam@example.com"
        assert body["firstName"] == "Sam"
        assert body["displayName"] == "Sam"

    def test_later_sign_in_updates_profile(self, client, make_headers):
        client.get("/api/me", headers=make_headers("trainer-1", first_name="Sam"))

        body = client.get(
            "/api/me", headers=make_headers("trainer-1", first_name="Sam", last_name="Lee")
        ).json()

        assert body["displayName"] == "Sam Lee"

    def test_without_identity_is_401(self, client, make_headers):
        headers = make_headers()
        del headers["X-User-Id"]

        assert client.get("/api/me", headers=headers).status_code == 401


class TestHealth:

    def test_liveness(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_readiness_in_mock_mode(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"
