"""
API tests for client management and authentication.
"""

from uuid import uuid4


def create_client(client, headers, **body):
    body.setdefault("name", "Alex")
    response = client.post("/api/clients", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestAuthentication:
    """Requests without a signed-in trainer are refused."""

    def test_list_clients_without_identity_is_401(self, client, make_headers):
        headers = make_headers()
        del headers["X-User-Id"]

        response = client.get("/api/clients", headers=headers)

        assert response.status_code == 401
        assert response.json() == {"message": "Unauthorized"}

    def test_create_client_without_identity_is_401(self, client, make_headers):
        headers = make_headers()
        del headers["X-User-Id"]

        response = client.post("/api/clients", json={"name": "Alex"}, headers=headers)

        assert response.status_code == 401

    def test_list_and_create_sessions_without_identity_is_401(self, client, make_headers):
        headers = make_headers()
        del headers["X-User-Id"]

        assert client.get("/api/sessions", headers=headers).status_code == 401
        response = client.post(
            "/api/sessions",
            json={"clientId": str(uuid4()), "date": "2026-03-02T09:30:00Z"},
            headers=headers,
        )
        assert response.status_code == 401

    def test_request_without_any_auth_headers_is_401(self, client):
        assert client.get("/api/clients").status_code == 401
        assert client.post("/api/clients", json={"name": "Alex"}).status_code == 401
        assert client.get("/api/sessions").status_code == 401
        response = client.post(
            "/api/sessions",
            json={"clientId": str(uuid4()), "date": "2026-03-02T09:30:00Z"},
        )
        assert response.status_code == 401
        assert response.json() == {"message": "Unauthorized"}

    def test_blank_identity_with_wrong_api_key_is_401(self, client):
        response = client.get(
            "/api/clients",
            headers={"X-User-Id": "  ", "X-API-Key": "not-a-key"},
        )

        assert response.status_code == 401

    def test_missing_api_key_is_403(self, client):
        response = client.get("/api/clients", headers={"X-User-Id": "trainer-1"})

        assert response.status_code == 403
        assert "API key" in response.json()["message"]

    def test_wrong_api_key_is_403(self, client):
        response = client.get(
            "/api/clients",
            headers={"X-User-Id": "trainer-1", "X-API-Key": "not-a-key"},
        )

        assert response.status_code == 403


class TestCreateClient:

    def test_returns_generated_id_and_owner(self, client, headers):
        response = client.post(
            "/api/clients",
            json={
                "name": "Alex Kim",
                "email": "alex@example.com",
                "phone": "555-0100",
                "goals": "Run a half marathon",
                "sessionCost": 60,
            },
            headers=headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["id"]
        assert body["trainerId"] == "trainer-1"
        assert body["name"] == "Alex Kim"
        assert body["sessionCost"] == 60
        assert body["goals"] == "Run a half marathon"
        assert "createdAt" in body

    def test_owner_in_body_is_ignored(self, client, headers):
        body = create_client(client, headers, trainerId="trainer-2")

        assert body["trainerId"] == "trainer-1"

    def test_only_name_is_required(self, client, headers):
        body = create_client(client, headers, name="Bea")

        assert body["email"] is None
        assert body["sessionCost"] is None

    def test_missing_name_is_400(self, client, headers):
        response = client.post("/api/clients", json={"email": "a@b.c"}, headers=headers)

        assert response.status_code == 400
        assert response.json()["field"] == "name"
        assert response.json()["message"]

    def test_blank_name_is_400(self, client, headers):
        response = client.post("/api/clients", json={"name": "   "}, headers=headers)

        assert response.status_code == 400

    def test_negative_session_cost_is_400(self, client, headers):
        response = client.post(
            "/api/clients", json={"name": "Alex", "sessionCost": -10}, headers=headers
        )

        assert response.status_code == 400
        assert response.json()["field"] == "sessionCost"


class TestListAndGetClients:

    def test_lists_only_own_clients(self, client, headers, other_headers):
        create_client(client, headers, name="Alex")
        create_client(client, headers, name="Bea")
        create_client(client, other_headers, name="Cal")

        response = client.get("/api/clients", headers=headers)

        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["Alex", "Bea"]

    def test_get_client(self, client, headers):
        created = create_client(client, headers)

        response = client.get(f"/api/clients/{created['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json() == created

    def test_get_other_trainers_client_is_404(self, client, headers, other_headers):
        created = create_client(client, headers)

        response = client.get(f"/api/clients/{created['id']}", headers=other_headers)

        assert response.status_code == 404
        assert response.json() == {"message": "Client not found"}


class TestUpdateClient:

    def test_partial_update(self, client, headers):
        created = create_client(client, headers, email="alex@example.com", sessionCost=50)

        response = client.patch(
            f"/api/clients/{created['id']}",
            json={"sessionCost": 70},
            headers=headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["sessionCost"] == 70
        assert body["email"] == "alex@example.com"
        assert body["name"] == "Alex"

    def test_empty_body_changes_nothing(self, client, headers):
        created = create_client(client, headers)

        response = client.patch(f"/api/clients/{created['id']}", json={}, headers=headers)

        assert response.status_code == 200
        assert response.json() == created

    def test_null_name_is_400(self, client, headers):
        created = create_client(client, headers)

        response = client.patch(
            f"/api/clients/{created['id']}", json={"name": None}, headers=headers
        )

        assert response.status_code == 400

    def test_missing_client_is_404(self, client, headers):
        response = client.patch(f"/api/clients/{uuid4()}", json={"name": "X"}, headers=headers)

        assert response.status_code == 404

    def test_other_trainers_client_is_404(self, client, headers, other_headers):
        created = create_client(client, headers)

        response = client.patch(
            f"/api/clients/{created['id']}", json={"name": "Hijacked"}, headers=other_headers
        )

        assert response.status_code == 404
        assert client.get(f"/api/clients/{created['id']}", headers=headers).json()["name"] == "Alex"


class TestDeleteClient:

    def test_delete_removes_client_and_sessions(self, client, headers):
        alex = create_client(client, headers, name="Alex")
        bea = create_client(client, headers, name="Bea")
        for day in ("2026-03-02", "2026-03-09"):
            client.post(
                "/api/sessions",
                json={"clientId": alex["id"], "date": f"{day}T09:30:00Z"},
                headers=headers,
            )
        client.post(
            "/api/sessions",
            json={"clientId": bea["id"], "date": "2026-03-03T09:30:00Z"},
            headers=headers,
        )

        response = client.delete(f"/api/clients/{alex['id']}", headers=headers)

        assert response.status_code == 204
        assert response.content == b""
        assert client.get(f"/api/clients/{alex['id']}", headers=headers).status_code == 404
        sessions = client.get("/api/sessions", headers=headers).json()
        assert [s["clientId"] for s in sessions] == [bea["id"]]

    def test_missing_client_is_404(self, client, headers):
        response = client.delete(f"/api/clients/{uuid4()}", headers=headers)

        assert response.status_code == 404
        assert response.json() == {"message": "Client not found"}

    def test_other_trainers_client_is_404(self, client, headers, other_headers):
        created = create_client(client, headers)

        response = client.delete(f"/api/clients/{created['id']}", headers=other_headers)

        assert response.status_code == 404
        assert client.get(f"/api/clients/{created['id']}", headers=headers).status_code == 200
