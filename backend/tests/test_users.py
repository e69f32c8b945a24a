"""Tests for user registration."""
from tests.conftest import create_test_user


class TestUsers:
    def test_create_and_fetch(self, client):
        user = create_test_user(client, "alice")
        assert user["display_name"] == "Alice"

        resp = client.get(f"/api/users/{user['user_id']}")
        assert resp.status_code == 200
        assert resp.json()["username"] == "alice"

    def test_duplicate_username(self, client):
        create_test_user(client, "alice")
        resp = client.post("/api/users/", json={"username": "alice", "display_name": "Other"})
        assert resp.status_code == 409

    def test_missing_user(self, client):
        assert client.get("/api/users/does-not-exist").status_code == 404

    def test_blank_username_rejected(self, client):
        resp = client.post("/api/users/", json={"username": "", "display_name": "Nobody"})
        assert resp.status_code == 422
