"""Tests for registration, login, tokens and profile management."""
from tests.conftest import auth_headers, register_admin, register_user


class TestRegisterLogin:

    def test_register_returns_token_and_user(self, client):
        user = register_user(client, name="Asha", email="Asha@Example.com")
        assert user["email"] == "asha@example.com"
        assert user["role"] == "user"
        assert user["token"]
        assert "password_hash" not in user

    def test_duplicate_email(self, client):
        register_user(client, name="Asha")
        resp = client.post("/api/auth/register", json={
            "name": "Asha Again", "email": "asha@example.com", "password": "secret123",
        })
        assert resp.status_code == 409
        assert resp.json()["success"] is False

    def test_short_password_rejected(self, client):
        resp = client.post("/api/auth/register", json={
            "name": "Asha", "email": "asha@example.com", "password": "123",
        })
        assert resp.status_code == 400
        assert resp.json()["message"] == "Validation failed"

    def test_invalid_email_rejected(self, client):
        resp = client.post("/api/auth/register", json={
            "name": "Asha", "email": "not-an-email", "password": "secret123",
        })
        assert resp.status_code == 400

    def test_login(self, client):
        register_user(client, name="Asha", password="secret123")
        resp = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "secret123"})
        assert resp.status_code == 200
        token = resp.json()["token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["data"]["name"] == "Asha"

    def test_login_wrong_password(self, client):
        register_user(client, name="Asha")
        resp = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "wrong-pass"})
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Invalid credentials"}

    def test_login_unknown_email(self, client):
        resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"})
        assert resp.status_code == 401


class TestTokens:

    def test_me_requires_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_garbage_token_rejected(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
        assert resp.status_code == 401

    def test_garbage_token_rejected_on_public_route(self, client):
        resp = client.get("/api/events/", headers={"Authorization": "Bearer not.a.jwt"})
        assert resp.status_code == 401


class TestProfile:

    def test_update_profile(self, client):
        user = register_user(client, name="Asha")
        resp = client.put("/api/auth/profile", json={"college": "NIT Trichy", "phone": "9999999999"},
                          headers=auth_headers(user))
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["college"] == "NIT Trichy"
        assert data["name"] == "Asha"

    def test_change_password(self, client):
        user = register_user(client, name="Asha", password="secret123")

        wrong = client.put("/api/auth/password", json={"current_password": "nope", "new_password": "newsecret"},
                           headers=auth_headers(user))
        assert wrong.status_code == 401

        resp = client.put("/api/auth/password",
                          json={"current_password": "secret123", "new_password": "newsecret"},
                          headers=auth_headers(user))
        assert resp.status_code == 200

        login = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "newsecret"})
        assert login.status_code == 200

    def test_admin_can_promote(self, client, session_factory):
        admin = register_admin(client, session_factory)
        user = register_user(client, name="Asha")

        resp = client.put(f"/api/auth/promote/{user['user_id']}", headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.json()["data"]["role"] == "admin"

        # Existing token picks up the new role immediately
        pending = client.get("/api/events/?status=pending", headers=auth_headers(user))
        assert pending.status_code == 200
        assert client.get("/api/auth/me", headers=auth_headers(user)).json()["data"]["role"] == "admin"

    def test_user_cannot_promote(self, client):
        user = register_user(client, name="Asha")
        other = register_user(client, name="Ravi")
        resp = client.put(f"/api/auth/promote/{other['user_id']}", headers=auth_headers(user))
        assert resp.status_code == 403

    def test_promote_unknown_user(self, client, session_factory):
        admin = register_admin(client, session_factory)
        resp = client.put("/api/auth/promote/missing", headers=auth_headers(admin))
        assert resp.status_code == 404
