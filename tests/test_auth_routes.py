"""Tests for the /api auth endpoints."""

import pytest
from flask import Flask
from flask.testing import FlaskClient
from sqlalchemy.exc import SQLAlchemyError

from models.audit_log import AuditLog
from tests.conftest import ALICE, FakeClock, login, register


class TestRegisterEndpoint:
    def test_register_returns_201_without_password(self, client: FlaskClient) -> None:
        resp = register(client)
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["email"] == ALICE["email"]
        assert data["username"] == "alice"
        assert data["firstName"] == "Alice"
        assert data["lastName"] == "Liddell"
        assert "password" not in data
        assert "password_hash" not in data

    def test_register_sets_httponly_session_cookie(self, client: FlaskClient) -> None:
        resp = register(client)
        cookie = resp.headers["Set-Cookie"]
        assert cookie.startswith("thescent_session=")
        assert "HttpOnly" in cookie

    def test_register_logs_the_user_in(self, client: FlaskClient) -> None:
        created = register(client).get_json()
        resp = client.get("/api/user")
        assert resp.status_code == 200
        assert resp.get_json()["id"] == created["id"]

    def test_duplicate_email_returns_400(self, client: FlaskClient) -> None:
        register(client)
        resp = register(client, username="alice2")
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "DuplicateEmail", "message": "Email already in use"}

    def test_duplicate_username_returns_400(self, client: FlaskClient) -> None:
        register(client)
        resp = register(client, email="other@example.com")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "DuplicateUsername"

    def test_invalid_email_rejected(self, client: FlaskClient) -> None:
        resp = register(client, email="not-an-email")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "ValidationError"

    def test_missing_username_rejected(self, client: FlaskClient) -> None:
        resp = register(client, username="  ")
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid username"

    def test_weak_password_lists_policy_failures(self, client: FlaskClient) -> None:
        resp = register(client, password="weak")
        assert resp.status_code == 400
        data = resp.get_json()
        assert data["message"] == "Password does not meet policy"
        assert "Password must be at least 8 characters" in data["details"]

    def test_register_is_audited(self, client: FlaskClient, app: Flask) -> None:
        register(client)
        register(client)
        assert AuditLog.query.filter_by(action="REGISTER_SUCCESS").count() == 1
        assert AuditLog.query.filter_by(action="REGISTER_FAIL").count() == 1


class TestLoginEndpoint:
    def test_login_success(self, client: FlaskClient) -> None:
        register(client)
        client.post("/api/logout")

        resp = login(client)
        assert resp.status_code == 200
        assert resp.get_json()["email"] == ALICE["email"]
        assert "password" not in resp.get_json()
        assert client.get("/api/user").status_code == 200

    def test_unknown_email_and_wrong_password_look_the_same(self, client: FlaskClient) -> None:
        register(client)
        unknown = login(client, email="nobody@example.com")
        wrong = login(client, password="WrongPass")
        assert unknown.status_code == wrong.status_code == 401
        assert unknown.get_json() == wrong.get_json()

    def test_lockout_scenario(self, client: FlaskClient, clock: FakeClock) -> None:
        register(client)
        client.post("/api/logout")

        for _ in range(4):
            resp = login(client, password="WrongPass")
            assert resp.status_code == 401
            assert resp.get_json()["error"] == "InvalidCredentials"

        resp = login(client, password="WrongPass")
        assert resp.status_code == 401
        data = resp.get_json()
        assert data["error"] == "AccountLocked"
        assert data["lockout_minutes"] == 30
        assert "30 minutes" in data["message"]

        resp = login(client)
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "AccountLocked"
        assert resp.get_json()["retry_after_seconds"] > 0

        clock.advance(minutes=31)
        resp = login(client)
        assert resp.status_code == 200
        assert resp.get_json()["loginAttempts"] == 0

    def test_failures_are_audited(self, client: FlaskClient, app: Flask) -> None:
        register(client)
        for _ in range(5):
            login(client, password="WrongPass")
        login(client)

        assert AuditLog.query.filter_by(action="LOGIN_FAIL").count() == 5
        assert AuditLog.query.filter_by(action="LOGIN_LOCKED").count() == 1
        assert AuditLog.query.filter_by(action="LOGIN_SUCCESS").count() == 0

    def test_store_failure_returns_500(self, client: FlaskClient, app: Flask, monkeypatch) -> None:
        register(client)

        def _unreachable(*args, **kwargs):
            raise SQLAlchemyError("store unreachable")

        monkeypatch.setattr(app.extensions["account_guard"].store, "register_failed_login", _unreachable)
        resp = login(client, password="WrongPass")
        assert resp.status_code == 500
        assert resp.get_json()["error"] == "InternalError"


class TestMalformedRequests:
    @pytest.mark.parametrize("body", [["a"], "alice", 42])
    def test_register_non_object_body(self, client: FlaskClient, body) -> None:
        resp = client.post("/api/register", json=body)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "ValidationError", "message": "Invalid request"}

    @pytest.mark.parametrize("field, value", [
        ("email", 12345),
        ("username", ["alice"]),
        ("password", 12345678),
        ("password", {"plain": "CorrectPass1"}),
    ])
    def test_register_non_string_credentials(self, client: FlaskClient, field: str, value) -> None:
        resp = register(client, **{field: value})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "ValidationError"

    def test_login_non_object_body(self, client: FlaskClient) -> None:
        resp = client.post("/api/login", json=["a"])
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "ValidationError"

    @pytest.mark.parametrize("body", [
        {"email": 12345, "password": "CorrectPass1"},
        {"email": ALICE["email"], "password": 12345678},
        {"email": None, "password": ["x"]},
    ])
    def test_login_non_string_credentials(self, client: FlaskClient, body: dict) -> None:
        register(client)
        client.post("/api/logout")

        resp = client.post("/api/login", json=body)
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "InvalidCredentials"

    def test_phone_wider_than_column_rejected(self, client: FlaskClient) -> None:
        resp = register(client, phone="5" * 31)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid phone"
        assert client.get("/api/user").status_code == 401

    def test_profile_fields_at_column_width_accepted(self, client: FlaskClient) -> None:
        resp = register(client, phone="5" * 30, firstName="A" * 120, lastName="L" * 120)
        assert resp.status_code == 201
        assert resp.get_json()["phone"] == "5" * 30

    def test_long_last_name_rejected(self, client: FlaskClient) -> None:
        resp = register(client, last_name="L" * 121, lastName=None)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid last_name"


class TestLogoutAndCurrentUser:
    def test_user_requires_session(self, client: FlaskClient) -> None:
        resp = client.get("/api/user")
        assert resp.status_code == 401
        assert resp.get_json() == {"error": "NotAuthenticated", "message": "Not authenticated"}

    def test_logout_ends_session(self, client: FlaskClient) -> None:
        register(client)
        resp = client.post("/api/logout")
        assert resp.status_code == 200
        assert resp.get_json() == {"message": "Logged out successfully"}
        assert client.get("/api/user").status_code == 401

    def test_logout_without_session_is_ok(self, client: FlaskClient) -> None:
        assert client.post("/api/logout").status_code == 200

    def test_revoked_token_cannot_be_replayed(self, client: FlaskClient, app: Flask) -> None:
        register(client)
        token = client.get_cookie("thescent_session").value
        client.post("/api/logout")

        other = app.test_client()
        other.set_cookie("thescent_session", token)
        assert other.get("/api/user").status_code == 401


class TestAppSurface:
    def test_health(self, client: FlaskClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.get_json() == {"status": "ok"}

    def test_security_headers(self, client: FlaskClient) -> None:
        resp = client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"

    def test_unlock_account_command(self, client: FlaskClient, app: Flask) -> None:
        register(client)
        for _ in range(5):
            login(client, password="WrongPass")

        result = app.test_cli_runner().invoke(args=["unlock-account", ALICE["email"]])
        assert "unlocked" in result.output
        assert login(client).status_code == 200

    def test_make_admin_command(self, client: FlaskClient, app: Flask) -> None:
        register(client)
        result = app.test_cli_runner().invoke(args=["make-admin", ALICE["email"]])
        assert "promoted to admin" in result.output
        assert client.get("/api/user").get_json()["role"] == "admin"

    def test_cli_unknown_email(self, app: Flask) -> None:
        result = app.test_cli_runner().invoke(args=["unlock-account", "nobody@example.com"])
        assert "User not found" in result.output
