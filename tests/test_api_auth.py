"""
tests/test_api_auth.py -- Integration tests for the /api/v1/auth routes.

These tests exercise the full stack: FastAPI routing -> auth dependency
injection -> UserStore / PasswordHasher / TokenService -> response model
serialization -> exception handlers.

Coverage:
  - register: 201 with token, no-store header, duplicate and case-variant 409
  - login: valid 200, wrong password and unknown email share one 401 body
  - me: 200 with a token, one identical 401 body for every gate failure
  - a valid token for an account that does not exist yields 404

Fixtures used (from conftest.py):
  - api_client: module-scoped TestClient over an isolated SQLite file
  - make_user: registers a fresh account, returns (token, user)
  - auth_headers: token -> {"Authorization": "Bearer <token>"}
"""

from __future__ import annotations

import uuid

from fastapi.testclient import TestClient
from jose import jwt

from auth.models import Identity


def _email(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


class TestRegister:
    def test_register_returns_token_and_user(self, api_client: TestClient) -> None:
        email = _email("reg")
        resp = api_client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": "secret123", "name": "Reggie"},
        )
        assert resp.status_code == 201, f"Expected 201, got {resp.status_code}: {resp.text}"
        data = resp.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 7 * 24 * 60 * 60
        assert data["access_token"]
        assert data["user"]["email"] == email
        assert data["user"]["name"] == "Reggie"
        assert "password" not in resp.text
        assert "password_hash" not in data["user"]

    def test_register_sets_no_store(self, api_client: TestClient) -> None:
        resp = api_client.post(
            "/api/v1/auth/register",
            json={"email": _email("cache"), "password": "secret123"},
        )
        assert resp.headers.get("cache-control") == "no-store"

    def test_register_normalizes_email(self, api_client: TestClient) -> None:
        email = _email("norm")
        resp = api_client.post(
            "/api/v1/auth/register",
            json={"email": f"  {email.upper()} ", "password": "secret123"},
        )
        assert resp.status_code == 201
        assert resp.json()["user"]["email"] == email

    def test_duplicate_email_returns_409(self, api_client: TestClient, make_user) -> None:
        email = _email("dup")
        make_user(email=email)
        resp = api_client.post("/api/v1/auth/register", json={"email": email, "password": "other-pass"})
        assert resp.status_code == 409, f"Expected 409, got {resp.status_code}: {resp.text}"
        assert resp.json()["error"]["code"] == "conflict"

    def test_case_variant_duplicate_returns_409(self, api_client: TestClient, make_user) -> None:
        email = _email("case")
        make_user(email=email)
        resp = api_client.post(
            "/api/v1/auth/register",
            json={"email": email.upper(), "password": "other-pass"},
        )
        assert resp.status_code == 409

    def test_missing_password_returns_400(self, api_client: TestClient) -> None:
        resp = api_client.post("/api/v1/auth/register", json={"email": _email("nopw")})
        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "validation_error"
        assert error["field"] == "password"

    def test_blank_email_returns_400(self, api_client: TestClient) -> None:
        resp = api_client.post("/api/v1/auth/register", json={"email": "   ", "password": "secret123"})
        assert resp.status_code == 400
        assert resp.json()["error"]["field"] == "email"

    def test_non_json_body_returns_400(self, api_client: TestClient) -> None:
        resp = api_client.post(
            "/api/v1/auth/register",
            content=b"email=a@example.com",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"


class TestLogin:
    def test_valid_login_returns_token(self, api_client: TestClient, make_user) -> None:
        email = _email("login")
        _token, user = make_user(email=email, password="correct-horse")
        resp = api_client.post("/api/v1/auth/login", json={"email": email, "password": "correct-horse"})
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
        data = resp.json()
        assert data["user"]["id"] == user["id"]
        claims = jwt.get_unverified_claims(data["access_token"])
        assert claims["user_id"] == user["id"]
        assert claims["email"] == email
        assert resp.headers.get("cache-control") == "no-store"

    def test_wrong_password_and_unknown_email_are_indistinguishable(
        self, api_client: TestClient, make_user
    ) -> None:
        email = _email("wrongpw")
        make_user(email=email, password="correct-horse")
        wrong_pw = api_client.post("/api/v1/auth/login", json={"email": email, "password": "battery"})
        unknown = api_client.post(
            "/api/v1/auth/login",
            json={"email": _email("ghost"), "password": "battery"},
        )
        assert wrong_pw.status_code == unknown.status_code == 401
        assert wrong_pw.json() == unknown.json()
        assert wrong_pw.json()["error"]["code"] == "bad_credentials"

    def test_login_missing_fields_returns_400(self, api_client: TestClient) -> None:
        resp = api_client.post("/api/v1/auth/login", json={})
        assert resp.status_code == 400


class TestMe:
    def test_me_returns_profile(self, api_client: TestClient, make_user, auth_headers) -> None:
        token, user = make_user()
        resp = api_client.get("/api/v1/auth/me", headers=auth_headers(token))
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
        data = resp.json()
        assert data["id"] == user["id"]
        assert data["email"] == user["email"]
        assert set(data) == {"id", "email", "name", "created_at"}

    def test_every_gate_failure_returns_same_401(self, api_client: TestClient) -> None:
        """Missing, malformed, and invalid credentials must look identical to the client."""
        responses = [
            api_client.get("/api/v1/auth/me"),
            api_client.get("/api/v1/auth/me", headers={"Authorization": "Token abc"}),
            api_client.get("/api/v1/auth/me", headers={"Authorization": "Bearer"}),
            api_client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"}),
        ]
        for resp in responses:
            assert resp.status_code == 401, f"Expected 401, got {resp.status_code}: {resp.text}"
            assert resp.headers.get("www-authenticate") == "Bearer"
        bodies = [r.json() for r in responses]
        assert all(b == bodies[0] for b in bodies)
        assert bodies[0]["error"]["code"] == "unauthorized"

    def test_token_signed_with_other_secret_returns_401(self, api_client: TestClient) -> None:
        forged = jwt.encode(
            {"user_id": 1, "email": "a@example.com", "exp": 4_102_444_800},
            "attacker-chosen-secret-0123456789abcdef",
            algorithm="HS256",
        )
        resp = api_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {forged}"})
        assert resp.status_code == 401

    def test_token_for_missing_account_returns_404(self, api_client: TestClient, auth_headers) -> None:
        token = api_client.app.state.tokens.issue(Identity(user_id=987_654, email="gone@example.com"))
        resp = api_client.get("/api/v1/auth/me", headers=auth_headers(token))
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "User not found."
