"""
tests/conftest.py -- Shared test fixtures for Linkdeck tests.

This module provides:
  - _test_settings(): an explicit Settings value pointing at a throwaway DB
  - _patch_lifespan(): wires services into app.state, bypassing real startup
  - api_client: module-scoped TestClient over the real ASGI stack
  - make_user: factory that registers a fresh account and returns its token
  - db: function-scoped Database for store/authorizer unit tests

Design: file-backed SQLite databases under pytest's tmp dirs rather than
:memory:. TestClient runs sync route handlers in a thread pool, and a plain
:memory: DB is per-connection, so worker threads would see a blank schema.

SECRET_KEY and BCRYPT_COST must be set before any api/ import because
api/main.py reads Settings at import time to configure middleware. Cost 4 is
bcrypt's minimum and keeps password hashing fast in tests.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from pathlib import Path

# CRITICAL: set before any api/ or core.config import.
os.environ.setdefault("SECRET_KEY", "linkdeck-test-secret-key-0123456789abcdef")
os.environ.setdefault("BCRYPT_COST", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app, configure_state
from core.config import Settings
from core.database import Database

TEST_SECRET = os.environ["SECRET_KEY"]


def _test_settings(db_path: Path) -> Settings:
    return Settings(
        secret_key=TEST_SECRET,
        bcrypt_cost=4,
        database_url=f"sqlite:///{db_path}",
    )


def _patch_lifespan(settings: Settings):
    """Return an async context manager that replaces the real lifespan.

    Uses the same configure_state() as production so tests exercise the real
    wiring, only with an isolated database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        configure_state(app, settings)
        yield
        app.state.db.close()

    return test_lifespan


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(tmp_path_factory: pytest.TempPathFactory) -> Generator[TestClient, None, None]:
    """Yield a TestClient over the real app backed by a fresh SQLite file."""
    db_path = tmp_path_factory.mktemp("api") / "linkdeck.db"
    app.router.lifespan_context = _patch_lifespan(_test_settings(db_path))

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client


@pytest.fixture
def make_user(api_client: TestClient) -> Callable[..., tuple[str, dict]]:
    """Return a factory: register a new account, get back (token, user JSON)."""

    def _make(email: str | None = None, password: str = "secret123") -> tuple[str, dict]:
        resp = api_client.post(
            "/api/v1/auth/register",
            json={"email": email or unique_email(), "password": password},
        )
        assert resp.status_code == 201, f"register failed: {resp.status_code} {resp.text}"
        data = resp.json()
        return data["access_token"], data["user"]

    return _make


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    return bearer


# ---------------------------------------------------------------------------
# Unit-test database
# ---------------------------------------------------------------------------


@pytest.fixture
def db(tmp_path: Path) -> Generator[Database, None, None]:
    database = Database(f"sqlite:///{tmp_path / 'unit.db'}")
    yield database
    database.close()
