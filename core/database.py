"""
core/database.py -- The persistence interface consumed by every Linkdeck store.

Database wraps one SQLAlchemy engine (and its connection pool) and exposes a
deliberately narrow surface:

    rows = db.execute("SELECT ... WHERE id = :id AND user_id = :uid", {...})

Each execute() call runs in its own transaction (engine.begin()) and returns
every row the statement produced, so INSERT/UPDATE/DELETE ... RETURNING read
back what they touched in the same round trip. Nothing above this module
composes multi-statement transactions; ownership checks are folded into the
mutating statement instead (see auth/ownership.py).

Security: all statements are text() with bound parameters. No f-strings with
user input in SQL.

Errors: SQLAlchemy exceptions propagate unchanged. Stores translate the one
expected case (IntegrityError on a unique key) into core.errors.ConflictError;
anything else surfaces as a 500 at the API boundary. No retries here.

Usage:
    db = Database("sqlite:///linkdeck.db")          # SQLite
    db = Database("postgresql://user:pw@host/db")   # PostgreSQL
    db.ping()
    db.close()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, Row

from core.schema import metadata

logger = logging.getLogger("linkdeck.db")


# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _configure_sqlite(dbapi_conn, connection_record) -> None:
    """Enable WAL journaling and foreign-key enforcement on each new connection.

    SQLite PRAGMAs are per-connection and not inherited from the pool, so this
    runs on every connect. foreign_keys=ON is what makes the ON DELETE CASCADE
    clauses in core/schema.py take effect.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Parameterized statement execution over a pooled SQLAlchemy engine."""

    def __init__(self, url: str, echo: bool = False) -> None:
        connect_args: dict = {}
        if url.startswith("sqlite"):
            # TestClient and FastAPI's threadpool hand connections across threads.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(url, connect_args=connect_args, echo=echo)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _configure_sqlite)
        metadata.create_all(self.engine)
        logger.info("Database ready (%s)", self.engine.url.render_as_string(hide_password=True))

    def execute(self, statement: str, params: Mapping[str, Any] | None = None) -> list[Row]:
        """Run one parameterized statement in its own transaction and return its rows."""
        with self.engine.begin() as conn:
            result = conn.execute(text(statement), dict(params or {}))
            if not result.returns_rows:
                return []
            return list(result.fetchall())

    def ping(self) -> bool:
        """Return True if the database answers ``SELECT 1``."""
        rows = self.execute("SELECT 1 AS ok")
        return bool(rows) and rows[0].ok == 1

    def close(self) -> None:
        self.engine.dispose()
