"""
auth/store.py -- Persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as playlists/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Email uniqueness is enforced by the UNIQUE constraint on users.email, not
  by a SELECT-then-INSERT check. Two concurrent registrations for the same
  address cannot both succeed; the loser's IntegrityError is translated to
  ConflictError here.

Layer rule: no imports from api/ or playlists/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from auth.models import User
from core.database import Database
from core.errors import ConflictError

_USER_COLUMNS = "id, email, name, password_hash, created_at"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_email(email: str) -> str:
    """Accounts are keyed on the trimmed, lowercased address."""
    return email.strip().lower()


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore(db)
        user = store.create_user(User(email="a@x.com", password_hash=hasher.hash("secret")))
        store.get_by_email("A@x.com ")   # same user
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def create_user(self, user: User) -> User:
        """Insert a new account and return it with id and created_at filled in.

        Raises ConflictError if the email is already registered.
        """
        try:
            rows = self.db.execute(
                f"""
                INSERT INTO users (email, name, password_hash, created_at)
                VALUES (:email, :name, :password_hash, :created_at)
                RETURNING {_USER_COLUMNS}
                """,  # noqa: S608 -- column list is a module constant
                {
                    "email": normalize_email(user.email),
                    "name": user.name,
                    "password_hash": user.password_hash,
                    "created_at": _now_iso(),
                },
            )
        except IntegrityError as exc:
            raise ConflictError("Email already in use.") from exc
        return _row_to_user(rows[0])

    def get_by_email(self, email: str) -> User | None:
        rows = self.db.execute(
            f"SELECT {_USER_COLUMNS} FROM users WHERE email = :email",  # noqa: S608
            {"email": normalize_email(email)},
        )
        return _row_to_user(rows[0]) if rows else None

    def get_by_id(self, user_id: int) -> User | None:
        rows = self.db.execute(
            f"SELECT {_USER_COLUMNS} FROM users WHERE id = :id",  # noqa: S608
            {"id": user_id},
        )
        return _row_to_user(rows[0]) if rows else None


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )
