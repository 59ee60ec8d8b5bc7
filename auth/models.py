"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in playlists/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or playlists/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """The authenticated principal for one request.

    Built by TokenService.verify() from a token's claims and attached to
    request.state by the auth dependency. Never persisted; discarded when the
    request ends. Frozen so downstream code cannot re-point a request at a
    different user.
    """

    user_id: int
    email: str


@dataclass
class User:
    """A registered account.

    email is stored trimmed and lowercased and is unique across accounts.
    password_hash is an opaque bcrypt string produced by PasswordHasher; the
    plaintext never reaches this object.
    """

    email: str
    password_hash: str
    id: int | None = None
    name: str | None = None
    created_at: str | None = None

    def identity(self) -> Identity:
        """Return the token claims for this account."""
        if self.id is None:
            raise ValueError("User has no id; persist it before issuing an identity.")
        return Identity(user_id=self.id, email=self.email)
