"""
auth/passwords.py -- Credential Manager: bcrypt hashing and verification.

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error.

Security design decisions:
  Work factor: configurable via BCRYPT_COST (default 12). Passed in at
       construction -- this module never reads settings itself.

  72-byte limit: bcrypt only looks at the first 72 bytes of input and newer
       releases raise instead of truncating. Inputs are truncated explicitly
       so both hash() and verify() see the same bytes.

  Corrupt hashes: a stored value that is not a bcrypt string is a data
       integrity fault, not a wrong password. verify() raises CorruptHash for
       it rather than quietly returning False.

  Timing equalization [C1]: dummy_hash is computed once at construction.
       Login runs verify() against it when the email is unknown so response
       time does not reveal whether an account exists.

Layer rule: no imports from api/ or playlists/.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import bcrypt

from core.errors import BadCredentials, CorruptHash

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

_BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class PasswordHasher:
    """Salted, deliberately slow one-way password transform.

    Usage:
        hasher = PasswordHasher(rounds=12)
        stored = hasher.hash("secret123")
        hasher.verify("secret123", stored)   # True
    """

    def __init__(self, rounds: int = 12) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31.")
        self.rounds = rounds
        self.dummy_hash: str = self.hash("linkdeck_timing_dummy")

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash with a fresh random salt."""
        return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True iff ``plain`` matches ``hashed``.

        Raises CorruptHash when ``hashed`` is not a usable bcrypt string.
        """
        try:
            return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
        except (ValueError, TypeError, AttributeError) as exc:
            raise CorruptHash("Stored password hash is malformed.") from exc


# ---------------------------------------------------------------------------
# Login (constant-time) [C1]
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, hasher: PasswordHasher, email: str, password: str) -> User:
    """Return the account for a correct email/password pair.

    Always runs bcrypt whether or not the account exists:
    - Unknown email: bcrypt runs against hasher.dummy_hash (same cost)
    - Wrong password: bcrypt runs against the stored hash (same cost)

    Both failures raise the same BadCredentials so neither the response body
    nor its timing reveals which one happened.
    """
    user = store.get_by_email(email)
    if user is None:
        # Equalize timing -- do NOT return early before running bcrypt [C1]
        hasher.verify(password, hasher.dummy_hash)
        raise BadCredentials("Invalid email or password.")
    if not hasher.verify(password, user.password_hash):
        raise BadCredentials("Invalid email or password.")
    return user
