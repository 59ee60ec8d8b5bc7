"""
auth/tokens.py -- Token Service: issue and verify signed, time-limited identity tokens.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       user_id, email, iat and exp. Only HS256 is accepted on decode, which
       shuts out "alg: none" and algorithm-confusion tokens.

  Stateless: there is no server-side session store and no revocation list.
       A token is valid iff its signature matches and exp is still in the
       future. Expiry is the only termination path.

  Expiry: checked here against the service clock (exp <= now is expired)
       rather than by python-jose, so the boundary is exact and tests can
       drive time without sleeping.

  SECRET_KEY: passed in at construction. An empty secret raises
       ConfigurationError -- api/main.py builds the service during lifespan
       startup, so a missing secret stops the process before it serves [M7].

Layer rule: no imports from api/ or playlists/. Import from core/ is allowed.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from jose import jwt
from jose.exceptions import JOSEError

from auth.models import Identity
from core.config import SEVEN_DAYS_SECONDS, Settings
from core.errors import ConfigurationError, InvalidToken

_ALGORITHM = "HS256"


class TokenService:
    """Encode and verify bearer tokens for an Identity.

    Usage:
        tokens = TokenService(secret_key=settings.secret_key)
        token = tokens.issue(Identity(user_id=1, email="a@x.com"))
        identity = tokens.verify(token)
    """

    def __init__(
        self,
        secret_key: str,
        expire_seconds: int = SEVEN_DAYS_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret_key:
            raise ConfigurationError(
                "SECRET_KEY is required. Set SECRET_KEY in your environment or .env file."
            )
        if expire_seconds <= 0:
            raise ConfigurationError("Token lifetime must be positive.")
        self._secret_key = secret_key
        self._expire_seconds = expire_seconds
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(secret_key=settings.secret_key, expire_seconds=settings.token_expire_seconds)

    @property
    def expires_in(self) -> int:
        """Lifetime of a freshly issued token, in seconds."""
        return self._expire_seconds

    def issue(self, identity: Identity) -> str:
        """Return a signed token for ``identity`` that expires expire_seconds from now."""
        now = int(self._clock())
        payload = {
            "user_id": identity.user_id,
            "email": identity.email,
            "iat": now,
            "exp": now + self._expire_seconds,
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> Identity:
        """Return the Identity encoded in ``token``.

        Raises InvalidToken for a bad signature, malformed structure, missing
        or mistyped claims, or an expiry at or before the current time.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[_ALGORITHM],
                options={"verify_exp": False},
            )
        except JOSEError as exc:
            raise InvalidToken("Token signature or structure is invalid.") from exc

        user_id = payload.get("user_id")
        email = payload.get("email")
        exp = payload.get("exp")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise InvalidToken("Token is missing the user_id claim.")
        if not isinstance(email, str) or not email:
            raise InvalidToken("Token is missing the email claim.")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            raise InvalidToken("Token is missing the exp claim.")
        if exp <= self._clock():
            raise InvalidToken("Token has expired.")
        return Identity(user_id=user_id, email=email)
