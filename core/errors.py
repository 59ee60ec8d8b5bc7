"""
core/errors.py -- Typed failure taxonomy shared by every Linkdeck layer.

Components raise these and never swallow them. The HTTP boundary
(api/main.py) owns the single translation from exception class to status
code, so nothing below api/ knows about HTTP.

Every class carries a stable machine-readable ``code`` used in the error
envelope. The three credential failures deliberately share one external code
("unauthorized") -- the distinct classes exist for logging and tests only.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or playlists/.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for every expected Linkdeck failure."""

    code: str = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(AppError):
    """Startup-only: a required setting (the signing secret) is absent or unusable."""

    code = "configuration_error"


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class AuthFailure(AppError):
    """A request could not be tied to an identity."""

    code = "unauthorized"


class MissingCredentials(AuthFailure):
    """No Authorization header was sent."""


class MalformedCredentials(AuthFailure):
    """Authorization header is not ``Bearer <token>``."""


class InvalidToken(AuthFailure):
    """Token signature, structure, claims, or expiry check failed."""


class BadCredentials(AuthFailure):
    """Login with an unknown email or a wrong password."""

    code = "bad_credentials"


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


class ValidationError(AppError):
    """A field failed structural or semantic validation.

    ``field`` names the offending input and ``allowed`` lists the accepted
    values when the field is drawn from a fixed set (URL schemes, link
    categories) so the client can correct the request.
    """

    code = "validation_error"

    def __init__(self, field: str, message: str, allowed: list[str] | None = None) -> None:
        super().__init__(message)
        self.field = field
        self.allowed = allowed


class NotFound(AppError):
    """Resource is absent OR owned by someone else. The two are never distinguished."""

    code = "not_found"


class ConflictError(AppError):
    """A unique key (account email) is already taken."""

    code = "conflict"


class CorruptHash(AppError):
    """A stored password hash is not a valid bcrypt string. Internal fault, not retried."""

    code = "internal_error"
