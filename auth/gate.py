"""
auth/gate.py -- Authentication Gate: Authorization header -> Identity.

Contract, given the raw header value:
  1. Missing or empty header                      -> MissingCredentials
  2. Not "<scheme> <credential>" split on the first space, scheme other than
     "Bearer" (case-sensitive), or a credential that is empty or contains
     whitespace                                  -> MalformedCredentials
  3. TokenService.verify(credential) failure       -> InvalidToken (propagated)
  4. Otherwise the verified Identity is returned.

Kept free of FastAPI so the three failure kinds can be asserted directly in
unit tests. auth/dependencies.py wraps this for request handling.

Layer rule: no imports from api/ or playlists/.
"""

from __future__ import annotations

from auth.models import Identity
from auth.tokens import TokenService
from core.errors import MalformedCredentials, MissingCredentials

BEARER_SCHEME = "Bearer"


def extract_bearer_token(header: str | None) -> str:
    """Return the credential part of a ``Bearer <token>`` header."""
    if not header:
        raise MissingCredentials("Missing Authorization header.")
    scheme, sep, credential = header.partition(" ")
    # Exactly two tokens: any further whitespace means extra or empty parts.
    if not sep or scheme != BEARER_SCHEME or not credential or any(c.isspace() for c in credential):
        raise MalformedCredentials("Authorization header must be 'Bearer <token>'.")
    return credential


def authenticate(header: str | None, tokens: TokenService) -> Identity:
    """Run the full gate: header shape first, then token verification."""
    return tokens.verify(extract_bearer_token(header))
