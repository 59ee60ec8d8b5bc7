"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

One auth method: the Authorization: Bearer <token> header. Cookies and API
keys are not accepted -- every client presents the token on every request.

get_current_identity() runs the gate (auth/gate.py), attaches the Identity to
request.state.identity, and lets the typed failure propagate. The exception
handler in api/main.py maps every AuthFailure to the same 401 body, so the
distinction between missing, malformed, and invalid credentials is visible
only in the log line written here.

Layer rule: no imports from playlists/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.gate import authenticate
from auth.models import Identity
from auth.tokens import TokenService
from core.errors import AuthFailure

logger = logging.getLogger("linkdeck.auth")


def get_current_identity(request: Request) -> Identity:
    """Require a valid bearer token. Raises an AuthFailure subclass otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(get_current_identity)): ...

    Declared as a plain def so FastAPI runs token verification in its
    threadpool rather than on the event loop.
    """
    tokens: TokenService = request.app.state.tokens
    try:
        identity = authenticate(request.headers.get("Authorization"), tokens)
    except AuthFailure as exc:
        logger.info(
            "auth rejected: %s (%s) on %s %s",
            type(exc).__name__,
            exc.message,
            request.method,
            request.url.path,
        )
        raise
    request.state.identity = identity
    return identity
