"""
api/main.py -- FastAPI application entry point for Linkdeck.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. log_requests          -- one access-log line per request

Lifespan builds every service from one immutable Settings value
(configure_state) and tears the database pool down on shutdown. TokenService
is constructed first: without SECRET_KEY it raises ConfigurationError and the
server never starts accepting requests.

Error translation happens ONLY here. Components raise typed core.errors
exceptions; _STATUS_BY_ERROR maps each class to its HTTP status.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.links import router as links_router
from api.routes.v1.playlists import router as playlists_router
from auth.ownership import OwnershipAuthorizer
from auth.passwords import PasswordHasher
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import Settings, get_settings
from core.database import Database
from core.errors import (
    AppError,
    AuthFailure,
    BadCredentials,
    ConfigurationError,
    ConflictError,
    CorruptHash,
    InvalidToken,
    MalformedCredentials,
    MissingCredentials,
    NotFound,
    ValidationError,
)
from playlists.store import PlaylistStore

API_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("linkdeck.api")

# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


def configure_state(app: FastAPI, settings: Settings) -> None:
    """Construct every service from ``settings`` and attach it to app.state.

    Shared by the real lifespan and the test fixtures so both wire the app the
    same way.
    """
    app.state.tokens = TokenService.from_settings(settings)
    app.state.passwords = PasswordHasher(rounds=settings.bcrypt_cost)
    app.state.db = Database(settings.database_url, echo=settings.debug)
    app.state.user_store = UserStore(app.state.db)
    app.state.playlists = PlaylistStore(app.state.db)
    app.state.authorizer = OwnershipAuthorizer(app.state.db)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build services on startup; dispose the connection pool on shutdown."""
    logger.info("Linkdeck API starting up")
    settings = get_settings()
    try:
        configure_state(app, settings)
    except ConfigurationError as exc:
        logger.critical("Refusing to start: %s", exc.message)
        raise
    logger.info(
        "Auth initialized (bcrypt_cost=%d, token_expire_seconds=%d)",
        settings.bcrypt_cost,
        settings.token_expire_seconds,
    )

    yield

    app.state.db.close()
    logger.info("Linkdeck API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

_settings = get_settings()

app = FastAPI(
    title="Linkdeck API",
    description="User accounts and owner-scoped playlists of external links.",
    version=API_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Register in the order you want the request to encounter them:
# TrustedHost -> CORS.
# ---------------------------------------------------------------------------

app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(playlists_router, prefix="/api/v1", tags=["Playlists"])
app.include_router(links_router, prefix="/api/v1", tags=["Links"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every failure, ours or the framework's, leaves as {"error": {...}} so a client
# needs one parser for all non-2xx bodies.
# ---------------------------------------------------------------------------

_STATUS_BY_ERROR: dict[type[AppError], int] = {
    MissingCredentials: 401,
    MalformedCredentials: 401,
    InvalidToken: 401,
    BadCredentials: 401,
    ValidationError: 400,
    NotFound: 404,
    ConflictError: 409,
    CorruptHash: 500,
    ConfigurationError: 500,
}

# One body for every gate failure -- which check failed is logged, not returned.
_UNAUTHORIZED = ErrorDetail(code="unauthorized", message="Authentication required.")
_INTERNAL = ErrorDetail(code="internal_error", message="An unexpected error occurred.")


def _error_response(status_code: int, detail: ErrorDetail) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=detail).model_dump(exclude_none=True),
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Translate a typed component failure into its HTTP response."""
    status_code = _STATUS_BY_ERROR.get(type(exc))
    if status_code is None:
        logger.error("No status mapping for %s on %s %s", type(exc).__name__, request.method, request.url.path)
        return _error_response(500, _INTERNAL)

    if status_code >= 500:
        logger.error(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc,
        )
        return _error_response(status_code, _INTERNAL)

    if isinstance(exc, BadCredentials):
        resp = _error_response(status_code, ErrorDetail(code=exc.code, message=exc.message))
        resp.headers["Cache-Control"] = "no-store"
        return resp

    if isinstance(exc, AuthFailure):
        resp = _error_response(status_code, _UNAUTHORIZED)
        resp.headers["WWW-Authenticate"] = "Bearer"
        return resp

    if isinstance(exc, ValidationError):
        return _error_response(
            status_code,
            ErrorDetail(code=exc.code, message=exc.message, field=exc.field, allowed=exc.allowed),
        )

    return _error_response(status_code, ErrorDetail(code=exc.code, message=exc.message))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with structured error when the request body fails shape validation."""
    return _error_response(
        400,
        ErrorDetail(
            code="validation_error",
            message="Request validation failed.",
            detail=str(exc.errors()),
        ),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Structured envelope for framework-raised errors (unknown route, bad method)."""
    message = "Not found" if exc.status_code == 404 else str(exc.detail)
    return _error_response(exc.status_code, ErrorDetail(code=f"http_{exc.status_code}", message=message))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors (storage faults included).

    Security note: the raw exception is written to the server log only, never
    to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, _INTERNAL)


# ---------------------------------------------------------------------------
# Health endpoint
#
# Registered on the app rather than a router, outside the auth dependency.
# Load balancers probe it without a token.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", response_model=HealthResponse, tags=["Health"])
def health(request: Request) -> JSONResponse:
    """Return liveness plus a database round trip."""
    components = {"app": "ok"}
    try:
        components["database"] = "ok" if request.app.state.db.ping() else "error"
    except SQLAlchemyError:
        logger.warning("Health check: database unreachable", exc_info=True)
        components["database"] = "error"

    healthy = all(v == "ok" for v in components.values())
    body = HealthResponse(
        status="healthy" if healthy else "degraded",
        version=API_VERSION,
        components=components,
    )
    return JSONResponse(status_code=200 if healthy else 503, content=body.model_dump())
