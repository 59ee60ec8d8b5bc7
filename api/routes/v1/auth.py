"""
api/routes/v1/auth.py -- Account registration, login, and profile endpoints.

Routes:
  POST /api/v1/auth/register   -- create account; 201 with a bearer token
  POST /api/v1/auth/login      -- email/password -> bearer token
  GET  /api/v1/auth/me         -- current account profile (requires auth)

Security:
  [C1] authenticate_user() provides timing equalization -- use it, never inline
       get_by_email() + verify().
  [M5] Cache-Control: no-store on every response that carries a token.
  Email uniqueness is enforced by the DB constraint; a duplicate surfaces as
  ConflictError (409) from the store.

Handlers are plain def: bcrypt is CPU-bound and blocking, so FastAPI runs
these in its threadpool instead of on the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from auth.dependencies import get_current_identity
from auth.models import Identity, User
from auth.passwords import PasswordHasher, authenticate_user
from auth.store import UserStore
from auth.tokens import TokenService
from core.errors import NotFound, ValidationError

# Auth policy:
# - POST /api/v1/auth/register: public -- creates the account
# - POST /api/v1/auth/login:    public -- login endpoint must be unauthenticated
# - GET  /api/v1/auth/me:       requires auth (get_current_identity)
router = APIRouter()


def _require_credentials(email: str | None, password: str | None) -> tuple[str, str]:
    if not email or not email.strip():
        raise ValidationError("email", "Email and password are required.")
    if not password:
        raise ValidationError("password", "Email and password are required.")
    return email, password


def _token_response(request: Request, user: User, status_code: int) -> JSONResponse:
    tokens: TokenService = request.app.state.tokens
    resp = JSONResponse(
        status_code=status_code,
        content=TokenResponse(
            access_token=tokens.issue(user.identity()),
            expires_in=tokens.expires_in,
            user=UserResponse.from_domain(user),
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=TokenResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and sign the caller in immediately.

    The email is trimmed and lowercased before storage, so "A@X.com" and
    "a@x.com " are the same account.
    """
    email, password = _require_credentials(body.email, body.password)
    user_store: UserStore = request.app.state.user_store
    hasher: PasswordHasher = request.app.state.passwords

    user = user_store.create_user(
        User(
            email=email,
            name=body.name or None,
            password_hash=hasher.hash(password),
        )
    )
    return _token_response(request, user, status_code=201)


@router.post("/auth/login", response_model=TokenResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password.

    Unknown email and wrong password both raise the same BadCredentials (401)
    so the response does not reveal which accounts exist.
    """
    email, password = _require_credentials(body.email, body.password)
    user = authenticate_user(
        request.app.state.user_store,
        request.app.state.passwords,
        email,
        password,
    )
    return _token_response(request, user, status_code=200)


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=UserResponse)
def me(request: Request, identity: Identity = Depends(get_current_identity)) -> UserResponse:
    """Return the profile of the account the token was issued to.

    A valid token for an account that no longer exists yields 404.
    """
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(identity.user_id)
    if user is None:
        raise NotFound("User not found.")
    return UserResponse.from_domain(user)
