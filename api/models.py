"""
API request and response models for Linkdeck REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
playlists/models.py, which own the internal domain representation. Route
handlers map between the two.

Request models only check shape and size. Semantic rules (non-empty titles,
http(s) URLs, the link category vocabulary) are enforced by
playlists/validators.py so their errors carry a field name and the allowed
values -- which is why most request fields are Optional here.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import User
from playlists.models import Link, Playlist

# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register."""

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    name: Optional[str] = None
    created_at: str

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(id=user.id, email=user.email, name=user.name, created_at=user.created_at or "")


class TokenResponse(BaseModel):
    """Returned by register and login. token_type is always "bearer"."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"  # noqa: S105 # nosec B105 -- OAuth token type, not a password
    expires_in: int
    user: UserResponse


# ---------------------------------------------------------------------------
# Playlists
# ---------------------------------------------------------------------------


class PlaylistCreate(BaseModel):
    """Request body for POST /api/v1/playlists."""

    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)


class PlaylistPatch(BaseModel):
    """Request body for PATCH /api/v1/playlists/{id}.

    Only keys present in the JSON body are applied (model_fields_set). An
    explicit "description": null clears the description; title cannot be
    cleared.
    """

    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)


class PlaylistResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    title: str
    description: Optional[str]
    created_at: str

    @classmethod
    def from_domain(cls, playlist: Playlist) -> "PlaylistResponse":
        """Factory Method -- the mapping lives beside the output model, not in routes."""
        return cls(
            id=playlist.id,
            user_id=playlist.user_id,
            title=playlist.title,
            description=playlist.description,
            created_at=playlist.created_at,
        )


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------


class LinkCreate(BaseModel):
    """Request body for POST /api/v1/playlists/{id}/links."""

    url: Optional[str] = Field(default=None, max_length=2048)
    category: Optional[str] = Field(default=None, max_length=20)
    title: Optional[str] = Field(default=None, max_length=255)


class LinkPatch(BaseModel):
    """Request body for PATCH /api/v1/playlists/{id}/links/{link_id}.

    Same presence rules as PlaylistPatch: "title": null clears the title,
    url and category cannot be cleared.
    """

    url: Optional[str] = Field(default=None, max_length=2048)
    category: Optional[str] = Field(default=None, max_length=20)
    title: Optional[str] = Field(default=None, max_length=255)


class LinkResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    playlist_id: int
    url: str
    title: Optional[str]
    category: str
    created_at: str

    @classmethod
    def from_domain(cls, link: Link) -> "LinkResponse":
        return cls(
            id=link.id,
            playlist_id=link.playlist_id,
            url=link.url,
            title=link.title,
            category=link.category,
            created_at=link.created_at,
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload.

    field and allowed are set for validation failures only.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None
    field: Optional[str] = None
    allowed: Optional[list[str]] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
