"""
api/routes/v1/playlists.py -- Owner-scoped playlist CRUD.

Routes:
  GET    /playlists                  -- caller's playlists, newest first
  POST   /playlists                  -- create playlist
  GET    /playlists/{playlist_id}    -- playlist detail
  PATCH  /playlists/{playlist_id}    -- update title and/or description
  DELETE /playlists/{playlist_id}    -- delete playlist and its links

Request pipeline for every handler:
  1. Authentication gate (router-level dependency)    -> 401
  2. Path id parsing (parse_resource_id)              -> 400
  3. Ownership (OwnershipAuthorizer / owner-filtered statement) -> 404
  4. Field validation (playlists/validators.py)       -> 400
  5. Owner-filtered statement via PlaylistStore

A playlist that exists but belongs to someone else is reported exactly like
one that does not exist (404 "Playlist not found."), never 403.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.models import PlaylistCreate, PlaylistPatch, PlaylistResponse
from auth.dependencies import get_current_identity
from auth.models import Identity
from auth.ownership import OwnershipAuthorizer
from core.errors import NotFound, ValidationError
from playlists.store import PlaylistStore
from playlists.validators import parse_resource_id, validate_title

# All playlist routes require authentication.
# Router-level dependency applies to every route registered on this router;
# handlers still declare the identity parameter to receive it (FastAPI caches
# the dependency, so the gate runs once per request).
router = APIRouter(dependencies=[Depends(get_current_identity)])


def _store(request: Request) -> PlaylistStore:
    return request.app.state.playlists


@router.get("/playlists", response_model=list[PlaylistResponse])
def list_playlists(request: Request, identity: Identity = Depends(get_current_identity)) -> list[PlaylistResponse]:
    return [PlaylistResponse.from_domain(p) for p in _store(request).list_playlists(identity.user_id)]


@router.post("/playlists", response_model=PlaylistResponse, status_code=201)
def create_playlist(
    request: Request,
    body: PlaylistCreate,
    identity: Identity = Depends(get_current_identity),
) -> PlaylistResponse:
    """Create a playlist owned by the caller. The title is stored trimmed."""
    title = validate_title(body.title)
    playlist = _store(request).create_playlist(identity.user_id, title, body.description or None)
    return PlaylistResponse.from_domain(playlist)


@router.get("/playlists/{playlist_id}", response_model=PlaylistResponse)
def get_playlist(
    request: Request,
    playlist_id: str,
    identity: Identity = Depends(get_current_identity),
) -> PlaylistResponse:
    pid = parse_resource_id(playlist_id, "playlist_id")
    playlist = _store(request).get_playlist(identity.user_id, pid)
    if playlist is None:
        raise NotFound("Playlist not found.")
    return PlaylistResponse.from_domain(playlist)


@router.patch("/playlists/{playlist_id}", response_model=PlaylistResponse)
def update_playlist(
    request: Request,
    playlist_id: str,
    body: PlaylistPatch,
    identity: Identity = Depends(get_current_identity),
) -> PlaylistResponse:
    """Update the fields present in the body.

    Ownership is checked before the body is validated so a caller probing
    someone else's playlist always gets 404, whatever it sends. The UPDATE
    itself still carries the owner filter, so a concurrent delete or
    ownership change between the two statements cannot be exploited.
    """
    pid = parse_resource_id(playlist_id, "playlist_id")
    authorizer: OwnershipAuthorizer = request.app.state.authorizer
    authorizer.require_playlist(identity, pid)

    fields: dict = {}
    if "title" in body.model_fields_set:
        fields["title"] = validate_title(body.title)
    if "description" in body.model_fields_set:
        fields["description"] = body.description
    if not fields:
        raise ValidationError("body", "No fields to update.", allowed=["title", "description"])

    updated = _store(request).update_playlist(identity.user_id, pid, **fields)
    if updated is None:
        raise NotFound("Playlist not found.")
    return PlaylistResponse.from_domain(updated)


@router.delete("/playlists/{playlist_id}", status_code=204)
def delete_playlist(
    request: Request,
    playlist_id: str,
    identity: Identity = Depends(get_current_identity),
) -> Response:
    pid = parse_resource_id(playlist_id, "playlist_id")
    if not _store(request).delete_playlist(identity.user_id, pid):
        raise NotFound("Playlist not found.")
    return Response(status_code=204)
