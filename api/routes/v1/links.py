"""
api/routes/v1/links.py -- Links nested under a playlist.

Routes (all under /playlists/{playlist_id}):
  GET    /links              -- links in the playlist, insertion order
  POST   /links              -- add a link
  GET    /links/{link_id}    -- link detail
  PATCH  /links/{link_id}    -- update url, category, and/or title
  DELETE /links/{link_id}    -- remove a link

Links carry no owner column. Every statement PlaylistStore issues for them
filters on the parent playlist's user_id, so a link id is only operable when
its playlist belongs to the caller. A link under someone else's playlist is
"Link not found." -- indistinguishable from a link that never existed.
The collection routes (list, create) address the playlist itself and answer
"Playlist not found." instead.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.models import LinkCreate, LinkPatch, LinkResponse
from auth.dependencies import get_current_identity
from auth.models import Identity
from auth.ownership import OwnershipAuthorizer
from core.errors import NotFound, ValidationError
from playlists.store import PlaylistStore
from playlists.validators import parse_resource_id, validate_category, validate_title, validate_url

router = APIRouter(dependencies=[Depends(get_current_identity)])


def _store(request: Request) -> PlaylistStore:
    return request.app.state.playlists


def _authorizer(request: Request) -> OwnershipAuthorizer:
    return request.app.state.authorizer


def _optional_title(value: str | None) -> str | None:
    return None if value is None else validate_title(value)


@router.get("/playlists/{playlist_id}/links", response_model=list[LinkResponse])
def list_links(
    request: Request,
    playlist_id: str,
    identity: Identity = Depends(get_current_identity),
) -> list[LinkResponse]:
    """List links of an owned playlist.

    The explicit ownership check is what separates "empty playlist" (200, [])
    from "not your playlist" (404).
    """
    pid = parse_resource_id(playlist_id, "playlist_id")
    _authorizer(request).require_playlist(identity, pid)
    return [LinkResponse.from_domain(link) for link in _store(request).list_links(identity.user_id, pid)]


@router.post("/playlists/{playlist_id}/links", response_model=LinkResponse, status_code=201)
def create_link(
    request: Request,
    playlist_id: str,
    body: LinkCreate,
    identity: Identity = Depends(get_current_identity),
) -> LinkResponse:
    pid = parse_resource_id(playlist_id, "playlist_id")
    _authorizer(request).require_playlist(identity, pid)

    url = validate_url(body.url)
    category = validate_category(body.category)
    title = _optional_title(body.title)

    # The INSERT re-checks ownership in the same statement; None means the
    # playlist was deleted after require_playlist() ran.
    link = _store(request).create_link(identity.user_id, pid, url, category, title)
    if link is None:
        raise NotFound("Playlist not found.")
    return LinkResponse.from_domain(link)


@router.get("/playlists/{playlist_id}/links/{link_id}", response_model=LinkResponse)
def get_link(
    request: Request,
    playlist_id: str,
    link_id: str,
    identity: Identity = Depends(get_current_identity),
) -> LinkResponse:
    pid = parse_resource_id(playlist_id, "playlist_id")
    lid = parse_resource_id(link_id, "link_id")
    link = _store(request).get_link(identity.user_id, pid, lid)
    if link is None:
        raise NotFound("Link not found.")
    return LinkResponse.from_domain(link)


@router.patch("/playlists/{playlist_id}/links/{link_id}", response_model=LinkResponse)
def update_link(
    request: Request,
    playlist_id: str,
    link_id: str,
    body: LinkPatch,
    identity: Identity = Depends(get_current_identity),
) -> LinkResponse:
    pid = parse_resource_id(playlist_id, "playlist_id")
    lid = parse_resource_id(link_id, "link_id")
    # Checked before body validation; reported like every other single-link miss.
    if not _authorizer(request).owns_playlist(identity, pid):
        raise NotFound("Link not found.")

    fields: dict = {}
    if "url" in body.model_fields_set:
        fields["url"] = validate_url(body.url)
    if "category" in body.model_fields_set:
        fields["category"] = validate_category(body.category)
    if "title" in body.model_fields_set:
        fields["title"] = _optional_title(body.title)
    if not fields:
        raise ValidationError("body", "No fields to update.", allowed=["category", "title", "url"])

    link = _store(request).update_link(identity.user_id, pid, lid, **fields)
    if link is None:
        raise NotFound("Link not found.")
    return LinkResponse.from_domain(link)


@router.delete("/playlists/{playlist_id}/links/{link_id}", status_code=204)
def delete_link(
    request: Request,
    playlist_id: str,
    link_id: str,
    identity: Identity = Depends(get_current_identity),
) -> Response:
    """Delete a link. Ownership rides inside the DELETE statement itself."""
    pid = parse_resource_id(playlist_id, "playlist_id")
    lid = parse_resource_id(link_id, "link_id")
    if not _store(request).delete_link(identity.user_id, pid, lid):
        raise NotFound("Link not found.")
    return Response(status_code=204)
