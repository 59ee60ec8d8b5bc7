"""
playlists/models.py -- Domain dataclasses for playlists and their links.

These are pure data containers with zero logic. Validation lives in
playlists/validators.py; persistence and ownership filtering live in
playlists/store.py.
"""

from dataclasses import dataclass
from typing import Optional

# Fixed vocabulary for Link.category. Anything else is rejected at validation.
LINK_CATEGORIES: frozenset[str] = frozenset({"tiktok", "instagram", "webpage", "youtube"})

ALLOWED_URL_SCHEMES: frozenset[str] = frozenset({"http", "https"})


@dataclass
class Playlist:
    """A named collection of links owned directly by one user.

    id is None before the record is written to the database.
    """

    user_id: int
    title: str
    id: Optional[int] = None
    description: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class Link:
    """An external URL inside a playlist.

    There is no owner field: a link belongs to whoever owns its playlist.
    """

    playlist_id: int
    url: str
    category: str  # one of LINK_CATEGORIES
    id: Optional[int] = None
    title: Optional[str] = None
    created_at: str = ""
