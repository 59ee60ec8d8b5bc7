"""
playlists/store.py -- Owner-scoped persistence for playlists and links.

Pattern: Repository + Data Mapper. PlaylistStore is the repository; the
_row_to_* functions are the mappers. Route handlers never touch SQL directly.

Every method takes the caller's user_id and every statement filters on it:

  playlists  -- WHERE id = :playlist_id AND user_id = :user_id
  links      -- WHERE playlist_id IN (<owned playlist>)   (transitive owner)
  new links  -- INSERT ... SELECT ... WHERE EXISTS (<owned playlist>)

The owner predicate and the read/mutation are ONE statement, so there is no
window between "check ownership" and "mutate" for a concurrent request to
slip into. A None / False return means "absent or not yours" -- callers must
not try to tell the two apart.

Security: all queries use bound parameters. Dynamic SET clauses are built
only from the _PLAYLIST_FIELDS / _LINK_FIELDS whitelists, never from raw
request keys.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from auth.ownership import OWNED_PLAYLIST_CLAUSE
from core.database import Database
from playlists.models import Link, Playlist

logger = logging.getLogger("linkdeck.playlists")

_PLAYLIST_COLUMNS = "id, user_id, title, description, created_at"
_LINK_COLUMNS = "id, playlist_id, url, title, category, created_at"

# Columns a PATCH may touch. Anything else is a programming error.
_PLAYLIST_FIELDS: frozenset[str] = frozenset({"title", "description"})
_LINK_FIELDS: frozenset[str] = frozenset({"url", "title", "category"})


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _set_clause(fields: dict[str, Any], allowed: frozenset[str]) -> str:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown fields: {sorted(unknown)!r}")
    if not fields:
        raise ValueError("No fields to update.")
    # Build SET clause from validated keys only -- never raw user input
    return ", ".join(f"{k} = :{k}" for k in sorted(fields))


class PlaylistStore:
    """Repository for Playlist and Link records, always scoped to one owner.

    Usage:
        store = PlaylistStore(db)
        playlist = store.create_playlist(user_id, "Road trip", None)
        store.create_link(user_id, playlist.id, "https://youtu.be/x", "youtube", None)
        store.delete_playlist(other_user_id, playlist.id)   # False -- not theirs
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Playlists
    # ------------------------------------------------------------------

    def list_playlists(self, user_id: int) -> list[Playlist]:
        """Return the user's playlists, newest first."""
        rows = self.db.execute(
            f"""
            SELECT {_PLAYLIST_COLUMNS} FROM playlists
            WHERE user_id = :user_id
            ORDER BY created_at DESC, id DESC
            """,  # noqa: S608
            {"user_id": user_id},
        )
        return [_row_to_playlist(r) for r in rows]

    def create_playlist(self, user_id: int, title: str, description: Optional[str]) -> Playlist:
        rows = self.db.execute(
            f"""
            INSERT INTO playlists (user_id, title, description, created_at)
            VALUES (:user_id, :title, :description, :created_at)
            RETURNING {_PLAYLIST_COLUMNS}
            """,  # noqa: S608
            {"user_id": user_id, "title": title, "description": description, "created_at": _now_iso()},
        )
        playlist = _row_to_playlist(rows[0])
        logger.info("playlist %d created by user %d", playlist.id, user_id)
        return playlist

    def get_playlist(self, user_id: int, playlist_id: int) -> Playlist | None:
        rows = self.db.execute(
            f"SELECT {_PLAYLIST_COLUMNS} FROM playlists WHERE id = :playlist_id AND user_id = :user_id",  # noqa: S608
            {"playlist_id": playlist_id, "user_id": user_id},
        )
        return _row_to_playlist(rows[0]) if rows else None

    def update_playlist(self, user_id: int, playlist_id: int, **fields: Any) -> Playlist | None:
        """Apply ``fields`` (title and/or description) if the user owns the playlist.

        Returns the updated playlist, or None if absent or not owned.
        """
        set_clause = _set_clause(fields, _PLAYLIST_FIELDS)
        rows = self.db.execute(
            f"""
            UPDATE playlists SET {set_clause}
            WHERE id = :playlist_id AND user_id = :user_id
            RETURNING {_PLAYLIST_COLUMNS}
            """,  # noqa: S608
            {**fields, "playlist_id": playlist_id, "user_id": user_id},
        )
        return _row_to_playlist(rows[0]) if rows else None

    def delete_playlist(self, user_id: int, playlist_id: int) -> bool:
        """Delete an owned playlist (its links cascade). False if absent or not owned."""
        rows = self.db.execute(
            """
            DELETE FROM playlists
            WHERE id = :playlist_id AND user_id = :user_id
            RETURNING id
            """,
            {"playlist_id": playlist_id, "user_id": user_id},
        )
        if rows:
            logger.info("playlist %d deleted by user %d", playlist_id, user_id)
        return bool(rows)

    # ------------------------------------------------------------------
    # Links (owned transitively through the parent playlist)
    # ------------------------------------------------------------------

    def list_links(self, user_id: int, playlist_id: int) -> list[Link]:
        """Return the links of an owned playlist in insertion order.

        An empty list is ambiguous (empty vs. not owned); callers that must
        distinguish check OwnershipAuthorizer.require_playlist() first.
        """
        rows = self.db.execute(
            f"""
            SELECT {_LINK_COLUMNS} FROM links
            WHERE playlist_id IN ({OWNED_PLAYLIST_CLAUSE})
            ORDER BY id
            """,  # noqa: S608
            {"playlist_id": playlist_id, "user_id": user_id},
        )
        return [_row_to_link(r) for r in rows]

    def create_link(
        self,
        user_id: int,
        playlist_id: int,
        url: str,
        category: str,
        title: Optional[str],
    ) -> Link | None:
        """Insert a link only if the parent playlist is owned by the user.

        Returns None (nothing inserted) when the playlist is absent or not owned.
        """
        rows = self.db.execute(
            f"""
            INSERT INTO links (playlist_id, url, title, category, created_at)
            SELECT :playlist_id, :url, :title, :category, :created_at
            WHERE EXISTS ({OWNED_PLAYLIST_CLAUSE})
            RETURNING {_LINK_COLUMNS}
            """,  # noqa: S608
            {
                "playlist_id": playlist_id,
                "user_id": user_id,
                "url": url,
                "title": title,
                "category": category,
                "created_at": _now_iso(),
            },
        )
        return _row_to_link(rows[0]) if rows else None

    def get_link(self, user_id: int, playlist_id: int, link_id: int) -> Link | None:
        rows = self.db.execute(
            f"""
            SELECT {_LINK_COLUMNS} FROM links
            WHERE id = :link_id AND playlist_id IN ({OWNED_PLAYLIST_CLAUSE})
            """,  # noqa: S608
            {"link_id": link_id, "playlist_id": playlist_id, "user_id": user_id},
        )
        return _row_to_link(rows[0]) if rows else None

    def update_link(self, user_id: int, playlist_id: int, link_id: int, **fields: Any) -> Link | None:
        set_clause = _set_clause(fields, _LINK_FIELDS)
        rows = self.db.execute(
            f"""
            UPDATE links SET {set_clause}
            WHERE id = :link_id AND playlist_id IN ({OWNED_PLAYLIST_CLAUSE})
            RETURNING {_LINK_COLUMNS}
            """,  # noqa: S608
            {**fields, "link_id": link_id, "playlist_id": playlist_id, "user_id": user_id},
        )
        return _row_to_link(rows[0]) if rows else None

    def delete_link(self, user_id: int, playlist_id: int, link_id: int) -> bool:
        rows = self.db.execute(
            f"""
            DELETE FROM links
            WHERE id = :link_id AND playlist_id IN ({OWNED_PLAYLIST_CLAUSE})
            RETURNING id
            """,  # noqa: S608
            {"link_id": link_id, "playlist_id": playlist_id, "user_id": user_id},
        )
        return bool(rows)


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_playlist(row) -> Playlist:
    return Playlist(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        description=row.description,
        created_at=row.created_at,
    )


def _row_to_link(row) -> Link:
    return Link(
        id=row.id,
        playlist_id=row.playlist_id,
        url=row.url,
        title=row.title,
        category=row.category,
        created_at=row.created_at,
    )
