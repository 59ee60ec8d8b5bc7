"""
auth/ownership.py -- Ownership Authorizer: is this playlist the caller's?

Existence and ownership are ONE predicate:

    SELECT id FROM playlists WHERE id = :playlist_id AND user_id = :user_id

so the caller learns nothing about playlists it does not own. "No such
playlist" and "someone else's playlist" both come back False, and
require_playlist() turns both into the same NotFound (404, never 403).

Links have no owner column; they are authorized transitively through the
parent playlist. OWNED_PLAYLIST_CLAUSE is the reusable fragment stores splice
into link statements so the owner filter rides inside the same statement as
the read or mutation -- no check-then-act window between two round trips.

Layer rule: no imports from api/ or playlists/. Import from core/ is allowed.
"""

from __future__ import annotations

from auth.models import Identity
from core.database import Database
from core.errors import NotFound

# Bind :playlist_id and :user_id alongside the statement's own parameters.
OWNED_PLAYLIST_CLAUSE = "SELECT id FROM playlists WHERE id = :playlist_id AND user_id = :user_id"


class OwnershipAuthorizer:
    """Answer ownership questions with a single owner-filtered query."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def owns_playlist(self, identity: Identity, playlist_id: int) -> bool:
        rows = self.db.execute(
            OWNED_PLAYLIST_CLAUSE,
            {"playlist_id": playlist_id, "user_id": identity.user_id},
        )
        return bool(rows)

    def require_playlist(self, identity: Identity, playlist_id: int) -> None:
        """Raise NotFound unless ``identity`` owns ``playlist_id``."""
        if not self.owns_playlist(identity, playlist_id):
            raise NotFound("Playlist not found.")
