"""
tests/test_ownership.py -- Owner scoping at the store and authorizer level.

Two users, A and B. Every operation B attempts on A's playlist or links must
behave exactly as if the resource did not exist, and must leave A's data
untouched.
"""

from __future__ import annotations

import pytest

from auth.models import Identity, User
from auth.ownership import OwnershipAuthorizer
from auth.store import UserStore
from core.errors import NotFound
from playlists.store import PlaylistStore


@pytest.fixture
def users(db) -> tuple[Identity, Identity]:
    store = UserStore(db)
    a = store.create_user(User(email="a@example.com", password_hash="unused"))
    b = store.create_user(User(email="b@example.com", password_hash="unused"))
    return a.identity(), b.identity()


@pytest.fixture
def store(db) -> PlaylistStore:
    return PlaylistStore(db)


@pytest.fixture
def authorizer(db) -> OwnershipAuthorizer:
    return OwnershipAuthorizer(db)


class TestOwnershipAuthorizer:
    def test_owner_owns(self, users, store, authorizer) -> None:
        a, _b = users
        playlist = store.create_playlist(a.user_id, "Mine", None)
        assert authorizer.owns_playlist(a, playlist.id) is True
        authorizer.require_playlist(a, playlist.id)

    def test_other_user_and_missing_look_the_same(self, users, store, authorizer) -> None:
        a, b = users
        playlist = store.create_playlist(a.user_id, "Mine", None)
        assert authorizer.owns_playlist(b, playlist.id) is False
        assert authorizer.owns_playlist(a, playlist.id + 1000) is False

        with pytest.raises(NotFound) as not_yours:
            authorizer.require_playlist(b, playlist.id)
        with pytest.raises(NotFound) as missing:
            authorizer.require_playlist(a, playlist.id + 1000)
        assert not_yours.value.message == missing.value.message == "Playlist not found."


class TestPlaylistScoping:
    def test_list_returns_only_own_playlists_newest_first(self, users, store) -> None:
        a, b = users
        first = store.create_playlist(a.user_id, "First", None)
        second = store.create_playlist(a.user_id, "Second", "desc")
        store.create_playlist(b.user_id, "Not A's", None)

        listed = store.list_playlists(a.user_id)
        assert [p.id for p in listed] == [second.id, first.id]

    def test_foreign_get_update_delete(self, users, store) -> None:
        a, b = users
        playlist = store.create_playlist(a.user_id, "Mine", "original")

        assert store.get_playlist(b.user_id, playlist.id) is None
        assert store.update_playlist(b.user_id, playlist.id, title="Hijacked") is None
        assert store.delete_playlist(b.user_id, playlist.id) is False

        unchanged = store.get_playlist(a.user_id, playlist.id)
        assert unchanged.title == "Mine"
        assert unchanged.description == "original"

    def test_owner_update_applies_only_given_fields(self, users, store) -> None:
        a, _b = users
        playlist = store.create_playlist(a.user_id, "Mine", "original")
        updated = store.update_playlist(a.user_id, playlist.id, title="Renamed")
        assert updated.title == "Renamed"
        assert updated.description == "original"

        cleared = store.update_playlist(a.user_id, playlist.id, description=None)
        assert cleared.description is None

    def test_update_rejects_unknown_columns(self, users, store) -> None:
        a, _b = users
        playlist = store.create_playlist(a.user_id, "Mine", None)
        with pytest.raises(ValueError):
            store.update_playlist(a.user_id, playlist.id, user_id=999)

    def test_delete_cascades_to_links(self, users, store, db) -> None:
        a, _b = users
        playlist = store.create_playlist(a.user_id, "Mine", None)
        store.create_link(a.user_id, playlist.id, "https://example.com", "webpage", None)
        store.create_link(a.user_id, playlist.id, "https://youtu.be/x", "youtube", None)

        assert store.delete_playlist(a.user_id, playlist.id) is True
        rows = db.execute("SELECT COUNT(*) AS n FROM links WHERE playlist_id = :pid", {"pid": playlist.id})
        assert rows[0].n == 0


class TestLinkScoping:
    @pytest.fixture
    def a_link(self, users, store):
        a, _b = users
        playlist = store.create_playlist(a.user_id, "Mine", None)
        link = store.create_link(a.user_id, playlist.id, "https://example.com", "webpage", "Example")
        return playlist, link

    def test_owner_reads_link(self, users, store, a_link) -> None:
        a, _b = users
        playlist, link = a_link
        assert store.get_link(a.user_id, playlist.id, link.id) == link
        assert store.list_links(a.user_id, playlist.id) == [link]

    def test_foreign_link_operations_see_nothing(self, users, store, a_link) -> None:
        _a, b = users
        playlist, link = a_link
        assert store.list_links(b.user_id, playlist.id) == []
        assert store.get_link(b.user_id, playlist.id, link.id) is None
        assert store.update_link(b.user_id, playlist.id, link.id, title="Hijacked") is None
        assert store.delete_link(b.user_id, playlist.id, link.id) is False

    def test_foreign_delete_leaves_link_in_place(self, users, store, a_link) -> None:
        a, b = users
        playlist, link = a_link
        store.delete_link(b.user_id, playlist.id, link.id)
        survivor = store.get_link(a.user_id, playlist.id, link.id)
        assert survivor is not None
        assert survivor.title == "Example"

    def test_foreign_create_inserts_nothing(self, users, store, a_link) -> None:
        a, b = users
        playlist, _link = a_link
        assert store.create_link(b.user_id, playlist.id, "https://evil.example", "webpage", None) is None
        assert len(store.list_links(a.user_id, playlist.id)) == 1

    def test_link_addressed_through_wrong_playlist(self, users, store, a_link) -> None:
        """A link id only resolves under its own parent playlist."""
        a, _b = users
        _playlist, link = a_link
        other = store.create_playlist(a.user_id, "Other", None)
        assert store.get_link(a.user_id, other.id, link.id) is None
        assert store.delete_link(a.user_id, other.id, link.id) is False

    def test_owner_update_link(self, users, store, a_link) -> None:
        a, _b = users
        playlist, link = a_link
        updated = store.update_link(a.user_id, playlist.id, link.id, category="youtube", title=None)
        assert updated.category == "youtube"
        assert updated.title is None
        assert updated.url == "https://example.com"
