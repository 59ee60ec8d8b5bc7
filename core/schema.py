"""
core/schema.py -- Table definitions for the Linkdeck database.

One MetaData for the whole service so foreign keys between users, playlists,
and links resolve inside a single create_all(). Stores do not query through
these Table objects -- they issue parameterized text() statements via
core.database.Database -- but the schema itself is declared here so SQLite
and PostgreSQL get the same DDL.

Ownership model:
  playlists.user_id     -- direct owner
  links.playlist_id     -- transitive owner via the parent playlist

Both foreign keys cascade on delete so removing a user or playlist never
leaves orphaned children behind.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, MetaData, String, Table, Text

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),  # trimmed + lowercased
    Column("name", String(255)),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),  # ISO 8601 UTC
)

playlists = Table(
    "playlists",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("title", String(255), nullable=False),
    Column("description", Text),
    Column("created_at", String(32), nullable=False),
    Index("ix_playlists_user_id", "user_id"),
)

links = Table(
    "links",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("playlist_id", Integer, ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False),
    Column("url", Text, nullable=False),
    Column("title", String(255)),
    Column("category", String(20), nullable=False),  # see playlists.models.LINK_CATEGORIES
    Column("created_at", String(32), nullable=False),
    Index("ix_links_playlist_id", "playlist_id"),
)
