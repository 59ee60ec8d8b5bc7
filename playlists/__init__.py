"""playlists/ -- User-owned playlists of external links.

Layer rule: playlists/ may import from auth/ and core/ (for the ownership
predicate and the persistence interface). It does NOT import from api/.
"""
