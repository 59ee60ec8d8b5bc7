"""auth/ -- Authentication and ownership authorization for Linkdeck.

Layer rule: auth/ imports only core/, stdlib, and third-party libraries.
It does NOT import from api/ or playlists/.
api/ imports from auth/, not the other way around.
"""
