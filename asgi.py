"""
asgi.py -- ASGI entry point for Linkdeck.

Run with:  uvicorn asgi:app --reload

Kept separate from api/main.py so process managers point at one stable
module path regardless of how the api/ package is organized.
"""

from api.main import app

__all__ = ["app"]
