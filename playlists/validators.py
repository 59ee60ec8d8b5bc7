"""
playlists/validators.py -- Field validation for playlists, links, and path ids.

Every check raises core.errors.ValidationError (HTTP 400) naming the field.
For fields drawn from a fixed set the error carries the allowed values so the
client can correct its request without reading docs.

Path identifiers are validated here rather than by FastAPI's int coercion so
a non-numeric id is a ValidationError (400) and never collapses into the
NotFound (404) reserved for absent-or-not-yours resources.
"""

import re
from urllib.parse import urlsplit

from core.errors import ValidationError
from playlists.models import ALLOWED_URL_SCHEMES, LINK_CATEGORIES

_DECIMAL_ID = re.compile(r"[0-9]+")

# Largest id a signed 64-bit primary key can hold.
_MAX_ID = 2**63 - 1


def validate_title(value: object, field: str = "title") -> str:
    """Return the trimmed title; reject anything empty after trimming."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, f"{field.capitalize()} is required and cannot be empty.")
    return value.strip()


def validate_url(value: object, field: str = "url") -> str:
    """Return the trimmed URL if it is absolute http(s) with a host.

    The scheme is stored lowercased ("HTTPS://a.com" -> "https://a.com").
    Inner whitespace, control characters and out-of-range ports are rejected.
    """
    allowed = sorted(ALLOWED_URL_SCHEMES)
    message = f"URL must be an absolute URL using one of: {', '.join(allowed)}."
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, message, allowed=allowed)
    candidate = value.strip()
    if any(c.isspace() or not c.isprintable() for c in candidate):
        raise ValidationError(field, message, allowed=allowed)
    try:
        parts = urlsplit(candidate)
        host = parts.hostname
        parts.port  # raises ValueError when out of range or non-numeric
    except ValueError as exc:
        raise ValidationError(field, message, allowed=allowed) from exc
    if parts.scheme not in ALLOWED_URL_SCHEMES or not parts.netloc or not host:
        raise ValidationError(field, message, allowed=allowed)
    # urlsplit lowercases the scheme; the remainder keeps its original text.
    return parts.scheme + candidate[len(parts.scheme):]


def validate_category(value: object, field: str = "category") -> str:
    allowed = sorted(LINK_CATEGORIES)
    if not isinstance(value, str) or value.strip() not in LINK_CATEGORIES:
        raise ValidationError(
            field,
            f"Category must be one of: {', '.join(allowed)}.",
            allowed=allowed,
        )
    return value.strip()


def parse_resource_id(raw: str, field: str = "id") -> int:
    """Parse a path segment as a positive integer id.

    "12" -> 12. "0", "-3", "1.5", "abc", " 7" and out-of-range values all
    raise ValidationError.
    """
    if not isinstance(raw, str) or len(raw) > 19 or not _DECIMAL_ID.fullmatch(raw):
        raise ValidationError(field, f"Invalid {field.replace('_', ' ')}: must be a positive integer.")
    value = int(raw)
    if value <= 0 or value > _MAX_ID:
        raise ValidationError(field, f"Invalid {field.replace('_', ' ')}: must be a positive integer.")
    return value
