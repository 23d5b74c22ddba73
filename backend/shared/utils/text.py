"""Text helpers: accent stripping and URL slugs."""

from __future__ import annotations

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def strip_accents(value: str) -> str:
    normalized = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def slugify(value: str) -> str:
    """
    Build a URL slug from a display name.

    "Café de la Gare" -> "cafe-de-la-gare"
    """
    slug = _NON_ALNUM.sub("-", strip_accents(value).lower())
    return slug.strip("-")
