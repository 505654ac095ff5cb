"""URL-safe slug generation for store names."""

import re
from collections.abc import Callable

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

_DISALLOWED = re.compile(r"[^a-z0-9 -]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")

# Used when a name has no slug-safe characters at all
_FALLBACK_BASE = "store"


def slugify(name: str) -> str:
    """Return the base slug for a display name, without collision handling."""
    base = _DISALLOWED.sub("", name.lower())
    base = _WHITESPACE.sub("-", base)
    base = _HYPHENS.sub("-", base).strip("-")
    return base or _FALLBACK_BASE


def generate_slug(name: str, exists: Callable[[str], bool]) -> str:
    """Derive a unique slug from ``name``.

    ``exists`` is the oracle that reports whether a candidate is taken. The
    base slug is returned when free, otherwise ``base-1``, ``base-2`` and so
    on are tried in order, one oracle call per candidate.

    >>> generate_slug("Joe's Cafe", lambda s: s == "joes-cafe")
    'joes-cafe-1'
    """
    base = slugify(name)
    candidate = base
    counter = 1
    while exists(candidate):
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate


def is_valid_slug(slug: str) -> bool:
    return bool(slug) and SLUG_PATTERN.match(slug) is not None
