"""
Slug generation for event URLs
"""

import re
from typing import Callable

_STRIP = re.compile(r"[^\w\s-]", re.ASCII)
_SPACES = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def base_slug(title: str) -> str:
    """Lowercase, trim, drop non-word characters and hyphenate whitespace"""
    slug = title.lower().strip()
    slug = _STRIP.sub("", slug)
    slug = _SPACES.sub("-", slug)
    return _HYPHENS.sub("-", slug)


def generate_unique_slug(
    title: str,
    event_id: str,
    slug_taken: Callable[[str, str], bool],
) -> str:
    """Return the base slug, or base slug + event id if another event owns it.

    ``slug_taken(slug, exclude_id)`` reports whether an event other than
    ``exclude_id`` already has ``slug``. Ids are unique, so the suffixed
    form is not re-checked.
    """
    slug = base_slug(title)
    if slug_taken(slug, event_id):
        return f"{slug}-{event_id}"
    return slug
