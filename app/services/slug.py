"""URL slug helpers."""


import re
from collections.abc import Awaitable, Callable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """``"Sun & Sand Events!"`` -> ``"sun-and-sand-events"``."""
    if not text:
        return ""
    lowered = text.strip().lower().replace("&", " and ")
    return _NON_ALNUM.sub("-", lowered).strip("-")


async def unique_slug(text: str, is_taken: Callable[[str], Awaitable[bool]]) -> str:
    """Return ``slugify(text)``, suffixed ``-1``, ``-2``, ... until ``is_taken`` says no."""
    base = slugify(text) or "item"
    slug = base
    count = 1
    while await is_taken(slug):
        slug = f"{base}-{count}"
        count += 1
    return slug
