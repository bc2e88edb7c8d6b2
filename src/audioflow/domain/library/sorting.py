"""
Track list ordering.

Sorting only reorders a displayed list; it never changes tracks or the catalog.
"""

import locale
from enum import Enum

from loguru import logger

from .models import Track


class SortDirection(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


def init_collation() -> bool:
    """Adopt the user's LC_COLLATE so name keys follow their locale.

    Returns:
        False if the environment names a locale that is not installed;
        sorting then falls back to code point order.
    """
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.debug(f"Keeping default collation: {e}")
        return False
    return True


def sort_key(track: Track) -> tuple[str, str]:
    """Locale-aware, case-normalized name key; path breaks ties so the order is total."""
    return (locale.strxfrm(track.name.casefold()), track.path)


def sort_tracks(tracks: list[Track], direction: SortDirection) -> list[Track]:
    """Return a new list of tracks sorted by name.

    DESCENDING is exactly the element-wise reverse of ASCENDING.
    """
    ordered = sorted(tracks, key=sort_key)
    if direction is SortDirection.DESCENDING:
        ordered.reverse()
    return ordered
