"""Media index and locator resolution for photointake."""

from photointake.media.index import MediaIndex, MediaEntry, MediaCursor
from photointake.media.resolver import LocatorResolver
from photointake.media.exceptions import (
    MediaError,
    MediaIndexError,
    LocatorNotFoundError,
)

__all__ = [
    "MediaIndex",
    "MediaEntry",
    "MediaCursor",
    "LocatorResolver",
    "MediaError",
    "MediaIndexError",
    "LocatorNotFoundError",
]
