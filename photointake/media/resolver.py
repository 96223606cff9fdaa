"""Resolve image references to readable file paths."""

import logging

from photointake.acquisition.models import ImageReference, SourceKind
from photointake.media.exceptions import LocatorNotFoundError
from photointake.media.index import DATA_COLUMN, MediaIndex

logger = logging.getLogger(__name__)


class LocatorResolver:
    """Maps an ImageReference to the file path stored in the media index.

    Gallery references resolve the locator from the pick result. Camera
    references resolve the locator the session recorded when the capture
    was launched; whatever the capture result reported is ignored, since
    some camera apps return an empty payload on success.
    """

    def __init__(self, media_index: MediaIndex) -> None:
        self.media_index = media_index

    def resolve(self, reference: ImageReference) -> str:
        """Return the file path for `reference`.

        Raises:
            LocatorNotFoundError: If there is no locator to resolve or the
                index has no matching row
        """
        if reference.source_kind is SourceKind.CAMERA:
            if reference.reported_locator and reference.reported_locator != reference.locator:
                logger.debug(
                    f"Ignoring capture result locator {reference.reported_locator}, "
                    f"using pending capture {reference.locator}"
                )
            if not reference.locator:
                raise LocatorNotFoundError("No capture is pending")
        elif not reference.locator:
            raise LocatorNotFoundError("Pick result carried no locator")

        return self.get_path(reference.locator)

    def get_path(self, locator: str) -> str:
        """Query the media index for the file path of `locator`."""
        with self.media_index.query(locator, [DATA_COLUMN]) as cursor:
            column = cursor.column_index(DATA_COLUMN)
            row = cursor.first()
            if row is None:
                raise LocatorNotFoundError("No matching media entry", locator=locator)
            path = row[column]

        logger.debug(f"Resolved {locator} -> {path}")
        return path
