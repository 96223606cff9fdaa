"""Acquire-resolve-decode pipeline that never raises past its boundary."""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from ..acquisition.launcher import ActionLauncher
from ..acquisition.models import ActivityResult, ImageReference
from ..acquisition.session import AcquisitionSession
from ..config import ConfigManager
from ..imaging.decoder import BoundedDecoder, DecodedImage
from ..imaging.exceptions import ImageDecodeError
from ..imaging.metadata import GeoCoordinate, read_location
from ..media.exceptions import LocatorNotFoundError, MediaIndexError
from ..media.index import MediaIndex
from ..media.resolver import LocatorResolver

logger = logging.getLogger(__name__)

STATUS_LOADED = "loaded"
STATUS_CANCELLED = "cancelled"
STATUS_NOT_FOUND = "not_found"
STATUS_DECODE_FAILED = "decode_failed"

DECODE_FAILED_MESSAGE = "Could not load image"


@dataclass
class IntakeResult:
    """Outcome of turning an acquisition result into a displayable image.

    Attributes:
        status: One of "loaded", "cancelled", "not_found", "decode_failed"
        reference: The ImageReference produced by the session, if any
        path: Resolved file path, if resolution succeeded
        image: Decoded upright image, if decoding succeeded
        location: GPS position from the image metadata, if present
        error: Message for the user when status is a failure
        processing_time: Time taken to resolve and decode (seconds)
    """
    status: str
    reference: Optional[ImageReference] = None
    path: Optional[str] = None
    image: Optional[DecodedImage] = None
    location: Optional[GeoCoordinate] = None
    error: Optional[str] = None
    processing_time: float = 0.0

    @property
    def success(self) -> bool:
        return self.status == STATUS_LOADED


class IntakePipeline:
    """Orchestrates acquisition, locator resolution and bounded decoding.

    This class coordinates:
    - The acquisition session that turns action results into references
    - Locator resolution against the media index
    - Bounded, orientation-corrected decoding
    - GPS location lookup

    Resolution and decode failures come back as IntakeResult statuses;
    metadata failures only mean no orientation correction or no location.
    """

    def __init__(
        self,
        config: ConfigManager,
        launcher: ActionLauncher,
        media_index: Optional[MediaIndex] = None,
        decoder: Optional[BoundedDecoder] = None,
        session: Optional[AcquisitionSession] = None
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Configuration manager
            launcher: Launcher for capture and pick actions
            media_index: Media index (created from config if not provided)
            decoder: Bounded decoder (created from config if not provided)
            session: Acquisition session (created if not provided)
        """
        self.config = config

        if media_index:
            self.media_index = media_index
        else:
            self.media_index = MediaIndex(
                config.get("media.index_path", "~/.photointake/media.db"),
                config.get("media.directory", "~/.photointake/media"),
            )

        if decoder:
            self.decoder = decoder
        else:
            self.decoder = BoundedDecoder(
                max_width=config.get("decoder.max_width", 800),
                apply_mirroring=config.get("decoder.apply_mirroring", False),
            )

        self.resolver = LocatorResolver(self.media_index)

        if session:
            self.session = session
        else:
            self.session = AcquisitionSession(
                self.media_index,
                launcher,
                title_prefix=config.get("capture.title_prefix", "ias-"),
                extension=config.get("capture.extension", ".jpg"),
                description=config.get("capture.description", "Taken for photointake"),
            )

        logger.debug(
            f"IntakePipeline initialized: max_width={self.decoder.max_width}, "
            f"index={self.media_index.db_path}"
        )

    def complete(self, result: ActivityResult) -> IntakeResult:
        """Handle an action result and decode the acquired image.

        Args:
            result: Result delivered by the launcher

        Returns:
            IntakeResult describing what happened
        """
        start_time = time.time()

        reference = self.session.handle_result(result)
        if reference is None:
            return IntakeResult(status=STATUS_CANCELLED)

        try:
            path = self.resolver.resolve(reference)
        except (LocatorNotFoundError, MediaIndexError) as e:
            logger.warning(f"Could not resolve {reference.source_kind.value} result: {e}")
            return IntakeResult(
                status=STATUS_NOT_FOUND,
                reference=reference,
                error=str(e),
                processing_time=time.time() - start_time,
            )

        intake = self.load(path)
        intake.reference = reference
        intake.processing_time = time.time() - start_time
        return intake

    def load(self, path: str) -> IntakeResult:
        """Decode `path` and read its location, reporting failure as a status."""
        start_time = time.time()

        try:
            decoded = self.decoder.decode(path)
        except ImageDecodeError as e:
            logger.error(f"{DECODE_FAILED_MESSAGE}: {e}")
            return IntakeResult(
                status=STATUS_DECODE_FAILED,
                path=path,
                error=DECODE_FAILED_MESSAGE,
                processing_time=time.time() - start_time,
            )

        location = read_location(path)
        logger.info(
            f"Loaded {path} at {decoded.width}x{decoded.height} "
            f"(factor {decoded.sample_factor})"
        )
        return IntakeResult(
            status=STATUS_LOADED,
            path=path,
            image=decoded,
            location=location,
            processing_time=time.time() - start_time,
        )
