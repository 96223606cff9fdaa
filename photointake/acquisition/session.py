"""Acquisition session: choose between capturing and picking an image."""

import logging
import time
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from photointake.acquisition.exceptions import SessionStateError
from photointake.acquisition.launcher import ActionLauncher
from photointake.acquisition.models import (
    AcquisitionChoice,
    ActivityResult,
    CaptureRequest,
    ImageReference,
    PickRequest,
    RequestCode,
    SourceKind,
)
from photointake.media.index import MediaIndex

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """States of an acquisition session."""
    IDLE = "idle"
    CHOICE_PRESENTED = "choice_presented"
    CAPTURE_LAUNCHED = "capture_launched"
    PICK_LAUNCHED = "pick_launched"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


LAUNCHED_STATES = (SessionState.CAPTURE_LAUNCHED, SessionState.PICK_LAUNCHED)

# Request code each launched state is waiting for
EXPECTED_CODES = {
    SessionState.CAPTURE_LAUNCHED: RequestCode.CAPTURE,
    SessionState.PICK_LAUNCHED: RequestCode.PICK,
}


class AcquisitionSession:
    """Drives one user's image acquisition at a time.

    The session remembers the locator of every capture it launches, keyed
    by the capture's request code. When the capture result arrives that
    remembered locator is used instead of the result payload, because
    some camera apps report success with no payload at all. The pending
    locator is kept after completion and only replaced by the next capture
    launch.

    Results are routed by request code alone; the payload is never used
    to decide which branch finished. Only the code of the branch currently
    in flight is accepted, so a result that arrives after abandon() or for
    the other branch is dropped.

    Attributes:
        state: Current SessionState
        pending_captures: Request code -> locator of the last launched capture
    """

    def __init__(
        self,
        media_index: MediaIndex,
        launcher: ActionLauncher,
        title_prefix: str = "ias-",
        extension: str = ".jpg",
        description: str = "Taken for photointake",
        clock: Callable[[], float] = time.time
    ) -> None:
        self.media_index = media_index
        self.launcher = launcher
        self.title_prefix = title_prefix
        self.extension = extension
        self.description = description
        self.clock = clock
        self.state = SessionState.IDLE
        self.pending_captures: Dict[int, str] = {}

    @property
    def pending_capture(self) -> Optional[str]:
        """Locator of the most recently launched capture, if any."""
        return self.pending_captures.get(RequestCode.CAPTURE)

    def request_acquisition(self) -> Tuple[AcquisitionChoice, AcquisitionChoice]:
        """Start an acquisition and return the two options to present.

        Raises:
            SessionStateError: If an action is already in flight
        """
        if self.state in LAUNCHED_STATES:
            raise SessionStateError(
                f"Cannot start a new acquisition while {self.state.value}"
            )
        self.state = SessionState.CHOICE_PRESENTED
        return (AcquisitionChoice.CAPTURE, AcquisitionChoice.PICK)

    def choose(self, choice: AcquisitionChoice) -> None:
        """Act on the user's choice."""
        if choice is AcquisitionChoice.CAPTURE:
            self.launch_capture()
        else:
            self.launch_pick()

    def _require_choice_presented(self) -> None:
        if self.state is not SessionState.CHOICE_PRESENTED:
            raise SessionStateError(
                f"No choice has been presented (state: {self.state.value})"
            )

    def launch_capture(self) -> str:
        """Reserve a new media entry and ask the camera to write to it.

        Returns:
            The locator recorded as the pending capture
        """
        self._require_choice_presented()

        title = f"{self.title_prefix}{int(self.clock() * 1000)}{self.extension}"
        locator = self.media_index.insert(title, self.description)
        self.pending_captures[RequestCode.CAPTURE] = locator
        self.state = SessionState.CAPTURE_LAUNCHED

        logger.info(f"Launching capture to {locator}")
        self.launcher.launch_capture(
            CaptureRequest(title=title, description=self.description, destination=locator),
            RequestCode.CAPTURE,
        )
        return locator

    def launch_pick(self) -> None:
        """Ask the content picker for an existing image."""
        self._require_choice_presented()

        self.state = SessionState.PICK_LAUNCHED
        logger.info("Launching image pick")
        self.launcher.launch_pick(PickRequest(), RequestCode.PICK)

    def handle_result(self, result: ActivityResult) -> Optional[ImageReference]:
        """Correlate an action result with the branch that launched it.

        Args:
            result: Result delivered by the launcher

        Returns:
            ImageReference for a successful capture or pick, None when the
            user backed out or the result is not for the branch in flight
        """
        expected = EXPECTED_CODES.get(self.state)
        if expected is None or result.request_code != expected:
            logger.warning(
                f"Dropping result for request {result.request_code} "
                f"while {self.state.value}"
            )
            return None

        if expected == RequestCode.CAPTURE:
            source_kind = SourceKind.CAMERA
        else:
            source_kind = SourceKind.GALLERY

        if not result.ok:
            logger.info(f"{source_kind.value.capitalize()} cancelled")
            self.state = SessionState.CANCELLED
            return None

        if source_kind is SourceKind.CAMERA:
            locator = self.pending_captures.get(result.request_code)
        else:
            locator = result.locator

        self.state = SessionState.COMPLETED
        logger.info(f"{source_kind.value.capitalize()} completed: {locator}")
        return ImageReference(
            source_kind=source_kind,
            locator=locator,
            reported_locator=result.locator,
            request_code=result.request_code,
        )

    def abandon(self) -> None:
        """Drop any in-flight action; the session returns to IDLE."""
        if self.state is not SessionState.IDLE:
            logger.debug(f"Session abandoned while {self.state.value}")
        self.state = SessionState.IDLE
