"""Launchers for capture and pick actions.

A launcher starts an external action (camera app, content picker) and
later produces an ActivityResult echoing the request code it was given.
The session never trusts the capture result payload, so launchers are
free to report whatever their platform reports.
"""

import logging
import shutil
from abc import ABC, abstractmethod
from collections import deque
from pathlib import Path
from typing import TYPE_CHECKING, Deque, List, Optional

from photointake.acquisition.models import (
    ActivityResult,
    CaptureRequest,
    PickRequest,
    ResultStatus,
)
from photointake.media.exceptions import MediaError

if TYPE_CHECKING:
    from photointake.media.resolver import LocatorResolver

logger = logging.getLogger(__name__)


class ActionLauncher(ABC):
    """Abstract interface for starting capture and pick actions.

    Implementations deliver results asynchronously; whoever owns the UI
    loop feeds them to ``AcquisitionSession.handle_result``.
    """

    @abstractmethod
    def launch_capture(self, request: CaptureRequest, request_code: int) -> None:
        """Start a camera capture that writes to `request.destination`."""
        pass

    @abstractmethod
    def launch_pick(self, request: PickRequest, request_code: int) -> None:
        """Start a content picker filtered to `request.mime_type`."""
        pass


class LocalLauncher(ActionLauncher):
    """Launcher backed by local files, used by the command-line interface.

    The "camera" copies `capture_source` into the destination of the
    capture request, then reports success with `reported_locator` as its
    payload (None by default, like camera apps that return no data). The
    "picker" reports `pick_locator` as the chosen content.

    Results queue up until `take_results` is called.

    Attributes:
        resolver: LocatorResolver used to find where a capture should go
    """

    def __init__(
        self,
        resolver: "LocatorResolver",
        capture_source: Optional[str] = None,
        pick_locator: Optional[str] = None,
        reported_locator: Optional[str] = None
    ) -> None:
        self.resolver = resolver
        self.capture_source = capture_source
        self.pick_locator = pick_locator
        self.reported_locator = reported_locator
        self._results: Deque[ActivityResult] = deque()

    def launch_capture(self, request: CaptureRequest, request_code: int) -> None:
        if not self.capture_source:
            logger.info("No capture source configured, capture cancelled")
            self._results.append(ActivityResult(request_code, ResultStatus.CANCELED))
            return

        try:
            destination = Path(self.resolver.get_path(request.destination))
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.capture_source, destination)
        except (OSError, MediaError) as e:
            logger.error(f"Capture failed: {e}")
            self._results.append(ActivityResult(request_code, ResultStatus.CANCELED))
            return

        logger.info(f"Captured {self.capture_source} -> {destination}")
        self._results.append(
            ActivityResult(request_code, ResultStatus.OK, self.reported_locator)
        )

    def launch_pick(self, request: PickRequest, request_code: int) -> None:
        if self.pick_locator is None:
            logger.info("Nothing picked, pick cancelled")
            self._results.append(ActivityResult(request_code, ResultStatus.CANCELED))
            return

        logger.info(f"Picked {self.pick_locator} ({request.mime_type})")
        self._results.append(
            ActivityResult(request_code, ResultStatus.OK, self.pick_locator)
        )

    def take_results(self) -> List[ActivityResult]:
        """Return and clear the results delivered so far."""
        results = list(self._results)
        self._results.clear()
        return results
