"""Data models for image acquisition requests and results."""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional


class SourceKind(Enum):
    """Where an acquired image came from."""
    GALLERY = "gallery"
    CAMERA = "camera"


class RequestCode(IntEnum):
    """Correlation codes attached to launched actions and echoed in results."""
    CAPTURE = 1000
    PICK = 1001


class ResultStatus(Enum):
    """Outcome reported by a launched action."""
    OK = "ok"
    CANCELED = "canceled"


class AcquisitionChoice(Enum):
    """The two options offered to the user."""
    CAPTURE = "capture"
    PICK = "pick"


@dataclass(frozen=True)
class CaptureRequest:
    """Request for the camera to write a new photo.

    Attributes:
        title: File name of the new image
        description: Description stored with the image
        destination: Locator the camera should write to
    """
    title: str
    description: str
    destination: str


@dataclass(frozen=True)
class PickRequest:
    """Request to choose existing content, filtered by MIME type."""
    mime_type: str = "image/*"


@dataclass(frozen=True)
class ActivityResult:
    """Result delivered back from a launched action.

    Attributes:
        request_code: Correlation code of the request this result answers
        status: Whether the user completed or backed out of the action
        locator: Locator carried in the result payload, if any. Authoritative
            for picks, advisory only for captures.
    """
    request_code: int
    status: ResultStatus
    locator: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.OK


@dataclass(frozen=True)
class ImageReference:
    """Reference to acquired image content, produced by a completed session.

    Attributes:
        source_kind: Gallery pick or camera capture
        locator: Locator to resolve. For captures this is the pending
            capture locator recorded at launch, never the result payload.
        reported_locator: Locator the result payload carried (advisory)
        request_code: Correlation code of the completed request
    """
    source_kind: SourceKind
    locator: Optional[str]
    reported_locator: Optional[str] = None
    request_code: Optional[int] = None
