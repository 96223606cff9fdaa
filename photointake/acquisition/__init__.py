"""Image acquisition: capture a new photo or pick an existing one."""

from photointake.acquisition.models import (
    AcquisitionChoice,
    ActivityResult,
    CaptureRequest,
    ImageReference,
    PickRequest,
    RequestCode,
    ResultStatus,
    SourceKind,
)
from photointake.acquisition.session import AcquisitionSession, SessionState
from photointake.acquisition.launcher import ActionLauncher, LocalLauncher
from photointake.acquisition.exceptions import AcquisitionError, SessionStateError

__all__ = [
    "AcquisitionChoice",
    "ActivityResult",
    "CaptureRequest",
    "ImageReference",
    "PickRequest",
    "RequestCode",
    "ResultStatus",
    "SourceKind",
    "AcquisitionSession",
    "SessionState",
    "ActionLauncher",
    "LocalLauncher",
    "AcquisitionError",
    "SessionStateError",
]
