"""Custom exceptions for image acquisition."""


class AcquisitionError(Exception):
    """Base exception for acquisition errors."""
    pass


class SessionStateError(AcquisitionError):
    """Raised when a session transition is requested from the wrong state."""
    pass
