"""Custom exceptions for image decoding."""


class ImagingError(Exception):
    """Base exception for imaging errors."""
    pass


class ImageDecodeError(ImagingError):
    """Raised when image bytes cannot be decoded.
    
    Covers missing or unreadable files, unidentified or corrupt data,
    decompression bombs and allocation failures during decode.
    
    Attributes:
        path: Path of the image that failed to decode
    """
    
    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.message = message
        self.path = path
    
    def __str__(self) -> str:
        if self.path:
            return f"Could not decode {self.path}: {self.message}"
        return f"Could not decode image: {self.message}"
