"""Custom exceptions for media index and locator resolution."""


class MediaError(Exception):
    """Base exception for media-related errors."""
    pass


class MediaIndexError(MediaError):
    """Raised when the media index cannot be opened, queried or updated."""
    pass


class LocatorNotFoundError(MediaError):
    """Exception raised when a locator resolves to no readable file.
    
    Attributes:
        locator: The locator that could not be resolved (may be None)
    """
    
    def __init__(self, message: str, locator: str = None):
        """Initialize not-found error.
        
        Args:
            message: Error message
            locator: The locator that failed to resolve
        """
        super().__init__(message)
        self.message = message
        self.locator = locator
    
    def __str__(self) -> str:
        """Return string representation of error."""
        if self.locator:
            return f"Locator not found ({self.locator}): {self.message}"
        return f"Locator not found: {self.message}"
