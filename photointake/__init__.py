"""photointake - acquire photos and decode them into bounded, upright images.

Capture a new photo or pick an existing one, resolve it through a local
media index, and decode it at a memory-bounded resolution with EXIF
orientation applied.
"""

from photointake._version import __version__, __version_info__
from photointake.config import ConfigManager
from photointake.acquisition import AcquisitionSession
from photointake.imaging import BoundedDecoder
from photointake.media import LocatorResolver, MediaIndex
from photointake.processing import IntakePipeline

__license__ = "MIT"
__all__ = [
    "__version__",
    "__version_info__",
    "ConfigManager",
    "AcquisitionSession",
    "BoundedDecoder",
    "LocatorResolver",
    "MediaIndex",
    "IntakePipeline",
]
