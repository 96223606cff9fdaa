"""EXIF orientation and GPS extraction for images.

Both readers open the file themselves and never raise: a corrupt or
metadata-free image must still decode and display, so every failure
resolves to a default (``Orientation.NORMAL`` or ``None``).
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any, Optional, Tuple

from PIL import ExifTags, Image, UnidentifiedImageError

# Register HEIF/HEIC support if available
try:
    from pillow_heif import register_heif_opener
    register_heif_opener()
    HEIC_SUPPORT = True
except ImportError:
    HEIC_SUPPORT = False

logger = logging.getLogger(__name__)

ORIENTATION_TAG = ExifTags.Base.Orientation
GPS_IFD_TAG = ExifTags.IFD.GPSInfo
HEIC_EXTENSIONS = (".heic", ".heif")


class Orientation(IntEnum):
    """EXIF orientation values (tag 0x0112)."""
    NORMAL = 1
    FLIP_HORIZONTAL = 2
    ROTATE_180 = 3
    FLIP_VERTICAL = 4
    TRANSPOSE = 5
    ROTATE_90 = 6
    TRANSVERSE = 7
    ROTATE_270 = 8

    @property
    def is_rotation(self) -> bool:
        return self in (Orientation.ROTATE_90, Orientation.ROTATE_180, Orientation.ROTATE_270)

    @property
    def is_mirrored(self) -> bool:
        return self in (
            Orientation.FLIP_HORIZONTAL,
            Orientation.FLIP_VERTICAL,
            Orientation.TRANSPOSE,
            Orientation.TRANSVERSE,
        )

    @classmethod
    def from_tag(cls, value: Any) -> "Orientation":
        """Map a raw tag value to an Orientation, NORMAL when unrecognised."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.NORMAL


@dataclass(frozen=True)
class GeoCoordinate:
    """GPS position in decimal degrees."""
    latitude: float
    longitude: float

    def __str__(self) -> str:
        return f"{self.latitude:.6f}, {self.longitude:.6f}"


def _convert_to_decimal_degrees(
    degrees: Tuple[float, float, float], ref: str
) -> float:
    """Convert GPS coordinates from degrees/minutes/seconds to decimal.

    Args:
        degrees: Tuple of (degrees, minutes, seconds)
        ref: Reference direction ('N', 'S', 'E', 'W')

    Returns:
        Decimal degrees (negative for South/West)
    """
    d, m, s = (float(part) for part in degrees)
    decimal = d + m / 60.0 + s / 3600.0

    if ref in ('S', 'W'):
        decimal = -decimal

    return decimal


def _normalize_ref(value: Any) -> Optional[str]:
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if value is None:
        return None
    value = str(value).strip().strip("\x00").upper()
    return value or None


def _build_coordinate(latitude, lat_ref, longitude, lon_ref) -> Optional[GeoCoordinate]:
    """Validate raw GPS values and build a GeoCoordinate, or None."""
    lat_ref = _normalize_ref(lat_ref)
    lon_ref = _normalize_ref(lon_ref)
    if latitude is None or longitude is None:
        return None
    if lat_ref not in ('N', 'S') or lon_ref not in ('E', 'W'):
        return None

    try:
        lat_decimal = _convert_to_decimal_degrees(latitude, lat_ref)
        lon_decimal = _convert_to_decimal_degrees(longitude, lon_ref)
    except (ValueError, TypeError, ZeroDivisionError) as e:
        logger.debug(f"Failed to convert GPS coordinates: {e}")
        return None

    # IFDRational with a zero denominator converts to nan
    if not (-90.0 <= lat_decimal <= 90.0) or not (-180.0 <= lon_decimal <= 180.0):
        logger.debug(f"GPS coordinates out of range: {lat_decimal}, {lon_decimal}")
        return None

    return GeoCoordinate(lat_decimal, lon_decimal)


def read_orientation(image_path: str) -> Orientation:
    """Return the EXIF orientation of an image.

    Args:
        image_path: Path to the image file

    Returns:
        The tagged Orientation, or NORMAL when the tag is absent, unknown or
        the file cannot be read
    """
    try:
        with Image.open(image_path) as img:
            value = img.getexif().get(ORIENTATION_TAG)
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        logger.debug(f"Could not read orientation from {image_path}: {e}")
        return Orientation.NORMAL

    if value is None:
        return Orientation.NORMAL

    orientation = Orientation.from_tag(value)
    logger.debug(f"Orientation of {image_path}: {orientation.name}")
    return orientation


def read_location(image_path: str) -> Optional[GeoCoordinate]:
    """Extract GPS location from image EXIF metadata.

    Uses Pillow for every format it can open; falls back to exifread for
    files Pillow cannot identify (e.g. HEIC without pillow-heif installed).

    Args:
        image_path: Path to the image file

    Returns:
        GeoCoordinate if complete, valid coordinates are present, else None

    Examples:
        >>> location = read_location("photo.jpg")
        >>> if location:
        ...     print(f"Photo taken at: {location}")
    """
    if not Path(image_path).exists():
        logger.warning(f"Image file not found: {image_path}")
        return None

    if Path(image_path).suffix.lower() in HEIC_EXTENSIONS and not HEIC_SUPPORT:
        logger.warning(
            f"HEIC format detected but pillow-heif not installed. "
            f"Falling back to exifread. Install with: pip install pillow-heif"
        )

    try:
        with Image.open(image_path) as img:
            gps_info = img.getexif().get_ifd(GPS_IFD_TAG)
    except UnidentifiedImageError:
        logger.debug(f"Pillow cannot identify {image_path}, trying exifread")
        return _read_location_with_exifread(image_path)
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        logger.debug(f"Error reading EXIF from {image_path}: {e}")
        return None

    if not gps_info:
        logger.debug(f"No GPS data found in EXIF for {image_path}")
        return None

    location = _build_coordinate(
        gps_info.get(ExifTags.GPS.GPSLatitude),
        gps_info.get(ExifTags.GPS.GPSLatitudeRef),
        gps_info.get(ExifTags.GPS.GPSLongitude),
        gps_info.get(ExifTags.GPS.GPSLongitudeRef),
    )
    if location:
        logger.debug(f"Extracted GPS coordinates from {image_path}: {location}")
    else:
        logger.debug(f"Incomplete or invalid GPS data in {image_path}")
    return location


def _read_location_with_exifread(image_path: str) -> Optional[GeoCoordinate]:
    """Extract GPS coordinates using the exifread library.

    exifread parses the raw EXIF block itself, so it works on containers
    Pillow has no opener for.
    """
    import exifread

    try:
        with open(image_path, 'rb') as f:
            tags = exifread.process_file(f, details=False)
    except Exception as e:
        # exifread raises a wide range of parse errors on malformed input
        logger.debug(f"Error using exifread for {image_path}: {e}")
        return None

    def dms(tag_name: str) -> Optional[Tuple[float, float, float]]:
        tag = tags.get(tag_name)
        if tag is None or len(tag.values) < 3:
            return None
        try:
            return tuple(float(value) for value in tag.values[:3])
        except (TypeError, ValueError, ZeroDivisionError):
            return None

    def ref(tag_name: str) -> Optional[str]:
        tag = tags.get(tag_name)
        return str(tag.values) if tag is not None else None

    return _build_coordinate(
        dms('GPS GPSLatitude'),
        ref('GPS GPSLatitudeRef'),
        dms('GPS GPSLongitude'),
        ref('GPS GPSLongitudeRef'),
    )
