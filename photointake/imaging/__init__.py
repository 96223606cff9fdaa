"""Bounded image decoding and EXIF metadata reading."""

from photointake.imaging.decoder import (
    BoundedDecoder,
    DecodedImage,
    DecodeOptions,
    compute_sample_factor,
    probe_bounds,
)
from photointake.imaging.metadata import (
    GeoCoordinate,
    Orientation,
    read_location,
    read_orientation,
)
from photointake.imaging.exceptions import ImagingError, ImageDecodeError

__all__ = [
    "BoundedDecoder",
    "DecodedImage",
    "DecodeOptions",
    "compute_sample_factor",
    "probe_bounds",
    "GeoCoordinate",
    "Orientation",
    "read_location",
    "read_orientation",
    "ImagingError",
    "ImageDecodeError",
]
