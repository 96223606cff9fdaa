"""Memory-bounded image decoding with orientation correction.

Decoding happens in two passes over the file. The first reads only the
header to learn the native size; the second decodes pixels subsampled by
a power-of-two factor chosen so the result stays just above the target
width. JPEG files are subsampled inside the codec (DCT scaling), so the
full-resolution buffer is never allocated for them.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

from PIL import Image

from photointake.imaging.exceptions import ImageDecodeError
from photointake.imaging.metadata import Orientation, read_orientation

logger = logging.getLogger(__name__)

DEFAULT_MAX_WIDTH = 800

# Transposes that bring an image tagged with each orientation upright
ROTATION_TRANSPOSES = {
    Orientation.ROTATE_90: Image.Transpose.ROTATE_270,   # 90 degrees clockwise
    Orientation.ROTATE_180: Image.Transpose.ROTATE_180,
    Orientation.ROTATE_270: Image.Transpose.ROTATE_90,   # 90 degrees counter-clockwise
}

MIRROR_TRANSPOSES = {
    Orientation.FLIP_HORIZONTAL: Image.Transpose.FLIP_LEFT_RIGHT,
    Orientation.FLIP_VERTICAL: Image.Transpose.FLIP_TOP_BOTTOM,
    Orientation.TRANSPOSE: Image.Transpose.TRANSPOSE,
    Orientation.TRANSVERSE: Image.Transpose.TRANSVERSE,
}

# Errors Pillow and the OS raise for unreadable or corrupt image data
DECODE_ERRORS = (
    OSError,
    SyntaxError,
    ValueError,
    MemoryError,
    Image.DecompressionBombError,
)


def _is_power_of_two(value: int) -> bool:
    return value >= 1 and value & (value - 1) == 0


@dataclass(frozen=True)
class DecodeOptions:
    """Options for a single decode pass.

    Attributes:
        probe_only: Read the header only, no pixel buffer is allocated
        sample_factor: Power-of-two subsampling rate
    """
    probe_only: bool = False
    sample_factor: int = 1

    def __post_init__(self):
        if isinstance(self.sample_factor, bool) or not isinstance(self.sample_factor, int):
            raise TypeError(f"sample_factor must be an int, got {self.sample_factor!r}")
        if not _is_power_of_two(self.sample_factor):
            raise ValueError(f"sample_factor must be a power of two, got {self.sample_factor}")


@dataclass
class DecodedImage:
    """A decoded, upright image owned by the caller.

    Attributes:
        image: The Pillow image holding the pixels
        source_path: Path the image was decoded from
        sample_factor: Subsampling rate used during decode
        orientation: EXIF orientation read from the source
        native_size: (width, height) of the source before subsampling
    """
    image: Image.Image
    source_path: str
    sample_factor: int = 1
    orientation: Orientation = Orientation.NORMAL
    native_size: Tuple[int, int] = field(default=(0, 0))

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


def compute_sample_factor(native_width: int, max_width: int = DEFAULT_MAX_WIDTH) -> int:
    """Return the power-of-two subsampling rate for an image width.

    The factor doubles while the image would still be at least `max_width`
    wide after one more halving, so the decoded width ends up in
    ``[max_width, 2 * max_width)`` for anything wider than `max_width`.

    Args:
        native_width: Width of the source image in pixels
        max_width: Target width in pixels (must be positive)

    Returns:
        Sample factor, 1 for images narrower than twice `max_width`

    Examples:
        >>> compute_sample_factor(3200, 800)
        4
        >>> compute_sample_factor(1500, 800)
        1
    """
    if max_width < 1:
        raise ValueError(f"max_width must be positive, got {max_width}")

    scale = 1
    while native_width // scale // 2 >= max_width:
        scale *= 2
    return scale


def probe_bounds(image_path: str) -> Tuple[int, int]:
    """Return (width, height) of an image by reading only its header.

    Raises:
        ImageDecodeError: If the file cannot be opened or identified
    """
    try:
        with Image.open(image_path) as img:
            return img.size
    except DECODE_ERRORS as e:
        raise ImageDecodeError(str(e) or e.__class__.__name__, path=image_path) from e


def decode_sampled(image_path: str, options: DecodeOptions) -> Optional[Image.Image]:
    """Decode an image subsampled by `options.sample_factor`.

    JPEG sources are scaled by the codec via ``Image.draft``; whatever
    factor the codec could not apply (all of it for other formats) is
    applied with ``Image.reduce``. Output size follows the codec's own
    rounding, so it is approximately, not exactly, native / factor.

    Returns:
        The decoded image, or None for a probe-only pass

    Raises:
        ImageDecodeError: If the file cannot be decoded
    """
    factor = options.sample_factor
    try:
        with Image.open(image_path) as img:
            if options.probe_only:
                return None

            native_width, native_height = img.size
            if factor > 1:
                img.draft(img.mode, (max(1, native_width // factor), max(1, native_height // factor)))

            # draft() only ever scales by a power of two
            applied = max(1, round(native_width / img.width))
            img.load()

            remaining = factor // applied
            if remaining > 1:
                return _reducible(img).reduce(remaining)
            return img.copy()
    except DECODE_ERRORS as e:
        raise ImageDecodeError(str(e) or e.__class__.__name__, path=image_path) from e


def _reducible(image: Image.Image) -> Image.Image:
    """Convert palette, bilevel and 16-bit images to a mode reduce() accepts."""
    if image.mode in ("P", "PA", "1"):
        has_alpha = image.mode == "PA" or "transparency" in image.info
        return image.convert("RGBA" if has_alpha else "RGB")
    if image.mode.startswith("I;16"):
        return image.convert("I")
    return image


def apply_orientation(
    image: Image.Image,
    orientation: Orientation,
    apply_mirroring: bool = False
) -> Image.Image:
    """Return a new image transposed to display `orientation` upright.

    Rotations are always applied. Mirrored orientations are applied only
    when `apply_mirroring` is set; otherwise they are treated as NORMAL.
    The input image is returned unchanged when no transform is needed.
    """
    if orientation.is_rotation:
        method = ROTATION_TRANSPOSES[orientation]
    elif orientation.is_mirrored and apply_mirroring:
        method = MIRROR_TRANSPOSES[orientation]
    else:
        return image
    return image.transpose(method)


class BoundedDecoder:
    """Decodes image files into upright, memory-bounded Pillow images.

    Attributes:
        max_width: Target width used to choose the sample factor
        apply_mirroring: Whether mirrored EXIF orientations are honored
    """

    def __init__(self, max_width: int = DEFAULT_MAX_WIDTH, apply_mirroring: bool = False) -> None:
        if max_width < 1:
            raise ValueError(f"max_width must be positive, got {max_width}")
        self.max_width = max_width
        self.apply_mirroring = apply_mirroring

    def decode(self, image_path: str) -> DecodedImage:
        """Decode `image_path` at reduced resolution and correct its orientation.

        Args:
            image_path: Path to a readable image file

        Returns:
            DecodedImage with the upright pixels and their final dimensions

        Raises:
            ImageDecodeError: If the image cannot be probed or decoded
        """
        native_size = probe_bounds(image_path)
        factor = compute_sample_factor(native_size[0], self.max_width)

        image = decode_sampled(image_path, DecodeOptions(sample_factor=factor))

        orientation = read_orientation(image_path)
        try:
            upright = apply_orientation(image, orientation, self.apply_mirroring)
        except MemoryError as e:
            raise ImageDecodeError("Out of memory while rotating", path=image_path) from e
        if upright is not image:
            image.close()

        logger.debug(
            f"Decoded {image_path}: native={native_size[0]}x{native_size[1]}, "
            f"factor={factor}, orientation={orientation.name}, "
            f"result={upright.width}x{upright.height}"
        )
        return DecodedImage(
            image=upright,
            source_path=image_path,
            sample_factor=factor,
            orientation=orientation,
            native_size=native_size,
        )
