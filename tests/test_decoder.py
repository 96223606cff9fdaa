"""Tests for bounded decoding and orientation correction."""

import pytest
from PIL import Image

from photointake.imaging import (
    BoundedDecoder,
    DecodeOptions,
    ImageDecodeError,
    Orientation,
    compute_sample_factor,
    probe_bounds,
)
from photointake.imaging.decoder import apply_orientation, decode_sampled

from conftest import RED


def is_power_of_two(value):
    return value >= 1 and value & (value - 1) == 0


@pytest.mark.parametrize("width, max_width, expected", [
    (3200, 800, 4),
    (800, 800, 1),
    (1599, 800, 1),
    (1600, 800, 2),
    (3199, 800, 2),
    (6400, 800, 8),
    (100, 800, 1),
    (0, 800, 1),
    (4000, 1000, 4),
])
def test_compute_sample_factor(width, max_width, expected):
    assert compute_sample_factor(width, max_width) == expected


def test_compute_sample_factor_brackets_target_width():
    threshold = 800
    for width in range(0, 40000, 137):
        factor = compute_sample_factor(width, threshold)
        assert is_power_of_two(factor)
        assert width // factor // 2 < threshold
        if width >= threshold:
            assert width // factor >= threshold


def test_compute_sample_factor_rejects_non_positive_target():
    with pytest.raises(ValueError):
        compute_sample_factor(3200, 0)


@pytest.mark.parametrize("factor", [0, 3, 6, 12])
def test_decode_options_requires_power_of_two(factor):
    with pytest.raises(ValueError):
        DecodeOptions(sample_factor=factor)


def test_decode_options_rejects_bool():
    with pytest.raises(TypeError):
        DecodeOptions(sample_factor=True)


def test_probe_bounds_reads_header(make_image):
    path = make_image("wide.png", size=(3200, 20))
    assert probe_bounds(path) == (3200, 20)


def test_probe_only_decode_returns_nothing(make_image):
    path = make_image("small.png")
    assert decode_sampled(path, DecodeOptions(probe_only=True)) is None


def test_decode_png_is_subsampled(make_image):
    path = make_image("wide.png", size=(3200, 200))

    decoded = BoundedDecoder(max_width=800).decode(path)

    assert decoded.sample_factor == 4
    assert decoded.native_size == (3200, 200)
    assert decoded.size == (800, 50)


def test_decode_jpeg_uses_codec_scaling(make_image):
    path = make_image("photo.jpg", size=(3200, 2400))

    decoded = BoundedDecoder(max_width=800).decode(path)

    assert decoded.sample_factor == 4
    assert decoded.size == (800, 600)


def test_decode_jpeg_beyond_codec_scaling(make_image):
    path = make_image("panorama.jpg", size=(12800, 64))

    decoded = BoundedDecoder(max_width=800).decode(path)

    assert decoded.sample_factor == 16
    assert decoded.width == 800


def test_narrow_image_is_not_subsampled(make_image):
    path = make_image("narrow.jpg", size=(1500, 1000))

    decoded = BoundedDecoder(max_width=800).decode(path)

    assert decoded.sample_factor == 1
    assert decoded.size == (1500, 1000)


@pytest.mark.parametrize("mode, name", [
    ("P", "palette.png"),
    ("P", "palette.gif"),
    ("1", "bilevel.png"),
    ("I;16", "deep.png"),
    ("L", "gray.png"),
])
def test_wide_image_of_any_common_mode_is_subsampled(tmp_path, mode, name):
    path = tmp_path / name
    Image.new(mode, (2000, 100)).save(path)

    decoded = BoundedDecoder(max_width=800).decode(str(path))

    assert decoded.sample_factor == 2
    assert decoded.size == (1000, 50)


def test_transparent_palette_keeps_alpha_when_subsampled(tmp_path):
    path = tmp_path / "transparent.gif"
    Image.new("P", (2000, 100)).save(path, transparency=0)

    decoded = BoundedDecoder(max_width=800).decode(str(path))

    assert decoded.image.mode == "RGBA"
    assert decoded.size == (1000, 50)


def test_untagged_image_is_not_rotated(make_image):
    path = make_image("plain.png")

    decoded = BoundedDecoder().decode(path)

    assert decoded.orientation is Orientation.NORMAL
    assert decoded.size == (60, 40)
    assert decoded.image.getpixel((0, 0)) == RED


def test_rotate_90_swaps_dimensions_and_rotates_clockwise(make_image):
    plain = BoundedDecoder().decode(make_image("plain.png"))
    rotated = BoundedDecoder().decode(make_image("rotated.png", orientation=6))

    assert rotated.orientation is Orientation.ROTATE_90
    assert rotated.size == (plain.height, plain.width)
    expected = plain.image.transpose(Image.Transpose.ROTATE_270)
    assert rotated.image.tobytes() == expected.tobytes()
    # Top-left corner of the source ends up top-right
    assert rotated.image.getpixel((rotated.width - 1, 0)) == RED


def test_rotate_180(make_image):
    plain = BoundedDecoder().decode(make_image("plain.png"))
    rotated = BoundedDecoder().decode(make_image("upside_down.png", orientation=3))

    assert rotated.size == plain.size
    assert rotated.image.getpixel((rotated.width - 1, rotated.height - 1)) == RED
    assert rotated.image.tobytes() == plain.image.transpose(Image.Transpose.ROTATE_180).tobytes()


def test_rotate_270_rotates_counter_clockwise(make_image):
    plain = BoundedDecoder().decode(make_image("plain.png"))
    rotated = BoundedDecoder().decode(make_image("rotated.png", orientation=8))

    assert rotated.size == (40, 60)
    assert rotated.image.getpixel((0, rotated.height - 1)) == RED
    assert rotated.image.tobytes() == plain.image.transpose(Image.Transpose.ROTATE_90).tobytes()


def test_rotation_applies_after_subsampling(make_image):
    path = make_image("tall.jpg", size=(3200, 2400), orientation=6)

    decoded = BoundedDecoder(max_width=800).decode(path)

    # The factor comes from the stored width, before rotation
    assert decoded.sample_factor == 4
    assert decoded.size == (600, 800)


def test_mirrored_orientation_ignored_by_default(make_image):
    path = make_image("mirrored.png", orientation=2)

    decoded = BoundedDecoder().decode(path)

    assert decoded.orientation is Orientation.FLIP_HORIZONTAL
    assert decoded.image.getpixel((0, 0)) == RED


def test_mirrored_orientation_applied_when_enabled(make_image):
    path = make_image("mirrored.png", orientation=2)

    decoded = BoundedDecoder(apply_mirroring=True).decode(path)

    assert decoded.image.getpixel((decoded.width - 1, 0)) == RED
    assert decoded.size == (60, 40)


def test_apply_orientation_returns_same_image_when_upright():
    image = Image.new("RGB", (4, 2))
    assert apply_orientation(image, Orientation.NORMAL) is image
    assert apply_orientation(image, Orientation.TRANSPOSE) is image


def test_corrupt_file_raises_decode_error(corrupt_file):
    with pytest.raises(ImageDecodeError) as excinfo:
        BoundedDecoder().decode(corrupt_file)
    assert excinfo.value.path == corrupt_file


def test_missing_file_raises_decode_error(tmp_path):
    with pytest.raises(ImageDecodeError):
        BoundedDecoder().decode(str(tmp_path / "missing.jpg"))


def test_truncated_jpeg_raises_decode_error(make_image, tmp_path):
    source = make_image("full.jpg", size=(400, 300))
    truncated = tmp_path / "truncated.jpg"
    with open(source, "rb") as f:
        truncated.write_bytes(f.read()[:200])

    with pytest.raises(ImageDecodeError):
        BoundedDecoder().decode(str(truncated))


def test_decoder_rejects_non_positive_max_width():
    with pytest.raises(ValueError):
        BoundedDecoder(max_width=0)
