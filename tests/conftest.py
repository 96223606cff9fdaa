"""Shared fixtures: synthetic images, a temporary media index and config."""

from pathlib import Path

import pytest
import yaml
from PIL import Image, ImageDraw
from PIL.TiffImagePlugin import IFDRational

from photointake.config import ConfigManager
from photointake.media import MediaIndex

ORIENTATION_TAG = 0x0112
GPS_IFD_TAG = 0x8825

RED = (255, 0, 0)


def dms(value):
    """Split decimal degrees into an EXIF (degrees, minutes, seconds) tuple."""
    degrees = int(value)
    minutes = int((value - degrees) * 60)
    seconds = round((value - degrees - minutes / 60) * 3600, 2)
    return (IFDRational(degrees), IFDRational(minutes), IFDRational(seconds))


def draw_pattern(size):
    """White image with a red block in the top-left corner."""
    image = Image.new("RGB", size, "white")
    draw = ImageDraw.Draw(image)
    draw.rectangle([0, 0, size[0] // 4, size[1] // 4], fill=RED)
    draw.line([0, size[1] - 1, size[0] - 1, size[1] - 1], fill=(0, 0, 255))
    return image


@pytest.fixture
def make_image(tmp_path):
    """Factory writing a synthetic image with optional EXIF tags.

    Args (of the returned callable):
        name: File name; the suffix picks the format
        size: (width, height)
        orientation: EXIF orientation value to embed
        gps: GPS IFD dict to embed
    """
    def _make(name="image.png", size=(60, 40), orientation=None, gps=None):
        path = tmp_path / name
        image = draw_pattern(size)
        exif = Image.Exif()
        if orientation is not None:
            exif[ORIENTATION_TAG] = orientation
        if gps is not None:
            exif[GPS_IFD_TAG] = gps
        if len(exif):
            image.save(path, exif=exif)
        else:
            image.save(path)
        return str(path)

    return _make


@pytest.fixture
def gps_tags():
    """GPS IFD for Pittsburgh (40.446 N, 79.982 W)."""
    return {
        1: "N",
        2: dms(40.446),
        3: "W",
        4: dms(79.982),
    }


@pytest.fixture
def corrupt_file(tmp_path):
    path = tmp_path / "corrupt.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0 this is not really a jpeg" * 4)
    return str(path)


@pytest.fixture
def media_index(tmp_path):
    return MediaIndex(tmp_path / "index" / "media.db", tmp_path / "media")


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "media": {
            "index_path": str(tmp_path / "index" / "media.db"),
            "directory": str(tmp_path / "media"),
        },
        "logging": {"file": ""},
    }))
    return path


@pytest.fixture
def config(config_file):
    return ConfigManager.load(config_path=str(config_file), create_if_missing=False)


@pytest.fixture
def gallery_dir(tmp_path):
    path = Path(tmp_path) / "gallery"
    path.mkdir()
    return path
