"""Default configuration values for photointake."""

from pathlib import Path

# Default configuration dictionary
DEFAULT_CONFIG = {
    # Bounded decoding
    "decoder": {
        "max_width": 800,
        "apply_mirroring": False,  # Honor EXIF flip variants (2, 4, 5, 7)
    },
    
    # Local media index (the gallery)
    "media": {
        "index_path": str(Path.home() / ".photointake" / "media.db"),
        "directory": str(Path.home() / ".photointake" / "media"),
    },
    
    # Camera capture requests
    "capture": {
        "title_prefix": "ias-",
        "extension": ".jpg",
        "description": "Taken for photointake",
    },
    
    # Logging Configuration
    "logging": {
        "level": "INFO",
        "file": str(Path.home() / ".photointake" / "photointake.log"),
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
}

# Configuration field descriptions, shown by `photointake config`
FIELD_DESCRIPTIONS = {
    "decoder.max_width": "Target width; images are subsampled while at least twice this wide",
    "decoder.apply_mirroring": "Apply EXIF mirror orientations in addition to rotations",
    "media.index_path": "SQLite file holding the media index",
    "media.directory": "Directory where captured images are written",
    "capture.title_prefix": "Filename prefix for new captures",
    "capture.extension": "Filename extension for new captures",
    "capture.description": "Description stored with new captures",
}
