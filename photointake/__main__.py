#!/usr/bin/env python3
"""photointake - acquire photos and decode them into bounded, upright images.

This is the main CLI entry point for photointake. It manages the local
media index, runs capture and pick acquisitions through the full pipeline,
and decodes individual files.

Usage:
    python -m photointake decode photo.jpg --save preview.png
    python -m photointake info photo.jpg
    python -m photointake index scan ~/Pictures
    python -m photointake pick content://media/external/images/media/3
    python -m photointake capture ~/camera/IMG_0001.jpg
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from ._version import __version__
from .acquisition import AcquisitionChoice, LocalLauncher
from .config import ConfigManager, ConfigError
from .config.defaults import FIELD_DESCRIPTIONS
from .imaging import (
    BoundedDecoder,
    ImageDecodeError,
    compute_sample_factor,
    probe_bounds,
    read_location,
    read_orientation,
)
from .media import LocatorResolver, MediaError, MediaIndex
from .processing import IntakePipeline, IntakeResult
from .processing.pipeline import DECODE_FAILED_MESSAGE, STATUS_LOADED


def setup_logging(config: Optional[ConfigManager] = None, verbose: bool = False) -> None:
    """Configure logging for the application.

    Args:
        config: Loaded configuration, used for the log level and log file
        verbose: If True, enable DEBUG level logging
    """
    level_name = config.get("logging.level", "INFO") if config else "INFO"
    level = logging.DEBUG if verbose else getattr(logging, str(level_name).upper(), logging.INFO)

    # Console handler with simpler format
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s - %(name)s - %(message)s'))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(console_handler)

    log_file = config.get("logging.file") if config else None
    if not log_file:
        return

    try:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
    except OSError as e:
        # Keep going with console logging only
        logging.getLogger(__name__).warning(f"Cannot log to {log_file}: {e}")
        return

    file_handler.setLevel(logging.DEBUG)  # Always DEBUG in file
    file_handler.setFormatter(
        logging.Formatter(
            config.get(
                "logging.format",
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
        )
    )
    root_logger.addHandler(file_handler)


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="photointake",
        description="photointake - acquire photos and decode them into bounded, upright images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Decode a file and save the bounded, upright result
  python -m photointake decode photo.jpg --save preview.png

  # Show size, sample factor, orientation and GPS without decoding
  python -m photointake info photo.jpg

  # Add a folder of photos to the gallery index
  python -m photointake index scan ~/Pictures

  # Pick an indexed photo
  python -m photointake pick content://media/external/images/media/3

  # Capture: the local camera writes SOURCE to the pending destination
  python -m photointake capture ~/camera/IMG_0001.jpg
"""
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"photointake {__version__}"
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to config file (default: ~/.photointake/config.yaml)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    decode_parser = subparsers.add_parser("decode", help="Decode an image file")
    decode_parser.add_argument("path", help="Image file to decode")
    decode_parser.add_argument("--max-width", type=int, help="Override decoder.max_width")
    decode_parser.add_argument("--save", metavar="OUT", help="Write the decoded image to OUT")

    info_parser = subparsers.add_parser("info", help="Probe an image without decoding pixels")
    info_parser.add_argument("path", help="Image file to probe")
    info_parser.add_argument("--max-width", type=int, help="Override decoder.max_width")

    index_parser = subparsers.add_parser("index", help="Manage the media index")
    index_subparsers = index_parser.add_subparsers(dest="index_command", required=True)
    add_parser = index_subparsers.add_parser("add", help="Register image files")
    add_parser.add_argument("files", nargs="+", help="Image files to register")
    scan_parser = index_subparsers.add_parser("scan", help="Register every image under a directory")
    scan_parser.add_argument("directory", help="Directory to scan")
    index_subparsers.add_parser("list", help="List indexed images")

    pick_parser = subparsers.add_parser("pick", help="Pick an indexed image and decode it")
    pick_parser.add_argument("locator", help="Locator of an indexed image")
    pick_parser.add_argument("--save", metavar="OUT", help="Write the decoded image to OUT")

    capture_parser = subparsers.add_parser("capture", help="Capture an image and decode it")
    capture_parser.add_argument("source", help="File the local camera writes as the new photo")
    capture_parser.add_argument(
        "--report-locator",
        metavar="LOCATOR",
        help="Locator the camera reports in its result (default: none)"
    )
    capture_parser.add_argument("--save", metavar="OUT", help="Write the decoded image to OUT")

    subparsers.add_parser("config", help="Show the active configuration")

    return parser


def open_media_index(config: ConfigManager) -> MediaIndex:
    return MediaIndex(
        config.get("media.index_path", "~/.photointake/media.db"),
        config.get("media.directory", "~/.photointake/media"),
    )


def save_image(image, out: str) -> None:
    """Save a decoded Pillow image, converting modes JPEG cannot hold."""
    if Path(out).suffix.lower() in (".jpg", ".jpeg") and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    image.save(out)
    print(f"✓ Saved: {out}")


def print_intake(intake: IntakeResult, save: Optional[str] = None) -> int:
    """Print an intake result and return the exit code for it."""
    if intake.reference:
        print(f"Source:       {intake.reference.source_kind.value}")
        print(f"Locator:      {intake.reference.locator}")

    if not intake.success:
        if intake.error:
            print(f"✗ {intake.error}")
        else:
            print(f"○ Acquisition {intake.status}")
        return 1

    decoded = intake.image
    print(f"Path:         {intake.path}")
    print(f"Native size:  {decoded.native_size[0]}x{decoded.native_size[1]}")
    print(f"Sample:       1/{decoded.sample_factor}")
    print(f"Orientation:  {decoded.orientation.name}")
    print(f"Decoded size: {decoded.width}x{decoded.height}")
    print(f"Location:     {intake.location or 'none'}")
    print(f"Time:         {intake.processing_time:.2f}s")

    if save:
        save_image(decoded.image, save)
    return 0


def run_decode(args: argparse.Namespace, config: ConfigManager) -> int:
    decoder = BoundedDecoder(
        max_width=args.max_width or config.get("decoder.max_width", 800),
        apply_mirroring=config.get("decoder.apply_mirroring", False),
    )
    try:
        decoded = decoder.decode(args.path)
    except ImageDecodeError as e:
        logging.getLogger(__name__).debug(f"Decode failed: {e}")
        print(f"✗ {DECODE_FAILED_MESSAGE}: {args.path}")
        return 1

    return print_intake(
        IntakeResult(
            status=STATUS_LOADED,
            path=args.path,
            image=decoded,
            location=read_location(args.path),
        ),
        save=args.save,
    )


def run_info(args: argparse.Namespace, config: ConfigManager) -> int:
    max_width = args.max_width or config.get("decoder.max_width", 800)
    try:
        width, height = probe_bounds(args.path)
    except ImageDecodeError as e:
        print(f"✗ {e}")
        return 1

    print(f"Path:         {args.path}")
    print(f"Native size:  {width}x{height}")
    print(f"Sample:       1/{compute_sample_factor(width, max_width)} (max width {max_width})")
    print(f"Orientation:  {read_orientation(args.path).name}")
    print(f"Location:     {read_location(args.path) or 'none'}")
    return 0


def run_index(args: argparse.Namespace, config: ConfigManager) -> int:
    media_index = open_media_index(config)

    if args.index_command == "add":
        for file_path in args.files:
            if not Path(file_path).is_file():
                print(f"✗ Not a file: {file_path}")
                return 1
            print(f"{media_index.register(file_path)}  {file_path}")
    elif args.index_command == "scan":
        locators = media_index.scan(args.directory)
        print(f"✓ {len(locators)} image(s) indexed from {args.directory}")
    else:
        entries = media_index.list_entries()
        for entry in entries:
            print(f"{entry.locator}  {entry.path}")
        print(f"{len(entries)} entr{'y' if len(entries) == 1 else 'ies'}")
    return 0


def run_acquisition(args: argparse.Namespace, config: ConfigManager) -> int:
    media_index = open_media_index(config)

    if args.command == "capture":
        launcher = LocalLauncher(
            LocatorResolver(media_index),
            capture_source=args.source,
            reported_locator=args.report_locator,
        )
        choice = AcquisitionChoice.CAPTURE
    else:
        launcher = LocalLauncher(LocatorResolver(media_index), pick_locator=args.locator)
        choice = AcquisitionChoice.PICK

    pipeline = IntakePipeline(config, launcher, media_index=media_index)
    pipeline.session.request_acquisition()
    pipeline.session.choose(choice)

    exit_code = 1
    for result in launcher.take_results():
        exit_code = print_intake(pipeline.complete(result), save=args.save)
    return exit_code


def run_config(config: ConfigManager) -> int:
    print(f"Configuration: {config.config_path}")
    print()
    for key, description in FIELD_DESCRIPTIONS.items():
        print(f"{key} = {config.get(key)!r}")
        print(f"    {description}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the photointake CLI.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = build_parser().parse_args(argv)
    logger = logging.getLogger(__name__)

    try:
        config = ConfigManager.load(config_path=args.config)
    except ConfigError as e:
        print(f"✗ Configuration Error: {e}")
        return 2

    setup_logging(config, args.verbose)

    try:
        if args.command == "decode":
            return run_decode(args, config)
        if args.command == "info":
            return run_info(args, config)
        if args.command == "index":
            return run_index(args, config)
        if args.command == "config":
            return run_config(config)
        return run_acquisition(args, config)

    except MediaError as e:
        logger.error(f"Media error: {e}", exc_info=args.verbose)
        print(f"✗ Media Error: {e}")
        return 3

    except KeyboardInterrupt:
        print()
        print("Interrupted by user")
        return 130

    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        print(f"✗ Unexpected Error: {e}")
        if not args.verbose:
            print("Run with --verbose for detailed error information")
        return 1


if __name__ == "__main__":
    sys.exit(main())
