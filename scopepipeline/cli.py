#!/usr/bin/env python3
"""
Command-line interface for the Scope capture pipeline.

Usage:
    # Capture with an external camera command and save the OCR-ready image
    scope capture ./scope/ocr.jpg --command "libcamera-still -o {output}" -o ./ocr_input.png

    # Use an existing photo instead of the camera
    scope capture ./scope/ocr.jpg --from ./IMG_20240101_120000.jpg -o ./ocr_input.png

    # Show the EXIF orientation of photos
    scope orientation ./photos/*.jpg

    # Normalize a photo directly
    scope normalize ./photo.jpg -o ./ocr_input.png --downsample 2

    # Finish a run that was interrupted after the photo was taken
    scope resume ./scope/ocr.jpg -o ./ocr_input.png
"""

import argparse
import logging
import shlex
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NO_PHOTO = 2

ORIENTATION_CHOICES = {
    "normal": "NORMAL",
    "90": "ROTATE_90",
    "180": "ROTATE_180",
    "270": "ROTATE_270",
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _save_buffer(buffer, output: str) -> Path:
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    buffer.to_image().save(output_path, "PNG")
    return output_path


def _report(result, output: str | None) -> int:
    """Print a pipeline result and map it to an exit status."""
    from .pipeline import PipelineStatus

    if result.success:
        print(f"✓ {result.message}")
        print(f"  Orientation: {result.orientation.name}")
        if output:
            print(f"  Saved: {_save_buffer(result.buffer, output)}")
        return EXIT_OK

    if result.status in (PipelineStatus.CANCELLED, PipelineStatus.TIMED_OUT):
        print(f"⚠ {result.message}", file=sys.stderr)
        return EXIT_NO_PHOTO

    print(f"✗ Failed: {result.message}", file=sys.stderr)
    return EXIT_FAILED


def _build_config(args: argparse.Namespace):
    from .capture import DEFAULT_CAPTURE_TIMEOUT
    from .config import PipelineConfig

    timeout = getattr(args, "timeout", None)

    return PipelineConfig(
        destination=Path(args.destination),
        downsample_factor=args.downsample,
        capture_timeout=DEFAULT_CAPTURE_TIMEOUT if timeout is None else timeout,
        brightness=args.brightness,
        contrast=args.contrast,
    )


def cmd_capture(args: argparse.Namespace) -> int:
    """Capture a photo and normalize it."""
    from .capture import CommandCaptureDevice, ImportDevice
    from .pipeline import ScanPipeline

    config = _build_config(args)

    if args.command:
        device = CommandCaptureDevice(shlex.split(args.command))
    else:
        device = ImportDevice(Path(args.source))

    pipeline = ScanPipeline(config, device)
    return _report(pipeline.run(), args.output)


def cmd_resume(args: argparse.Namespace) -> int:
    """Resume a run interrupted after capture."""
    from .capture import ImportDevice
    from .pipeline import ScanPipeline

    config = _build_config(args)
    pipeline = ScanPipeline(config, ImportDevice(config.destination))

    result = pipeline.resume()
    if result is None:
        print("Nothing to resume", file=sys.stderr)
        return EXIT_NO_PHOTO

    return _report(result, args.output)


def cmd_orientation(args: argparse.Namespace) -> int:
    """Print the EXIF orientation of each image."""
    from .errors import MetadataReadFailure
    from .metadata import read_orientation

    status = EXIT_OK
    for name in args.images:
        try:
            tag = read_orientation(Path(name))
        except MetadataReadFailure as e:
            print(f"{name}: {e}", file=sys.stderr)
            status = EXIT_FAILED
            continue
        print(f"{name}: {tag.name} ({tag.degrees}°)")

    return status


def cmd_normalize(args: argparse.Namespace) -> int:
    """Normalize an existing photo."""
    from .errors import DecodeError, MetadataReadFailure
    from .metadata import read_orientation
    from .models import CapturedImage, OrientationTag
    from .normalizer import normalize
    from .preprocessor import LevelsCorrection

    image = CapturedImage(Path(args.image))

    try:
        if args.orientation == "auto":
            tag = read_orientation(image)
        else:
            tag = OrientationTag[ORIENTATION_CHOICES[args.orientation]]
        buffer = normalize(image, tag, args.downsample)
    except (MetadataReadFailure, DecodeError) as e:
        print(f"✗ Failed: {e}", file=sys.stderr)
        return EXIT_FAILED

    buffer = LevelsCorrection(args.brightness, args.contrast).apply(buffer)
    output_path = _save_buffer(buffer, args.output)

    print(f"✓ Normalized {image.path.name} ({tag.name}) -> {buffer.width}x{buffer.height}")
    print(f"  Saved: {output_path}")
    return EXIT_OK


def _add_processing_args(parser: argparse.ArgumentParser, downsample_default: int) -> None:
    parser.add_argument("--downsample", type=int, default=downsample_default,
                        help=f"Decode at 1/N resolution (default: {downsample_default})")
    parser.add_argument("--brightness", type=int, default=0,
                        help="Brightness correction, -255..255 (default: 0)")
    parser.add_argument("--contrast", type=int, default=0,
                        help="Contrast correction, -127..127 (default: 0)")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="scope",
        description="Capture photos and prepare them for OCR",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # capture command (full pipeline)
    p_capture = subparsers.add_parser(
        "capture",
        help="Capture a photo and normalize it for OCR",
    )
    p_capture.add_argument("destination", help="Where the photo is written (overwritten)")
    source = p_capture.add_mutually_exclusive_group(required=True)
    source.add_argument("--command", help="Capture command; {output} is replaced by the destination")
    source.add_argument("--from", dest="source", help="Import an existing photo instead of capturing")
    p_capture.add_argument("--timeout", type=float, default=None,
                           help="Seconds to wait for the capture device (default: 300)")
    p_capture.add_argument("-o", "--output", help="Save the normalized image as PNG")
    _add_processing_args(p_capture, downsample_default=4)
    p_capture.set_defaults(func=cmd_capture)

    # orientation command
    p_orientation = subparsers.add_parser(
        "orientation",
        help="Show EXIF orientation of images",
    )
    p_orientation.add_argument("images", nargs="+", help="Image files")
    p_orientation.set_defaults(func=cmd_orientation)

    # normalize command
    p_normalize = subparsers.add_parser(
        "normalize",
        help="Normalize an existing photo",
    )
    p_normalize.add_argument("image", help="Input image")
    p_normalize.add_argument("-o", "--output", required=True, help="Output PNG file")
    p_normalize.add_argument("--orientation", choices=["auto", *ORIENTATION_CHOICES], default="auto",
                             help="Orientation to apply (default: read from EXIF)")
    _add_processing_args(p_normalize, downsample_default=1)
    p_normalize.set_defaults(func=cmd_normalize)

    # resume command
    p_resume = subparsers.add_parser(
        "resume",
        help="Finish a run interrupted after the photo was taken",
    )
    p_resume.add_argument("destination", help="Destination used by the interrupted capture")
    p_resume.add_argument("-o", "--output", help="Save the normalized image as PNG")
    _add_processing_args(p_resume, downsample_default=4)
    p_resume.set_defaults(func=cmd_resume)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        return args.func(args)
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
