"""Main module for the image renderer CLI."""

import argparse
import os
import sys
from typing import List, Optional

from . import __version__
from .core import (
    ConfigurationError,
    Quality,
    RenderSpec,
    TargetFormat,
    UploadCandidate,
    get_logger,
)
from .core.config import RendererSettings
from .core.factories import ImageProcessorFactory
from .processors import PROCESSORS

QUALITY_CHOICES = {q.name.lower(): q for q in Quality}


def parse_quality(value: str) -> int:
    """Accept a preset name (low, medium, high, ultra) or an integer 1-100."""
    preset = QUALITY_CHOICES.get(value.lower())
    if preset is not None:
        return int(preset)
    try:
        quality = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid quality '{value}', use one of {sorted(QUALITY_CHOICES)} or 1-100"
        )
    if not 1 <= quality <= 100:
        raise argparse.ArgumentTypeError(f"quality must be between 1 and 100: {quality}")
    return quality


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: '{value}'")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero: {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with `upload`, `delete` and `version` commands."""
    parser = argparse.ArgumentParser(
        prog="image-renderer",
        description="Image Renderer - validate, resize, re-encode and store images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Render two photos to 512x512 WebP under ./Images
  image-renderer upload cat.png dog.jpg --width 512 --height 512

  # Store as high quality JPEG with a label
  image-renderer upload cat.png --format jpeg --quality ultra --label avatar

  # Delete previously stored files
  image-renderer delete Images/512x512_0_20240101_ab12.webp

  # Show version
  image-renderer version
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--processor",
            type=str,
            default=None,
            choices=sorted(PROCESSORS),
            help="Concurrency strategy (default: multithread)",
        )
        sub.add_argument(
            "--max-workers", type=positive_int, default=None, help="Upper bound on workers"
        )
        sub.add_argument("--debug", action="store_true", help="Enable debug logging")

    upload_parser = subparsers.add_parser(
        "upload", help="Validate, render and store image files"
    )
    upload_parser.add_argument("files", nargs="+", help="Image files to upload")
    upload_parser.add_argument(
        "--out-dir", default=None, help="Output directory (default: Images)"
    )
    upload_parser.add_argument("--label", default="", help="Label placed in file names")
    upload_parser.add_argument(
        "--format",
        dest="target_format",
        default=TargetFormat.WEBP.value,
        choices=[f.value for f in TargetFormat],
        help="Output format (default: webp)",
    )
    upload_parser.add_argument(
        "--quality",
        type=parse_quality,
        default=int(Quality.HIGH),
        help="low, medium, high, ultra or 1-100 (default: high)",
    )
    upload_parser.add_argument("--width", type=positive_int, default=1024, help="Output width")
    upload_parser.add_argument("--height", type=positive_int, default=1024, help="Output height")
    upload_parser.add_argument(
        "--max-size-mb",
        type=int,
        default=None,
        help="Reject files larger than this, 0 for no limit (default: 10)",
    )
    upload_parser.add_argument(
        "--allow-ext",
        action="append",
        default=None,
        help="Allowed extension, repeatable (default: jpg jpeg png gif ico)",
    )
    add_common(upload_parser)

    delete_parser = subparsers.add_parser("delete", help="Delete stored files")
    delete_parser.add_argument("paths", nargs="+", help="Paths to delete")
    add_common(delete_parser)

    subparsers.add_parser("version", help="Show version information")
    return parser


def _settings_from_args(args: argparse.Namespace) -> RendererSettings:
    overrides = {}
    if args.processor:
        overrides["processor"] = args.processor
    if args.max_workers:
        overrides["max_workers"] = args.max_workers
    if getattr(args, "max_size_mb", None) is not None:
        overrides["max_size_mb"] = args.max_size_mb
    if getattr(args, "allow_ext", None):
        overrides["allowed_extensions"] = args.allow_ext
    if getattr(args, "out_dir", None):
        overrides["output_dir"] = args.out_dir
    return RendererSettings.from_env(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the image renderer command-line interface.

    Prints the batch result as JSON and returns 0 when every item
    succeeded, 1 otherwise.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "version":
        print("Image Renderer CLI")
        print(f"Version {__version__}")
        return 0

    if args.command not in ("upload", "delete"):
        parser.print_help()
        return 1

    if args.debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
    logger = get_logger("image-renderer.cli")

    try:
        settings = _settings_from_args(args)
        processor = ImageProcessorFactory.create_processor(settings)

        if args.command == "upload":
            candidates = []
            max_size_bytes = processor.policy.max_size_bytes
            for path in args.files:
                try:
                    candidates.append(UploadCandidate.from_path(path, max_size_bytes))
                except OSError as e:
                    logger.error(f"Cannot read {path}: {e}")
                    candidates.append(
                        UploadCandidate(name=os.path.basename(path), size_bytes=0)
                    )
            spec = RenderSpec(
                quality=args.quality,
                target_format=TargetFormat(args.target_format),
                width=args.width,
                height=args.height,
            )
            result = processor.upload_many(
                candidates, out_dir=settings.output_dir, label=args.label, spec=spec
            )
        else:
            result = processor.delete_many(args.paths)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    print(result.model_dump_json(indent=2))
    return 0 if result.all_succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
