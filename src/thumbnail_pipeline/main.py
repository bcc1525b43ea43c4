"""Main module for the thumbnail pipeline CLI."""

import io
import sys
import argparse
from typing import Dict, Optional

import boto3
from PIL import Image

from . import __version__
from .core import get_logger, load_settings
from .core.exceptions import ConfigurationError
from .core.factories import ThumbnailPipelineFactory
from .core.image_utils import resize_to_width
from .core.models import PipelineStatus, UploadEvent


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``thumbnail-pipeline`` command."""
    parser = argparse.ArgumentParser(
        prog="thumbnail-pipeline",
        description="Thumbnail Pipeline - generate gallery thumbnails for uploaded images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Re-run the pipeline for an object that is already uploaded
  thumbnail-pipeline process --bucket my-bucket --key gallery/photo.jpg

  # Only accept objects under gallery/
  thumbnail-pipeline process --bucket my-bucket --key gallery/photo.jpg \\
                             --source-prefix gallery/ --content-type image/jpeg

  # Check that the imaging stack works in this environment
  thumbnail-pipeline verify
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser(
        "process", help="Replay a finalize event for one stored object"
    )
    process_parser.add_argument("--bucket", required=True, help="Bucket holding the object")
    process_parser.add_argument("--key", required=True, help="Object key to process")
    process_parser.add_argument(
        "--content-type", default=None, help="Content type reported for the object"
    )
    process_parser.add_argument(
        "--size", type=int, default=None, help="Object size in bytes"
    )
    process_parser.add_argument(
        "--source-prefix",
        default=None,
        help="Only process keys under this prefix (default: THUMBNAIL_SOURCE_PREFIX)",
    )
    process_parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )

    subparsers.add_parser(
        "verify", help="Check that image resizing and the AWS SDK are available"
    )
    subparsers.add_parser("version", help="Show version information")

    return parser


def run_process(args: argparse.Namespace) -> int:
    """Run the pipeline once for the object named on the command line."""
    logger = get_logger("thumbnail-pipeline.cli")

    overrides: Dict[str, object] = {"debug": args.debug}
    if args.source_prefix is not None:
        overrides["source_prefix"] = args.source_prefix

    try:
        settings = load_settings(**overrides)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    pipeline = ThumbnailPipelineFactory.create_pipeline(settings=settings)
    event = UploadEvent(
        bucket=args.bucket,
        name=args.key,
        content_type=args.content_type,
        size=args.size,
    )
    result = pipeline.handle(event)

    if result.status == PipelineStatus.SKIPPED:
        print(f"Skipped {args.key}: {result.reason}")
        return 0
    if result.status == PipelineStatus.FAILED:
        stage = result.failed_stage.value if result.failed_stage else "unknown"
        print(f"Failed {args.key} during {stage}: {result.error}")
        return 1

    print(f"Created s3://{args.bucket}/{result.thumbnail_key} (record {result.record_id})")
    return 0


def run_verify(width: int = 100, height: int = 100, target_width: int = 50) -> int:
    """Resize an in-memory image and report whether the stack works."""
    try:
        source = Image.new("RGB", (width, height), color=(255, 0, 0))
        thumbnail = resize_to_width(source, target_width)
        output = io.BytesIO()
        thumbnail.save(output, format="JPEG", quality=80)
        print(
            f"OK: Pillow resize succeeded ({width}x{height} -> "
            f"{thumbnail.width}x{thumbnail.height}, {len(output.getvalue())} bytes)"
        )
        print(f"OK: boto3 {boto3.__version__} available")
        return 0
    except Exception as e:  # noqa: BLE001
        print(f"FAILED: {e}")
        return 1


def main(argv: Optional[list] = None) -> None:
    """
    Entry point for the ``thumbnail-pipeline`` command-line interface.

    The pipeline normally runs from a storage trigger; the CLI lets an
    operator re-trigger it by hand and check the runtime environment.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "process":
        try:
            sys.exit(run_process(args))
        except KeyboardInterrupt:
            get_logger("thumbnail-pipeline.cli").warning("Processing interrupted by user.")
            sys.exit(130)

    elif args.command == "verify":
        sys.exit(run_verify())

    elif args.command == "version":
        print("Thumbnail Pipeline CLI")
        print(f"Version {__version__}")
        print("Upload-triggered thumbnail generation for the gallery")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
