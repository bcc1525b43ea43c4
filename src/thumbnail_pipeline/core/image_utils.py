"""Image processing utilities for the thumbnail pipeline."""

import math
from pathlib import PurePosixPath
from typing import Any, Dict, Tuple

from PIL import Image, ImageOps

THUMBNAIL_PREFIX = "thumbnails/"
THUMBNAIL_SUFFIX = "-320"
THUMBNAIL_WIDTH = 320
JPEG_QUALITY = 80


def source_basename(source_key: str) -> str:
    """Return the final path component of an object key."""
    return PurePosixPath(source_key).name


def calculate_thumbnail_key(
    source_key: str, thumbnail_prefix: str = THUMBNAIL_PREFIX
) -> str:
    """
    Calculate the thumbnail object key for a source key.

    The source directory and extension are dropped, so
    ``gallery/sunset.png`` becomes ``thumbnails/sunset-320.jpg``. The ``-320``
    suffix is fixed and does not follow the configured width.

    Args:
        source_key: Original object key
        thumbnail_prefix: Prefix for derived objects

    Returns:
        Thumbnail object key
    """
    stem = PurePosixPath(source_key).stem
    return f"{thumbnail_prefix.rstrip('/')}/{stem}{THUMBNAIL_SUFFIX}.jpg"


def calculate_thumbnail_size(
    original_size: Tuple[int, int], target_width: int = THUMBNAIL_WIDTH
) -> Tuple[int, int]:
    """
    Scale ``original_size`` to ``target_width`` keeping the aspect ratio.

    Images narrower than the target are upscaled.

    Args:
        original_size: (width, height) of the decoded image
        target_width: Output width in pixels

    Returns:
        (width, height) of the thumbnail

    Raises:
        ValueError: If the original size has a non-positive dimension
    """
    width, height = original_size
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size: {width}x{height}")
    # Half-pixel heights round up.
    target_height = max(1, math.floor(height * (target_width / width) + 0.5))
    return target_width, target_height


def resize_to_width(
    img: "Image.Image", target_width: int = THUMBNAIL_WIDTH
) -> "Image.Image":
    """
    Orient, resize and convert an image so it can be written as JPEG.

    Args:
        img: Decoded PIL image
        target_width: Output width in pixels

    Returns:
        Resized RGB image
    """
    oriented = ImageOps.exif_transpose(img)
    size = calculate_thumbnail_size(oriented.size, target_width)
    resized = oriented.resize(size, Image.Resampling.BILINEAR)
    if resized.mode != "RGB":
        resized = _flatten_to_rgb(resized)
    return resized


def _flatten_to_rgb(img: "Image.Image") -> "Image.Image":
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    return img.convert("RGB")


def describe_image(img: "Image.Image") -> Dict[str, Any]:
    """Basic image information used in log context."""
    return {
        "width": img.width,
        "height": img.height,
        "format": img.format or "unknown",
        "mode": img.mode,
    }
