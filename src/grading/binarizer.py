"""
Binarization functions for the Grading module.

Turns an RGBA raster into a foreground/background silhouette. A pixel is
ink when it is both visibly opaque and not near-black, which drops the
anti-aliased fringe around pen strokes and dark artifacts on a dark canvas.
"""

import logging

import numpy as np

from src.grading.types import (
    BufferSizeMismatch,
    InvalidImageDimensions,
    RasterImage,
    Bitmap,
)

logger = logging.getLogger(__name__)

DEFAULT_ALPHA_THRESHOLD = 10
DEFAULT_LUMINANCE_THRESHOLD = 20.0


def validate_raster(image: RasterImage) -> None:
    """
    Check raster preconditions before any pixel is read.

    Args:
        image: Raster to validate.

    Raises:
        InvalidImageDimensions: If width or height is below 1.
        BufferSizeMismatch: If the buffer length is not width * height * 4.
    """
    if image.width < 1 or image.height < 1:
        raise InvalidImageDimensions(
            f"Image dimensions must be at least 1x1, got {image.width}x{image.height}"
        )

    if image.data.size != image.expected_buffer_size:
        raise BufferSizeMismatch(
            f"Pixel buffer has {image.data.size} bytes, expected "
            f"{image.expected_buffer_size} for a {image.width}x{image.height} "
            "RGBA image"
        )


def binarize(
    image: RasterImage,
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD,
    luminance_threshold: float = DEFAULT_LUMINANCE_THRESHOLD,
) -> Bitmap:
    """
    Convert an RGBA raster into a silhouette of identical size.

    Foreground iff ``alpha > alpha_threshold`` and
    ``(R + G + B) / 3 > luminance_threshold``.

    Args:
        image: Validated or unvalidated RGBA raster.
        alpha_threshold: Minimum (exclusive) alpha for ink.
        luminance_threshold: Minimum (exclusive) mean channel value for ink.

    Returns:
        Bitmap with the same width and height as the input.

    Raises:
        InvalidImageDimensions, BufferSizeMismatch: On malformed input.

    Example:
        >>> px = RasterImage(width=2, height=1, data=[255, 255, 255, 255, 0, 0, 0, 255])
        >>> binarize(px).mask.tolist()
        [[True, False]]
    """
    validate_raster(image)

    rgba = image.as_array()
    luminance = rgba[..., :3].astype(np.float64).sum(axis=-1) / 3.0
    alpha = rgba[..., 3]

    mask = (alpha > alpha_threshold) & (luminance > luminance_threshold)

    bitmap = Bitmap(width=image.width, height=image.height, mask=mask)
    logger.debug(
        f"Binarized {image.width}x{image.height} raster: "
        f"{bitmap.foreground_count} foreground pixels"
    )
    return bitmap
