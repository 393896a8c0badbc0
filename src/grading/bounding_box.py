"""
Bounding box extraction for the Grading module.

Crops a silhouette to the tight rectangle around its ink so that where the
glyph sits on the canvas no longer matters.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from src.common.types import BBox
from src.grading.types import Bitmap

logger = logging.getLogger(__name__)


def find_bounding_box(bitmap: Bitmap) -> Optional[BBox]:
    """
    Find the smallest inclusive rectangle containing every foreground pixel.

    Args:
        bitmap: Silhouette to scan.

    Returns:
        Inclusive BBox, or None when the bitmap has no foreground.

    Example:
        >>> mask = np.zeros((100, 100), dtype=bool)
        >>> mask[5:15, 5:15] = True
        >>> find_bounding_box(Bitmap.from_mask(mask)).to_tuple()
        (5, 5, 14, 14)
    """
    rows = np.flatnonzero(bitmap.mask.any(axis=1))
    if rows.size == 0:
        return None
    cols = np.flatnonzero(bitmap.mask.any(axis=0))

    return BBox(
        x_min=int(cols[0]),
        y_min=int(rows[0]),
        x_max=int(cols[-1]),
        y_max=int(rows[-1]),
    )


def crop_to_content(bitmap: Bitmap) -> Tuple[Bitmap, Optional[BBox]]:
    """
    Crop a silhouette to its ink.

    A blank input is a legitimate case (nothing drawn yet) and yields the
    1x1 background bitmap so that later stages never see a zero-size image.

    Args:
        bitmap: Silhouette to crop.

    Returns:
        Tuple of (cropped bitmap, bounding box used). The box is None for
        blank input.
    """
    bbox = find_bounding_box(bitmap)
    if bbox is None:
        logger.debug("No foreground pixels, using 1x1 empty bitmap")
        return Bitmap.empty(), None

    cropped = bitmap.mask[bbox.y_min : bbox.y_max + 1, bbox.x_min : bbox.x_max + 1]
    logger.debug(f"Cropped to {bbox.width}x{bbox.height} at {bbox!r}")

    return Bitmap(width=bbox.width, height=bbox.height, mask=cropped.copy()), bbox
