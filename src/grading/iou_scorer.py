"""
Intersection-over-Union scoring for the Grading module.
"""

import logging

import numpy as np

from src.grading.types import Bitmap, GridSizeMismatch, MatchStatus, OverlapCounts

logger = logging.getLogger(__name__)


def compute_overlap(bitmap_a: Bitmap, bitmap_b: Bitmap) -> OverlapCounts:
    """
    Count shared and combined foreground pixels of two normalized bitmaps.

    Args:
        bitmap_a: First N x N silhouette.
        bitmap_b: Second N x N silhouette.

    Returns:
        OverlapCounts with intersection, union and the branch taken.

    Raises:
        GridSizeMismatch: If the bitmaps were normalized to different grids.
    """
    if bitmap_a.mask.shape != bitmap_b.mask.shape:
        raise GridSizeMismatch(
            f"Cannot compare {bitmap_a.width}x{bitmap_a.height} bitmap with "
            f"{bitmap_b.width}x{bitmap_b.height} bitmap"
        )

    intersection = int(np.count_nonzero(bitmap_a.mask & bitmap_b.mask))
    union = int(np.count_nonzero(bitmap_a.mask | bitmap_b.mask))

    if union == 0:
        status = MatchStatus.EMPTY_UNION
    elif intersection == 0:
        status = MatchStatus.NO_OVERLAP
    else:
        status = MatchStatus.OVERLAP

    logger.debug(f"Overlap: intersection={intersection}, union={union} ({status.value})")

    return OverlapCounts(intersection=intersection, union=union, status=status)


def iou_from_counts(counts: OverlapCounts) -> float:
    """IoU of precomputed counts; an empty union scores exactly 0.0."""
    if counts.status == MatchStatus.EMPTY_UNION:
        return 0.0

    return counts.intersection / counts.union


def compute_iou(bitmap_a: Bitmap, bitmap_b: Bitmap) -> float:
    """
    Intersection over union of two normalized silhouettes.

    Symmetric in its arguments. Two blank silhouettes score exactly 0.0
    through the explicit empty-union branch; a blank silhouette against a
    drawn one also scores 0.0, but through the ordinary ratio.

    Example:
        >>> full = Bitmap.from_mask(np.ones((4, 4), dtype=bool))
        >>> compute_iou(full, full)
        1.0
    """
    return iou_from_counts(compute_overlap(bitmap_a, bitmap_b))
