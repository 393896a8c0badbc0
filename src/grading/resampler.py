"""
Fit-to-grid resampling for the Grading module.

Scales a cropped silhouette into a fixed N x N canvas, preserving aspect
ratio, and centres it. Sampling is nearest-neighbour with no filtering:
pass thresholds are calibrated against exactly this behaviour, so the
sampling rule below must not be replaced with an interpolating resize.
"""

import logging
import math
from typing import Tuple

import numpy as np

from src.grading.types import Bitmap

logger = logging.getLogger(__name__)


def compute_fit(width: int, height: int, grid_size: int) -> Tuple[float, int, int]:
    """
    Compute the scale factor and scaled size for fitting into the grid.

    The limiting (larger) side decides the scale. Scaled sides are floored
    but never drop below one pixel, so extreme aspect ratios still produce
    a usable strip.

    Args:
        width: Source width in pixels (>= 1).
        height: Source height in pixels (>= 1).
        grid_size: Side length N of the target grid.

    Returns:
        Tuple of (scale, scaled_width, scaled_height).

    Example:
        >>> compute_fit(10, 20, 64)
        (3.2, 32, 64)
    """
    scale = min(grid_size / width, grid_size / height)
    scaled_width = max(1, math.floor(width * scale))
    scaled_height = max(1, math.floor(height * scale))
    return scale, scaled_width, scaled_height


def _source_indices(length: int, scale: float, source_length: int) -> np.ndarray:
    """Nearest-neighbour source index floor(i / scale) for each destination i."""
    indices = np.floor(np.arange(length, dtype=np.float64) / scale).astype(np.intp)
    # Float rounding must never step past the last source pixel
    return np.minimum(indices, source_length - 1)


def fit_to_grid(bitmap: Bitmap, grid_size: int) -> Bitmap:
    """
    Resample a silhouette into a centred grid_size x grid_size bitmap.

    Steps:
        1. scale = min(N / W, N / H)
        2. w = max(1, floor(W * scale)), h = max(1, floor(H * scale))
        3. destination (x, y) samples source (floor(x / scale), floor(y / scale))
        4. paste at offsets floor((N - w) / 2), floor((N - h) / 2)

    Args:
        bitmap: Cropped silhouette of any size >= 1x1.
        grid_size: Side length N of the output.

    Returns:
        Bitmap of exactly N x N pixels.

    Raises:
        ValueError: If grid_size is below 1.
    """
    if grid_size < 1:
        raise ValueError(f"grid_size must be at least 1, got {grid_size}")

    scale, scaled_width, scaled_height = compute_fit(
        bitmap.width, bitmap.height, grid_size
    )

    src_x = _source_indices(scaled_width, scale, bitmap.width)
    src_y = _source_indices(scaled_height, scale, bitmap.height)
    scaled = bitmap.mask[np.ix_(src_y, src_x)]

    offset_x = (grid_size - scaled_width) // 2
    offset_y = (grid_size - scaled_height) // 2

    canvas = np.zeros((grid_size, grid_size), dtype=bool)
    canvas[
        offset_y : offset_y + scaled_height, offset_x : offset_x + scaled_width
    ] = scaled

    logger.debug(
        f"Resampled {bitmap.width}x{bitmap.height} -> {scaled_width}x{scaled_height} "
        f"(scale={scale:.4f}) at offset ({offset_x}, {offset_y}) in {grid_size}x{grid_size}"
    )

    return Bitmap(width=grid_size, height=grid_size, mask=canvas)
