"""
Raster file input/output for the Grading module.

OpenCV stores channels as BGR(A); every raster handed to the pipeline is
RGBA, so conversions happen here and nowhere else.
"""

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from src.grading.types import Bitmap, RasterImage

logger = logging.getLogger(__name__)


def raster_from_bgr(image: np.ndarray) -> RasterImage:
    """
    Convert an OpenCV image (grayscale, BGR or BGRA) to an RGBA raster.

    Images without an alpha channel are treated as fully opaque.

    Raises:
        ValueError: If the array is empty or has an unsupported channel count.
    """
    if image is None or image.size == 0:
        raise ValueError("Invalid image: image is None or empty")

    if image.dtype != np.uint8:
        raise ValueError(f"Expected uint8 image, got {image.dtype}")

    if image.ndim == 2:
        rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    elif image.ndim == 3 and image.shape[2] == 3:
        rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    elif image.ndim == 3 and image.shape[2] == 4:
        rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    else:
        raise ValueError(f"Unsupported image shape {image.shape}")

    return RasterImage.from_array(rgba)


def load_raster(path: Union[str, Path]) -> RasterImage:
    """
    Read an image file into an RGBA raster, keeping its alpha channel.

    Args:
        path: Image file (PNG recommended, for transparency).

    Returns:
        RasterImage.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If OpenCV cannot decode the file.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ValueError(f"Could not decode image: {path}")

    raster = raster_from_bgr(image)
    logger.debug(f"Loaded {raster.width}x{raster.height} raster from {path}")
    return raster


def save_raster(image: RasterImage, path: Union[str, Path]) -> None:
    """Write an RGBA raster to disk (PNG keeps the alpha channel)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    bgra = cv2.cvtColor(np.ascontiguousarray(image.as_array()), cv2.COLOR_RGBA2BGRA)
    if not cv2.imwrite(str(path), bgra):
        raise ValueError(f"Could not write image: {path}")


def save_bitmap(bitmap: Bitmap, path: Union[str, Path]) -> None:
    """Write a silhouette as a black/white image, white marking foreground."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), bitmap.mask.astype(np.uint8) * 255):
        raise ValueError(f"Could not write image: {path}")
