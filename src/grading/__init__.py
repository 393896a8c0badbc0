"""
Handwriting Similarity Grading

Compares a learner's drawn glyph with a reference glyph and produces a
similarity score in [0, 1] from the Intersection-over-Union of normalized
binary silhouettes.

Pipeline stages (per raster):
1. Binarization (alpha > 10 and mean RGB > 20 is ink)
2. Bounding box extraction (crop to ink, translation invariance)
3. Fit-to-grid resampling (N x N, nearest-neighbour, scale invariance)

followed by:
4. IoU scoring of the two N x N silhouettes
"""

from src.grading.config_loader import load_config
from src.grading.image_io import load_raster, save_bitmap, save_raster
from src.grading.processor import (
    GradingProcessor,
    grade_drawing,
    normalize_image,
    score,
)
from src.grading.types import (
    Bitmap,
    BufferSizeMismatch,
    DecisionStatus,
    GradeResult,
    GradingConfig,
    GradingError,
    GridSizeMismatch,
    InvalidImageDimensions,
    InvalidPixelValues,
    MatchStatus,
    RasterImage,
)

__all__ = [
    "GradingProcessor",
    "score",
    "grade_drawing",
    "normalize_image",
    "load_config",
    "load_raster",
    "save_raster",
    "save_bitmap",
    "Bitmap",
    "RasterImage",
    "GradeResult",
    "GradingConfig",
    "DecisionStatus",
    "MatchStatus",
    "GradingError",
    "InvalidImageDimensions",
    "InvalidPixelValues",
    "BufferSizeMismatch",
    "GridSizeMismatch",
]
