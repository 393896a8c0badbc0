"""
Main processor for the Grading module.

Orchestrates the complete pipeline for each of the two rasters:
1. Binarization (RGBA -> silhouette)
2. Bounding box extraction (crop to ink)
3. Fit-to-grid resampling (N x N, centred)

and then compares the two normalized silhouettes:
4. IoU scoring

The pipeline is stateless. Every call owns its intermediate buffers, so a
single processor may be shared between threads.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from src.common.types import BBox
from src.grading.binarizer import binarize, validate_raster
from src.grading.bounding_box import crop_to_content
from src.grading.config_loader import load_config
from src.grading.iou_scorer import compute_iou, compute_overlap, iou_from_counts
from src.grading.resampler import fit_to_grid
from src.grading.types import (
    BinarizationConfig,
    Bitmap,
    DecisionStatus,
    GradeResult,
    GradingConfig,
    RasterImage,
)

logger = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 64


def normalize_image(
    image: RasterImage,
    grid_size: int = DEFAULT_GRID_SIZE,
    binarization: Optional[BinarizationConfig] = None,
) -> Tuple[Bitmap, Optional[BBox]]:
    """
    Run binarize -> crop -> fit for a single raster.

    Args:
        image: RGBA raster.
        grid_size: Side length N of the output grid.
        binarization: Thresholds; defaults reproduce alpha > 10, luminance > 20.

    Returns:
        Tuple of (N x N silhouette, ink bounding box or None if blank).
    """
    binarization = binarization or BinarizationConfig()

    bitmap = binarize(
        image,
        alpha_threshold=binarization.alpha_threshold,
        luminance_threshold=binarization.luminance_threshold,
    )
    cropped, bbox = crop_to_content(bitmap)
    return fit_to_grid(cropped, grid_size), bbox


class GradingProcessor:
    """
    Main processor comparing a drawn glyph against a reference glyph.

    Example:
        >>> processor = GradingProcessor()
        >>> result = processor.grade(drawing, reference)
        >>> if result.is_pass():
        ...     print(f"Passed with {result.score_pct:.0f}%")
    """

    def __init__(
        self,
        config: Optional[GradingConfig] = None,
        config_path: Optional[Path] = None,
    ):
        """
        Initialize the grading processor.

        Args:
            config: Pre-loaded configuration object. If None, will load from file.
            config_path: Path to config file. If None, uses default location.
        """
        if config is not None:
            self.config = config
            logger.info("Using provided configuration")
        else:
            self.config = load_config(config_path) if config_path else load_config()
            logger.info("Loaded configuration from file")

    def _normalize_pair(
        self, drawing: RasterImage, reference: RasterImage, grid_size: int
    ) -> Tuple[Bitmap, Optional[BBox], Bitmap, Optional[BBox]]:
        # Both inputs are checked before either is processed
        validate_raster(drawing)
        validate_raster(reference)

        logger.debug(f"[Drawing] {drawing.width}x{drawing.height}")
        drawing_grid, drawing_bbox = normalize_image(
            drawing, grid_size, self.config.binarization
        )
        logger.debug(f"[Reference] {reference.width}x{reference.height}")
        reference_grid, reference_bbox = normalize_image(
            reference, grid_size, self.config.binarization
        )
        return drawing_grid, drawing_bbox, reference_grid, reference_bbox

    def score(
        self,
        drawing: RasterImage,
        reference: RasterImage,
        grid_size: Optional[int] = None,
    ) -> float:
        """
        Similarity of the two glyph silhouettes in [0.0, 1.0].

        Args:
            drawing: Flattened snapshot of the user's strokes.
            reference: Reference glyph in the same raster format.
            grid_size: Comparison grid; defaults to the configured size.

        Raises:
            InvalidImageDimensions, BufferSizeMismatch: On malformed rasters.
        """
        if grid_size is None:
            grid_size = self.config.normalization.grid_size
        drawing_grid, _, reference_grid, _ = self._normalize_pair(
            drawing, reference, grid_size
        )
        return compute_iou(drawing_grid, reference_grid)

    def grade(
        self,
        drawing: RasterImage,
        reference: RasterImage,
        grid_size: Optional[int] = None,
        threshold_pct: Optional[float] = None,
    ) -> GradeResult:
        """
        Score a drawing and decide pass/fail.

        Args:
            drawing: Flattened snapshot of the user's strokes.
            reference: Reference glyph in the same raster format.
            grid_size: Comparison grid; defaults to the configured size.
            threshold_pct: Pass threshold in percent; defaults to the
                configured threshold.

        Returns:
            GradeResult with score, decision and diagnostic counts.
        """
        if grid_size is None:
            grid_size = self.config.normalization.grid_size
        if threshold_pct is None:
            threshold_pct = self.config.decision.pass_threshold_pct

        logger.info("=" * 60)
        logger.info(f"Starting Grading Pipeline (grid {grid_size}x{grid_size})")
        logger.info("=" * 60)

        logger.info("[Stage 1-3] Binarize, crop and fit both rasters")
        drawing_grid, drawing_bbox, reference_grid, reference_bbox = (
            self._normalize_pair(drawing, reference, grid_size)
        )

        if drawing_bbox is None:
            logger.warning("Drawing has no foreground pixels")
        if reference_bbox is None:
            logger.warning("Reference has no foreground pixels")

        logger.info("[Stage 4] IoU scoring")
        counts = compute_overlap(drawing_grid, reference_grid)
        score = iou_from_counts(counts)
        score_pct = score * 100.0

        decision = (
            DecisionStatus.PASS if score_pct >= threshold_pct else DecisionStatus.FAIL
        )

        result = GradeResult(
            score=score,
            score_pct=score_pct,
            decision=decision,
            threshold_pct=threshold_pct,
            grid_size=grid_size,
            intersection=counts.intersection,
            union=counts.union,
            status=counts.status,
            drawing_bbox=drawing_bbox,
            reference_bbox=reference_bbox,
        )
        logger.info(result.get_summary())
        return result


def score(
    image_a: RasterImage, image_b: RasterImage, grid_size: int = DEFAULT_GRID_SIZE
) -> float:
    """
    Score two rasters with the calibrated default thresholds.

    Pure function: reads no configuration file and keeps no state, so
    repeated calls with identical inputs return identical floats.

    Args:
        image_a: Drawn glyph raster.
        image_b: Reference glyph raster.
        grid_size: Side length of the comparison grid (default 64).

    Returns:
        IoU of the normalized silhouettes in [0.0, 1.0].

    Example:
        >>> similarity = score(drawing, reference)
        >>> passed = similarity * 100 >= 65
    """
    processor = GradingProcessor(config=GradingConfig())
    return processor.score(image_a, image_b, grid_size=grid_size)


def grade_drawing(
    drawing: RasterImage,
    reference: RasterImage,
    config: Optional[GradingConfig] = None,
    threshold_pct: Optional[float] = None,
) -> GradeResult:
    """
    Convenience function for one-shot grading.

    Args:
        drawing: Drawn glyph raster.
        reference: Reference glyph raster.
        config: Optional custom configuration. Uses config.yaml if None.
        threshold_pct: Optional override of the configured pass threshold.

    Returns:
        GradeResult object.
    """
    processor = GradingProcessor(config=config)
    return processor.grade(drawing, reference, threshold_pct=threshold_pct)
