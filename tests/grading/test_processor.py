"""
Integration tests for the grading processor.
"""

from unittest.mock import patch

import numpy as np
import pytest

from src.grading.iou_scorer import compute_overlap
from src.grading.processor import GradingProcessor, grade_drawing, normalize_image, score
from src.grading.types import (
    BufferSizeMismatch,
    DecisionConfig,
    DecisionStatus,
    GradingConfig,
    InvalidImageDimensions,
    MatchStatus,
    NormalizationConfig,
    RasterImage,
)


@pytest.fixture
def plus_sign():
    """16x16 plus sign whose bounding box spans the full 16x16."""
    mask = np.zeros((16, 16), dtype=bool)
    mask[6:10, :] = True
    mask[:, 6:10] = True
    return mask


@pytest.fixture
def l_shape_raster(raster_factory):
    mask = np.zeros((60, 80), dtype=bool)
    mask[10:50, 20:28] = True
    mask[42:50, 20:60] = True
    return raster_factory(mask)


class TestScore:
    """Tests for the module level score() function."""

    def test_translation_invariance(self, raster_factory, square_factory):
        a = raster_factory(square_factory(100, 5, 5, 10))
        b = raster_factory(square_factory(100, 50, 50, 10))

        assert score(a, b) == 1.0

    def test_scale_invariance_for_squares(self, raster_factory, square_factory):
        a = raster_factory(square_factory(100, 5, 5, 10))
        b = raster_factory(square_factory(100, 30, 30, 20))

        assert score(a, b) == 1.0

    def test_scale_invariance_for_exact_upscale(self, raster_factory, plus_sign):
        small = np.zeros((50, 50), dtype=bool)
        small[3:19, 7:23] = plus_sign
        large = np.zeros((80, 80), dtype=bool)
        large[40:72, 10:42] = np.kron(plus_sign, np.ones((2, 2), dtype=bool))

        assert score(raster_factory(small), raster_factory(large)) == 1.0

    def test_half_shapes_partial_overlap(self, half_filled_pair):
        left, right = half_filled_pair

        assert score(left, right) == pytest.approx(0.03125)

    def test_blank_against_ink_is_zero(self, blank_raster, square_raster):
        assert score(blank_raster, square_raster) == 0.0
        assert score(square_raster, blank_raster) == 0.0

    def test_both_blank_is_zero(self, blank_raster):
        assert score(blank_raster, blank_raster) == 0.0

    def test_identity(self, l_shape_raster):
        assert score(l_shape_raster, l_shape_raster) == 1.0

    def test_symmetry(self, l_shape_raster, square_raster):
        assert score(l_shape_raster, square_raster) == score(
            square_raster, l_shape_raster
        )

    def test_range(self, l_shape_raster, square_raster):
        assert 0.0 <= score(l_shape_raster, square_raster) <= 1.0

    def test_idempotent(self, half_filled_pair):
        left, right = half_filled_pair

        results = {score(left, right) for _ in range(3)}

        assert len(results) == 1

    def test_inputs_are_not_modified(self, l_shape_raster, square_raster):
        before = l_shape_raster.data.copy()
        score(l_shape_raster, square_raster)
        assert np.array_equal(l_shape_raster.data, before)

    def test_dark_ink_counts_as_background(self, raster_factory, square_factory):
        dark = raster_factory(square_factory(100, 5, 5, 10), color=(10, 10, 10, 255))
        light = raster_factory(square_factory(100, 5, 5, 10))

        assert score(dark, light) == 0.0

    def test_custom_grid_size(self, raster_factory, square_factory):
        a = raster_factory(square_factory(100, 5, 5, 10))
        b = raster_factory(square_factory(100, 60, 10, 30))

        assert score(a, b, grid_size=16) == 1.0

    def test_different_canvas_sizes(self, raster_factory, square_factory):
        a = raster_factory(square_factory(40, 0, 0, 40))
        b = raster_factory(square_factory(300, 100, 100, 50))

        assert score(a, b) == 1.0

    def test_zero_size_raster_raises(self, square_raster):
        empty = RasterImage(width=0, height=0, data=b"")

        with pytest.raises(InvalidImageDimensions):
            score(empty, square_raster)
        with pytest.raises(InvalidImageDimensions):
            score(square_raster, empty)

    def test_buffer_mismatch_raises(self, square_raster):
        broken = RasterImage(width=10, height=10, data=bytes(399))

        with pytest.raises(BufferSizeMismatch):
            score(square_raster, broken)

    def test_malformed_input_is_not_scored_as_zero(self, blank_raster):
        broken = RasterImage(width=3, height=3, data=bytes(4))

        with pytest.raises(ValueError):
            score(blank_raster, broken)


class TestNormalizeImage:
    """Tests for the single-raster pipeline."""

    def test_returns_grid_and_bbox(self, square_raster):
        grid, bbox = normalize_image(square_raster)

        assert grid.mask.shape == (64, 64)
        assert grid.mask.all()
        assert bbox.to_tuple() == (5, 5, 14, 14)

    def test_blank_raster(self, blank_raster):
        grid, bbox = normalize_image(blank_raster, grid_size=32)

        assert bbox is None
        assert grid.mask.shape == (32, 32)
        assert grid.is_empty


class TestGradingProcessor:
    """Tests for GradingProcessor.grade()."""

    def test_initialization_default_config(self):
        processor = GradingProcessor()

        assert processor.config.normalization.grid_size == 64
        assert processor.config.decision.pass_threshold_pct == 65.0
        assert processor.config.binarization.alpha_threshold == 10

    def test_identical_drawing_passes(self, l_shape_raster):
        result = GradingProcessor().grade(l_shape_raster, l_shape_raster)

        assert result.decision == DecisionStatus.PASS
        assert result.is_pass()
        assert result.score == 1.0
        assert result.score_pct == 100.0
        assert result.status == MatchStatus.OVERLAP
        assert result.intersection == result.union

    def test_partial_overlap_fails(self, half_filled_pair):
        left, right = half_filled_pair

        result = GradingProcessor().grade(left, right)

        assert result.decision == DecisionStatus.FAIL
        assert result.score_pct == pytest.approx(3.125)
        assert result.intersection == 32 * 4
        assert result.union == 1024 * 4

    def test_threshold_is_inclusive(self, half_filled_pair):
        left, right = half_filled_pair

        result = GradingProcessor().grade(left, right, threshold_pct=3.125)

        assert result.decision == DecisionStatus.PASS

    def test_blank_drawing(self, blank_raster, square_raster):
        result = GradingProcessor().grade(blank_raster, square_raster)

        assert result.decision == DecisionStatus.FAIL
        assert result.status == MatchStatus.NO_OVERLAP
        assert result.drawing_bbox is None
        assert result.reference_bbox.to_tuple() == (5, 5, 14, 14)
        assert "drawing is blank" in result.get_summary()

    def test_both_blank(self, blank_raster):
        result = GradingProcessor().grade(blank_raster, blank_raster)

        assert result.score == 0.0
        assert result.union == 0
        assert result.status == MatchStatus.EMPTY_UNION
        assert "nothing drawn" in result.get_summary()

    def test_custom_config(self, l_shape_raster, square_raster):
        config = GradingConfig(
            normalization=NormalizationConfig(grid_size=32),
            decision=DecisionConfig(pass_threshold_pct=0.0),
        )

        result = GradingProcessor(config=config).grade(l_shape_raster, square_raster)

        assert result.grid_size == 32
        assert result.threshold_pct == 0.0
        assert result.decision == DecisionStatus.PASS

    def test_grid_size_override(self, square_raster):
        result = GradingProcessor().grade(square_raster, square_raster, grid_size=8)

        assert result.grid_size == 8
        assert result.union == 64

    def test_score_matches_module_function(self, l_shape_raster, square_raster):
        processor = GradingProcessor(config=GradingConfig())

        assert processor.score(l_shape_raster, square_raster) == score(
            l_shape_raster, square_raster
        )

    def test_summary_and_dict(self, l_shape_raster):
        result = GradingProcessor().grade(l_shape_raster, l_shape_raster)

        assert result.get_summary().startswith("PASS: 100.0%")
        data = result.to_dict()
        assert data["decision"] == "PASS"
        assert data["status"] == "Overlap"
        assert data["drawing_bbox"] == (20, 10, 59, 49)

    def test_grade_drawing_convenience(self, square_raster, blank_raster):
        result = grade_drawing(square_raster, blank_raster, threshold_pct=50)

        assert result.decision == DecisionStatus.FAIL
        assert result.threshold_pct == 50

    def test_grade_counts_overlap_once(self, half_filled_pair):
        left, right = half_filled_pair

        with patch(
            "src.grading.processor.compute_overlap",
            wraps=compute_overlap,
        ) as mock_overlap:
            result = GradingProcessor().grade(left, right)

        assert mock_overlap.call_count == 1
        assert result.score == result.intersection / result.union
