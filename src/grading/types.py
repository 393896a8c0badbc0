"""
Data types and structures for the Grading module.

Provides type-safe containers for raster input, intermediate bitmaps,
configuration, results and the grading error taxonomy.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Union

import numpy as np

from src.common.types import BBox

RGBA_CHANNELS = 4

PixelBuffer = Union[bytes, bytearray, memoryview, Sequence[int], np.ndarray]


class GradingError(ValueError):
    """Base class for malformed-input errors raised by the grading pipeline."""


class InvalidImageDimensions(GradingError):
    """Raster width or height is zero (or negative)."""


class BufferSizeMismatch(GradingError):
    """Pixel buffer length disagrees with width * height * 4."""


class GridSizeMismatch(GradingError):
    """Two sides of one comparison were normalized to different grids."""


class InvalidPixelValues(GradingError):
    """Channel values are not integers within 0..255."""


class DecisionStatus(Enum):
    """Pass/fail outcome of a graded attempt."""

    PASS = "PASS"
    FAIL = "FAIL"


class MatchStatus(Enum):
    """How an IoU value was reached."""

    OVERLAP = "Overlap"  # intersection > 0
    NO_OVERLAP = "No Overlap"  # union > 0, intersection == 0
    EMPTY_UNION = "Empty Union"  # both silhouettes blank, nothing drawn


@dataclass(frozen=True)
class RasterImage:
    """
    Immutable RGBA raster, row-major, 8 bits per channel.

    Attributes:
        width: Width in pixels.
        height: Height in pixels.
        data: Flat uint8 buffer of length width * height * 4, ordered
            R, G, B, A for each pixel.

    Example:
        >>> img = RasterImage(width=1, height=1, data=bytes([255, 255, 255, 255]))
        >>> img.as_array().shape
        (1, 1, 4)
    """

    width: int
    height: int
    data: PixelBuffer = field(repr=False)

    def __post_init__(self):
        if isinstance(self.data, (bytes, bytearray, memoryview)):
            buffer = np.frombuffer(bytes(self.data), dtype=np.uint8)
        else:
            values = np.asarray(self.data)
            if values.size and (
                values.dtype.kind not in "ui"
                or values.min() < 0
                or values.max() > 255
            ):
                raise InvalidPixelValues(
                    "Pixel channels must be integers within 0..255, got "
                    f"{values.dtype} data in [{values.min()}, {values.max()}]"
                )
            buffer = values.astype(np.uint8).reshape(-1)
        buffer.flags.writeable = False
        object.__setattr__(self, "data", buffer)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RasterImage":
        """
        Build a raster from an (H, W, 4) RGBA array of 0..255 integers.

        Raises:
            ValueError: If the array is not three dimensional with 4 channels.
            InvalidPixelValues: If a channel is not an integer within 0..255.
        """
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] != RGBA_CHANNELS:
            raise ValueError(f"Expected (H, W, 4) RGBA array, got shape {array.shape}")
        height, width = array.shape[:2]
        return cls(width=int(width), height=int(height), data=array)

    @property
    def expected_buffer_size(self) -> int:
        return self.width * self.height * RGBA_CHANNELS

    def as_array(self) -> np.ndarray:
        """Return a read-only (H, W, 4) view of the pixel buffer."""
        return self.data.reshape(self.height, self.width, RGBA_CHANNELS)


@dataclass
class Bitmap:
    """
    Foreground/background silhouette.

    Attributes:
        width: Width in pixels.
        height: Height in pixels.
        mask: Boolean array of shape (height, width); True marks foreground.
    """

    width: int
    height: int
    mask: np.ndarray = field(repr=False)

    def __post_init__(self):
        self.mask = np.asarray(self.mask, dtype=bool)
        if self.mask.shape != (self.height, self.width):
            raise ValueError(
                f"Mask shape {self.mask.shape} does not match "
                f"{self.width}x{self.height} bitmap"
            )

    @classmethod
    def from_mask(cls, mask: np.ndarray) -> "Bitmap":
        mask = np.asarray(mask, dtype=bool)
        if mask.ndim != 2:
            raise ValueError(f"Expected 2D mask, got shape {mask.shape}")
        return cls(width=int(mask.shape[1]), height=int(mask.shape[0]), mask=mask)

    @classmethod
    def empty(cls) -> "Bitmap":
        """The 1x1 background bitmap standing in for a blank drawing."""
        return cls(width=1, height=1, mask=np.zeros((1, 1), dtype=bool))

    @property
    def foreground_count(self) -> int:
        return int(np.count_nonzero(self.mask))

    @property
    def is_empty(self) -> bool:
        return self.foreground_count == 0


@dataclass
class BinarizationConfig:
    """Thresholds deciding whether a pixel counts as drawn ink."""

    alpha_threshold: int = 10  # foreground requires alpha > this
    luminance_threshold: float = 20.0  # foreground requires (R+G+B)/3 > this


@dataclass
class NormalizationConfig:
    """Configuration for the fit-to-grid stage."""

    grid_size: int = 64


@dataclass
class DecisionConfig:
    """Configuration for the pass/fail decision."""

    pass_threshold_pct: float = 65.0


@dataclass
class GradingConfig:
    """Complete grading module configuration."""

    binarization: BinarizationConfig = field(default_factory=BinarizationConfig)
    normalization: NormalizationConfig = field(default_factory=NormalizationConfig)
    decision: DecisionConfig = field(default_factory=DecisionConfig)


@dataclass
class OverlapCounts:
    """Pixel counts behind an IoU value."""

    intersection: int
    union: int
    status: MatchStatus


@dataclass
class GradeResult:
    """
    Output from the grading pipeline.

    Attributes:
        score: IoU of the two normalized silhouettes in [0.0, 1.0].
        score_pct: score * 100.
        decision: PASS when score_pct reaches threshold_pct.
        threshold_pct: Pass threshold used for the decision.
        grid_size: Side length of the comparison grid.
        intersection: Foreground pixels shared by both silhouettes.
        union: Foreground pixels present in either silhouette.
        status: Which branch produced the score.
        drawing_bbox: Ink bounding box of the drawing (None if blank).
        reference_bbox: Ink bounding box of the reference (None if blank).
    """

    score: float
    score_pct: float
    decision: DecisionStatus
    threshold_pct: float
    grid_size: int
    intersection: int
    union: int
    status: MatchStatus
    drawing_bbox: Optional[BBox] = None
    reference_bbox: Optional[BBox] = None

    def is_pass(self) -> bool:
        """Check if the attempt passed."""
        return self.decision == DecisionStatus.PASS

    def get_summary(self) -> str:
        """Get human-readable one-line summary."""
        if self.status == MatchStatus.EMPTY_UNION:
            detail = "nothing drawn on either canvas"
        elif self.drawing_bbox is None:
            detail = "drawing is blank"
        elif self.status == MatchStatus.NO_OVERLAP:
            detail = "drawing does not overlap the reference"
        else:
            detail = f"{self.intersection}/{self.union} pixels overlap"

        return (
            f"{self.decision.value}: {self.score_pct:.1f}% "
            f"(threshold {self.threshold_pct:.0f}%, {detail})"
        )

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "score_pct": self.score_pct,
            "decision": self.decision.value,
            "threshold_pct": self.threshold_pct,
            "grid_size": self.grid_size,
            "intersection": self.intersection,
            "union": self.union,
            "status": self.status.value,
            "drawing_bbox": self.drawing_bbox.to_tuple() if self.drawing_bbox else None,
            "reference_bbox": (
                self.reference_bbox.to_tuple() if self.reference_bbox else None
            ),
        }
