"""
Common type definitions for the handwriting grading pipeline.

Pixel coordinates and inclusive bounding boxes, as pydantic models so that
float input from pointer devices and numpy scalars are rounded and checked
at construction.
"""

from typing import Tuple, Union

import numpy as np
from pydantic import BaseModel, Field, field_validator, model_validator


class Point(BaseModel):
    """
    Type-safe representation of a 2D pixel coordinate (x, y).

    Used by the drawing surface when stroke coordinates (which arrive as
    floats from the input device) are rasterized onto the canvas.

    Attributes:
        x: X-coordinate (column, 0 to canvas width).
        y: Y-coordinate (row, 0 to canvas height).

    Example:
        >>> point = Point(x=10.6, y=4.2)
        >>> point.to_tuple()
        (11, 4)
    """

    x: int = Field(..., description="X-coordinate (column)")
    y: int = Field(..., description="Y-coordinate (row)")

    @field_validator("x", "y", mode="before")
    @classmethod
    def _convert_to_int(cls, v: Union[int, float]) -> int:
        """Convert coordinate to int, rounding if float."""
        if isinstance(v, (int, float, np.integer, np.floating)):
            return int(round(float(v)))
        raise ValueError(f"Coordinate must be numeric, got {type(v)}")

    def to_tuple(self) -> Tuple[int, int]:
        """Convert Point to an (x, y) tuple."""
        return (self.x, self.y)


class BBox(BaseModel):
    """
    Inclusive pixel bounding box [x_min, y_min, x_max, y_max].

    Both corners belong to the box, so a single foreground pixel at (3, 7)
    is described by ``BBox(x_min=3, y_min=7, x_max=3, y_max=7)`` with a
    width and height of 1.

    Attributes:
        x_min: Leftmost foreground column.
        y_min: Topmost foreground row.
        x_max: Rightmost foreground column.
        y_max: Bottommost foreground row.

    Example:
        >>> bbox = BBox(x_min=5, y_min=5, x_max=14, y_max=14)
        >>> bbox.width, bbox.height
        (10, 10)
    """

    x_min: int = Field(..., description="Leftmost column (inclusive)")
    y_min: int = Field(..., description="Topmost row (inclusive)")
    x_max: int = Field(..., description="Rightmost column (inclusive)")
    y_max: int = Field(..., description="Bottommost row (inclusive)")

    @field_validator("x_min", "y_min", "x_max", "y_max", mode="before")
    @classmethod
    def _convert_to_int(cls, v: Union[int, float]) -> int:
        """Convert coordinate to int, rounding if float."""
        if isinstance(v, (int, float, np.integer, np.floating)):
            return int(round(float(v)))
        raise ValueError(f"Coordinate must be numeric, got {type(v)}")

    @model_validator(mode="after")
    def _validate_bbox(self) -> "BBox":
        """
        Validate bbox coordinates after initialization.

        Raises:
            ValueError: If the corners are inverted or negative.
        """
        if self.x_min > self.x_max:
            raise ValueError(
                f"Invalid bbox: x_min ({self.x_min}) must be <= x_max ({self.x_max})"
            )
        if self.y_min > self.y_max:
            raise ValueError(
                f"Invalid bbox: y_min ({self.y_min}) must be <= y_max ({self.y_max})"
            )
        if self.x_min < 0 or self.y_min < 0:
            raise ValueError(
                f"Invalid bbox: coordinates must be non-negative, "
                f"got x_min={self.x_min}, y_min={self.y_min}"
            )
        return self

    @classmethod
    def from_tuple(cls, coords: Tuple[int, int, int, int]) -> "BBox":
        """
        Create BBox from tuple (x_min, y_min, x_max, y_max).

        Raises:
            ValueError: If tuple does not contain exactly 4 elements.
        """
        if len(coords) != 4:
            raise ValueError(f"Expected tuple with 4 elements, got {len(coords)}")
        return cls(x_min=coords[0], y_min=coords[1], x_max=coords[2], y_max=coords[3])

    def to_tuple(self) -> Tuple[int, int, int, int]:
        """Convert BBox to tuple (x_min, y_min, x_max, y_max)."""
        return (self.x_min, self.y_min, self.x_max, self.y_max)

    @property
    def width(self) -> int:
        """Number of columns covered (x_max - x_min + 1)."""
        return self.x_max - self.x_min + 1

    @property
    def height(self) -> int:
        """Number of rows covered (y_max - y_min + 1)."""
        return self.y_max - self.y_min + 1

    def __repr__(self) -> str:
        return (
            f"BBox(x_min={self.x_min}, y_min={self.y_min}, "
            f"x_max={self.x_max}, y_max={self.y_max})"
        )
