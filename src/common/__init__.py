"""
Common types shared across all modules.

Provides standardized value types for the handwriting grading pipeline,
used by the grading, rendering and progress packages.
"""

from src.common.types import BBox, Point

__all__ = ["BBox", "Point"]
