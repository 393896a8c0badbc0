"""
Drawing-surface collaborators for the grader.

Produces the two rasters the grading pipeline compares:
- the learner's drawing, replayed from pen/eraser stroke history
- the reference glyph, rendered from a font
"""

from src.rendering.drawing_surface import (
    DrawingSurface,
    StrokePath,
    load_paths,
    parse_hex_color,
    render_paths,
    save_paths,
)
from src.rendering.glyph_renderer import render_reference_glyph

__all__ = [
    "DrawingSurface",
    "StrokePath",
    "render_paths",
    "load_paths",
    "save_paths",
    "parse_hex_color",
    "render_reference_glyph",
]
