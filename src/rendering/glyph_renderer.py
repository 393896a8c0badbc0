"""
Reference glyph rendering.

Draws the model character that the learner traces over, on a transparent
canvas and in the same raster format as the drawing surface snapshot.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from src.grading.types import RasterImage
from src.rendering.drawing_surface import DEFAULT_STROKE_COLOR, parse_hex_color

logger = logging.getLogger(__name__)

DEFAULT_CANVAS_SIZE = 300
GLYPH_FILL_RATIO = 0.8


def render_reference_glyph(
    char: str,
    canvas_size: int = DEFAULT_CANVAS_SIZE,
    font_path: Optional[Union[str, Path]] = None,
    fill: str = DEFAULT_STROKE_COLOR,
) -> RasterImage:
    """
    Render a single character centred on a transparent square canvas.

    Args:
        char: Character to render.
        canvas_size: Side length of the canvas in pixels.
        font_path: TrueType/OpenType font containing the character. When
            None, Pillow's bundled default font is used (Latin only).
        fill: Glyph color as hex string.

    Returns:
        RGBA raster of canvas_size x canvas_size.

    Raises:
        ValueError: If char is not a single character or canvas_size < 1.
        OSError: If the font file cannot be loaded.
    """
    if len(char) != 1:
        raise ValueError(f"Expected a single character, got {char!r}")
    if canvas_size < 1:
        raise ValueError(f"canvas_size must be at least 1, got {canvas_size}")

    font_size = max(1, int(canvas_size * GLYPH_FILL_RATIO))
    if font_path is not None:
        font = ImageFont.truetype(str(font_path), font_size)
    else:
        font = ImageFont.load_default(size=font_size)

    img = Image.new("RGBA", (canvas_size, canvas_size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)

    left, top, right, bottom = draw.textbbox((0, 0), char, font=font)
    x = (canvas_size - (right - left)) // 2 - left
    y = (canvas_size - (bottom - top)) // 2 - top
    draw.text((x, y), char, font=font, fill=parse_hex_color(fill))

    logger.debug(
        f"Rendered reference glyph {char!r} at font size {font_size} "
        f"on {canvas_size}x{canvas_size} canvas"
    )
    return RasterImage.from_array(np.array(img, dtype=np.uint8))
