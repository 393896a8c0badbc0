"""
Drawing surface for handwritten glyphs.

Keeps the pen/eraser stroke history of one canvas and replays it onto a
transparent RGBA raster, which is the snapshot handed to the grader.

Stroke model:
- A stroke is a polyline drawn with round caps and joins.
- Pen strokes paint ``stroke_color`` at full opacity.
- Eraser strokes clear pixels to fully transparent (destination-out), so
  erased ink is background for the binarizer.
- Strokes with a single point are discarded when the stroke ends.
"""

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

import cv2
import numpy as np

from src.common.types import Point
from src.grading.types import RasterImage
from src.utils.io import load_json, save_json

logger = logging.getLogger(__name__)

DEFAULT_LINE_WIDTH = 14
DEFAULT_STROKE_COLOR = "#e5e7eb"
TRANSPARENT = (0, 0, 0, 0)


def parse_hex_color(color: str) -> Tuple[int, int, int, int]:
    """
    Parse ``#rgb``, ``#rrggbb`` or ``#rrggbbaa`` into an RGBA tuple.

    Raises:
        ValueError: If the string is not a hex color.

    Example:
        >>> parse_hex_color("#e5e7eb")
        (229, 231, 235, 255)
    """
    value = color.strip().lstrip("#")
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    if len(value) == 6:
        value += "ff"
    if len(value) != 8:
        raise ValueError(f"Invalid hex color: {color!r}")
    try:
        r, g, b, a = (int(value[i : i + 2], 16) for i in range(0, 8, 2))
    except ValueError as e:
        raise ValueError(f"Invalid hex color: {color!r}") from e
    return r, g, b, a


@dataclass
class StrokePath:
    """
    One pen or eraser stroke.

    Attributes:
        points: Canvas coordinates (x, y) in drawing order.
        width: Line width in pixels.
        erase: True for an eraser stroke.
    """

    points: List[Tuple[float, float]] = field(default_factory=list)
    width: float = DEFAULT_LINE_WIDTH
    erase: bool = False

    def to_dict(self) -> dict:
        return {
            "points": [{"x": x, "y": y} for x, y in self.points],
            "width": self.width,
            "erase": self.erase,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "StrokePath":
        """
        Parse ``{"points": [{"x": .., "y": ..}, ...], "width": .., "erase": ..}``.

        Raises:
            ValueError: If points are missing or malformed.
        """
        try:
            return cls(
                points=[(float(p["x"]), float(p["y"])) for p in raw["points"]],
                width=float(raw.get("width", DEFAULT_LINE_WIDTH)),
                erase=bool(raw.get("erase", False)),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed stroke: {e}") from e


def _draw_path(canvas: np.ndarray, path: StrokePath, color: Tuple[int, ...]) -> None:
    thickness = max(1, int(round(path.width)))
    radius = thickness // 2
    pixels = [Point(x=x, y=y).to_tuple() for x, y in path.points]

    for start, end in zip(pixels, pixels[1:]):
        cv2.line(canvas, start, end, color, thickness=thickness, lineType=cv2.LINE_8)
    # Round joins and caps
    for pixel in pixels:
        cv2.circle(canvas, pixel, radius, color, thickness=-1, lineType=cv2.LINE_8)


def render_paths(
    paths: List[StrokePath],
    width: int,
    height: int,
    stroke_color: str = DEFAULT_STROKE_COLOR,
) -> RasterImage:
    """
    Replay strokes in order onto a transparent canvas.

    Args:
        paths: Strokes in drawing order.
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        stroke_color: Pen color as hex string.

    Returns:
        RGBA raster snapshot of the canvas.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Canvas must be at least 1x1, got {width}x{height}")

    pen_color = parse_hex_color(stroke_color)
    canvas = np.zeros((height, width, 4), dtype=np.uint8)

    for path in paths:
        _draw_path(canvas, path, TRANSPARENT if path.erase else pen_color)

    logger.debug(f"Rendered {len(paths)} strokes onto {width}x{height} canvas")
    return RasterImage.from_array(canvas)


def load_paths(path: Union[str, Path]) -> List[StrokePath]:
    """Load a stroke history saved by ``save_paths``."""
    raw = load_json(Path(path))
    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of strokes in {path}")
    return [StrokePath.from_dict(item) for item in raw]


def save_paths(paths: List[StrokePath], path: Union[str, Path]) -> None:
    """Save a stroke history as JSON."""
    save_json([p.to_dict() for p in paths], Path(path))


class DrawingSurface:
    """
    Stroke history of one canvas with pen, eraser and undo.

    Example:
        >>> surface = DrawingSurface(300, 300)
        >>> surface.begin_stroke(50, 50)
        >>> surface.continue_stroke(250, 250)
        >>> surface.end_stroke()
        >>> snapshot = surface.to_raster()
    """

    def __init__(
        self,
        width: int,
        height: int,
        line_width: float = DEFAULT_LINE_WIDTH,
        stroke_color: str = DEFAULT_STROKE_COLOR,
        erase_mode: bool = False,
    ):
        if width < 1 or height < 1:
            raise ValueError(f"Canvas must be at least 1x1, got {width}x{height}")
        parse_hex_color(stroke_color)

        self.width = width
        self.height = height
        self.stroke_color = stroke_color
        self.line_width = max(1, line_width)
        self.erase_mode = erase_mode
        self.paths: List[StrokePath] = []
        self.current_path: Optional[StrokePath] = None

    @property
    def is_drawing(self) -> bool:
        return self.current_path is not None

    def set_line_width(self, width: float) -> None:
        self.line_width = max(1, width or 1)

    def set_erase_mode(self, on: bool) -> None:
        self.erase_mode = bool(on)

    def toggle_erase_mode(self) -> bool:
        self.erase_mode = not self.erase_mode
        return self.erase_mode

    def begin_stroke(self, x: float, y: float) -> None:
        self.current_path = StrokePath(
            points=[(x, y)], width=self.line_width, erase=self.erase_mode
        )

    def continue_stroke(self, x: float, y: float) -> None:
        if self.current_path is None:
            return
        self.current_path.points.append((x, y))

    def end_stroke(self) -> None:
        if self.current_path is None:
            return
        if len(self.current_path.points) > 1:
            self.paths.append(self.current_path)
        else:
            logger.debug("Discarding single-point stroke")
        self.current_path = None

    def undo(self) -> None:
        """Remove the most recent completed stroke."""
        if self.paths:
            self.paths.pop()

    def clear(self) -> None:
        """Remove all strokes."""
        self.paths = []
        self.current_path = None

    def get_paths(self) -> List[StrokePath]:
        return copy.deepcopy(self.paths)

    def set_paths(self, paths: Optional[List[StrokePath]]) -> None:
        self.paths = copy.deepcopy(list(paths)) if paths else []

    def to_raster(self) -> RasterImage:
        """Flattened snapshot of every completed stroke."""
        return render_paths(self.paths, self.width, self.height, self.stroke_color)
