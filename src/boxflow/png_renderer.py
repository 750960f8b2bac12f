"""
PNG drawing surface for diagram generation.

Implements the DrawingSurface protocol on top of a Pillow image so that
diagrams can be saved as high-resolution PNG files. All coordinates are
in diagram units and multiplied by the surface scale when drawn.
"""

import math
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from .config import DEFAULT_CONFIG, DiagramConfig
from .geometry import Area, Point
from .renderer import DiagramRenderer
from .text import PillowTextMeasurer


class PillowSurface:
    """
    DrawingSurface backed by a Pillow RGB image.

    Args:
        width: Surface width in diagram units.
        height: Surface height in diagram units.
        config: Diagram configuration (background color and font file).
        scale: Resolution multiplier for crisp output (default 2 for retina).
    """

    def __init__(
        self,
        width: float,
        height: float,
        config: DiagramConfig = DEFAULT_CONFIG,
        scale: float = 2,
    ):
        self.width = width
        self.height = height
        self.scale = scale
        self.measurer = PillowTextMeasurer(config.font_path, scale)
        size = (
            max(1, int(math.ceil(width * scale))),
            max(1, int(math.ceil(height * scale))),
        )
        self.image = Image.new("RGB", size, config.background_color)
        self.draw = ImageDraw.Draw(self.image)

    def _xy(self, point: Point) -> Tuple[float, float]:
        return (point.x * self.scale, point.y * self.scale)

    def _weight(self, line_weight: float) -> int:
        return max(1, int(round(line_weight * self.scale)))

    def measure_text(self, text: str, font: str) -> float:
        return self.measurer.measure_text(text, font)

    def fill_rect(self, area: Area, color: str) -> None:
        self.draw.rectangle(
            [self._xy(area.point()), self._xy(Point(area.right, area.bottom))],
            fill=color,
        )

    def stroke_rect(self, area: Area, color: str, line_weight: float) -> None:
        self.draw.rectangle(
            [self._xy(area.point()), self._xy(Point(area.right, area.bottom))],
            outline=color,
            width=self._weight(line_weight),
        )

    def fill_text(self, text: str, point: Point, color: str, font: str) -> None:
        loaded = self.measurer.get_font(font)
        if isinstance(loaded, ImageFont.FreeTypeFont):
            self.draw.text(self._xy(point), text, font=loaded, fill=color, anchor="ls")
            return
        # Bitmap fonts have no baseline anchor; place the top one line up
        bbox = loaded.getbbox(text)
        x, y = self._xy(point)
        self.draw.text((x, y - (bbox[3] - bbox[1])), text, font=loaded, fill=color)

    def stroke_polyline(
        self,
        points: Sequence[Point],
        color: str,
        line_weight: float,
        dash: Optional[Sequence[float]] = None,
        closed: bool = False,
    ) -> None:
        points = list(points)
        if closed and points:
            points.append(points[0])
        if len(points) < 2:
            return
        width = self._weight(line_weight)
        if not dash:
            self.draw.line([self._xy(p) for p in points], fill=color, width=width)
            return
        for start, end in zip(points, points[1:]):
            for dash_start, dash_end in dash_segments(start, end, dash):
                self.draw.line(
                    [self._xy(dash_start), self._xy(dash_end)], fill=color, width=width
                )

    def fill_polygon(self, points: Sequence[Point], color: str) -> None:
        if len(points) < 3:
            return
        self.draw.polygon([self._xy(p) for p in points], fill=color)

    def save(self, filename: str) -> None:
        """Save the surface as a PNG file."""
        self.image.save(Path(filename), "PNG")


def dash_segments(
    start: Point, end: Point, dash: Sequence[float]
) -> List[Tuple[Point, Point]]:
    """
    Split a segment into dashes.

    Args:
        start: Segment start.
        end: Segment end.
        dash: [dash length, gap length].

    Returns:
        (start, end) pairs of the drawn dashes.
    """
    dash_length, gap_length = dash[0], dash[1]
    length = math.hypot(end.x - start.x, end.y - start.y)
    if length == 0 or dash_length <= 0:
        return [(start, end)]
    ux = (end.x - start.x) / length
    uy = (end.y - start.y) / length
    segments = []
    position = 0.0
    while position < length:
        stop = min(position + dash_length, length)
        segments.append(
            (
                Point(start.x + ux * position, start.y + uy * position),
                Point(start.x + ux * stop, start.y + uy * stop),
            )
        )
        position = stop + gap_length
    return segments


def render_to_png(
    layout,
    routes,
    filename: str,
    config: DiagramConfig = DEFAULT_CONFIG,
    scale: float = 2,
) -> str:
    """
    Render a laid-out diagram to a PNG file.

    Args:
        layout: LayoutResult from the layout engine.
        routes: Connectors from the router.
        filename: Output filename (should end in .png).
        config: Diagram configuration.
        scale: Resolution multiplier.

    Returns:
        Path to the saved PNG file.
    """
    surface = PillowSurface(layout.width, layout.height, config, scale)
    DiagramRenderer(config).render(layout, routes, surface)
    surface.save(filename)
    return filename
