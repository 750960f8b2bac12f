"""
Arrowhead kinds and shapes.

An arrowhead is computed from the direction of the connector's final
segment and the configured target area; no font metrics are involved.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .geometry import Line, Point


class ArrowHead(Enum):
    """Decoration at the end of a connector."""

    NONE = "none"
    PLAIN_ARROW = "plain_arrow"
    FILLED_ARROW = "filled_arrow"
    HOLLOW_ARROW = "hollow_arrow"
    HOLLOW_DIAMOND = "hollow_diamond"
    FILLED_DIAMOND = "filled_diamond"

    @classmethod
    def from_token(cls, token: str) -> "ArrowHead":
        """Read the arrowhead from the last two characters of an arrow token."""
        tail = token[-2:] if len(token) > 2 else token
        return _TAIL_TO_ARROW_HEAD.get(tail, cls.NONE)


_TAIL_TO_ARROW_HEAD = {
    "=>": ArrowHead.FILLED_ARROW,
    "->": ArrowHead.FILLED_ARROW,
    "-D": ArrowHead.HOLLOW_ARROW,
    ":>": ArrowHead.HOLLOW_ARROW,
    "-o": ArrowHead.HOLLOW_DIAMOND,
    "-+": ArrowHead.FILLED_DIAMOND,
}


class ArrowFill(Enum):
    """What an arrowhead shape is filled with."""

    NONE = "none"
    LINE = "line"  # line color
    BACKGROUND = "background"  # background color, masks the incoming line


@dataclass(frozen=True)
class ArrowheadShape:
    """
    Polygon of an arrowhead.

    Attributes:
        points: Polygon corners, starting at the connector's end point.
        closed: Whether the outline returns to the first point.
        fill: Fill applied before outlining.
        outlined: Whether the outline is stroked.
    """

    points: Tuple[Point, ...]
    closed: bool
    fill: ArrowFill
    outlined: bool


def _corner(origin: Point, length: float, angle: float) -> Point:
    return Point(origin.x - length * math.cos(angle), origin.y - length * math.sin(angle))


def equilateral_side(area: float) -> float:
    """Side length of an equilateral triangle with the given area."""
    return math.sqrt(area * 4 / math.sqrt(3))


def arrowhead_shape(
    kind: ArrowHead, start: Point, end: Point, head_area: float
) -> Optional[ArrowheadShape]:
    """
    Build the arrowhead for a segment ending at end.

    Args:
        kind: Arrowhead kind.
        start: Start of the final segment.
        end: End of the final segment (the arrowhead tip).
        head_area: Target area of the arrowhead.

    Returns:
        The shape, or None for ArrowHead.NONE.
    """
    if kind == ArrowHead.NONE:
        return None
    angle = Line(start, end).angle()

    if kind == ArrowHead.FILLED_ARROW:
        # Isosceles triangle, height is 1.5 x base
        height_to_base = 1.5
        base = math.sqrt((2 * head_area) / height_to_base)
        height = base * height_to_base
        side = math.hypot(base / 2, height)
        half_angle = math.asin((base / 2) / side)
        corner_a = _corner(end, side, angle - half_angle)
        corner_b = _corner(end, side, angle + half_angle)
        return ArrowheadShape((end, corner_a, corner_b), True, ArrowFill.LINE, False)

    if kind in (ArrowHead.PLAIN_ARROW, ArrowHead.HOLLOW_ARROW):
        side = equilateral_side(head_area)
        corner_a = _corner(end, side, angle - math.pi / 6)
        corner_b = _corner(end, side, angle + math.pi / 6)
        if kind == ArrowHead.PLAIN_ARROW:
            return ArrowheadShape((corner_a, end, corner_b), False, ArrowFill.NONE, True)
        return ArrowheadShape(
            (end, corner_a, corner_b), True, ArrowFill.BACKGROUND, True
        )

    # Diamonds: two equilateral triangles of half the area, base to base
    side = equilateral_side(head_area / 2)
    corner_a = _corner(end, side, angle - math.pi / 6)
    corner_b = _corner(end, side, angle + math.pi / 6)
    corner_c = _corner(corner_a, side, angle + math.pi / 6)
    fill = ArrowFill.BACKGROUND if kind == ArrowHead.HOLLOW_DIAMOND else ArrowFill.LINE
    return ArrowheadShape((end, corner_a, corner_c, corner_b), True, fill, True)
