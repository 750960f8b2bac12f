"""
Geometry kernel for diagram layout and routing.

Pure math with no knowledge of diagrams:
- Point: a fixed 2D coordinate
- Range: a closed numeric interval
- Area: a rectangle with independent padding on each side
- Line: a segment between two points, with segment intersection
- PotentialPoint: a waypoint whose x and y are ranges instead of values

All types are immutable; operations return new values.
"""

import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple


def ordered(a: float, b: float, c: float) -> bool:
    """Return True if a <= b <= c (equality allowed)."""
    return a <= b <= c


@dataclass(frozen=True)
class Point:
    """A fixed point."""

    x: float
    y: float

    def plus(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @classmethod
    def uniform(cls, value: float) -> "Point":
        """Point with the same value on both axes."""
        return cls(value, value)


@dataclass(frozen=True)
class Range:
    """A closed interval [min, max]."""

    min: float
    max: float

    @classmethod
    def single(cls, value: float) -> "Range":
        return cls(value, value)

    @property
    def is_single(self) -> bool:
        return self.min == self.max

    def middle(self) -> float:
        return (self.min + self.max) / 2

    def includes(self, value: float) -> bool:
        return self.min <= value <= self.max

    def intersect(self, other: "Range") -> Optional["Range"]:
        """Return the overlap of two ranges, or None if they are disjoint."""
        new_min = max(self.min, other.min)
        new_max = min(self.max, other.max)
        if new_min > new_max:
            return None
        return Range(new_min, new_max)


@dataclass(frozen=True)
class Line:
    """A line segment from start to end."""

    start: Point
    end: Point

    def slope(self) -> float:
        return (self.end.y - self.start.y) / (self.end.x - self.start.x)

    def y_intercept(self) -> float:
        # y = mx + b
        return self.start.y - self.slope() * self.start.x

    def solve_x(self, y: float) -> float:
        return (y - self.y_intercept()) / self.slope()

    def solve_y(self, x: float) -> float:
        return self.slope() * x + self.y_intercept()

    def is_vertical(self) -> bool:
        return self.start.x == self.end.x

    def is_horizontal(self) -> bool:
        return self.start.y == self.end.y

    def min_x(self) -> float:
        return min(self.start.x, self.end.x)

    def max_x(self) -> float:
        return max(self.start.x, self.end.x)

    def min_y(self) -> float:
        return min(self.start.y, self.end.y)

    def max_y(self) -> float:
        return max(self.start.y, self.end.y)

    def angle(self) -> float:
        """Direction of travel from start to end, in radians."""
        return math.atan2(self.end.y - self.start.y, self.end.x - self.start.x)

    def length(self) -> float:
        return math.hypot(self.end.x - self.start.x, self.end.y - self.start.y)

    def contains_x(self, x: float) -> bool:
        return ordered(self.min_x(), x, self.max_x())

    def contains_y(self, y: float) -> bool:
        return ordered(self.min_y(), y, self.max_y())

    def intersection(self, other: "Line") -> Optional[Point]:
        """
        Return the point where two segments cross, or None.

        Parallel segments (including two vertical or two horizontal ones)
        never intersect, even when they overlap.
        """
        if self.is_vertical():
            if other.is_vertical():
                return None
            if other.is_horizontal():
                return _intersect_vertical_horizontal(self, other)
            return _intersect_vertical_angled(self, other)
        if self.is_horizontal():
            if other.is_vertical():
                return _intersect_vertical_horizontal(other, self)
            if other.is_horizontal():
                return None
            return _intersect_horizontal_angled(self, other)
        if other.is_vertical():
            return _intersect_vertical_angled(other, self)
        if other.is_horizontal():
            return _intersect_horizontal_angled(other, self)
        return _intersect_angled_angled(self, other)


def _intersect_vertical_horizontal(vertical: Line, horizontal: Line) -> Optional[Point]:
    point = Point(vertical.start.x, horizontal.start.y)
    if not horizontal.contains_x(point.x) or not vertical.contains_y(point.y):
        return None
    return point


def _intersect_vertical_angled(vertical: Line, angled: Line) -> Optional[Point]:
    x = vertical.min_x()
    point = Point(x, angled.solve_y(x))
    if not vertical.contains_y(point.y):
        return None
    if not angled.contains_x(point.x) or not angled.contains_y(point.y):
        return None
    return point


def _intersect_horizontal_angled(horizontal: Line, angled: Line) -> Optional[Point]:
    y = horizontal.min_y()
    point = Point(angled.solve_x(y), y)
    if not horizontal.contains_x(point.x):
        return None
    if not angled.contains_x(point.x) or not angled.contains_y(point.y):
        return None
    return point


def _intersect_angled_angled(line_a: Line, line_b: Line) -> Optional[Point]:
    slope_a = line_a.slope()
    slope_b = line_b.slope()
    if slope_a == slope_b:
        return None
    x = (line_b.y_intercept() - line_a.y_intercept()) / (slope_a - slope_b)
    point = Point(x, line_a.solve_y(x))
    for line in (line_a, line_b):
        if not line.contains_x(point.x) or not line.contains_y(point.y):
            return None
    return point


@dataclass(frozen=True)
class Area:
    """
    A rectangle with independent padding per side.

    Padding describes where content sits inside the rectangle; it does not
    change the rectangle's own bounds.
    """

    x: float
    y: float
    width: float
    height: float
    padding_left: float = 0
    padding_right: float = 0
    padding_top: float = 0
    padding_bottom: float = 0

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def point(self) -> Point:
        return Point(self.x, self.y)

    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def content_origin(self) -> Point:
        """Top-left corner of the padded content region."""
        return Point(self.x + self.padding_left, self.y + self.padding_top)

    def translated(self, dx: float, dy: float) -> "Area":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def offset_by(self, origin: Point) -> "Area":
        """Convert an area relative to origin into origin's coordinate space."""
        return self.translated(origin.x, origin.y)

    def with_padding(self, padding: float) -> "Area":
        return replace(
            self,
            padding_left=padding,
            padding_right=padding,
            padding_top=padding,
            padding_bottom=padding,
        )

    def has_vertical_overlap(self, other: "Area") -> bool:
        """True if the two areas share some span of y values."""
        return max(self.top, other.top) < min(self.bottom, other.bottom)

    def has_horizontal_overlap(self, other: "Area") -> bool:
        """True if the two areas share some span of x values."""
        return max(self.left, other.left) < min(self.right, other.right)

    def is_vertically_congruent(self, other: "Area") -> bool:
        """Neither area extends left or right past the other."""
        return (self.left >= other.left and self.right <= other.right) or (
            other.left >= self.left and other.right <= self.right
        )

    def is_horizontally_congruent(self, other: "Area") -> bool:
        """Neither area extends up or down past the other."""
        return (self.top >= other.top and self.bottom <= other.bottom) or (
            other.top >= self.top and other.bottom <= self.bottom
        )

    def is_above(self, other: "Area") -> bool:
        return self.has_horizontal_overlap(other) and self.bottom < other.top

    def is_below(self, other: "Area") -> bool:
        return self.has_horizontal_overlap(other) and self.top > other.bottom

    def is_left_of(self, other: "Area") -> bool:
        return self.has_vertical_overlap(other) and self.right < other.left

    def is_right_of(self, other: "Area") -> bool:
        return self.has_vertical_overlap(other) and self.left > other.right

    def corners(self) -> List[Point]:
        """Corners in order: top-left, top-right, bottom-right, bottom-left."""
        return [
            Point(self.left, self.top),
            Point(self.right, self.top),
            Point(self.right, self.bottom),
            Point(self.left, self.bottom),
        ]

    def edges(self) -> List[Line]:
        """Boundary segments in order: top, right, bottom, left."""
        corners = self.corners()
        return [Line(corners[i], corners[(i + 1) % 4]) for i in range(4)]

    def intersection(self, line: Line) -> Optional[Point]:
        """
        Return where line crosses this area's boundary.

        Edges are tried in order (top, right, bottom, left) and the first
        hit wins. Returns None if the line never reaches the boundary.
        """
        for edge in self.edges():
            point = edge.intersection(line)
            if point is not None:
                return point
        return None


def bounding_size(areas: Iterable[Area]) -> Tuple[float, float]:
    """
    Width and height of the box from the origin to the far corner of areas.

    Returns (0, 0) for no areas.
    """
    width = 0.0
    height = 0.0
    for area in areas:
        width = max(width, area.right)
        height = max(height, area.bottom)
    return width, height


@dataclass(frozen=True)
class PotentialPoint:
    """
    A waypoint constrained to a range on each axis.

    The exact position is decided only when the path is resolved, so
    routing can be planned before the final coordinate is chosen.
    """

    range_x: Range
    range_y: Range

    def middle_point(self) -> Point:
        return Point(self.range_x.middle(), self.range_y.middle())

    def stable_x(self) -> bool:
        return self.range_x.is_single

    def stable_y(self) -> bool:
        return self.range_y.is_single

    def to_point_horizontal(self, anchor: Optional[Point] = None) -> Point:
        """
        Fix this point so that anchor -> result is a horizontal segment.

        Falls back to the middle point when anchor's y is outside range_y.
        """
        if anchor is None or not self.range_y.includes(anchor.y):
            return self.middle_point()
        return Point(self.range_x.middle(), anchor.y)

    def to_point_vertical(self, anchor: Optional[Point] = None) -> Point:
        """
        Fix this point so that anchor -> result is a vertical segment.

        Falls back to the middle point when anchor's x is outside range_x.
        """
        if anchor is None or not self.range_x.includes(anchor.x):
            return self.middle_point()
        return Point(anchor.x, self.range_y.middle())
