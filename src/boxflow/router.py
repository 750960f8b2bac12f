"""
Path routing module for diagram relations.

Handles connector geometry between placed nodes:
- Orthogonal paths between nodes that are directly above, below, left or
  right of each other, with waypoints kept as ranges until drawing
- Direct lines clipped to box boundaries for diagonal placements
- Line style and arrowhead kind from the relation's arrow token
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Tuple, Union

from .arrowheads import ArrowHead
from .geometry import Area, Line, Point, PotentialPoint, Range
from .layout import LayoutResult, Node, join_path
from .models import RelateRecord, Source
from .parser import Parser

logger = logging.getLogger(__name__)


class LineStyle(Enum):
    """Stroke style of a connector."""

    SOLID = "solid"
    DASHED = "dashed"

    @classmethod
    def from_token(cls, token: str) -> "LineStyle":
        """Read the line style from the first two characters of an arrow token."""
        head = token[:2]
        if head in ("=", "=>", "--"):
            return cls.DASHED
        return cls.SOLID


@dataclass(frozen=True)
class OrthogonalPath:
    """
    A connector made of horizontal and vertical segments.

    Waypoints are PotentialPoints; consecutive points alternate which axis
    they share, starting with y (a horizontal segment) when
    starts_horizontal is True.
    """

    points: Tuple[PotentialPoint, ...]
    line_style: LineStyle
    arrow_head: ArrowHead
    starts_horizontal: bool = True
    start_label: Optional[str] = None
    end_label: Optional[str] = None

    def clean(self) -> Tuple[Tuple[PotentialPoint, ...], bool]:
        """
        Make neighbouring points agree on their shared axis.

        Two points joined by a horizontal segment are narrowed to their
        common y range; a vertical segment narrows x. When the ranges do
        not overlap, both points keep their ranges and the path is
        reported as degenerate.

        Returns:
            (cleaned points, degenerate)
        """
        points = list(self.points)
        degenerate = False
        horizontal = self.starts_horizontal
        for i in range(1, len(points)):
            previous, current = points[i - 1], points[i]
            if horizontal:
                shared = previous.range_y.intersect(current.range_y)
                if shared is not None:
                    points[i - 1] = replace(previous, range_y=shared)
                    points[i] = replace(current, range_y=shared)
            else:
                shared = previous.range_x.intersect(current.range_x)
                if shared is not None:
                    points[i - 1] = replace(previous, range_x=shared)
                    points[i] = replace(current, range_x=shared)
            if shared is None:
                degenerate = True
                logger.warning(
                    "Path %s -> %s: waypoint ranges do not overlap at point %d",
                    self.start_label,
                    self.end_label,
                    i,
                )
            horizontal = not horizontal
        return tuple(points), degenerate

    def is_degenerate(self) -> bool:
        return self.clean()[1]

    def stable_points(self) -> List[Point]:
        """
        Resolve waypoints into fixed points.

        The first point takes the middle of both ranges. Each later point
        takes the middle of its free axis and reuses the previous point's
        value on the shared axis when its own range allows it, which keeps
        the segment straight.
        """
        points, _degenerate = self.clean()
        result: List[Point] = []
        previous: Optional[Point] = None
        horizontal = self.starts_horizontal
        for point in points:
            if previous is None:
                stable = point.middle_point()
            else:
                if horizontal:
                    stable = point.to_point_horizontal(previous)
                else:
                    stable = point.to_point_vertical(previous)
                horizontal = not horizontal
            result.append(stable)
            previous = stable
        return result

    def lines(self) -> List[Line]:
        stable = self.stable_points()
        return [Line(stable[i - 1], stable[i]) for i in range(1, len(stable))]


@dataclass(frozen=True)
class DirectLine:
    """
    A straight connector between two box boundaries.

    degenerate is True when a boundary crossing could not be found and a
    box center was used instead.
    """

    line: Line
    line_style: LineStyle
    arrow_head: ArrowHead
    degenerate: bool = False
    start_label: Optional[str] = None
    end_label: Optional[str] = None

    def lines(self) -> List[Line]:
        return [self.line]


Route = Union[OrthogonalPath, DirectLine]


@dataclass
class RoutingResult:
    """
    Result of routing every relation in a Source tree.

    Attributes:
        routes: Connectors in relation order.
        dropped: Relations whose start or end could not be found.
    """

    routes: List[Route] = field(default_factory=list)
    dropped: List[RelateRecord] = field(default_factory=list)


class PathRouter:
    """
    Routes connectors between placed nodes.
    """

    def __init__(self):
        self.terms = Parser()

    def route(self, start: Node, end: Node, arrow_token: str) -> Route:
        """
        Route one connector from start to end.

        Nodes directly above/below or left/right of each other get a
        two-point orthogonal path; anything else gets a direct line.
        """
        start_area = start.absolute_area
        end_area = end.absolute_area
        line_style = LineStyle.from_token(arrow_token)
        arrow_head = ArrowHead.from_token(arrow_token)
        labels = {"start_label": start.path_label(), "end_label": end.path_label()}

        if start_area.is_above(end_area) or start_area.is_below(end_area):
            range_x = Range(
                max(start_area.left, end_area.left),
                min(start_area.right, end_area.right),
            )
            if start_area.is_above(end_area):
                start_y, end_y = start_area.bottom, end_area.top
            else:
                start_y, end_y = start_area.top, end_area.bottom
            points = (
                PotentialPoint(range_x, Range.single(start_y)),
                PotentialPoint(range_x, Range.single(end_y)),
            )
            return OrthogonalPath(
                points, line_style, arrow_head, starts_horizontal=False, **labels
            )

        if start_area.is_left_of(end_area) or start_area.is_right_of(end_area):
            range_y = self._side_range(start, end)
            if start_area.is_left_of(end_area):
                start_x, end_x = start_area.right, end_area.left
            else:
                start_x, end_x = start_area.left, end_area.right
            points = (
                PotentialPoint(Range.single(start_x), range_y),
                PotentialPoint(Range.single(end_x), range_y),
            )
            return OrthogonalPath(
                points, line_style, arrow_head, starts_horizontal=True, **labels
            )

        return self._direct_line(start_area, end_area, line_style, arrow_head, labels)

    def _side_range(self, start: Node, end: Node) -> Range:
        """
        Shared y range for a side-by-side connector.

        Header-style nodes only offer their label band, so the connector
        meets the label rather than the content. If the bands do not
        overlap the full shared height is used.
        """
        start_area = start.absolute_area
        end_area = end.absolute_area
        min_y = max(start_area.top, end_area.top)
        max_y = min(_anchor_bottom(start), _anchor_bottom(end))
        if max_y <= min_y:
            max_y = min(start_area.bottom, end_area.bottom)
        return Range(min_y, max_y)

    def _direct_line(
        self,
        start_area: Area,
        end_area: Area,
        line_style: LineStyle,
        arrow_head: ArrowHead,
        labels: dict,
    ) -> DirectLine:
        center_line = Line(start_area.center(), end_area.center())
        start_point = start_area.intersection(center_line)
        end_point = end_area.intersection(center_line)
        degenerate = start_point is None or end_point is None
        if degenerate:
            # Better to show some line than none
            logger.warning(
                "No boundary crossing for %s -> %s; using box centers",
                labels["start_label"],
                labels["end_label"],
            )
        if start_point is None:
            start_point = start_area.center()
        if end_point is None:
            end_point = end_area.center()
        return DirectLine(
            Line(start_point, end_point),
            line_style,
            arrow_head,
            degenerate=degenerate,
            **labels,
        )

    def find_node(
        self, term: str, scope_path: str, layout: LayoutResult
    ) -> Optional[Node]:
        """
        Resolve a relation term to a node.

        "{alias}" uses the alias index; "{alias}.rest" resolves rest below
        the aliased node; anything else is tried relative to scope_path,
        then as a full dotted path.
        """
        if self.terms.is_alias(term):
            return layout.node_for_alias(term)
        if self.terms.starts_with_alias(term):
            alias, remaining = self.terms.split_alias_path(term)
            aliased = layout.node_for_alias(alias)
            if aliased is None:
                return None
            return layout.node_at_path(
                join_path(aliased.path_label(), self.terms.open_scope(remaining))
            )
        if scope_path:
            node = layout.node_at_path(join_path(scope_path, term))
            if node is not None:
                return node
        return layout.node_at_path(term)

    def route_relations(self, source: Source, layout: LayoutResult) -> RoutingResult:
        """
        Route every relation in the Source tree.

        Relations whose ends cannot be found are dropped.
        """
        result = RoutingResult()
        self._route_source(source, layout, "", result)
        return result

    def _route_source(
        self, source: Source, layout: LayoutResult, path: str, result: RoutingResult
    ) -> None:
        path = join_path(path, source.label)
        if source.relate is not None:
            for record in source.relate.records:
                start = self.find_node(record.start_label, path, layout)
                end = self.find_node(record.end_label, path, layout)
                if start is None or end is None:
                    logger.debug(
                        "Dropping relation %s %s %s: node not found",
                        record.start_label,
                        record.arrow_token,
                        record.end_label,
                    )
                    result.dropped.append(record)
                    continue
                result.routes.append(self.route(start, end, record.arrow_token))
        for nested in source.nested_sources:
            self._route_source(nested, layout, path, result)


def _anchor_bottom(node: Node) -> float:
    if node.label_layout.is_header():
        return node.absolute_label_area().bottom
    return node.absolute_area.bottom


def route_relations(source: Source, layout: LayoutResult) -> RoutingResult:
    """
    Convenience function to route all relations of a parsed diagram.

    Args:
        source: Root Source from the parser.
        layout: Layout of the same Source.

    Returns:
        RoutingResult with routes and dropped relations.
    """
    return PathRouter().route_relations(source, layout)
