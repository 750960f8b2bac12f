"""
Render dispatcher for laid-out diagrams.

Turns a LayoutResult and its routed connectors into calls on a
DrawingSurface. The renderer never touches pixels itself; any object
implementing the DrawingSurface protocol can be drawn on (a Pillow image,
a recording surface for tests, a traced wrapper for debugging).

Draw order:
1. Background
2. Nodes, outer before inner: outline, header band, label, define area
3. Connectors, each with an arrowhead on its final segment
"""

from typing import List, Optional, Protocol, Sequence

from .arrowheads import ArrowFill, arrowhead_shape
from .config import DEFAULT_CONFIG, DiagramConfig
from .geometry import Area, Point
from .layout import LayoutResult, Node
from .router import LineStyle, Route
from .text import DefineLayout, LabelLayout

# Extra outline weight per level of nesting below a node
DEPTH_LINE_WEIGHT = 0.33
# Horizontal rules sit this fraction of the line spacing below a text line
RULE_OFFSET = 0.9


class DrawingSurface(Protocol):
    """
    Drawing operations the renderer needs from a host.

    Text points are at the left end of the text baseline.
    """

    def measure_text(self, text: str, font: str) -> float:
        ...

    def fill_rect(self, area: Area, color: str) -> None:
        ...

    def stroke_rect(self, area: Area, color: str, line_weight: float) -> None:
        ...

    def fill_text(self, text: str, point: Point, color: str, font: str) -> None:
        ...

    def stroke_polyline(
        self,
        points: Sequence[Point],
        color: str,
        line_weight: float,
        dash: Optional[Sequence[float]] = None,
        closed: bool = False,
    ) -> None:
        ...

    def fill_polygon(self, points: Sequence[Point], color: str) -> None:
        ...


class DiagramRenderer:
    """
    Draws nodes and connectors onto a DrawingSurface.

    Args:
        config: Diagram configuration (colors, weights, fonts).
    """

    def __init__(self, config: DiagramConfig = DEFAULT_CONFIG):
        self.config = config

    def render(
        self, layout: LayoutResult, routes: List[Route], surface: DrawingSurface
    ) -> None:
        """
        Draw a complete diagram.

        Args:
            layout: Node geometry from the layout engine.
            routes: Connectors from the router.
            surface: Target surface, at least layout.width x layout.height.
        """
        self._set_source(surface, "DiagramRenderer.background")
        surface.fill_rect(
            Area(0, 0, layout.width, layout.height), self.config.background_color
        )
        self.draw_nodes(layout.nodes, layout.max_depth(), surface)
        for route in routes:
            self.draw_route(route, surface)

    def draw_nodes(
        self, nodes: Sequence[Node], max_depth: int, surface: DrawingSurface
    ) -> None:
        for node in nodes:
            self.draw_node(node, max_depth, surface)

    def draw_node(self, node: Node, max_depth: int, surface: DrawingSurface) -> None:
        """Draw one node and, recursively, its nested nodes."""
        config = self.config
        padding = Point.uniform(config.scope_padding)
        double_padding = config.scope_padding * 2
        line_weight = config.line_weight + (max_depth - 1) * DEPTH_LINE_WEIGHT
        origin = node.absolute_area.point()

        self._set_source(surface, "DiagramRenderer.draw_node")
        surface.stroke_rect(node.absolute_area, config.line_color, line_weight)

        label_area = node.label_area.offset_by(origin)
        if node.label_layout.is_header():
            surface.fill_rect(label_area, config.shade_color)
            surface.stroke_rect(label_area, config.line_color, line_weight)

        self._set_source(surface, "DiagramRenderer.draw_label")
        self.draw_label(
            node.label_layout,
            label_area.point().plus(padding),
            node.label_area.width - double_padding,
            node.label_area.height - double_padding,
            surface,
        )

        if node.define_layout is not None and node.define_area is not None:
            define_area = node.define_area.offset_by(origin)
            self._set_source(surface, "DiagramRenderer.draw_define")
            surface.stroke_rect(define_area, config.line_color, line_weight)
            self.draw_define(
                node.define_layout,
                define_area.point().plus(padding),
                (define_area.width - node.define_layout.width) / 2,
                surface,
            )

        self.draw_nodes(node.nodes, max_depth - 1, surface)

    def draw_label(
        self,
        label: LabelLayout,
        point: Point,
        width: float,
        height: float,
        surface: DrawingSurface,
    ) -> None:
        """Draw label lines centered in a width x height box at point."""
        font = self.config.font()
        line_height = self.config.estimate_font_height()
        y = point.y + line_height + (height - label.height) / 2
        for line in label.lines:
            line_width = surface.measure_text(line, font)
            surface.fill_text(
                line,
                Point(point.x + (width - line_width) / 2, y),
                self.config.line_color,
                font,
            )
            y += line_height

    def draw_define(
        self,
        define: DefineLayout,
        point: Point,
        line_width_padding: float,
        surface: DrawingSurface,
    ) -> None:
        """
        Draw define text lines starting at point.

        A horizontal rule after line i is drawn when i + 1 is a rule
        position; it spans the text width plus line_width_padding on each
        side, reaching the define area's border.
        """
        config = self.config
        font = config.font()
        line_height = config.estimate_font_height()
        line_spacing = config.line_spacing()
        rule_weight = config.line_weight / 2
        y = point.y + line_height
        for index, line in enumerate(define.lines):
            surface.fill_text(line, Point(point.x, y), config.line_color, font)
            if index + 1 in define.horizontal_rules:
                rule_y = y + line_spacing * RULE_OFFSET
                surface.stroke_polyline(
                    [
                        Point(point.x - line_width_padding, rule_y),
                        Point(point.x + define.width + line_width_padding, rule_y),
                    ],
                    config.line_color,
                    rule_weight,
                )
            y += line_height + line_spacing

    def draw_route(self, route: Route, surface: DrawingSurface) -> None:
        """Draw a connector's segments and the arrowhead on its last segment."""
        lines = route.lines()
        if not lines:
            return
        config = self.config
        dash = config.dash_pattern() if route.line_style == LineStyle.DASHED else None
        self._set_source(surface, "DiagramRenderer.draw_route")
        for line in lines:
            surface.stroke_polyline(
                [line.start, line.end], config.line_color, config.line_weight, dash
            )
        last = lines[-1]
        self.draw_arrowhead(route, last.start, last.end, surface)

    def draw_arrowhead(
        self, route: Route, start: Point, end: Point, surface: DrawingSurface
    ) -> None:
        shape = arrowhead_shape(
            route.arrow_head, start, end, self.config.arrow_head_area
        )
        if shape is None:
            return
        config = self.config
        self._set_source(surface, "DiagramRenderer.draw_arrowhead")
        if shape.fill == ArrowFill.LINE:
            surface.fill_polygon(shape.points, config.line_color)
        elif shape.fill == ArrowFill.BACKGROUND:
            surface.fill_polygon(shape.points, config.background_color)
        if shape.outlined:
            surface.stroke_polyline(
                shape.points,
                config.line_color,
                config.line_weight,
                closed=shape.closed,
            )

    @staticmethod
    def _set_source(surface: DrawingSurface, source: str) -> None:
        # Only traced surfaces record where a draw call came from
        set_source = getattr(surface, "set_source", None)
        if set_source is not None:
            set_source(source)
