"""
Debug utilities for boxflow.

This module provides surfaces for understanding and testing diagram
rendering without a real image.

Key Components:
- RecordingSurface: headless DrawingSurface that stores every call
- TracedSurface: wraps any DrawingSurface and logs each call to a RenderTrace

Usage:
    # TracedSurface is used internally by DiagramGenerator when debug=True
    # You typically access traces via the generator:

    >>> generator = DiagramGenerator()
    >>> generator.render(text, RecordingSurface(), debug=True)
    >>> trace = generator.get_trace()
"""

from typing import List, Optional, Sequence

from .geometry import Area, Point
from .renderer import DrawingSurface
from .text import FixedWidthMeasurer, TextMeasurer
from .tracer import DrawCall, RenderTrace


class RecordingSurface:
    """
    DrawingSurface that draws nothing and records every call.

    Text is measured with a FixedWidthMeasurer unless another measurer is
    given, so results do not depend on installed fonts.

    Example:
        >>> surface = RecordingSurface()
        >>> surface.fill_text("A", Point(0, 14), "#000000", "14px Georgia")
        >>> surface.calls[-1].operation
        'fill_text'
    """

    def __init__(self, measurer: Optional[TextMeasurer] = None):
        self.measurer = measurer or FixedWidthMeasurer()
        self.calls: List[DrawCall] = []
        self._current_source = "unknown"

    def set_source(self, source: str) -> None:
        self._current_source = source

    def _record(self, operation: str, **args) -> None:
        self.calls.append(DrawCall(operation, args, self._current_source))

    def measure_text(self, text: str, font: str) -> float:
        return self.measurer.measure_text(text, font)

    def fill_rect(self, area: Area, color: str) -> None:
        self._record("fill_rect", area=area, color=color)

    def stroke_rect(self, area: Area, color: str, line_weight: float) -> None:
        self._record("stroke_rect", area=area, color=color, line_weight=line_weight)

    def fill_text(self, text: str, point: Point, color: str, font: str) -> None:
        self._record("fill_text", text=text, point=point, color=color, font=font)

    def stroke_polyline(
        self,
        points: Sequence[Point],
        color: str,
        line_weight: float,
        dash: Optional[Sequence[float]] = None,
        closed: bool = False,
    ) -> None:
        self._record(
            "stroke_polyline",
            points=tuple(points),
            color=color,
            line_weight=line_weight,
            dash=tuple(dash) if dash else None,
            closed=closed,
        )

    def fill_polygon(self, points: Sequence[Point], color: str) -> None:
        self._record("fill_polygon", points=tuple(points), color=color)

    def operations(self) -> List[str]:
        """Operation names in call order."""
        return [call.operation for call in self.calls]

    def texts(self) -> List[str]:
        """Every string drawn, in call order."""
        return [call.args["text"] for call in self.calls if call.operation == "fill_text"]


class TracedSurface:
    """
    Surface wrapper that logs all draw calls to a RenderTrace.

    This wraps a DrawingSurface and forwards every call to it, recording
    the call in a RenderTrace for later analysis.

    The TracedSurface maintains a "current source" context that identifies
    which part of the renderer is drawing. DiagramRenderer updates it via
    set_source() before each group of calls.

    Example:
        >>> trace = RenderTrace()
        >>> traced = TracedSurface(RecordingSurface(), trace)
        >>> traced.set_source("DiagramRenderer.draw_node")
        >>> traced.stroke_rect(Area(0, 0, 10, 10), "#000000", 1)
        >>> print(trace.draw_calls[-1])
    """

    def __init__(self, surface: DrawingSurface, trace: RenderTrace):
        """
        Initialize a TracedSurface.

        Args:
            surface: The underlying surface to wrap
            trace: The RenderTrace to record draw calls to
        """
        self._surface = surface
        self._trace = trace
        self._current_source = "unknown"

    def set_source(self, source: str) -> None:
        """
        Set the current source context for draw calls.

        The wrapped surface is told too, if it keeps its own context.

        Args:
            source: Identifier for the source (e.g., "DiagramRenderer.draw_route")
        """
        self._current_source = source
        set_source = getattr(self._surface, "set_source", None)
        if set_source is not None:
            set_source(source)

    def measure_text(self, text: str, font: str) -> float:
        return self._surface.measure_text(text, font)

    def fill_rect(self, area: Area, color: str) -> None:
        self._trace.add_call(
            "fill_rect", {"area": area, "color": color}, self._current_source
        )
        self._surface.fill_rect(area, color)

    def stroke_rect(self, area: Area, color: str, line_weight: float) -> None:
        self._trace.add_call(
            "stroke_rect",
            {"area": area, "color": color, "line_weight": line_weight},
            self._current_source,
        )
        self._surface.stroke_rect(area, color, line_weight)

    def fill_text(self, text: str, point: Point, color: str, font: str) -> None:
        self._trace.add_call(
            "fill_text",
            {"text": text, "point": point, "color": color, "font": font},
            self._current_source,
        )
        self._surface.fill_text(text, point, color, font)

    def stroke_polyline(
        self,
        points: Sequence[Point],
        color: str,
        line_weight: float,
        dash: Optional[Sequence[float]] = None,
        closed: bool = False,
    ) -> None:
        self._trace.add_call(
            "stroke_polyline",
            {
                "points": tuple(points),
                "color": color,
                "line_weight": line_weight,
                "dash": tuple(dash) if dash else None,
                "closed": closed,
            },
            self._current_source,
        )
        self._surface.stroke_polyline(points, color, line_weight, dash, closed)

    def fill_polygon(self, points: Sequence[Point], color: str) -> None:
        self._trace.add_call(
            "fill_polygon",
            {"points": tuple(points), "color": color},
            self._current_source,
        )
        self._surface.fill_polygon(points, color)
