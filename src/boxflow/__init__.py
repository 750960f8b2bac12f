"""
boxflow - Box-and-Connector Diagrams from Plain Text

A Python library for turning a small text language of nested scopes,
layout rows and relations into laid-out, connected box diagrams.

Example:
    >>> from boxflow import DiagramGenerator
    >>> generator = DiagramGenerator()
    >>> diagram = generator.generate('''
    ...     layout:
    ...     [A] [B]
    ...     relate:
    ...     [A] -> [B]
    ... ''')
    >>> generator.save_png(text, "diagram.png")

Debug Mode Example:
    >>> generator = DiagramGenerator()
    >>> generator.render(text, RecordingSurface(), debug=True)
    >>> trace = generator.get_trace()
    >>> print(trace.summary())
"""

__version__ = "0.1.0"

from .arrowheads import ArrowHead, ArrowheadShape, arrowhead_shape
from .config import DEFAULT_CONFIG, DiagramConfig
from .debug import RecordingSurface, TracedSurface
from .generator import Diagram, DiagramGenerator
from .geometry import Area, Line, Point, PotentialPoint, Range
from .layout import LayoutEngine, LayoutResult, Node, compute_layout
from .models import Source
from .parser import ParseError, ParseResult, Parser, parse_source
from .png_renderer import PillowSurface, render_to_png
from .renderer import DiagramRenderer, DrawingSurface
from .router import DirectLine, LineStyle, OrthogonalPath, PathRouter, route_relations
from .text import FixedWidthMeasurer, PillowTextMeasurer, TextMeasurer
from .tracer import DrawCall, PipelineStage, RenderTrace

__all__ = [
    # Main API
    "DiagramGenerator",
    "Diagram",
    "DiagramConfig",
    "DEFAULT_CONFIG",
    # Parser
    "Parser",
    "ParseResult",
    "ParseError",
    "parse_source",
    "Source",
    # Geometry
    "Point",
    "Range",
    "Line",
    "Area",
    "PotentialPoint",
    # Text
    "TextMeasurer",
    "FixedWidthMeasurer",
    "PillowTextMeasurer",
    # Layout
    "LayoutEngine",
    "LayoutResult",
    "Node",
    "compute_layout",
    # Router
    "PathRouter",
    "OrthogonalPath",
    "DirectLine",
    "LineStyle",
    "ArrowHead",
    "route_relations",
    "ArrowheadShape",
    "arrowhead_shape",
    # Rendering
    "DrawingSurface",
    "DiagramRenderer",
    "PillowSurface",
    "render_to_png",
    # Debug/Tracing (for development and debugging)
    "RenderTrace",
    "PipelineStage",
    "DrawCall",
    "RecordingSurface",
    "TracedSurface",
]
