"""
Main diagram generator module.

Combines parsing, layout, routing and rendering to produce
box-and-connector diagrams from plain text.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .config import DiagramConfig
from .debug import TracedSurface
from .layout import LayoutEngine, LayoutResult
from .models import RelateRecord, Source
from .parser import Parser
from .png_renderer import PillowSurface
from .renderer import DiagramRenderer, DrawingSurface
from .router import PathRouter, Route
from .text import PillowTextMeasurer, TextMeasurer
from .tracer import RenderTrace

logger = logging.getLogger(__name__)


@dataclass
class Diagram:
    """
    Everything produced for one input text.

    Attributes:
        source: Parsed Source tree.
        errors: Parse and validation messages; the diagram is still
            complete with whatever could be understood.
        layout: Node geometry.
        routes: Connectors in relation order.
        dropped: Relations whose ends could not be found.
    """

    source: Source
    errors: List[str]
    layout: LayoutResult
    routes: List[Route] = field(default_factory=list)
    dropped: List[RelateRecord] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def width(self) -> float:
        return self.layout.width

    @property
    def height(self) -> float:
        return self.layout.height


class DiagramGenerator:
    """
    Generate diagrams from simple text descriptions.

    Example:
        >>> generator = DiagramGenerator()
        >>> diagram = generator.generate('''
        ...     layout:
        ...     [A] [B]
        ...     relate:
        ...     [A] -> [B]
        ... ''')
        >>> generator.save_png(text, "diagram.png")
    """

    def __init__(
        self,
        config: Optional[DiagramConfig] = None,
        measurer: Optional[TextMeasurer] = None,
        **overrides,
    ):
        """
        Initialize the diagram generator.

        Args:
            config: Diagram configuration; defaults to DiagramConfig().
            measurer: Text measurer for layout; defaults to Pillow fonts.
            **overrides: DiagramConfig options applied on top of config
                (e.g., font_size=16, scope_margin=40).

        Raises:
            TypeError: If an override is not a DiagramConfig option.
        """
        config = config or DiagramConfig()
        if overrides:
            config = config.with_overrides(**overrides)
        self.config = config
        self.measurer = measurer or PillowTextMeasurer(config.font_path)
        self.parser = Parser()
        self.router = PathRouter()
        self.renderer = DiagramRenderer(config)
        self._trace: Optional[RenderTrace] = None

    def generate(
        self,
        input_text: str,
        debug: bool = False,
        measurer: Optional[TextMeasurer] = None,
    ) -> Diagram:
        """
        Parse, lay out and route a diagram without drawing it.

        Args:
            input_text: Diagram text with define/layout/relate sections.
            debug: Record a RenderTrace, available via get_trace().
            measurer: Text measurer for this call (overrides the instance one).

        Returns:
            Diagram with geometry, connectors and error messages.
        """
        trace = RenderTrace(input_text=input_text) if debug else None
        self._trace = trace

        parsed = self.parser.parse(input_text)
        for message in parsed.errors:
            logger.warning("%s", message)
        if trace:
            trace.add_stage(
                "parse",
                {
                    "errors": list(parsed.errors),
                    "aliases": sorted(parsed.alias_index),
                    "scopes": sum(1 for _ in parsed.source.walk()),
                },
            )

        engine = LayoutEngine(measurer or self.measurer, self.config)
        layout = engine.layout(parsed.source, parsed.alias_index)
        if trace:
            trace.add_stage(
                "layout",
                {
                    "width": layout.width,
                    "height": layout.height,
                    "node_count": len(layout.all_nodes()),
                    "max_depth": layout.max_depth(),
                },
            )

        routing = self.router.route_relations(parsed.source, layout)
        if trace:
            trace.add_stage(
                "route",
                {
                    "routes": len(routing.routes),
                    "dropped": [
                        f"{r.start_label} {r.arrow_token} {r.end_label}"
                        for r in routing.dropped
                    ],
                },
            )

        return Diagram(
            source=parsed.source,
            errors=list(parsed.errors),
            layout=layout,
            routes=routing.routes,
            dropped=routing.dropped,
        )

    def render(
        self, input_text: str, surface: DrawingSurface, debug: bool = False
    ) -> Diagram:
        """
        Generate a diagram and draw it on a surface.

        Text is measured by the surface itself so layout and drawing agree.

        Args:
            input_text: Diagram text.
            surface: Target DrawingSurface.
            debug: Record a RenderTrace including every draw call.

        Returns:
            The drawn Diagram.
        """
        diagram = self.generate(input_text, debug=debug, measurer=surface)
        self._draw(diagram, surface)
        return diagram

    def save_png(
        self,
        input_text: str,
        filename: str,
        scale: float = 2,
        debug: bool = False,
    ) -> Diagram:
        """
        Generate a diagram and save it as a high-resolution PNG image.

        Args:
            input_text: Diagram text.
            filename: Output filename (should end in .png).
            scale: Resolution multiplier for crisp output (default 2 for retina).
            debug: Record a RenderTrace including every draw call.

        Returns:
            The drawn Diagram.
        """
        measurer = PillowTextMeasurer(self.config.font_path, scale)
        diagram = self.generate(input_text, debug=debug, measurer=measurer)
        surface = PillowSurface(diagram.width, diagram.height, self.config, scale)
        self._draw(diagram, surface)
        surface.save(filename)
        logger.debug("Saved %s (%dx%d)", filename, diagram.width, diagram.height)
        return diagram

    def _draw(self, diagram: Diagram, surface: DrawingSurface) -> None:
        trace = self._trace
        target = TracedSurface(surface, trace) if trace else surface
        self.renderer.render(diagram.layout, diagram.routes, target)
        if trace:
            trace.add_stage("render", {"draw_calls": len(trace.draw_calls)})

    def get_trace(self) -> Optional[RenderTrace]:
        """
        Get the trace from the most recent call made with debug=True.

        Returns:
            The RenderTrace, or None if the last call was not in debug mode.
        """
        return self._trace
