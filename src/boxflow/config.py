"""
Configuration for diagram generation.

A single immutable DiagramConfig value is passed explicitly to every stage
(text sizing, layout, routing and rendering). Changing an option means
building a new value, so a render in progress never sees a change.

Example:
    >>> config = DiagramConfig(font_size=16)
    >>> wide = config.with_overrides(scope_margin=50)
"""

from dataclasses import dataclass, fields, replace
from typing import Optional


@dataclass(frozen=True)
class DiagramConfig:
    """
    Read-only settings for one render.

    Attributes:
        font_size: Font size in pixels.
        font_family: Font family name used for text.
        font_path: Optional TrueType file for Pillow text measurement.
        scope_margin: Minimum space around each scope box.
        scope_padding: Space between a scope's border and its contents.
        canvas_padding: Space between the canvas edge and the diagram.
        background_color: Canvas and hollow-shape fill color.
        shade_color: Fill color of header label bands.
        line_color: Color of outlines, text and connectors.
        line_weight: Line weight in pixels.
        line_dash_length: Length of a dash in dashed connectors.
        line_dash_spacing: Gap between dashes in dashed connectors.
        arrow_head_area: Target area (pixels squared) of an arrowhead.
        favor_golden_ratio_label_size: Wrap labels toward a 1.6 ratio.
        favor_uniform_node_sizes: Equalize similar sibling sizes.
        uniform_size_variance: Fractional size difference that still
            counts as "similar" for uniform sizing.
        golden_ratio: Target width:height ratio for wrapped labels.
        golden_ratio_floor: Ratios below this are always improved upon.
    """

    font_size: int = 14
    font_family: str = "Georgia"
    font_path: Optional[str] = None
    scope_margin: float = 30
    scope_padding: float = 10
    canvas_padding: float = 15
    background_color: str = "#FFFFFF"
    shade_color: str = "#EEEEEE"
    line_color: str = "#000000"
    line_weight: float = 1
    line_dash_length: float = 5
    line_dash_spacing: float = 3
    arrow_head_area: float = 50
    favor_golden_ratio_label_size: bool = True
    favor_uniform_node_sizes: bool = True
    uniform_size_variance: float = 0.3
    golden_ratio: float = 1.6
    golden_ratio_floor: float = 1.2

    def font(self) -> str:
        """Return a CSS-style font description, e.g. ``14px Georgia``."""
        return f"{self.font_size}px {self.font_family}"

    def estimate_font_height(self) -> float:
        return self.font_size

    def line_spacing(self) -> float:
        """Extra vertical space between define lines."""
        return self.estimate_font_height() * 0.4

    def dash_pattern(self):
        return [self.line_dash_length, self.line_dash_spacing]

    def with_overrides(self, **changes) -> "DiagramConfig":
        """
        Return a copy with the given options changed.

        Raises:
            TypeError: If an option name is not a DiagramConfig field.
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise TypeError(f"Unknown configuration option(s): {', '.join(unknown)}")
        return replace(self, **changes)


DEFAULT_CONFIG = DiagramConfig()
