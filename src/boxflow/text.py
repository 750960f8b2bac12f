"""
Text measurement and text block sizing.

The layout engine never measures text itself; it asks a TextMeasurer.
Two measurers are provided:
- PillowTextMeasurer: real font metrics through Pillow
- FixedWidthMeasurer: every character has the same width (headless use)

LabelLayout picks how a scope label wraps, and DefineLayout sizes the
free-text content of a scope.
"""

import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple

from PIL import ImageFont

from .config import DiagramConfig
from .models import DefineSection

FONT_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)px\s+(.+?)\s*$")

EMPTY_LABEL_SIZE = 5


def parse_font(font: str) -> Tuple[float, str]:
    """Split a "14px Georgia" font description into (size, family)."""
    match = FONT_PATTERN.match(font)
    if match is None:
        raise ValueError(f"Invalid font description: {font!r}")
    return float(match.group(1)), match.group(2)


class TextMeasurer(Protocol):
    """Anything that can report the drawn width of a string."""

    def measure_text(self, text: str, font: str) -> float:
        """Return the width of text drawn in font."""
        ...


class FixedWidthMeasurer:
    """
    Measures text as if every character had the same width.

    Args:
        char_width: Width of one character. Defaults to 0.6 x font size.
    """

    def __init__(self, char_width: Optional[float] = None):
        self.char_width = char_width

    def measure_text(self, text: str, font: str) -> float:
        if self.char_width is not None:
            return len(text) * self.char_width
        size, _family = parse_font(font)
        return len(text) * size * 0.6


class PillowTextMeasurer:
    """
    Measures text with Pillow font metrics.

    Fonts are looked up by family name first, then by the configured font
    file, then by common system fonts, then Pillow's built-in font.
    """

    FALLBACK_FONTS = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSerif-Regular.ttf",
        "/System/Library/Fonts/Supplemental/Georgia.ttf",
        "C:/Windows/Fonts/georgia.ttf",
    ]

    def __init__(self, font_path: Optional[str] = None, scale: float = 1):
        self.font_path = font_path
        self.scale = scale
        self._fonts: Dict[str, ImageFont.ImageFont] = {}

    def get_font(self, font: str):
        """Return the Pillow font for a font description, loading it once."""
        if font in self._fonts:
            return self._fonts[font]
        size, family = parse_font(font)
        pixel_size = max(1, int(round(size * self.scale)))

        candidates = [family]
        if self.font_path and os.path.exists(self.font_path):
            candidates.insert(0, self.font_path)
        candidates.extend(path for path in self.FALLBACK_FONTS if os.path.exists(path))

        loaded = None
        for candidate in candidates:
            try:
                loaded = ImageFont.truetype(candidate, pixel_size)
                break
            except OSError:
                continue
        if loaded is None:
            try:
                loaded = ImageFont.load_default(size=pixel_size)
            except TypeError:
                # Older Pillow versions don't support size parameter
                loaded = ImageFont.load_default()
        self._fonts[font] = loaded
        return loaded

    def measure_text(self, text: str, font: str) -> float:
        if not text:
            return 0.0
        return self.get_font(font).getlength(text) / self.scale


class LabelKind(Enum):
    """How a scope label is drawn."""

    TEXT = "text"  # plain text filling the node
    HEADER = "header"  # shaded band above content


@dataclass(frozen=True)
class LabelLayout:
    """Measured size and line breaks of a label."""

    width: float
    height: float
    kind: LabelKind
    lines: Tuple[str, ...] = ()

    def is_header(self) -> bool:
        return self.kind == LabelKind.HEADER

    def width_height_ratio(self) -> float:
        return self.width / self.height

    def distance_to_ratio(self, ratio: float) -> float:
        return abs(ratio - self.width_height_ratio())


def split_into_words_per_line(text: str, words_per_line: int) -> List[str]:
    """
    Group words into lines of words_per_line words.

    Lines are filled from last to first, so the first line holds any
    remainder: 5 words at 2 per line gives 1, 2, 2.
    """
    words = text.split()
    lines: List[str] = []
    while words:
        if len(words) <= words_per_line:
            lines.insert(0, " ".join(words))
            break
        lines.insert(0, " ".join(words[-words_per_line:]))
        words = words[:-words_per_line]
    return lines


def calculate_words_per_line(
    label: str, words_per_line: int, measurer: TextMeasurer, config: DiagramConfig
) -> LabelLayout:
    font = config.font()
    lines = split_into_words_per_line(label, words_per_line)
    width = max((measurer.measure_text(line, font) for line in lines), default=0.0)
    height = config.estimate_font_height() * len(lines)
    return LabelLayout(width, height, LabelKind.TEXT, tuple(lines))


def calculate_text_label(
    label: Optional[str], measurer: TextMeasurer, config: DiagramConfig
) -> LabelLayout:
    """
    Size a plain text label, choosing where it wraps.

    With favor_golden_ratio_label_size the wrap closest to the golden
    ratio wins (see calculate_text_to_golden_ratio). Otherwise the first
    wrap that is wider than it is tall wins.
    """
    if not label or not label.strip():
        return LabelLayout(EMPTY_LABEL_SIZE, EMPTY_LABEL_SIZE, LabelKind.TEXT)
    if config.favor_golden_ratio_label_size:
        return calculate_text_to_golden_ratio(label, measurer, config)

    word_count = len(label.split())
    layout = None
    for words_per_line in range(1, word_count + 1):
        layout = calculate_words_per_line(label, words_per_line, measurer, config)
        if layout.width > layout.height:
            return layout
    return layout


def calculate_text_to_golden_ratio(
    label: str, measurer: TextMeasurer, config: DiagramConfig
) -> LabelLayout:
    """
    Wrap a label so its width:height ratio is close to the golden ratio.

    Candidates are tried from 1 word per line upward. A candidate replaces
    the current choice while it is closer to the target ratio, or while the
    current choice is narrower than golden_ratio_floor; the search stops at
    the first candidate that is no improvement.
    """
    word_count = len(label.split())
    selected: Optional[LabelLayout] = None
    for words_per_line in range(1, word_count + 1):
        candidate = calculate_words_per_line(label, words_per_line, measurer, config)
        if (
            selected is None
            or selected.distance_to_ratio(config.golden_ratio)
            > candidate.distance_to_ratio(config.golden_ratio)
            or selected.width_height_ratio() < config.golden_ratio_floor
        ):
            selected = candidate
            continue
        break
    return selected


def calculate_header_label(
    label: Optional[str], measurer: TextMeasurer, config: DiagramConfig
) -> LabelLayout:
    """Size a single-line header label."""
    text = label or ""
    width = measurer.measure_text(text, config.font())
    return LabelLayout(
        width, config.estimate_font_height(), LabelKind.HEADER, (text,)
    )


@dataclass(frozen=True)
class DefineLayout:
    """
    Measured content text of a scope.

    Attributes:
        lines: Text lines.
        horizontal_rules: Rule positions (rule n sits after n lines).
        width: Widest line.
        height: Total height including line spacing.
    """

    lines: Tuple[str, ...] = ()
    horizontal_rules: Tuple[int, ...] = ()
    width: float = 0
    height: float = 0

    @classmethod
    def from_section(
        cls, define: DefineSection, measurer: TextMeasurer, config: DiagramConfig
    ) -> "DefineLayout":
        font = config.font()
        line_step = config.estimate_font_height() + config.line_spacing()
        width = max((measurer.measure_text(line, font) for line in define.lines), default=0.0)
        return cls(
            lines=tuple(define.lines),
            horizontal_rules=tuple(define.horizontal_rules),
            width=width,
            height=line_step * len(define.lines),
        )

