"""Pytest configuration and shared fixtures for boxflow tests."""

import pytest

from boxflow import (
    DiagramConfig,
    DiagramGenerator,
    FixedWidthMeasurer,
    LayoutEngine,
    Parser,
    RecordingSurface,
)

# Every character is 10 units wide so expected geometry is exact
CHAR_WIDTH = 10


@pytest.fixture
def two_boxes_input():
    """Two sibling boxes with a relation between them."""
    return """
    layout:
    [A] [B]
    relate:
    [A] -> [B]
    """


@pytest.fixture
def stacked_input():
    """Two boxes stacked vertically."""
    return """
    layout:
    [A]
    [B]
    relate:
    [A] -> [B]
    """


@pytest.fixture
def nested_input():
    """A scope containing a nested layout."""
    return """
    layout:
    [Outer]

    [Outer]:
    layout:
    [Inner]
    """


@pytest.fixture
def define_input():
    """A scope with define text split by a horizontal rule."""
    return """
    layout:
    [Shape]

    [Shape]:
    define:
    area
    |
    name
    """


@pytest.fixture
def aliased_input():
    """Aliases declared in a layout and referenced in headers and relations."""
    return """
    layout:
    [{a} Client] [{b} Server]
    relate:
    {a} -> {b}

    {b}:
    define:
    handles requests
    """


@pytest.fixture
def config():
    """Default DiagramConfig."""
    return DiagramConfig()


@pytest.fixture
def measurer():
    """Fixed-width text measurer."""
    return FixedWidthMeasurer(char_width=CHAR_WIDTH)


@pytest.fixture
def parser():
    """Parser instance."""
    return Parser()


@pytest.fixture
def engine(measurer, config):
    """LayoutEngine with fixed-width text."""
    return LayoutEngine(measurer, config)


@pytest.fixture
def layout_of(parser, engine):
    """Parse text and lay it out."""

    def _layout(text):
        parsed = parser.parse(text)
        return engine.layout(parsed.source, parsed.alias_index)

    return _layout


@pytest.fixture
def generator(measurer):
    """DiagramGenerator that measures text with fixed widths."""
    return DiagramGenerator(measurer=measurer)


@pytest.fixture
def surface(measurer):
    """RecordingSurface with fixed-width text."""
    return RecordingSurface(measurer)
