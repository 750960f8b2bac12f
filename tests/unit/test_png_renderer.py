"""Unit tests for the Pillow drawing surface."""

import math
import os
import tempfile

import pytest
from PIL import Image

from boxflow import DiagramGenerator, parse_source
from boxflow.config import DiagramConfig
from boxflow.geometry import Area, Point
from boxflow.layout import compute_layout
from boxflow.png_renderer import PillowSurface, dash_segments, render_to_png
from boxflow.router import route_relations


class TestPillowSurface:
    """Tests for PillowSurface drawing operations."""

    def test_image_size_scaled(self):
        """Test the image is sized in device pixels."""
        surface = PillowSurface(100.5, 40, scale=2)
        assert surface.image.size == (201, 80)

    def test_background(self):
        """Test the image starts filled with the background color."""
        surface = PillowSurface(10, 10, DiagramConfig(background_color="#00FF00"), 1)
        assert surface.image.getpixel((5, 5)) == (0, 255, 0)

    def test_fill_rect(self):
        """Test filling a rectangle in scaled coordinates."""
        surface = PillowSurface(20, 20, scale=2)
        surface.fill_rect(Area(0, 0, 5, 5), "#FF0000")
        assert surface.image.getpixel((4, 4)) == (255, 0, 0)
        assert surface.image.getpixel((30, 30)) == (255, 255, 255)

    def test_stroke_rect_leaves_inside(self):
        """Test an outline does not fill the rectangle."""
        surface = PillowSurface(40, 40, scale=1)
        surface.stroke_rect(Area(5, 5, 30, 30), "#000000", 1)
        assert surface.image.getpixel((5, 20)) == (0, 0, 0)
        assert surface.image.getpixel((20, 20)) == (255, 255, 255)

    def test_polygon(self):
        """Test filling a polygon."""
        surface = PillowSurface(20, 20, scale=1)
        surface.fill_polygon([Point(0, 0), Point(20, 0), Point(0, 20)], "#0000FF")
        assert surface.image.getpixel((3, 3)) == (0, 0, 255)

    def test_degenerate_shapes_ignored(self):
        """Test that too few points draw nothing."""
        surface = PillowSurface(10, 10, scale=1)
        surface.fill_polygon([Point(0, 0), Point(5, 5)], "#000000")
        surface.stroke_polyline([Point(0, 0)], "#000000", 1)
        assert surface.image.getcolors() == [(100, (255, 255, 255))]

    def test_dashed_polyline_has_gaps(self):
        """Test a dashed line leaves gaps."""
        surface = PillowSurface(40, 10, scale=1)
        surface.stroke_polyline(
            [Point(0, 5), Point(40, 5)], "#000000", 1, dash=[5, 3]
        )
        assert surface.image.getpixel((2, 5)) == (0, 0, 0)
        assert surface.image.getpixel((7, 5)) == (255, 255, 255)

    def test_fill_text_draws(self):
        """Test that text puts ink on the image."""
        surface = PillowSurface(60, 30, scale=1)
        surface.fill_text("Hello", Point(5, 20), "#000000", "14px Georgia")
        assert len(surface.image.getcolors(maxcolors=1024)) > 1

    def test_measures_at_scale(self):
        """Test measurements come back in diagram units."""
        small = PillowSurface(10, 10, scale=1).measure_text("Hello", "14px Georgia")
        large = PillowSurface(10, 10, scale=3).measure_text("Hello", "14px Georgia")
        assert large == pytest.approx(small, rel=0.25)


class TestDashSegments:
    """Tests for splitting lines into dashes."""

    def test_dashes(self):
        """Test dash and gap lengths along a line."""
        segments = dash_segments(Point(0, 0), Point(16, 0), [5, 3])
        assert segments == [
            (Point(0, 0), Point(5, 0)),
            (Point(8, 0), Point(13, 0)),
        ]

    def test_last_dash_clipped(self):
        """Test the final dash stops at the line end."""
        segments = dash_segments(Point(0, 0), Point(0, 10), [5, 3])
        assert segments[-1] == (Point(0, 8), Point(0, 10))

    def test_zero_length(self):
        """Test a zero-length line stays as is."""
        point = Point(3, 3)
        assert dash_segments(point, point, [5, 3]) == [(point, point)]


class TestSavePNG:
    """Tests for writing PNG files."""

    def test_save_png(self, tmp_path, two_boxes_input):
        """Test generating a PNG file from text."""
        output_path = tmp_path / "diagram.png"
        diagram = DiagramGenerator().save_png(
            two_boxes_input, str(output_path), scale=2
        )
        assert output_path.exists()
        with Image.open(output_path) as image:
            assert image.format == "PNG"
            assert image.size == (
                int(math.ceil(diagram.width * 2)),
                int(math.ceil(diagram.height * 2)),
            )

    def test_save_png_scale_one(self, two_boxes_input):
        """Test saving at scale 1."""
        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            output_path = f.name

        try:
            diagram = DiagramGenerator().save_png(two_boxes_input, output_path, scale=1)
            assert os.path.getsize(output_path) > 0
            with Image.open(output_path) as image:
                assert image.size[0] == int(math.ceil(diagram.width))
        finally:
            if os.path.exists(output_path):
                os.unlink(output_path)

    def test_render_to_png(self, tmp_path, measurer, two_boxes_input):
        """Test rendering an existing layout."""
        parsed = parse_source(two_boxes_input)
        layout = compute_layout(parsed.source, measurer)
        routes = route_relations(parsed.source, layout).routes
        output_path = tmp_path / "layout.png"
        result = render_to_png(layout, routes, str(output_path), scale=1)
        assert result == str(output_path)
        with Image.open(output_path) as image:
            assert image.size == (120, 64)

    def test_save_png_with_errors(self, tmp_path):
        """Test that a diagram with errors is still saved."""
        output_path = tmp_path / "empty.png"
        diagram = DiagramGenerator().save_png("", str(output_path))
        assert diagram.has_errors
        assert output_path.exists()
