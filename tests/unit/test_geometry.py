"""Unit tests for the geometry module."""

import math

import pytest

from boxflow.geometry import Area, Line, Point, PotentialPoint, Range, bounding_size


class TestPoint:
    """Tests for Point."""

    def test_plus(self):
        """Test adding two points."""
        assert Point(1, 2).plus(Point(3, 4)) == Point(4, 6)

    def test_uniform(self):
        """Test a point with the same value on both axes."""
        assert Point.uniform(10) == Point(10, 10)


class TestRange:
    """Tests for Range."""

    def test_single(self):
        """Test a single-value range."""
        r = Range.single(5)
        assert r.is_single
        assert r.middle() == 5

    def test_middle(self):
        """Test the middle of a range."""
        assert Range(10, 20).middle() == 15

    def test_includes_bounds(self):
        """Test that both bounds are included."""
        r = Range(10, 20)
        assert r.includes(10)
        assert r.includes(20)
        assert not r.includes(20.5)

    def test_intersect_overlapping(self):
        """Test the overlap of two ranges."""
        assert Range(0, 10).intersect(Range(5, 15)) == Range(5, 10)

    def test_intersect_touching(self):
        """Test ranges that share a single value."""
        assert Range(0, 10).intersect(Range(10, 20)) == Range(10, 10)

    def test_intersect_disjoint(self):
        """Test that disjoint ranges have no overlap."""
        assert Range(0, 10).intersect(Range(11, 20)) is None


class TestLine:
    """Tests for Line."""

    def test_vertical_and_horizontal(self):
        """Test axis-aligned line detection."""
        assert Line(Point(0, 0), Point(0, 10)).is_vertical()
        assert Line(Point(0, 0), Point(10, 0)).is_horizontal()

    def test_angle(self):
        """Test line angle in radians."""
        assert Line(Point(0, 0), Point(10, 0)).angle() == 0
        assert Line(Point(0, 0), Point(0, 10)).angle() == pytest.approx(math.pi / 2)

    def test_length(self):
        """Test line length."""
        assert Line(Point(0, 0), Point(3, 4)).length() == 5

    def test_vertical_crosses_horizontal(self):
        """Test intersection of a vertical and a horizontal segment."""
        vertical = Line(Point(5, 0), Point(5, 10))
        horizontal = Line(Point(0, 5), Point(10, 5))
        assert vertical.intersection(horizontal) == Point(5, 5)
        assert horizontal.intersection(vertical) == Point(5, 5)

    def test_segments_that_do_not_reach(self):
        """Test that segments must actually overlap to intersect."""
        vertical = Line(Point(5, 0), Point(5, 4))
        horizontal = Line(Point(0, 5), Point(10, 5))
        assert vertical.intersection(horizontal) is None

    def test_parallel_lines(self):
        """Test that parallel segments never intersect."""
        a = Line(Point(0, 0), Point(10, 0))
        b = Line(Point(0, 0), Point(10, 0))
        assert a.intersection(b) is None
        assert Line(Point(0, 0), Point(10, 10)).intersection(
            Line(Point(0, 1), Point(10, 11))
        ) is None

    def test_angled_crosses_horizontal(self):
        """Test intersection of a diagonal with a horizontal segment."""
        diagonal = Line(Point(0, 0), Point(10, 10))
        horizontal = Line(Point(0, 4), Point(10, 4))
        point = diagonal.intersection(horizontal)
        assert point.x == pytest.approx(4)
        assert point.y == pytest.approx(4)

    def test_angled_crosses_vertical(self):
        """Test intersection of a diagonal with a vertical segment."""
        diagonal = Line(Point(0, 0), Point(10, 20))
        vertical = Line(Point(5, 0), Point(5, 20))
        point = diagonal.intersection(vertical)
        assert point.x == pytest.approx(5)
        assert point.y == pytest.approx(10)

    def test_two_diagonals(self):
        """Test intersection of two angled segments."""
        a = Line(Point(0, 0), Point(10, 10))
        b = Line(Point(0, 10), Point(10, 0))
        point = a.intersection(b)
        assert point.x == pytest.approx(5)
        assert point.y == pytest.approx(5)


class TestArea:
    """Tests for Area."""

    def test_edges_properties(self):
        """Test left/right/top/bottom."""
        area = Area(10, 20, 30, 40)
        assert (area.left, area.right, area.top, area.bottom) == (10, 40, 20, 60)

    def test_center(self):
        """Test area center."""
        assert Area(0, 0, 10, 20).center() == Point(5, 10)

    def test_offset_by(self):
        """Test moving a relative area into its parent's space."""
        assert Area(5, 5, 10, 10).offset_by(Point(100, 50)) == Area(105, 55, 10, 10)

    def test_content_origin_uses_padding(self):
        """Test that content starts inside the padding."""
        area = Area(0, 0, 100, 100).with_padding(10)
        assert area.content_origin() == Point(10, 10)

    def test_above_and_below(self):
        """Test strict vertical relations."""
        top = Area(0, 0, 50, 20)
        bottom = Area(10, 40, 50, 20)
        assert top.is_above(bottom)
        assert bottom.is_below(top)
        assert not top.is_left_of(bottom)

    def test_left_and_right(self):
        """Test strict horizontal relations."""
        left = Area(0, 0, 20, 50)
        right = Area(40, 10, 20, 50)
        assert left.is_left_of(right)
        assert right.is_right_of(left)
        assert not left.is_above(right)

    def test_diagonal_has_no_relation(self):
        """Test that diagonal areas are neither above nor beside."""
        a = Area(0, 0, 20, 20)
        b = Area(50, 50, 20, 20)
        assert not (a.is_above(b) or a.is_below(b))
        assert not (a.is_left_of(b) or a.is_right_of(b))

    def test_congruence(self):
        """Test that a contained span is congruent."""
        outer = Area(0, 0, 100, 100)
        inner = Area(10, 10, 20, 20)
        assert outer.is_vertically_congruent(inner)
        assert inner.is_horizontally_congruent(outer)
        assert not Area(0, 0, 10, 10).is_vertically_congruent(Area(5, 0, 10, 10))

    def test_intersection_first_edge_wins(self):
        """Test boundary crossing of a line leaving the area downward."""
        area = Area(0, 0, 10, 10)
        line = Line(Point(5, 5), Point(5, 50))
        assert area.intersection(line) == Point(5, 10)

    def test_intersection_none_inside(self):
        """Test that a line fully inside never crosses the boundary."""
        area = Area(0, 0, 10, 10)
        assert area.intersection(Line(Point(2, 2), Point(8, 3))) is None

    def test_bounding_size(self):
        """Test bounding size of several areas."""
        assert bounding_size([Area(0, 0, 10, 10), Area(20, 5, 10, 30)]) == (30, 35)
        assert bounding_size([]) == (0, 0)


class TestPotentialPoint:
    """Tests for PotentialPoint."""

    def test_middle_point(self):
        """Test resolving to the middle of both ranges."""
        point = PotentialPoint(Range(0, 10), Range(20, 40))
        assert point.middle_point() == Point(5, 30)

    def test_horizontal_reuses_anchor_y(self):
        """Test that an in-range anchor keeps the segment horizontal."""
        point = PotentialPoint(Range.single(50), Range(0, 40))
        assert point.to_point_horizontal(Point(0, 12)) == Point(50, 12)

    def test_horizontal_out_of_range_falls_back(self):
        """Test fallback to the middle point when the anchor is outside."""
        point = PotentialPoint(Range.single(50), Range(0, 40))
        assert point.to_point_horizontal(Point(0, 100)) == Point(50, 20)

    def test_vertical_reuses_anchor_x(self):
        """Test that an in-range anchor keeps the segment vertical."""
        point = PotentialPoint(Range(0, 40), Range.single(80))
        assert point.to_point_vertical(Point(7, 0)) == Point(7, 80)

    def test_stable_axes(self):
        """Test which axes are already fixed."""
        point = PotentialPoint(Range.single(1), Range(0, 5))
        assert point.stable_x()
        assert not point.stable_y()
