"""Integration tests for complete diagram generation.

These tests cover end-to-end scenarios based on real-world use cases,
inspired by the diagrams in examples.py.
"""

import pytest
from PIL import Image

from boxflow import DiagramGenerator, DirectLine, RecordingSurface
from boxflow.arrowheads import ArrowHead
from boxflow.router import LineStyle

SERVICES = """
layout:
[{web} Web Tier]
[{app} Services] ... [{db} Database]
relate:
{web} -> {app}.[Orders], {app}.[Billing]
{app}.[Orders] => {db}
{app}.[Billing] -o {db}

{web}:
layout:
[Browser] [Mobile]
relate:
[Browser] -- [Mobile]

{app}:
layout:
[Orders] [Billing]

{db}:
define:
orders
invoices
|
audit log
"""

CLASS_DIAGRAM = """
layout:
[Shape]
[Circle] [Square]
relate:
[Circle] -D [Shape]
[Square] -D [Shape]

[Shape]:
define:
+area(): float
|
+name: str

[Circle]:
define:
radius

[Square]:
define:
side
"""


def _on_boundary(point, area):
    on_x = area.left <= point.x <= area.right
    on_y = area.top <= point.y <= area.bottom
    touches = point.x in (area.left, area.right) or point.y in (area.top, area.bottom)
    return on_x and on_y and touches


class TestSimpleDiagrams:
    """Integration tests for small diagrams."""

    def test_boxes_without_relations(self, generator):
        """Test a layout with no relate section."""
        diagram = generator.generate("layout:\n[A] [B]")
        assert not diagram.has_errors
        assert len(diagram.layout.nodes) == 2
        assert diagram.routes == []

    def test_two_boxes_with_arrow(self, generator, surface, two_boxes_input):
        """Test two boxes joined by an arrow."""
        generator.render(two_boxes_input, surface)
        assert surface.texts() == ["A", "B"]
        assert "fill_polygon" in surface.operations()

    def test_define_only(self, generator):
        """Test a diagram that only defines text at the top level."""
        diagram = generator.generate("define:\njust some notes")
        assert not diagram.has_errors
        assert diagram.layout.nodes == ()

    def test_indented_input(self, generator, stacked_input):
        """Test that indentation in triple-quoted input is ignored."""
        diagram = generator.generate(stacked_input)
        a, b = diagram.layout.nodes
        assert b.absolute_area.top > a.absolute_area.bottom


class TestClassDiagram:
    """Integration tests for a UML-style class diagram."""

    def test_structure(self, generator):
        """Test define sections turn every box into a header box."""
        diagram = generator.generate(CLASS_DIAGRAM)
        assert not diagram.has_errors
        assert all(node.label_layout.is_header() for node in diagram.layout.all_nodes())
        shape = diagram.layout.node_at_path("Shape")
        assert shape.define_layout.lines == ("+area(): float", "+name: str")
        assert shape.define_layout.horizontal_rules == (1,)

    def test_inheritance_arrows(self, generator):
        """Test hollow arrows pointing up at the base class."""
        diagram = generator.generate(CLASS_DIAGRAM)
        shape = diagram.layout.node_at_path("Shape").absolute_area
        assert len(diagram.routes) == 2
        for route in diagram.routes:
            assert route.arrow_head == ArrowHead.HOLLOW_ARROW
            end = route.lines()[-1].end
            assert _on_boundary(end, shape)

    def test_draw(self, generator, surface):
        """Test the drawn text of every box and define line."""
        generator.render(CLASS_DIAGRAM, surface)
        assert surface.texts() == [
            "Shape",
            "+area(): float",
            "+name: str",
            "Circle",
            "radius",
            "Square",
            "side",
        ]


class TestNestedServices:
    """Integration tests for nested, aliased scopes."""

    def test_no_errors(self, generator):
        """Test the diagram parses cleanly."""
        diagram = generator.generate(SERVICES)
        assert diagram.errors == []
        assert diagram.dropped == []

    def test_nesting(self, generator):
        """Test nested nodes by path and alias."""
        layout = generator.generate(SERVICES).layout
        assert layout.node_for_alias("{app}").label == "Services"
        assert layout.node_at_path("Services.Orders") is not None
        assert layout.node_at_path("Web Tier.Mobile") is not None
        assert layout.max_depth() == 2

    def test_children_inside_parents(self, generator):
        """Test containment for every nested node."""
        layout = generator.generate(SERVICES).layout
        for parent in layout.all_nodes():
            for child in parent.nodes:
                p, c = parent.absolute_area, child.absolute_area
                assert p.left <= c.left and c.right <= p.right
                assert p.top <= c.top and c.bottom <= p.bottom

    def test_right_aligned_database(self, generator):
        """Test the right-aligned scope meets the widest row's edge."""
        layout = generator.generate(SERVICES).layout
        db = layout.node_for_alias("{db}")
        widest = max(node.absolute_area.right for node in layout.nodes)
        assert db.is_right_aligned
        assert db.absolute_area.right == widest

    def test_routes(self, generator):
        """Test every relation becomes a connector in relation order."""
        routes = generator.generate(SERVICES).routes
        assert [(r.start_label, r.end_label) for r in routes] == [
            ("Web Tier", "Services.Orders"),
            ("Web Tier", "Services.Billing"),
            ("Services.Orders", "Database"),
            ("Services.Billing", "Database"),
            ("Web Tier.Browser", "Web Tier.Mobile"),
        ]
        assert routes[2].line_style == LineStyle.DASHED
        assert routes[3].arrow_head == ArrowHead.HOLLOW_DIAMOND
        assert routes[4].arrow_head == ArrowHead.NONE

    def test_connector_ends_on_boxes(self, generator):
        """Test connectors start and end on box boundaries."""
        diagram = generator.generate(SERVICES)
        layout = diagram.layout
        for route in diagram.routes:
            lines = route.lines()
            start = layout.node_at_path(route.start_label).absolute_area
            end = layout.node_at_path(route.end_label).absolute_area
            assert _on_boundary(lines[0].start, start)
            assert _on_boundary(lines[-1].end, end)

    def test_orthogonal_segments(self, generator):
        """Test that routed paths only use straight segments."""
        for route in generator.generate(SERVICES).routes:
            if isinstance(route, DirectLine):
                continue
            for line in route.lines():
                assert line.is_horizontal() or line.is_vertical()

    def test_png(self, tmp_path):
        """Test saving the diagram with real fonts."""
        output_path = tmp_path / "services.png"
        diagram = DiagramGenerator().save_png(SERVICES, str(output_path))
        assert not diagram.has_errors
        with Image.open(output_path) as image:
            assert image.size[0] >= diagram.width


class TestBrokenInput:
    """Integration tests for input with mistakes."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "layout:\n[A]\n[A]:\nrelate:\n[x] -> [y]",
            "layout:\n[A]\n{ghost}:\ndefine:\nboo",
            "relate:\n[A] -> [B]",
            "layout:\n[{a} A]\n{a}:\nlayout:\n{a}",
        ],
    )
    def test_always_renders(self, generator, text):
        """Test that broken input still draws a complete picture."""
        surface = RecordingSurface(generator.measurer)
        diagram = generator.render(text, surface)
        assert surface.operations()[0] == "fill_rect"
        assert diagram.width > 0 and diagram.height > 0

    def test_errors_listed(self, generator):
        """Test several errors from one input."""
        diagram = generator.generate(
            "layout:\n[A] [B]\n[A]:\nrelate:\n[x] -> [y]\n{ghost}:\ndefine:\nboo"
        )
        assert "No layout OR define section. Section: 'A'." in diagram.errors
        assert "Cannot find alias '{ghost}'." in diagram.errors
