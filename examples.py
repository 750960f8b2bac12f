#!/usr/bin/env python3
"""
Examples of using the diagram generator.

Run this file (with boxflow installed) to generate example diagrams as
PNG files.
"""

from boxflow import DiagramGenerator


def example_two_boxes():
    """Two boxes side by side with an arrow"""
    print("Example 1: Two Boxes")

    input_text = """
    layout:
    [Client] [Server]
    relate:
    [Client] -> [Server]
    """

    generator = DiagramGenerator()
    generator.save_png(input_text, "example_two_boxes.png", scale=2)
    print("  Saved: example_two_boxes.png\n")


def example_class_diagram():
    """Scopes with define sections and UML-style connectors"""
    print("Example 2: Class Diagram")

    input_text = """
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
    radius: float

    [Square]:
    define:
    side: float
    """

    generator = DiagramGenerator()
    generator.save_png(input_text, "example_class_diagram.png", scale=2)
    print("  Saved: example_class_diagram.png\n")


def example_nested_services():
    """Nested scopes, right alignment and aliases"""
    print("Example 3: Nested Services")

    input_text = """
    layout:
    [Browser] ... [{db} Database]
    [Backend]
    relate:
    [Browser] -> [Backend]
    [Backend.API] => {db}

    [Backend]:
    layout:
    [API] [Worker]
    relate:
    [API] -o [Worker]

    {db}:
    define:
    users
    orders
    """

    generator = DiagramGenerator()
    generator.save_png(input_text, "example_nested_services.png", scale=2)
    print("  Saved: example_nested_services.png\n")


def example_debug_trace():
    """Render with tracing enabled and print the trace summary"""
    print("Example 4: Debug Trace")

    input_text = """
    layout:
    [A] [B]
    [C]
    relate:
    [A] -> [B]
    [A] -- [C]
    """

    generator = DiagramGenerator()
    generator.save_png(input_text, "example_debug.png", scale=2, debug=True)
    print(generator.get_trace().summary())
    print("  Saved: example_debug.png\n")


if __name__ == "__main__":
    print("=" * 60)
    print("BOXFLOW EXAMPLES")
    print("=" * 60 + "\n")

    example_two_boxes()
    example_class_diagram()
    example_nested_services()
    example_debug_trace()

    print("=" * 60)
    print("All examples generated successfully!")
    print("=" * 60)
