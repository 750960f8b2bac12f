"""
Render traces for boxflow.

A RenderTrace is filled in by DiagramGenerator when called with
debug=True. It holds a snapshot per pipeline stage (parse, layout, route,
render) and, once a surface is drawn on, every draw call together with the
renderer method that issued it.

Traces answer questions such as "why is this outline heavier than that
one" or "which relation produced this polyline" without looking at pixels,
and make targeted assertions in tests cheap.

Usage:
    >>> generator = DiagramGenerator()
    >>> generator.render(text, RecordingSurface(), debug=True)
    >>> trace = generator.get_trace()
    >>> trace.get_stage("layout").data["max_depth"]
    >>> trace.dump_to_file("boxflow_trace.txt")
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Longest value or input excerpt shown before truncating
MAX_VALUE_LENGTH = 100
RULE = "=" * 60


@dataclass
class DrawCall:
    """
    Record of a single call on a drawing surface.

    Attributes:
        operation: Surface method name (e.g., "stroke_rect", "fill_text")
        args: Arguments of the call by name
        source: The renderer method that made the call
                (e.g., "DiagramRenderer.draw_node")
    """

    operation: str
    args: Dict[str, Any]
    source: str

    def __str__(self) -> str:
        rendered = ", ".join(f"{key}={value}" for key, value in self.args.items())
        return f"{self.operation}({rendered}) from {self.source}"


@dataclass
class PipelineStage:
    """
    Data recorded when one pipeline stage finishes.

    Stage names are "parse" (errors, aliases, scope count), "layout"
    (canvas size, node count, depth), "route" (connector count, dropped
    relations) and "render" (draw call count, only when a surface is drawn).
    """

    name: str
    data: Dict[str, Any]

    def __str__(self) -> str:
        lines = [f"=== Stage: {self.name} ==="]
        for key, value in self.data.items():
            text = str(value)
            if len(text) > MAX_VALUE_LENGTH:
                text = text[:MAX_VALUE_LENGTH] + "..."
            lines.append(f"  {key}: {text}")
        return "\n".join(lines)


@dataclass
class RenderTrace:
    """
    Stages and draw calls of one generate, render or save_png call.

    Example:
        >>> generator.render(text, surface, debug=True)
        >>> trace = generator.get_trace()
        >>> outlines = trace.get_calls_by_operation("stroke_rect")
        >>> arrowheads = trace.get_calls_by_source("draw_arrowhead")

    Attributes:
        stages: Stage snapshots in pipeline order
        draw_calls: Surface calls in draw order
        input_text: The diagram text that was processed
    """

    stages: List[PipelineStage] = field(default_factory=list)
    draw_calls: List[DrawCall] = field(default_factory=list)
    input_text: str = ""

    def add_stage(self, name: str, data: Dict[str, Any]) -> None:
        """
        Record a stage snapshot.

        Args:
            name: Stage name (e.g., "route")
            data: Values to keep; copied so later changes do not leak in
        """
        self.stages.append(PipelineStage(name, data.copy()))

    def add_call(self, operation: str, args: Dict[str, Any], source: str) -> None:
        self.draw_calls.append(DrawCall(operation, dict(args), source))

    def get_stage(self, name: str) -> Optional[PipelineStage]:
        """Return the first stage with this name, or None."""
        return next((stage for stage in self.stages if stage.name == name), None)

    def get_calls_by_operation(self, operation: str) -> List[DrawCall]:
        return [call for call in self.draw_calls if call.operation == operation]

    def get_calls_by_source(self, source_substring: str) -> List[DrawCall]:
        """Draw calls whose source contains source_substring."""
        return [call for call in self.draw_calls if source_substring in call.source]

    def summary(self) -> str:
        """Short report: input excerpt, stage names and draw call counts."""
        excerpt = repr(self.input_text[:MAX_VALUE_LENGTH])
        if len(self.input_text) > MAX_VALUE_LENGTH:
            excerpt += "..."
        lines = [
            RULE,
            "RENDER TRACE SUMMARY",
            RULE,
            "",
            f"Input: {excerpt}",
            "",
            f"Pipeline stages: {len(self.stages)}",
        ]
        lines.extend(f"  {stage.name}" for stage in self.stages)
        lines.extend(["", f"Total draw calls: {len(self.draw_calls)}", ""])
        lines.append("Draw calls by operation:")
        counts = Counter(call.operation for call in self.draw_calls)
        lines.extend(f"  {operation}: {count}" for operation, count in counts.most_common())
        return "\n".join(lines)

    def dump(self) -> str:
        """
        Summary followed by every stage and every draw call.

        Large diagrams produce long dumps; write them to a file.
        """
        lines = [self.summary(), "", RULE, "DETAILED TRACE", RULE, ""]
        lines.extend(["PIPELINE STAGES:", "-" * 40])
        for stage in self.stages:
            lines.extend([str(stage), ""])
        lines.extend(["DRAW CALLS:", "-" * 40])
        lines.extend(str(call) for call in self.draw_calls)
        return "\n".join(lines)

    def dump_to_file(self, filename: str) -> None:
        with open(filename, "w", encoding="utf-8") as f:
            f.write(self.dump())
