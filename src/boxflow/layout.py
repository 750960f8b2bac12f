"""
Layout module turning a Source tree into positioned boxes.

Layout runs in two passes:
1. Measure (bottom-up): every layout record becomes a MeasuredBox sized to
   fit its label, define text and nested boxes. Rows are packed left to
   right, similar sibling sizes are equalized, and right-aligned entries
   are moved against the shared right edge.
2. Commit (top-down): MeasuredBoxes are frozen into Nodes with relative
   and absolute areas. Nodes are stored in a networkx graph keyed by a
   stable integer id, with separate path and alias indexes.

Uses networkx for:
- Node tree storage (parent -> child edges)
- Depth of nesting (longest path from the root)
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

import networkx as nx

from .config import DEFAULT_CONFIG, DiagramConfig
from .geometry import Area, Point, bounding_size
from .models import LayoutRecord, Source
from .text import (
    DefineLayout,
    LabelLayout,
    TextMeasurer,
    calculate_header_label,
    calculate_text_label,
)

logger = logging.getLogger(__name__)

ROOT_ID = 0


def join_path(path: Optional[str], label: Optional[str]) -> str:
    """Join a dotted path and a label, skipping empty parts."""
    if not path:
        return label or ""
    if not label:
        return path
    return f"{path}.{label}"


@dataclass
class MeasuredBox:
    """
    Working size and position of one box during the measure pass.

    Region heights are kept separately so that growing the box can grow
    the right region: the nested-node region if there is one, else the
    define region, else the label.
    """

    label: Optional[str]
    alias: Optional[str]
    path: str
    label_layout: LabelLayout
    define_layout: Optional[DefineLayout] = None
    children: List["MeasuredBox"] = field(default_factory=list)
    row_index: int = 0
    is_right_aligned: bool = False
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0
    label_height: float = 0
    define_height: Optional[float] = None
    nodes_height: Optional[float] = None
    nested_width: float = 0
    nested_height: float = 0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def area(self) -> Area:
        return Area(self.x, self.y, self.width, self.height)

    def update_width(self, new_width: float) -> float:
        """Widen the box (never narrow it). Returns the change in width."""
        if self.width >= new_width:
            return 0
        delta = new_width - self.width
        self.width = new_width
        return delta

    def update_height(self, new_height: float) -> float:
        """Heighten the box (never shorten it). Returns the change in height."""
        if self.height >= new_height:
            return 0
        delta = new_height - self.height
        self.height = new_height
        if self.nodes_height is not None:
            self.nodes_height += delta
        elif self.define_height is not None:
            self.define_height += delta
        else:
            self.label_height += delta
        return delta


@dataclass(frozen=True)
class Node:
    """
    A placed box.

    Sub-areas (label_area, define_area, node_area) are relative to the
    node's own top-left corner. relative_area is relative to the parent's
    nested-node content origin; absolute_area is in canvas coordinates.
    """

    node_id: int
    label: Optional[str]
    alias: Optional[str]
    path: str
    relative_area: Area
    absolute_area: Area
    label_layout: LabelLayout
    label_area: Area
    define_layout: Optional[DefineLayout] = None
    define_area: Optional[Area] = None
    node_area: Optional[Area] = None
    nodes: Tuple["Node", ...] = ()
    row_index: int = 0
    is_right_aligned: bool = False

    def path_label(self) -> str:
        """Full dotted path of this node, e.g. "Outer.Inner"."""
        return join_path(self.path, self.label)

    def path_prefix(self) -> str:
        return f"{self.label}."

    def absolute_label_area(self) -> Area:
        return self.label_area.offset_by(self.absolute_area.point())

    def absolute_define_area(self) -> Optional[Area]:
        if self.define_area is None:
            return None
        return self.define_area.offset_by(self.absolute_area.point())

    def absolute_node_area(self) -> Optional[Area]:
        if self.node_area is None:
            return None
        return self.node_area.offset_by(self.absolute_area.point())

    def find_label(self, label: Optional[str]) -> Optional["Node"]:
        """Return the node at dotted path label, starting from this node."""
        if label is None or self.label is None:
            return None
        if self.label == label:
            return self
        if not label.startswith(self.path_prefix()):
            return None
        remaining = label[len(self.path_prefix()) :]
        for node in self.nodes:
            found = node.find_label(remaining)
            if found is not None:
                return found
        return None

    def find_alias(self, alias: Optional[str]) -> Optional["Node"]:
        if alias is None:
            return None
        if self.alias == alias:
            return self
        for node in self.nodes:
            found = node.find_alias(alias)
            if found is not None:
                return found
        return None

    def max_depth(self) -> int:
        """Levels of nesting, 1 for a node without nested nodes."""
        return 1 + max((node.max_depth() for node in self.nodes), default=0)

    def walk(self) -> Iterator["Node"]:
        yield self
        for node in self.nodes:
            yield from node.walk()


@dataclass
class LayoutResult:
    """
    Result of the layout pass.

    Attributes:
        nodes: Top-level nodes in layout order.
        graph: Node tree; ids are ints, root is ROOT_ID, each node has a
            "node" attribute.
        path_index: Full dotted path to node id (first node wins).
        alias_index: Alias to node id (first node wins).
        width: Canvas width including canvas padding.
        height: Canvas height including canvas padding.
    """

    nodes: Tuple[Node, ...] = ()
    graph: nx.DiGraph = field(default_factory=nx.DiGraph)
    path_index: Dict[str, int] = field(default_factory=dict)
    alias_index: Dict[str, int] = field(default_factory=dict)
    width: float = 0
    height: float = 0

    def node(self, node_id: int) -> Node:
        return self.graph.nodes[node_id]["node"]

    def node_at_path(self, path: str) -> Optional[Node]:
        node_id = self.path_index.get(path)
        return None if node_id is None else self.node(node_id)

    def node_for_alias(self, alias: str) -> Optional[Node]:
        node_id = self.alias_index.get(alias)
        return None if node_id is None else self.node(node_id)

    def all_nodes(self) -> List[Node]:
        """Every node, parents before children, in layout order."""
        return [node for top in self.nodes for node in top.walk()]

    def max_depth(self) -> int:
        """Deepest nesting level; 1 when nothing is nested."""
        if self.graph.number_of_nodes() <= 1:
            return 1
        return max(1, nx.dag_longest_path_length(self.graph))


class LayoutEngine:
    """
    Computes node geometry for a Source tree.

    Args:
        measurer: Text measurement capability.
        config: Diagram configuration.
    """

    def __init__(self, measurer: TextMeasurer, config: DiagramConfig = DEFAULT_CONFIG):
        self.measurer = measurer
        self.config = config

    def layout(
        self, source: Source, alias_sources: Optional[Dict[str, Source]] = None
    ) -> LayoutResult:
        """
        Lay out a parsed Source tree.

        Args:
            source: Root Source.
            alias_sources: Alias to Source, used for "{alias}" entries
                that carry no label of their own.

        Returns:
            LayoutResult with frozen absolute geometry.
        """
        boxes = self.measure(source, alias_sources=alias_sources or {})
        padding = self.config.canvas_padding
        width, height = bounding_size(box.area() for box in boxes)

        result = LayoutResult(width=width + padding * 2, height=height + padding * 2)
        result.graph.add_node(ROOT_ID, node=None)
        result.nodes = self._commit(boxes, Point(padding, padding), ROOT_ID, result)
        return result

    # ------------------------------------------------------------------
    # Measure pass
    # ------------------------------------------------------------------

    def measure(
        self,
        source: Source,
        path: str = "",
        alias_sources: Optional[Dict[str, Source]] = None,
        _active: Optional[Set[int]] = None,
    ) -> List[MeasuredBox]:
        """
        Measure and pack the boxes of one scope's layout section.

        Returns:
            Sibling boxes with positions relative to the scope's content
            origin, or [] if the scope has no layout.
        """
        if source.layout is None:
            return []
        alias_sources = alias_sources or {}
        active = set() if _active is None else _active
        active.add(id(source))
        path = join_path(path, source.label)
        margin = self.config.scope_margin

        rows: List[List[MeasuredBox]] = []
        all_boxes: List[MeasuredBox] = []
        y = 0.0
        for row_index, row in enumerate(source.layout.rows):
            x = 0.0
            row_height = 0.0
            row_boxes: List[MeasuredBox] = []
            left_count = len(row.left_align)
            for index, record in enumerate(row.all()):
                box = self._measure_record(
                    source, record, path, alias_sources, active
                )
                box.row_index = row_index
                box.is_right_aligned = index >= left_count
                box.x = x
                box.y = y
                row_boxes.append(box)
                x += box.width + margin
                row_height = max(row_height, box.height)
            y += row_height + margin
            rows.append(row_boxes)
            all_boxes.extend(row_boxes)

        if self.config.favor_uniform_node_sizes:
            self.make_sibling_sizes_uniform(all_boxes)
        self.align_right(rows)
        active.discard(id(source))
        return all_boxes

    def _measure_record(
        self,
        source: Source,
        record: LayoutRecord,
        path: str,
        alias_sources: Dict[str, Source],
        active: Set[int],
    ) -> MeasuredBox:
        label = record.label
        if label is None and record.alias is not None:
            related = alias_sources.get(record.alias)
            label = related.label if related is not None else None
        else:
            related = source.find_labeled_source(label)

        if related is not None and id(related) in active:
            logger.warning("Scope '%s' contains itself; drawing it once", label)
            related = None

        nested: List[MeasuredBox] = []
        define = None
        if related is not None:
            nested = self.measure(related, path, alias_sources, active)
            define = related.define

        if define is not None or nested:
            label_layout = calculate_header_label(label, self.measurer, self.config)
        else:
            label_layout = calculate_text_label(label, self.measurer, self.config)

        double_padding = self.config.scope_padding * 2
        box = MeasuredBox(
            label=label,
            alias=record.alias,
            path=path,
            label_layout=label_layout,
            width=label_layout.width + double_padding,
            height=label_layout.height + double_padding,
            label_height=label_layout.height + double_padding,
        )

        if define is not None:
            box.define_layout = DefineLayout.from_section(
                define, self.measurer, self.config
            )
            box.update_width(box.define_layout.width + double_padding)
            box.define_height = box.define_layout.height + double_padding
            box.height += box.define_height

        if nested:
            box.children = nested
            box.nested_width, box.nested_height = bounding_size(
                child.area() for child in nested
            )
            box.update_width(box.nested_width + double_padding)
            box.nodes_height = box.nested_height + double_padding
            box.height += box.nodes_height

        return box

    def make_sibling_sizes_uniform(self, boxes: List[MeasuredBox]) -> None:
        """
        Give siblings of similar size the same size.

        Boxes are visited largest first. A box within the configured
        variance of the running maximum is grown to it (pushing later boxes
        in its row to the right); a box outside the band becomes the new
        running maximum. This yields clusters of equal sizes rather than
        one global size. Heights work the same way, and later rows move
        down by any growth in a row's height.
        """
        if not boxes:
            return
        variance = self.config.uniform_size_variance

        by_width = sorted(boxes, key=lambda box: box.width, reverse=True)
        max_width = by_width[0].width
        for box in by_width:
            if _within_variance(box.width, max_width, variance):
                delta = box.update_width(max_width)
                for other in boxes:
                    if other.row_index == box.row_index and other.x > box.x:
                        other.x += delta
            else:
                max_width = box.width

        row_count = max(box.row_index for box in boxes) + 1
        row_heights = [0.0] * row_count
        new_row_heights = [0.0] * row_count
        for box in boxes:
            row_heights[box.row_index] = max(row_heights[box.row_index], box.height)

        by_height = sorted(boxes, key=lambda box: box.height, reverse=True)
        max_height = by_height[0].height
        for box in by_height:
            if _within_variance(box.height, max_height, variance):
                box.update_height(max_height)
                new_row_heights[box.row_index] = max(
                    new_row_heights[box.row_index], box.height
                )
            else:
                max_height = box.height

        for row_index in range(row_count):
            delta = new_row_heights[row_index] - row_heights[row_index]
            if delta <= 0:
                continue
            for box in boxes:
                if box.row_index > row_index:
                    box.y += delta

    def align_right(self, rows: List[List[MeasuredBox]]) -> None:
        """Move right-aligned boxes of each row against the widest row's edge."""
        all_boxes = [box for row in rows for box in row]
        if not all_boxes:
            return
        max_x = max(box.right for box in all_boxes)
        margin = self.config.scope_margin
        for row in rows:
            right = max_x
            for box in reversed(row):
                if not box.is_right_aligned:
                    break
                box.x = right - box.width
                right -= box.width + margin

    # ------------------------------------------------------------------
    # Commit pass
    # ------------------------------------------------------------------

    def _commit(
        self,
        boxes: List[MeasuredBox],
        origin: Point,
        parent_id: int,
        result: LayoutResult,
    ) -> Tuple[Node, ...]:
        nodes = []
        for box in boxes:
            node_id = result.graph.number_of_nodes()
            # Reserve the id before children take theirs
            result.graph.add_node(node_id, node=None)
            result.graph.add_edge(parent_id, node_id)
            # Parents are indexed before their children
            if box.label is not None:
                result.path_index.setdefault(join_path(box.path, box.label), node_id)
            if box.alias is not None:
                result.alias_index.setdefault(box.alias, node_id)

            relative_area = box.area()
            absolute_area = relative_area.offset_by(origin)
            label_area = Area(0, 0, box.width, box.label_height)
            define_area = None
            node_area = None
            top = box.label_height
            if box.define_height is not None:
                define_area = Area(0, top, box.width, box.define_height)
                top += box.define_height
            children: Tuple[Node, ...] = ()
            if box.nodes_height is not None:
                pad_x = (box.width - box.nested_width) / 2
                pad_y = (box.nodes_height - box.nested_height) / 2
                node_area = Area(
                    0,
                    top,
                    box.width,
                    box.nodes_height,
                    padding_left=pad_x,
                    padding_right=pad_x,
                    padding_top=pad_y,
                    padding_bottom=pad_y,
                )
                content_origin = node_area.offset_by(absolute_area.point()).content_origin()
                children = self._commit(box.children, content_origin, node_id, result)

            node = Node(
                node_id=node_id,
                label=box.label,
                alias=box.alias,
                path=box.path,
                relative_area=relative_area,
                absolute_area=absolute_area,
                label_layout=box.label_layout,
                label_area=label_area,
                define_layout=box.define_layout,
                define_area=define_area,
                node_area=node_area,
                nodes=children,
                row_index=box.row_index,
                is_right_aligned=box.is_right_aligned,
            )
            result.graph.nodes[node_id]["node"] = node
            nodes.append(node)
        return tuple(nodes)


def _within_variance(size: float, maximum: float, variance: float) -> bool:
    if maximum <= 0:
        return True
    return 1 - (size / maximum) <= variance


def compute_layout(
    source: Source,
    measurer: TextMeasurer,
    config: DiagramConfig = DEFAULT_CONFIG,
    alias_sources: Optional[Dict[str, Source]] = None,
) -> LayoutResult:
    """
    Convenience function to lay out a Source tree.

    Args:
        source: Root Source from the parser.
        measurer: Text measurement capability.
        config: Diagram configuration.
        alias_sources: Alias index from the parse result.

    Returns:
        LayoutResult with absolute node geometry.
    """
    return LayoutEngine(measurer, config).layout(source, alias_sources)
