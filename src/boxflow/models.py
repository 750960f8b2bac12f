"""
Data models for parsed diagram sources.

This module contains the records produced by the parser: one Source per
scope, holding its define, layout and relate sections and its nested
Sources. The layout engine reads these; nothing modifies them once
parsing has finished.

Classes:
    DefineSection: Free text content with horizontal rule positions.
    LayoutRecord: One entry of a layout row (label and/or alias).
    LayoutRow: Left-aligned and right-aligned records of one row.
    LayoutSection: Ordered layout rows of a scope.
    RelateRecord: One directed relation between two terms.
    RelateSection: Ordered relations of a scope.
    Source: A scope with its sections and nested scopes.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

PIPE = "|"
MISSING_CONTENT_MESSAGE = "No layout OR define section."


@dataclass
class DefineSection:
    """
    Text content of a scope.

    Attributes:
        lines: Text lines in order.
        horizontal_rules: Positions of horizontal rules; a value of n means
            the rule sits after the first n lines.
    """

    lines: List[str] = field(default_factory=list)
    horizontal_rules: List[int] = field(default_factory=list)

    def add_line(self, line: str) -> None:
        if line:
            self.lines.append(line)

    def add_rule(self) -> None:
        # Two rules in a row collapse into one
        position = len(self.lines)
        if self.horizontal_rules and self.horizontal_rules[-1] == position:
            return
        self.horizontal_rules.append(position)


@dataclass
class LayoutRecord:
    """
    A scope placed in a layout row.

    Attributes:
        label: Scope label, or None for a bare alias entry.
        alias: Alias including its braces (e.g. "{a}"), or None.
    """

    label: Optional[str]
    alias: Optional[str] = None


@dataclass
class LayoutRow:
    """A row of records, split into left- and right-aligned groups."""

    left_align: List[LayoutRecord] = field(default_factory=list)
    right_align: List[LayoutRecord] = field(default_factory=list)

    def all(self) -> List[LayoutRecord]:
        return self.left_align + self.right_align

    def find_alias(self, alias: str) -> Optional[LayoutRecord]:
        for record in self.all():
            if record.alias == alias:
                return record
        return None


@dataclass
class LayoutSection:
    rows: List[LayoutRow] = field(default_factory=list)

    def find_alias(self, alias: str) -> Optional[LayoutRecord]:
        for row in self.rows:
            record = row.find_alias(alias)
            if record is not None:
                return record
        return None

    def records(self) -> Iterator[LayoutRecord]:
        for row in self.rows:
            yield from row.all()


@dataclass
class RelateRecord:
    """
    A relation from one term to another.

    Terms are stored with scope brackets removed; aliases keep their braces.

    Attributes:
        start_label: Starting scope label, alias, or alias-prefixed path.
        arrow_token: The arrow text between the terms (e.g. "->").
        end_label: Ending scope label, alias, or alias-prefixed path.
    """

    start_label: str
    arrow_token: str
    end_label: str


@dataclass
class RelateSection:
    records: List[RelateRecord] = field(default_factory=list)


@dataclass
class Source:
    """
    One scope of a parsed diagram.

    The root Source has no label. A Source is valid when it has a define
    or a layout section.

    Attributes:
        label: Scope label (None for the root).
        alias: Alias bound to this scope, including braces.
        define: Define section, if any.
        layout: Layout section, if any.
        relate: Relate section, if any.
        nested_sources: Child scopes in declaration order.
        error_messages: Validation and reference errors for this scope
            and, after validation, its descendants.
    """

    label: Optional[str] = None
    alias: Optional[str] = None
    define: Optional[DefineSection] = None
    layout: Optional[LayoutSection] = None
    relate: Optional[RelateSection] = None
    nested_sources: List["Source"] = field(default_factory=list)
    error_messages: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.error_messages)

    def add_error(self, message: str) -> None:
        self.error_messages.append(message)

    def find_labeled_source(self, label: Optional[str]) -> Optional["Source"]:
        """Return the direct child with this label (current level only)."""
        if label is None:
            return None
        for nested in self.nested_sources:
            if nested.label == label:
                return nested
        return None

    def walk(self) -> Iterator["Source"]:
        """Yield this source and all descendants, depth first."""
        yield self
        for nested in self.nested_sources:
            yield from nested.walk()

    def validate(self) -> None:
        """
        Check that every scope has something to render.

        Child messages are copied up with the child's label attached, so
        the root ends up holding every error in the tree.
        """
        if self.layout is None and self.define is None:
            self.add_error(MISSING_CONTENT_MESSAGE)
        for nested in self.nested_sources:
            nested.validate()
            for message in nested.error_messages:
                self.add_error(f"{message} Section: '{nested.label}'.")
