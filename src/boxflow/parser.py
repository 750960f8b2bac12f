"""
Parser module for diagram sources.

Turns raw text into a Source tree. Parsing is best-effort: it never raises
for any input, and problems are collected as error messages on the result.

Input format:

    layout:
    [A] [{b} Bravo] ... [C]
    relate:
    [A] -> {b}, [C]
    [Bravo]:
        define:
        some text
        |
        more text
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .models import (
    PIPE,
    DefineSection,
    LayoutRecord,
    LayoutRow,
    LayoutSection,
    RelateRecord,
    RelateSection,
    Source,
)

logger = logging.getLogger(__name__)


class ParseError(Exception):
    """Raised on request when a parse produced errors."""

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__("\n".join(self.messages))


@dataclass
class Section:
    """A header line and the body lines below it."""

    header: str
    body: List[str] = field(default_factory=list)


@dataclass
class ReferenceSection:
    """A scope or alias header owning the plain sections that follow it."""

    reference: str
    sections: List[Section] = field(default_factory=list)


@dataclass
class ParseResult:
    """
    Result of parsing source text.

    Attributes:
        source: Root of the Source tree (always present).
        errors: Every error message in the tree, root first.
        alias_index: Alias (with braces) to the Source bound to it.
    """

    source: Source
    errors: List[str] = field(default_factory=list)
    alias_index: Dict[str, Source] = field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def raise_for_errors(self) -> None:
        """
        Raise ParseError if any errors were found.

        Raises:
            ParseError: With every collected message.
        """
        if self.errors:
            raise ParseError(self.errors)


class AliasIndex:
    """
    Where each alias lives in the tree being built.

    Tracks both Sources already bound to an alias and the layout records
    that declare an alias, so lookups do not walk the tree.
    """

    def __init__(self):
        self.sources: Dict[str, Source] = {}
        self.declarations: Dict[str, Tuple[Source, LayoutRecord]] = {}

    def register_source(self, source: Source) -> None:
        if source.alias is not None:
            self.sources.setdefault(source.alias, source)

    def register_layout(self, owner: Source) -> None:
        for record in owner.layout.records():
            if record.alias is not None:
                self.declarations.setdefault(record.alias, (owner, record))


class Parser:
    """Parses diagram text into a Source tree."""

    HEADER_PATTERN = re.compile(r"^(.+):$")
    SCOPE_PATTERN = re.compile(r"^\[(.+)\]$")
    ALIAS_PATTERN = re.compile(r"^\{[^{}]+\}$")
    ALIAS_PATH_PATTERN = re.compile(r"^(\{[^{}]+?\})\.(.*)$")
    LAYOUT_TOKEN_PATTERN = re.compile(r"\[.+?\]|\{.+?\}")
    RECORD_ALIAS_PATTERN = re.compile(r"^(\{[^{}]+?\})(.*)$")
    TERM_PATTERN = re.compile(
        r"\{[^{}]+\}\.\[[^\]]+\]"  # {alias}.[Path]
        r"|\{[^{}]+\}\.[^\s,\[{]+"  # {alias}.Path
        r"|\{[^{}]+\}"  # {alias}
        r"|\[[^\]]+\]"  # [Scope]
    )
    ARROW_PATTERN = re.compile(r"^(.*?)(?=[\[{])")

    LAYOUT_SEPARATOR = "..."
    SECTION_NAMES = ("define", "layout", "relate")

    def parse(self, input_text: str) -> ParseResult:
        """
        Parse input text into a Source tree.

        Args:
            input_text: Diagram text.

        Returns:
            ParseResult with the tree and all error messages.
        """
        root = Source()
        index = AliasIndex()
        sections = self.collapse_sections(self.split_sections(input_text or ""))
        self._add_sections(root, sections, index)
        root.validate()
        return ParseResult(
            source=root,
            errors=list(root.error_messages),
            alias_index=dict(index.sources),
        )

    # ------------------------------------------------------------------
    # Text to sections
    # ------------------------------------------------------------------

    def split_sections(self, input_text: str) -> List[Section]:
        """
        Break text into sections at every header line.

        Lines are un-indented; blank lines and lines before the first
        header are dropped.
        """
        sections: List[Section] = []
        current: Optional[Section] = None
        for raw_line in input_text.split("\n"):
            line = raw_line.strip()
            if not line:
                continue
            match = self.HEADER_PATTERN.match(line)
            if match:
                current = Section(header=match.group(1).strip())
                sections.append(current)
            elif current is not None:
                current.body.append(line)
        return sections

    def collapse_sections(
        self, sections: List[Section]
    ) -> List[Union[Section, ReferenceSection]]:
        """Group plain sections under the scope/alias header before them."""
        collapsed: List[Union[Section, ReferenceSection]] = []
        current_reference: Optional[ReferenceSection] = None
        for section in sections:
            if self.is_scope(section.header):
                current_reference = ReferenceSection(self.open_scope(section.header))
                collapsed.append(current_reference)
            elif self.is_alias(section.header) or self.starts_with_alias(
                section.header
            ):
                current_reference = ReferenceSection(section.header)
                collapsed.append(current_reference)
            elif current_reference is not None:
                current_reference.sections.append(section)
            else:
                collapsed.append(section)
        return collapsed

    # ------------------------------------------------------------------
    # Term helpers
    # ------------------------------------------------------------------

    def is_scope(self, term: str) -> bool:
        return self.SCOPE_PATTERN.match(term) is not None

    def is_alias(self, term: str) -> bool:
        return self.ALIAS_PATTERN.match(term) is not None

    def starts_with_alias(self, term: str) -> bool:
        """True for "{alias}.rest"; False when the whole term is one alias."""
        return self.ALIAS_PATH_PATTERN.match(term) is not None

    def open_scope(self, term: str) -> str:
        """Return term without enclosing [], if it has them."""
        match = self.SCOPE_PATTERN.match(term)
        if match is None:
            return term
        return match.group(1).strip()

    def split_alias_path(self, term: str) -> Tuple[str, str]:
        """Split "{alias}.rest" into ("{alias}", "rest")."""
        match = self.ALIAS_PATH_PATTERN.match(term)
        return match.group(1), match.group(2)

    # ------------------------------------------------------------------
    # Section bodies
    # ------------------------------------------------------------------

    def parse_define_section(self, body: List[str]) -> DefineSection:
        define = DefineSection()
        for line in body:
            line = line.strip()
            if not line:
                continue
            if line.startswith(PIPE):
                define.add_rule()
                line = line[len(PIPE) :].strip()
            if line.endswith(PIPE):
                define.add_line(line[: -len(PIPE)].strip())
                define.add_rule()
            else:
                define.add_line(line)
        return define

    def parse_layout_section(self, body: List[str]) -> LayoutSection:
        layout = LayoutSection()
        for line in body:
            if line:
                layout.rows.append(self.parse_layout_row(line))
        return layout

    def parse_layout_row(self, line: str) -> LayoutRow:
        """Parse "<entries> [... <entries>]" into a LayoutRow."""
        row = LayoutRow()
        parts = line.split(self.LAYOUT_SEPARATOR)
        row.left_align = [self.parse_layout_record(t) for t in self._layout_tokens(parts[0])]
        if len(parts) > 1:
            row.right_align = [
                self.parse_layout_record(t) for t in self._layout_tokens(parts[1])
            ]
        return row

    def _layout_tokens(self, text: str) -> List[str]:
        tokens: List[str] = []
        remaining = text.strip()
        while remaining:
            match = self.LAYOUT_TOKEN_PATTERN.match(remaining)
            if match is None:
                # Unknown term; ignore the rest of this group
                logger.debug("Ignoring unrecognized layout text: %r", remaining)
                break
            tokens.append(match.group(0))
            remaining = remaining[match.end() :].lstrip()
        return tokens

    def parse_layout_record(self, token: str) -> LayoutRecord:
        """Parse "[Label]", "{alias}" or "[{alias} Label]"."""
        if self.is_alias(token):
            return LayoutRecord(label=None, alias=token)
        full_label = self.open_scope(token)
        match = self.RECORD_ALIAS_PATTERN.match(full_label)
        if match is None:
            return LayoutRecord(label=full_label)
        label = match.group(2).strip() or None
        return LayoutRecord(label=label, alias=match.group(1))

    def parse_relate_section(self, body: List[str]) -> RelateSection:
        relate = RelateSection()
        for line in body:
            terms = self.parse_relate_line(line)
            if terms is None:
                logger.debug("Skipping unrecognized relate line: %r", line)
                continue
            start, arrow, ends = terms
            for end in ends:
                relate.records.append(
                    RelateRecord(
                        start_label=self.open_scope(start),
                        arrow_token=arrow,
                        end_label=self.open_scope(end),
                    )
                )
        return relate

    def parse_relate_line(self, line: str) -> Optional[Tuple[str, str, List[str]]]:
        """
        Split "<term> <arrow> <term>(, <term>)*" into its parts.

        Returns:
            (start_term, arrow_token, end_terms), or None if the line does
            not have a start term, an arrow position and at least one end.
        """
        line = line.strip()
        start_match = self.TERM_PATTERN.match(line)
        if start_match is None:
            return None
        rest = line[start_match.end() :]
        arrow_match = self.ARROW_PATTERN.match(rest)
        if arrow_match is None:
            return None
        arrow = arrow_match.group(1).strip()
        ends = [
            term.strip()
            for term in rest[arrow_match.end() :].split(",")
            if self.TERM_PATTERN.fullmatch(term.strip())
        ]
        if not ends:
            return None
        return start_match.group(0), arrow, ends

    # ------------------------------------------------------------------
    # Sections to tree
    # ------------------------------------------------------------------

    def _add_sections(
        self,
        source: Source,
        sections: List[Union[Section, ReferenceSection]],
        index: AliasIndex,
    ) -> None:
        for section in sections:
            if isinstance(section, ReferenceSection):
                self._add_reference_section(source, section, index)
            else:
                self._add_section(source, section, index)

    def _add_reference_section(
        self, source: Source, section: ReferenceSection, index: AliasIndex
    ) -> None:
        reference = section.reference
        if self.is_alias(reference):
            if not self._add_aliased_source(reference, section.sections, index):
                source.add_error(f"Cannot find alias '{reference}'.")
        elif self.starts_with_alias(reference):
            alias, remaining = self.split_alias_path(reference)
            aliased = index.sources.get(alias)
            if aliased is None:
                source.add_error(f"Cannot find alias '{alias}'.")
                return
            self._add_nested_source(
                aliased, self.open_scope(remaining), section.sections, index
            )
        else:
            self._add_nested_source(source, reference, section.sections, index)

    def _add_section(self, source: Source, section: Section, index: AliasIndex) -> None:
        """Attach a define/layout/relate section; the first of each kind wins."""
        name = section.header.lower()
        if name == "define":
            if source.define is None:
                source.define = self.parse_define_section(section.body)
        elif name == "layout":
            if source.layout is None:
                source.layout = self.parse_layout_section(section.body)
                index.register_layout(source)
        elif name == "relate":
            if source.relate is None:
                source.relate = self.parse_relate_section(section.body)
        else:
            logger.debug("Ignoring unknown section header: %r", section.header)

    def _add_nested_source(
        self,
        source: Source,
        label: str,
        sections: List[Section],
        index: AliasIndex,
    ) -> None:
        """
        Add sections to the nested scope at dotted path label.

        An existing child whose label is a prefix of the path takes the
        rest of the path; otherwise a new child is created.
        """
        if not label:
            return
        for nested in source.nested_sources:
            if nested.label is None:
                continue
            if nested.label == label:
                self._add_sections(nested, sections, index)
                return
            prefix = f"{nested.label}."
            if label.startswith(prefix):
                self._add_nested_source(nested, label[len(prefix) :], sections, index)
                return
        nested = Source(label=label)
        source.nested_sources.append(nested)
        self._add_sections(nested, sections, index)

    def _add_aliased_source(
        self, alias: str, sections: List[Section], index: AliasIndex
    ) -> bool:
        """
        Add sections to the scope bound to alias.

        Returns:
            False if no layout in the tree declares the alias.
        """
        aliased = index.sources.get(alias)
        if aliased is None:
            declaration = index.declarations.get(alias)
            if declaration is None:
                return False
            owner, record = declaration
            aliased = owner.find_labeled_source(record.label)
            if aliased is None or aliased.alias is not None:
                aliased = Source(label=record.label)
                owner.nested_sources.append(aliased)
            aliased.alias = alias
            index.register_source(aliased)
        self._add_sections(aliased, sections, index)
        return True


def parse_source(input_text: str) -> ParseResult:
    """
    Convenience function to parse diagram text.

    Args:
        input_text: Diagram text.

    Returns:
        ParseResult with the Source tree and error messages.
    """
    return Parser().parse(input_text)
