"""
AST construction from the generic YAML tree.

Walks the position-carrying variants produced by :mod:`yttkit.core.delegate`
together with the YAML section's text and turns them into ``ir`` nodes.
Annotations are merged in by line position:

- an inline ``#@`` after a mapping value becomes that entry's EXPRESSION;
- annotation lines recorded by the extraction pass attach to the entry
  whose key follows them, except ``end`` which closes the entry before it.
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from dataclasses import dataclass

from .annotations import extract_inline
from .delegate import YamlMapping, YamlScalar, YamlSequence, YamlValue
from .ir import Annotation, MapEntry, MappingNode, Node, ScalarNode, SequenceNode

logger = logging.getLogger(__name__)


@dataclass
class EntryAnchor:
    """A mapping entry with the 0-based line and column of its key."""

    line: int
    column: int
    entry: MapEntry


def attach_line_annotations(
    anchors: list[EntryAnchor],
    inline_annotations: dict[int, Annotation],
    annotation_columns: dict[int, int] | None = None,
) -> None:
    """
    Attach annotation lines from the YAML section to mapping entries.

    Annotation order inside each entry follows source line order: leading
    annotations first, then whatever the key line itself carries, then
    trailing ``end`` annotations.

    An ``end`` line closes the nearest preceding entry whose key is not
    indented deeper than the ``end`` itself, so a block opened around a
    nested mapping is closed on that mapping rather than its last child.

    Args:
        anchors: Entries with key lines, in document order
        inline_annotations: Annotations keyed by YAML line offset
        annotation_columns: Indentation of each annotation line, keyed like
            inline_annotations
    """
    if not inline_annotations:
        return

    if not anchors:
        for offset in sorted(inline_annotations):
            logger.warning(
                "Dropping annotation on YAML line %d, no mapping entry to attach it to: %s",
                offset + 1,
                inline_annotations[offset].text,
            )
        return

    ordered = sorted(anchors, key=lambda anchor: anchor.line)
    lines = [anchor.line for anchor in ordered]
    columns = annotation_columns or {}
    leading: dict[int, int] = {}

    for offset in sorted(inline_annotations):
        annotation = inline_annotations[offset]

        if annotation.is_block_end:
            before = max(bisect_left(lines, offset) - 1, 0)
            ordered[_closing_anchor(ordered, before, columns.get(offset))].entry.annotations.append(annotation)
            continue

        # Past the last key: lead the last entry
        after = min(bisect_right(lines, offset), len(ordered) - 1)
        entry = ordered[after].entry
        position = leading.get(id(entry), 0)
        entry.annotations.insert(position, annotation)
        leading[id(entry)] = position + 1


def _closing_anchor(ordered: list[EntryAnchor], before: int, indent: int | None) -> int:
    if indent is None:
        return before
    for index in range(before, -1, -1):
        if ordered[index].column <= indent:
            return index
    return before


def _inline_value_end(value: YamlValue) -> tuple[int, int] | None:
    """
    Where text after a value starts, for values written inline after their key.

    Block collections and block scalars begin on later lines, so their
    key line is searched from the key; None signals that case.
    """
    if isinstance(value, YamlScalar):
        if value.empty or value.block:
            return None
        return value.end_line, value.end_column
    if value.flow:
        return value.end_line, value.end_column
    return None


class AstBuilder:
    """
    Converts a generic YAML tree into ``ir`` nodes.

    Each instance handles one parse; anchors collected while converting are
    used for the annotation merge at the end of :meth:`build`.
    """

    def __init__(
        self,
        yaml_text: str,
        inline_annotations: dict[int, Annotation],
        annotation_columns: dict[int, int] | None = None,
    ):
        """
        Initialize builder.

        Args:
            yaml_text: The blanked YAML section the tree was parsed from
            inline_annotations: Annotation lines keyed by YAML line offset
            annotation_columns: Indentation of each annotation line
        """
        self.lines = yaml_text.split("\n")
        self.inline_annotations = inline_annotations
        self.annotation_columns = annotation_columns or {}
        self.anchors: list[EntryAnchor] = []

    def build(self, value: YamlValue) -> Node:
        """Convert the tree and merge annotations into its mapping entries."""
        node = self._convert(value)
        attach_line_annotations(self.anchors, self.inline_annotations, self.annotation_columns)
        return node

    def _convert(self, value: YamlValue) -> Node:
        if isinstance(value, YamlScalar):
            return ScalarNode(value=value.value)
        if isinstance(value, YamlSequence):
            return SequenceNode(items=[self._convert(item) for item in value.items])
        return self._convert_mapping(value)

    def _convert_mapping(self, mapping: YamlMapping) -> MappingNode:
        node = MappingNode()
        for pair in mapping.pairs:
            entry = MapEntry(key=pair.key)
            # Anchor before descending so parents precede children on a shared line
            self.anchors.append(EntryAnchor(line=pair.line, column=pair.column, entry=entry))
            entry.value = self._convert(pair.value)

            search_line, search_from = pair.line, pair.key_end_column
            end = _inline_value_end(pair.value)
            if end is not None:
                end_line, end_column = end
                if end_line == pair.line:
                    search_from = max(search_from, end_column)
                else:
                    search_line, search_from = end_line, end_column

            text = self._line(search_line)
            if mapping.flow and search_line == mapping.end_line:
                # Comments after the closing brace belong to the enclosing entry
                text = text[: mapping.end_column]
            expression, _ = extract_inline(text[search_from:])
            if expression is not None:
                entry.annotations.append(expression)
                if isinstance(pair.value, YamlScalar) and pair.value.empty:
                    entry.value = None

            node.entries.append(entry)
        return node

    def _line(self, index: int) -> str:
        if 0 <= index < len(self.lines):
            return self.lines[index]
        return ""


def build_ast(
    value: YamlValue,
    yaml_text: str,
    inline_annotations: dict[int, Annotation],
    annotation_columns: dict[int, int] | None = None,
) -> Node:
    """
    Convenience function to build an AST from a generic YAML tree.

    Args:
        value: Root variant from :func:`yttkit.core.delegate.load_yaml`
        yaml_text: The YAML text the tree came from
        inline_annotations: Annotation lines keyed by YAML line offset
        annotation_columns: Indentation of each annotation line

    Returns:
        Root node with annotations attached
    """
    return AstBuilder(yaml_text, inline_annotations, annotation_columns).build(value)
