"""
Indentation-based fallback parser.

Used when PyYAML rejects a template body and strict mode is off. It reads
``key: value`` and ``- item`` lines with an indentation stack and produces
the same node types as the regular builder, so a broken template still
yields its keys and annotations. The result is best-effort: it does not
promise the tree PyYAML would have built for valid YAML.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

import yaml

from .annotations import extract_inline, indent_of
from .builder import EntryAnchor, attach_line_annotations
from .ir import Annotation, MapEntry, MappingNode, Node, ScalarNode, ScalarValue, SequenceNode

logger = logging.getLogger(__name__)

_KEY_VALUE = re.compile(r"""^(?P<key>"[^"]*"|'[^']*'|[^\s#'"][^:]*?):(?:\s+(?P<value>.*))?$""")


@dataclass
class _Frame:
    """
    An open container on the indentation stack.

    ``placeholder`` marks the empty mapping opened by a lone ``-``; it turns
    into a nested sequence if the next item line is another dash.
    """

    node: MappingNode | SequenceNode
    indent: int
    placeholder: bool = False
    parent: SequenceNode | None = None


def coerce_scalar(text: str) -> ScalarValue:
    """Resolve a plain value the way YAML would, keeping the text otherwise."""
    try:
        value = yaml.safe_load(text)
    except (yaml.YAMLError, ValueError, KeyError, AttributeError, TypeError):
        # Includes values an explicit tag rejects, such as `!!int abc`
        return text
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return text


def _unquote(key: str) -> str:
    if len(key) >= 2 and key[0] == key[-1] and key[0] in "\"'":
        return key[1:-1]
    return key


def _slot(sequence: SequenceNode, node: Node) -> int:
    return next(index for index, item in enumerate(sequence.items) if item is node)


def _is_dash(stripped: str) -> bool:
    return stripped == "-" or stripped.startswith("- ")


class FallbackParser:
    """
    Hand-rolled parser for YAML sections PyYAML cannot read.

    Each instance handles one parse.
    """

    def __init__(
        self,
        yaml_text: str,
        inline_annotations: dict[int, Annotation],
        annotation_columns: dict[int, int] | None = None,
    ):
        """
        Initialize parser.

        Args:
            yaml_text: The blanked YAML section
            inline_annotations: Annotation lines keyed by YAML line offset
            annotation_columns: Indentation of each annotation line
        """
        self.lines = yaml_text.split("\n")
        self.inline_annotations = inline_annotations
        self.annotation_columns = annotation_columns or {}
        self.anchors: list[EntryAnchor] = []
        self.stack: list[_Frame] = []

    def parse(self) -> Node:
        """
        Parse the YAML section.

        Returns:
            Root mapping (or sequence when the first content line is a dash)
        """
        first = self._next_content(-1)
        root: MappingNode | SequenceNode
        if first is not None and _is_dash(self.lines[first].strip()):
            root = SequenceNode()
        else:
            root = MappingNode()
        self.stack = [_Frame(node=root, indent=-1)]

        for index, line in enumerate(self.lines):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue

            indent = indent_of(line)
            if _is_dash(stripped):
                self._item_line(index, indent, stripped[1:].strip())
                continue

            match = _KEY_VALUE.match(stripped)
            if match is None:
                logger.debug("Fallback parser skipping line %d: %s", index + 1, stripped)
                continue

            self._pop_while(lambda frame: frame.indent >= indent)
            self._entry_line(index, indent, _unquote(match.group("key")), match.group("value") or "")

        while len(self.stack) > 1:
            self._pop()

        attach_line_annotations(self.anchors, self.inline_annotations, self.annotation_columns)
        return root

    def _entry_line(self, index: int, indent: int, key: str, value_text: str) -> MapEntry | None:
        frame = self.stack[-1]
        if isinstance(frame.node, SequenceNode):
            logger.debug("Fallback parser: key %r directly inside a sequence, skipped", key)
            return None
        frame.placeholder = False

        expression, clean = extract_inline(value_text)
        entry = MapEntry(
            key=key,
            value=ScalarNode(value=coerce_scalar(clean)) if clean else None,
            annotations=[expression] if expression else [],
        )
        frame.node.entries.append(entry)
        self.anchors.append(EntryAnchor(line=index, column=indent, entry=entry))

        if not clean and expression is None:
            following = self._next_content(index)
            if following is not None:
                next_line = self.lines[following]
                if indent_of(next_line) > indent and not _is_dash(next_line.strip()):
                    nested = MappingNode()
                    entry.value = nested
                    self.stack.append(_Frame(node=nested, indent=indent))
        return entry

    def _item_line(self, index: int, indent: int, value_text: str) -> None:
        self._pop_while(
            lambda frame: frame.indent > indent
            or (frame.indent == indent and not isinstance(frame.node, SequenceNode))
        )
        sequence = self._sequence_for(indent)
        if sequence is None:
            logger.debug("Fallback parser: no sequence for item on line %d", index + 1)
            return

        if not value_text:
            item = MappingNode()
            sequence.items.append(item)
            self.stack.append(_Frame(node=item, indent=indent + 1, placeholder=True, parent=sequence))
            return

        match = _KEY_VALUE.match(value_text)
        if match is not None:
            item = MappingNode()
            sequence.items.append(item)
            self.stack.append(_Frame(node=item, indent=indent + 1, parent=sequence))
            self._entry_line(index, indent + 2, _unquote(match.group("key")), match.group("value") or "")
            return

        _, clean = extract_inline(value_text)
        sequence.items.append(ScalarNode(value=coerce_scalar(clean) if clean else None))

    def _sequence_for(self, indent: int) -> SequenceNode | None:
        frame = self.stack[-1]

        if isinstance(frame.node, SequenceNode):
            return frame.node

        if frame.placeholder and frame.parent is not None:
            # `-` followed by another dash: the item is a nested sequence
            nested = SequenceNode()
            frame.parent.items[_slot(frame.parent, frame.node)] = nested
            self.stack[-1] = _Frame(node=nested, indent=indent)
            return nested

        if frame.node.entries and frame.node.entries[-1].value is None:
            owner = frame.node.entries[-1]
            if owner.expression is not None:
                return None
            sequence = SequenceNode()
            owner.value = sequence
            self.stack.append(_Frame(node=sequence, indent=indent))
            return sequence

        return None

    def _pop_while(self, predicate: Callable[[_Frame], bool]) -> None:
        while len(self.stack) > 1 and predicate(self.stack[-1]):
            self._pop()

    def _pop(self) -> None:
        frame = self.stack.pop()
        if frame.placeholder and frame.parent is not None:
            # A lone `-` with nothing under it is a null item
            frame.parent.items[_slot(frame.parent, frame.node)] = ScalarNode(value=None)

    def _next_content(self, index: int) -> int | None:
        for following in range(index + 1, len(self.lines)):
            stripped = self.lines[following].strip()
            if stripped and not stripped.startswith("#"):
                return following
        return None


def fallback_parse(
    yaml_text: str,
    inline_annotations: dict[int, Annotation],
    annotation_columns: dict[int, int] | None = None,
) -> Node:
    """
    Convenience function to run the fallback parser.

    Args:
        yaml_text: The blanked YAML section
        inline_annotations: Annotation lines keyed by YAML line offset
        annotation_columns: Indentation of each annotation line

    Returns:
        Best-effort root node
    """
    return FallbackParser(yaml_text, inline_annotations, annotation_columns).parse()
