"""
Serialization of parsed templates back to ytt text.

Output layout:

- document annotations, one ``#@`` line each (multi-line text gets one
  ``#@`` line per text line), then the ``---`` separator;
- for each mapping entry: its leading annotation lines, then
  ``key: #@ expr`` when an expression supplies the value (a literal scalar
  parsed in front of the marker is kept there), otherwise the key with its
  scalar, ``|`` literal block or nested block; then any ``end`` annotations
  closing it;
- sequence items as ``- value`` or a lone ``-`` followed by the nested node.

Scalars go through PyYAML's emitter so that strings which would otherwise
read back as numbers, booleans or null come out quoted.
"""

from __future__ import annotations

import yaml

from .annotations import ANNOTATION_MARKER, DOCUMENT_SEPARATOR, is_annotation_line, is_separator
from .config import StringifyOptions
from .ir import (
    Annotation,
    AnnotationKind,
    DocumentNode,
    MapEntry,
    MappingNode,
    Node,
    ScalarNode,
    ScalarValue,
    SequenceNode,
)

# Literal block lines are indented this much past their key or dash
BLOCK_SCALAR_INDENT = 2

_PLAIN_KEY_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-./")


class _BlockTail(str):
    """Last content line of a ``|`` block; its line break is part of the value."""


def format_scalar(value: ScalarValue) -> str:
    """
    Render a scalar as a single-line YAML token.

    Args:
        value: None, bool, int, float or str

    Returns:
        ``null``/``true``/``42``/``hello`` for values that read back as
        themselves, a quoted form otherwise
    """
    style = '"' if isinstance(value, str) and "\n" in value else None
    dumped = yaml.safe_dump(
        value,
        allow_unicode=True,
        default_style=style,
        width=float("inf"),
    )
    if dumped.endswith("\n...\n"):
        dumped = dumped[: -len("...\n")]
    return dumped.rstrip("\n")


def format_key(key: str) -> str:
    """Render a mapping key, quoting only keys that cannot be written plain."""
    if key and all(char in _PLAIN_KEY_CHARS for char in key) and not key.startswith("-"):
        return key
    return format_scalar(key)


def _literal_block(value: str) -> tuple[str, list[str]] | None:
    """
    Split a multi-line string for a ``|`` block.

    Returns:
        Tuple of (block indicator, content lines), or None when the string
        needs a quoted scalar to survive a re-parse
    """
    if value.endswith("\n"):
        indicator, body = "|", value[:-1]
    else:
        indicator, body = "|-", value

    lines = body.split("\n")
    if not lines[0] or lines[0][0] in " \t" or body.endswith("\n"):
        return None

    for line in lines:
        if line != line.rstrip() or "\t" in line or "\r" in line:
            return None
        if is_annotation_line(line) or is_separator(line):
            return None
    return indicator, lines


class Stringifier:
    """
    Renders a DocumentNode as ytt template text.

    Each call to :meth:`stringify` is independent; the instance only holds
    options.
    """

    def __init__(self, options: StringifyOptions | None = None):
        """
        Initialize stringifier.

        Args:
            options: Indentation and trailing-newline settings
        """
        self.options = options or StringifyOptions()

    @property
    def width(self) -> int:
        return self.options.indent

    def stringify(self, document: DocumentNode) -> str:
        """
        Render a document.

        Args:
            document: Parsed or hand-built document

        Returns:
            Template text; ends with a newline only when configured to
        """
        lines: list[str] = []

        for annotation in document.annotations:
            lines.extend(self._annotation_lines(annotation, ""))

        lines.append(DOCUMENT_SEPARATOR)

        if document.content is not None:
            lines.extend(self._root_lines(document.content))

        text = "\n".join(lines)
        if self.options.trailing_newline or isinstance(lines[-1], _BlockTail):
            text += "\n"
        return text

    def _root_lines(self, node: Node) -> list[str]:
        if isinstance(node, MappingNode):
            return self._mapping_lines(node, 0) if node.entries else ["{}"]
        if isinstance(node, SequenceNode):
            return self._sequence_lines(node, 0) if node.items else ["[]"]
        return self._scalar_lines("", node.value, 0)

    def _annotation_lines(self, annotation: Annotation, indent: str) -> list[str]:
        # Blank lines inside multi-line text keep the space so they stay annotation lines
        return [f"{indent}{ANNOTATION_MARKER} {line}" for line in annotation.text.split("\n")]

    def _scalar_lines(self, prefix: str, value: ScalarValue, indent_level: int) -> list[str]:
        """
        Render ``prefix`` followed by a scalar.

        ``prefix`` is ``"key:"``, ``"-"`` or empty for a root scalar.
        """
        lead = f"{prefix} " if prefix else ""
        if isinstance(value, str) and "\n" in value:
            block = _literal_block(value)
            if block is not None:
                indicator, body = block
                pad = " " * (indent_level + BLOCK_SCALAR_INDENT)
                rendered = [f"{lead}{indicator}"] + [f"{pad}{line}" if line else "" for line in body]
                if indicator == "|":
                    rendered[-1] = _BlockTail(rendered[-1])
                return rendered
        return [f"{lead}{format_scalar(value)}"]

    def _mapping_lines(self, node: MappingNode, indent_level: int) -> list[str]:
        lines: list[str] = []
        for entry in node.entries:
            lines.extend(self._entry_lines(entry, indent_level))
        return lines

    def _entry_lines(self, entry: MapEntry, indent_level: int) -> list[str]:
        indent = " " * indent_level
        lines: list[str] = []

        for annotation in entry.annotations:
            if annotation.kind != AnnotationKind.EXPRESSION and not annotation.is_block_end:
                lines.extend(self._annotation_lines(annotation, indent))

        key = f"{indent}{format_key(entry.key)}:"
        expression = entry.expression
        value = entry.value

        if expression is not None:
            lines.extend(self._expression_lines(key, expression, value, indent_level))
        elif value is None:
            lines.append(key)
        elif isinstance(value, ScalarNode):
            lines.extend(self._scalar_lines(key, value.value, indent_level))
        elif isinstance(value, MappingNode):
            if value.entries:
                lines.append(key)
                lines.extend(self._mapping_lines(value, indent_level + self.width))
            else:
                lines.append(f"{key} {{}}")
        else:
            if value.items:
                lines.append(key)
                lines.extend(self._sequence_lines(value, indent_level + self.width))
            else:
                lines.append(f"{key} []")

        for annotation in entry.annotations:
            if annotation.is_block_end:
                lines.extend(self._annotation_lines(annotation, indent))

        return lines

    def _expression_lines(
        self, key: str, expression: Annotation, value: Node | None, indent_level: int
    ) -> list[str]:
        marker = f"{ANNOTATION_MARKER} {expression.text}"
        if value is None:
            return [f"{key} {marker}"]
        if isinstance(value, ScalarNode):
            # Literal data written before the marker stays in front of it
            return [f"{key} {format_scalar(value.value)} {marker}"]
        if isinstance(value, MappingNode):
            if not value.entries:
                return [f"{key} {{}} {marker}"]
            return [f"{key} {marker}", *self._mapping_lines(value, indent_level + self.width)]
        if not value.items:
            return [f"{key} [] {marker}"]
        return [f"{key} {marker}", *self._sequence_lines(value, indent_level + self.width)]

    def _sequence_lines(self, node: SequenceNode, indent_level: int) -> list[str]:
        indent = " " * indent_level
        lines: list[str] = []

        for item in node.items:
            if isinstance(item, ScalarNode):
                lines.extend(self._scalar_lines(f"{indent}-", item.value, indent_level))
            elif isinstance(item, MappingNode):
                if item.entries:
                    lines.append(f"{indent}-")
                    lines.extend(self._mapping_lines(item, indent_level + self.width))
                else:
                    lines.append(f"{indent}- {{}}")
            else:
                if item.items:
                    lines.append(f"{indent}-")
                    lines.extend(self._sequence_lines(item, indent_level + self.width))
                else:
                    lines.append(f"{indent}- []")

        return lines


def stringify_document(document: DocumentNode, options: StringifyOptions | None = None) -> str:
    """
    Convenience function to render a document.

    Args:
        document: Document to render
        options: Optional stringify options

    Returns:
        Template text
    """
    return Stringifier(options).stringify(document)
