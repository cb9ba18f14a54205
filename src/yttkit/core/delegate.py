"""
Generic YAML parsing for template bodies.

PyYAML composes the blanked YAML text into a node graph; this module turns
that graph into a small closed set of variants (scalar, sequence, mapping)
that keep the source positions the AST builder needs to re-attach
annotations. Nothing outside this module touches PyYAML nodes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

import yaml

logger = logging.getLogger(__name__)

_PRIMITIVES = (str, int, float, bool, type(None))
_CONSTRUCT_ERRORS = (yaml.YAMLError, ValueError, KeyError, AttributeError, TypeError)


@dataclass
class YamlScalar:
    """
    A resolved scalar.

    Attributes:
        value: None, bool, int, float or str
        line: 0-based line of the first character
        end_line: 0-based line after the last character
        end_column: 0-based column after the last character
        empty: True for a value-less plain scalar such as ``key:``
        block: True for a ``|`` or ``>`` block scalar
    """

    value: str | int | float | bool | None
    line: int
    end_line: int
    end_column: int
    empty: bool = False
    block: bool = False


@dataclass
class YamlSequence:
    """A block or flow sequence; ``flow`` marks the ``[...]`` form."""

    items: list[YamlValue]
    line: int
    end_line: int = 0
    end_column: int = 0
    flow: bool = False


@dataclass
class YamlPair:
    """
    One mapping pair with the position of its key.

    Attributes:
        key: Key text
        line: 0-based line of the key
        column: 0-based column of the key
        key_end_column: 0-based column after the key
        value: Value variant
    """

    key: str
    line: int
    column: int
    key_end_column: int
    value: YamlValue


@dataclass
class YamlMapping:
    """A mapping; pairs keep source order, duplicates included."""

    pairs: list[YamlPair] = field(default_factory=list)
    line: int = 0
    end_line: int = 0
    end_column: int = 0
    flow: bool = False


YamlValue = Union[YamlScalar, YamlSequence, YamlMapping]


def load_yaml(text: str) -> YamlValue | None:
    """
    Parse YAML text into position-carrying variants.

    Args:
        text: A single YAML document

    Returns:
        The root variant, or None for an empty document

    Raises:
        yaml.YAMLError: If the text is not valid YAML, or an alias refers
            to a collection that contains it
    """
    loader = yaml.SafeLoader(text)
    try:
        node = loader.get_single_node()
        if node is None:
            return None
        return _Converter(loader).convert(node)
    finally:
        loader.dispose()


def _source_text(node: yaml.Node) -> str:
    start, end = node.start_mark, node.end_mark
    if start.buffer is None:
        return str(node.value)
    return start.buffer[start.index : end.index]


class _Converter:
    """Walks one composed node graph, refusing to enter a node twice on a path."""

    def __init__(self, loader: yaml.SafeLoader):
        self.loader = loader
        self.active: set[int] = set()

    def convert(self, node: yaml.Node) -> YamlValue:
        if isinstance(node, yaml.ScalarNode):
            return YamlScalar(
                value=self._construct_scalar(node),
                line=node.start_mark.line,
                end_line=node.end_mark.line,
                end_column=node.end_mark.column,
                empty=node.value == "" and node.style is None,
                block=node.style in ("|", ">"),
            )

        if id(node) in self.active:
            raise yaml.composer.ComposerError(
                None, None, "found a recursive alias", node.start_mark
            )
        self.active.add(id(node))
        try:
            return self._convert_collection(node)
        finally:
            self.active.discard(id(node))

    def _convert_collection(self, node: yaml.Node) -> YamlValue:
        flow = bool(node.flow_style)
        if isinstance(node, yaml.SequenceNode):
            return YamlSequence(
                items=[self.convert(item) for item in node.value],
                line=node.start_mark.line,
                end_line=node.end_mark.line,
                end_column=node.end_mark.column,
                flow=flow,
            )

        mapping = YamlMapping(
            line=node.start_mark.line,
            end_line=node.end_mark.line,
            end_column=node.end_mark.column,
            flow=flow,
        )
        for key_node, value_node in node.value:
            mapping.pairs.append(
                YamlPair(
                    key=self._key_text(key_node),
                    line=key_node.start_mark.line,
                    column=key_node.start_mark.column,
                    key_end_column=key_node.end_mark.column,
                    value=self.convert(value_node),
                )
            )
        return mapping

    def _construct_scalar(self, node: yaml.ScalarNode) -> str | int | float | bool | None:
        try:
            value = self.loader.construct_object(node, deep=True)
        except _CONSTRUCT_ERRORS:
            # Unknown tags and values an explicit tag rejects (`!!int abc`)
            logger.debug("Cannot construct %s at line %d; keeping text", node.tag, node.start_mark.line + 1)
            return node.value

        if isinstance(value, _PRIMITIVES):
            return value
        # Timestamps, binary and other resolved types stay as written
        return node.value

    def _key_text(self, node: yaml.Node) -> str:
        if isinstance(node, yaml.ScalarNode):
            return node.value
        try:
            return str(self.loader.construct_object(node, deep=True))
        except _CONSTRUCT_ERRORS:
            return _source_text(node)
