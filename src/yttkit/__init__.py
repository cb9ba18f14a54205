"""
yttkit - lossless parsing and re-serialization of ytt YAML templates.

Templates are ordinary YAML carrying ``#@`` annotation comments (loads,
control blocks, inline value expressions, multi-line assignments). ``parse``
keeps both the YAML shape and the annotations; ``stringify`` writes them
back out.
"""

from __future__ import annotations

from ._version import __version__
from .core import ir
from .core.config import ParseOptions, StringifyOptions
from .core.errors import ConfigError, ParseError, YttError
from .core.ir import (
    Annotation,
    AnnotationKind,
    DocumentNode,
    MapEntry,
    MappingNode,
    Node,
    ScalarNode,
    SequenceNode,
)
from .core.parser import parse_template
from .core.stringifier import stringify_document


def parse(text: str, options: ParseOptions | None = None) -> DocumentNode:
    """
    Parse template text.

    Malformed YAML is absorbed by the fallback parser unless
    ``options.strict`` is set, in which case ParseError is raised.
    """
    return parse_template(text, options)


def stringify(document: DocumentNode, options: StringifyOptions | None = None) -> str:
    """Render a document back to template text."""
    return stringify_document(document, options)


__all__ = [
    "__version__",
    "ir",
    "parse",
    "stringify",
    "ParseOptions",
    "StringifyOptions",
    "Annotation",
    "AnnotationKind",
    "DocumentNode",
    "MapEntry",
    "MappingNode",
    "Node",
    "ScalarNode",
    "SequenceNode",
    "YttError",
    "ParseError",
    "ConfigError",
]
