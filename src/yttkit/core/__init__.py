"""Core ytt template handling: node model, annotation scanner, YAML merge, fallback parser, stringifier."""

from . import ir
from .config import ParseOptions, StringifyOptions, YttkitConfig, find_config, load_config
from .errors import ConfigError, ErrorContext, ParseError, YttError
from .parser import parse_template
from .query import (
    find_annotation,
    format_code_assignment,
    iter_annotations,
    iter_entries,
    replace_annotation_text,
)
from .stringifier import Stringifier, stringify_document

__all__ = [
    "ir",
    # Config
    "ParseOptions",
    "StringifyOptions",
    "YttkitConfig",
    "find_config",
    "load_config",
    # Errors
    "ConfigError",
    "ErrorContext",
    "ParseError",
    "YttError",
    # Pipeline
    "parse_template",
    "Stringifier",
    "stringify_document",
    # Editing
    "find_annotation",
    "format_code_assignment",
    "iter_annotations",
    "iter_entries",
    "replace_annotation_text",
]
