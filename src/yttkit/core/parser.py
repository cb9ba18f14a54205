"""
Template parsing pipeline.

text -> annotation extraction -> PyYAML (AST builder) or, when PyYAML
rejects the body and strict mode is off, the fallback parser -> DocumentNode.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from .builder import build_ast
from .config import ParseOptions
from .delegate import load_yaml
from .errors import ParseError, make_parse_error, source_snippet
from .fallback import fallback_parse
from .ir import DocumentNode, Node
from .scanner import ScanResult, extract_annotations

logger = logging.getLogger(__name__)


def parse_template(
    text: str,
    options: ParseOptions | None = None,
    file: Path | None = None,
) -> DocumentNode:
    """
    Parse ytt template text into a DocumentNode.

    Args:
        text: Template source
        options: Parse options; ``strict`` turns YAML errors into ParseError
        file: Optional source path, used in error messages only

    Returns:
        DocumentNode with document annotations and content

    Raises:
        ParseError: If strict mode is on and the YAML body is invalid
    """
    options = options or ParseOptions()
    lines = text.split("\n")
    scan = extract_annotations(lines)

    content = _parse_content(scan, lines, options, file)
    return DocumentNode(annotations=scan.document_annotations, content=content)


def _parse_content(
    scan: ScanResult,
    lines: list[str],
    options: ParseOptions,
    file: Path | None,
) -> Node | None:
    if not scan.yaml_text.strip():
        return None

    try:
        tree = load_yaml(scan.yaml_text)
    except yaml.YAMLError as e:
        if options.strict:
            raise _to_parse_error(e, scan, lines, file) from e
        logger.debug("YAML body rejected, using fallback parser: %s", e)
        return fallback_parse(scan.yaml_text, scan.inline_annotations, scan.annotation_columns)

    if tree is None:
        return None
    return build_ast(tree, scan.yaml_text, scan.inline_annotations, scan.annotation_columns)


def _to_parse_error(
    error: yaml.YAMLError,
    scan: ScanResult,
    lines: list[str],
    file: Path | None,
) -> ParseError:
    message = f"Failed to parse YAML: {error}"
    mark = getattr(error, "problem_mark", None)
    if mark is None:
        return make_parse_error(message, line=scan.yaml_start + 1, column=1, file=file)

    # Marks count from the first YAML line; report positions in the template
    line = scan.yaml_start + mark.line + 1
    return make_parse_error(
        message,
        line=line,
        column=mark.column + 1,
        snippet=source_snippet(lines, line),
        file=file,
    )
