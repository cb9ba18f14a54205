"""
Line classification and annotation tokenizing.

An annotation line is a comment that starts with ``#@`` followed by at least
one space, optionally indented::

    #@ load("@ytt:data", "data")
    ---
    metadata:
      #@ if data.values.enabled:
      name: #@ data.values.app_name
      #@ end

The same marker after a value on a mapping line introduces an inline
expression (``name: #@ data.values.app_name`` above).
"""

from __future__ import annotations

import re

from .ir import BLOCK_KEYWORDS, Annotation, AnnotationKind

ANNOTATION_MARKER = "#@"
DOCUMENT_SEPARATOR = "---"

_ANNOTATION_LINE = re.compile(r"^\s*#@\s+")
_ANNOTATION_CONTENT = re.compile(r"^\s*#@\s+(.+)$")
# Continuation lines of a multi-line block keep everything after one space
_CONTINUATION_CONTENT = re.compile(r"^\s*#@\s?(.*)$")
_BLOCK = re.compile(r"^(%s)(?:[\s:].*)?$" % "|".join(BLOCK_KEYWORDS), re.DOTALL)
_INLINE = re.compile(r"^(.*?)\s*#@\s+(.+)$")


def is_annotation_line(line: str) -> bool:
    """Check if a line is a ``#@`` annotation comment."""
    return _ANNOTATION_LINE.match(line) is not None


def is_separator(line: str) -> bool:
    """Check if a line is the ``---`` document separator."""
    return line.strip() == DOCUMENT_SEPARATOR


def indent_of(line: str) -> int:
    """Count leading whitespace characters; blank lines report -1."""
    stripped = line.lstrip()
    if not stripped:
        return -1
    return len(line) - len(stripped)


def annotation_content(line: str) -> str | None:
    """
    Strip the marker from an annotation line.

    Returns:
        Everything after ``#@`` and its spaces, or None when nothing follows
    """
    match = _ANNOTATION_CONTENT.match(line)
    if match is None:
        return None
    return match.group(1)


def continuation_content(line: str) -> str:
    """Strip the marker and a single space from a block continuation line."""
    match = _CONTINUATION_CONTENT.match(line)
    if match is None:
        return line
    return match.group(1)


def classify(content: str) -> Annotation:
    """
    Classify annotation content (the text after the marker).

    First match wins: ``load(`` calls are LOAD, anything mentioning
    ``data/values`` is SCHEMA, a leading control word is BLOCK, and the rest
    is opaque CODE.

    Args:
        content: Annotation text with the marker removed

    Returns:
        Annotation with kind, trimmed text and (for BLOCK) keyword
    """
    text = content.strip()

    if text.startswith("load("):
        return Annotation(kind=AnnotationKind.LOAD, text=text)

    if "data/values" in text:
        return Annotation(kind=AnnotationKind.SCHEMA, text=text)

    match = _BLOCK.match(text)
    if match:
        return Annotation(kind=AnnotationKind.BLOCK, text=text, keyword=match.group(1))

    return Annotation(kind=AnnotationKind.CODE, text=text)


def classify_line(line: str) -> Annotation | None:
    """Classify an annotation line; a bare ``#@ `` yields None."""
    content = annotation_content(line)
    if content is None or not content.strip():
        return None
    return classify(content)


def extract_inline(value_text: str) -> tuple[Annotation | None, str]:
    """
    Split a value on the first inline ``#@`` marker.

    Args:
        value_text: Text of a value, or of a whole ``key: value`` line

    Returns:
        Tuple of (EXPRESSION annotation or None, text before the marker).
        Without a marker the original text comes back unchanged.
    """
    match = _INLINE.match(value_text)
    if match is None:
        return None, value_text

    expression = Annotation(kind=AnnotationKind.EXPRESSION, text=match.group(2).strip())
    return expression, match.group(1).strip()
