"""
Traversal and in-place editing helpers.

Typical config-update workflow::

    document = parse(text)
    replace_annotation_text(
        document,
        "allowed_supervisors",
        format_code_assignment("allowed_supervisors", {"us-east-1": ["us-east-1a"]}),
        kind=AnnotationKind.CODE,
    )
    text = stringify(document)
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

from .ir import Annotation, AnnotationKind, DocumentNode, MapEntry, MappingNode, Node, SequenceNode


def iter_entries(node: Node | None, path: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], MapEntry]]:
    """
    Walk every mapping entry depth-first in source order.

    Sequence positions appear in the path as ``[index]``.

    Args:
        node: Root node (None yields nothing)
        path: Key path of ``node`` itself

    Yields:
        Tuples of (key path including the entry's key, entry)
    """
    if isinstance(node, MappingNode):
        for entry in node.entries:
            entry_path = (*path, entry.key)
            yield entry_path, entry
            yield from iter_entries(entry.value, entry_path)
    elif isinstance(node, SequenceNode):
        for index, item in enumerate(node.items):
            yield from iter_entries(item, (*path, f"[{index}]"))


def iter_annotations(
    document: DocumentNode, kind: AnnotationKind | None = None
) -> Iterator[tuple[tuple[str, ...], Annotation]]:
    """
    Walk document-level annotations, then entry annotations.

    Args:
        document: Parsed document
        kind: Only yield annotations of this kind

    Yields:
        Tuples of (owning key path, annotation); document-level annotations
        have an empty path
    """
    for annotation in document.annotations:
        if kind is None or annotation.kind == kind:
            yield (), annotation

    for path, entry in iter_entries(document.content):
        for annotation in entry.annotations:
            if kind is None or annotation.kind == kind:
                yield path, annotation


def find_annotation(
    document: DocumentNode, contains: str, kind: AnnotationKind | None = None
) -> Annotation | None:
    """Get the first annotation whose text contains a substring."""
    for _, annotation in iter_annotations(document, kind):
        if contains in annotation.text:
            return annotation
    return None


def replace_annotation_text(
    document: DocumentNode,
    contains: str,
    new_text: str,
    kind: AnnotationKind | None = None,
) -> int:
    """
    Rewrite the text of every annotation containing a substring.

    Args:
        document: Document to edit in place
        contains: Substring identifying the annotations
        new_text: Replacement text
        kind: Only touch annotations of this kind

    Returns:
        Number of annotations changed
    """
    changed = 0
    for _, annotation in iter_annotations(document, kind):
        if contains in annotation.text:
            annotation.text = new_text
            changed += 1
    return changed


def format_code_assignment(name: str, value: Any) -> str:
    """
    Build a ``name = {...}`` assignment for a multi-line CODE annotation.

    Nested lines get a single space of indentation, the style hand-written
    templates use inside ``#@`` blocks::

        allowed = {
         "us-east-1": [
         "us-east-1a"
         ],
         "eu-central-1": "*"
        }

    Args:
        name: Variable name
        value: JSON-compatible data

    Returns:
        Assignment text; scalars and empty containers stay on one line
    """
    lines = json.dumps(value, indent=2, ensure_ascii=False).split("\n")
    if len(lines) == 1:
        return f"{name} = {lines[0]}"

    body = [f" {line.strip()}" for line in lines[1:-1]]
    return "\n".join([f"{name} = {lines[0]}", *body, lines[-1]])
