"""
Node types for parsed ytt templates.

A parse produces exactly one ``DocumentNode``. Document-level annotations are
the ``#@`` lines that appear before the ``---`` separator; everything after
the separator becomes a tree of mappings, sequences and scalars whose mapping
entries carry the annotations found around them.

The models are plain mutable value trees: callers that edit a document (for
example rewriting a ``load`` or a multi-line assignment) change
``Annotation.text`` or replace ``MapEntry.value`` in place and re-serialize.
Nodes never hold a reference to their parent.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class AnnotationKind(str, Enum):
    """Classification of a ``#@`` annotation."""

    LOAD = "load"
    EXPRESSION = "expression"
    BLOCK = "block"
    SCHEMA = "schema"
    CODE = "code"


BLOCK_KEYWORDS = ("if", "for", "def", "end", "else", "elif")


class Annotation(BaseModel):
    """
    A directive extracted from a ``#@`` comment.

    ``text`` is the directive without the marker. ``keyword`` is only set
    for BLOCK annotations and holds the control word (``if``, ``for``,
    ``def``, ``end``, ``else`` or ``elif``).

    Examples:
        - load("@ytt:data", "data")           LOAD
        - if data.values.enabled:             BLOCK, keyword "if"
        - data.values.app_name                EXPRESSION (after a key)
        - allowed = {\\n "a": 1\\n}           CODE spanning several lines
    """

    kind: AnnotationKind
    text: str
    keyword: str | None = None

    @property
    def is_block_end(self) -> bool:
        """Check if this annotation closes an if/for/def block."""
        return self.kind == AnnotationKind.BLOCK and self.keyword == "end"

    @property
    def is_multiline(self) -> bool:
        """Check if the directive text spans several comment lines."""
        return "\n" in self.text


ScalarValue = Union[str, int, float, bool, None]


class ScalarNode(BaseModel):
    """A null, string, number or boolean value."""

    type: Literal["scalar"] = "scalar"
    value: ScalarValue = None


class MapEntry(BaseModel):
    """
    One ``key: value`` pair of a mapping.

    A ``None`` value together with an EXPRESSION annotation means the value
    is supplied by that expression rather than by literal data.
    """

    key: str
    value: Node | None = None
    annotations: list[Annotation] = Field(default_factory=list)

    @property
    def expression(self) -> Annotation | None:
        """Get the inline expression supplying this entry's value, if any."""
        for annotation in self.annotations:
            if annotation.kind == AnnotationKind.EXPRESSION:
                return annotation
        return None


class MappingNode(BaseModel):
    """Ordered mapping; entries keep source order and duplicate keys."""

    type: Literal["mapping"] = "mapping"
    entries: list[MapEntry] = Field(default_factory=list)

    def get(self, key: str) -> MapEntry | None:
        """Get the first entry with the given key."""
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def keys(self) -> list[str]:
        """Get entry keys in source order."""
        return [entry.key for entry in self.entries]


class SequenceNode(BaseModel):
    """Ordered list of nodes."""

    type: Literal["sequence"] = "sequence"
    items: list[Node] = Field(default_factory=list)


Node = Annotated[Union[ScalarNode, MappingNode, SequenceNode], Field(discriminator="type")]


class DocumentNode(BaseModel):
    """Root of a parse result."""

    type: Literal["document"] = "document"
    annotations: list[Annotation] = Field(default_factory=list)
    content: Node | None = None


MapEntry.model_rebuild()
MappingNode.model_rebuild()
SequenceNode.model_rebuild()
DocumentNode.model_rebuild()
