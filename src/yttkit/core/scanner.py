"""
Annotation extraction pass.

Scans template lines once, pulling ``#@`` annotation lines out of the text so
that what remains is plain YAML. Annotations before the ``---`` separator
belong to the document; annotations after it are recorded by their line
offset within the YAML section and re-attached to mapping entries later.

Extracted lines are blanked rather than removed, so line numbers in the YAML
text stay aligned with the recorded offsets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .annotations import (
    annotation_content,
    classify_line,
    continuation_content,
    indent_of,
    is_annotation_line,
    is_separator,
)
from .ir import Annotation, AnnotationKind

logger = logging.getLogger(__name__)


@dataclass
class MultiLineBlock:
    """
    A CODE annotation assembled from several comment lines.

    Attributes:
        annotation: The CODE annotation; text lines joined by newlines
        start_index: Index of the opening line
        end_index: Index of the last consumed line
    """

    annotation: Annotation
    start_index: int
    end_index: int


@dataclass
class ScanResult:
    """
    Output of the extraction pass.

    Attributes:
        document_annotations: Annotations found before the separator
        yaml_text: Blanked YAML section, lines joined by newlines
        inline_annotations: Annotations inside the YAML section, keyed by
            0-based line offset from the first YAML line
        annotation_columns: Indentation of each recorded annotation line,
            keyed like inline_annotations
        yaml_start: Index of the first YAML line in the original input
    """

    document_annotations: list[Annotation] = field(default_factory=list)
    yaml_text: str = ""
    inline_annotations: dict[int, Annotation] = field(default_factory=dict)
    annotation_columns: dict[int, int] = field(default_factory=dict)
    yaml_start: int = 0

    @property
    def yaml_lines(self) -> list[str]:
        """Get the blanked YAML section split into lines."""
        return self.yaml_text.split("\n")


def _brace_balance(text: str) -> int:
    return text.count("{") - text.count("}")


def detect_multiline_block(lines: list[str], start_index: int) -> MultiLineBlock | None:
    """
    Detect a brace-delimited assignment spanning several annotation lines.

    An opener is an annotation containing ``=`` that either ends with ``{``
    or contains ``= {``. Following annotation lines are consumed until the
    running ``{``/``}`` balance returns to zero::

        #@ allowed_supervisors = {
        #@  "us-east-1": ["us-east-1a"],
        #@ }

    Args:
        lines: All template lines
        start_index: Index of a line known to be an annotation line

    Returns:
        MultiLineBlock when at least two lines form a balanced block,
        None otherwise
    """
    content = annotation_content(lines[start_index])
    if content is None:
        return None

    if "=" not in content or not (content.rstrip().endswith("{") or "= {" in content):
        return None

    balance = _brace_balance(content)
    if balance == 0 and "}" in content:
        # Balanced on one line: `x = {}`
        return None

    block_lines = [content]
    end_index = start_index

    for index in range(start_index + 1, len(lines)):
        if balance == 0:
            break
        line = lines[index]
        if not is_annotation_line(line) or is_separator(line):
            break

        text = continuation_content(line)
        block_lines.append(text)
        balance += _brace_balance(text)
        end_index = index

    if balance != 0:
        logger.debug(
            "Unbalanced block opened at line %d; treating as single annotation",
            start_index + 1,
        )
        return None

    if len(block_lines) < 2:
        return None

    logger.debug("Multi-line block at lines %d-%d", start_index + 1, end_index + 1)
    annotation = Annotation(kind=AnnotationKind.CODE, text="\n".join(block_lines))
    return MultiLineBlock(annotation=annotation, start_index=start_index, end_index=end_index)


def extract_annotations(lines: list[str]) -> ScanResult:
    """
    Separate annotations from YAML content.

    The input list is not modified; blanking happens on a private copy.

    Args:
        lines: Template split on newlines

    Returns:
        ScanResult with document annotations, YAML text and the inline
        annotation offset map
    """
    work = list(lines)
    result = ScanResult()
    in_yaml = False

    index = 0
    while index < len(work):
        line = work[index]

        if is_separator(line):
            if in_yaml:
                logger.warning(
                    "Additional document separator at line %d; "
                    "only the last YAML section is kept",
                    index + 1,
                )
            result.yaml_start = index + 1
            result.inline_annotations = {}
            result.annotation_columns = {}
            in_yaml = True
            index += 1
            continue

        if not is_annotation_line(line):
            index += 1
            continue

        if not in_yaml:
            block = detect_multiline_block(work, index)
            if block is not None:
                result.document_annotations.append(block.annotation)
                for consumed in range(block.start_index, block.end_index + 1):
                    work[consumed] = ""
                index = block.end_index + 1
                continue

            annotation = classify_line(line)
            if annotation is not None:
                result.document_annotations.append(annotation)
        else:
            annotation = classify_line(line)
            if annotation is not None:
                offset = index - result.yaml_start
                result.inline_annotations[offset] = annotation
                result.annotation_columns[offset] = indent_of(line)

        work[index] = ""
        index += 1

    result.yaml_text = "\n".join(work[result.yaml_start :])
    return result
