"""Tests for traversal and annotation editing helpers.

Covers the config-update workflow: find the multi-line supervisors
assignment, rewrite it from data, re-serialize.
"""

from yttkit import StringifyOptions, parse, stringify
from yttkit.core.ir import AnnotationKind
from yttkit.core.query import (
    find_annotation,
    format_code_assignment,
    iter_annotations,
    iter_entries,
    replace_annotation_text,
)

NEW_SUPERVISORS = {
    "us-east-1": ["us-east-1a", "us-east-1b", "us-east-1c"],
    "us-west-1": ["us-west-1a", "us-west-1b"],
    "eu-central-1": "*",
    "ap-south-1": ["ap-south-1a"],
}


class TestIterEntries:
    """Depth-first walk over mapping entries."""

    def test_paths(self) -> None:
        document = parse("---\na:\n  b: 1\nitems:\n  - name: x\nc: 2")
        paths = [path for path, _ in iter_entries(document.content)]
        assert paths == [("a",), ("a", "b"), ("items",), ("items", "[0]", "name"), ("c",)]

    def test_no_content(self) -> None:
        assert list(iter_entries(None)) == []


class TestIterAnnotations:
    """Document annotations first, then entry annotations."""

    def test_order_and_owners(self, config_template: str) -> None:
        found = [(path, annotation.kind) for path, annotation in iter_annotations(parse(config_template))]
        assert found == [
            ((), AnnotationKind.LOAD),
            ((), AnnotationKind.CODE),
            (("name",), AnnotationKind.EXPRESSION),
            (("monitoring",), AnnotationKind.BLOCK),
            (("monitoring",), AnnotationKind.BLOCK),
            (("supervisors",), AnnotationKind.EXPRESSION),
        ]

    def test_kind_filter(self, config_template: str) -> None:
        found = list(iter_annotations(parse(config_template), AnnotationKind.EXPRESSION))
        assert [annotation.text for _, annotation in found] == ["data.values.app_name", "allowed_supervisors"]

    def test_find_annotation(self, config_template: str) -> None:
        document = parse(config_template)
        block = find_annotation(document, "allowed_supervisors", AnnotationKind.CODE)
        assert block is not None
        assert block.is_multiline
        assert find_annotation(document, "does-not-exist") is None


class TestFormatCodeAssignment:
    """Building ``name = {...}`` text from data."""

    def test_nested_lines_get_one_space(self) -> None:
        text = format_code_assignment("allowed", {"a": ["x"], "b": "*"})
        assert text.split("\n") == [
            "allowed = {",
            ' "a": [',
            ' "x"',
            " ],",
            ' "b": "*"',
            "}",
        ]

    def test_single_line_values(self) -> None:
        assert format_code_assignment("x", {}) == "x = {}"
        assert format_code_assignment("n", 3) == "n = 3"


class TestUpdateWorkflow:
    """Edit the supervisors block and write the template back."""

    def test_replace_multiline_block(self, config_template: str) -> None:
        document = parse(config_template)
        new_text = format_code_assignment("allowed_supervisors", NEW_SUPERVISORS)

        changed = replace_annotation_text(document, "allowed_supervisors", new_text, kind=AnnotationKind.CODE)
        assert changed == 1

        output = stringify(document, StringifyOptions(trailing_newline=True))
        assert '#@  "ap-south-1": [' in output
        assert "#@ allowed_supervisors = {" in output
        # The inline expression using the variable is untouched
        assert "supervisors: #@ allowed_supervisors" in output

        reparsed = parse(output)
        assert reparsed == document
        assert reparsed.annotations[1].text == new_text

    def test_replace_counts_every_match(self) -> None:
        document = parse("---\na: #@ data.values.x\nb: #@ data.values.y")
        assert replace_annotation_text(document, "data.values", "z") == 2
        assert stringify(document) == "---\na: #@ z\nb: #@ z"

    def test_replace_without_match(self, config_template: str) -> None:
        document = parse(config_template)
        assert replace_annotation_text(document, "nothing-here", "x") == 0
