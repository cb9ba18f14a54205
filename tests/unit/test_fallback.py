"""Tests for the indentation-based fallback parser."""

from yttkit.core.fallback import coerce_scalar, fallback_parse
from yttkit.core.ir import Annotation, AnnotationKind, MappingNode, ScalarNode, SequenceNode
from yttkit.core.scanner import extract_annotations


def _parse(text: str) -> MappingNode | SequenceNode:
    scan = extract_annotations(text.split("\n"))
    node = fallback_parse(scan.yaml_text, scan.inline_annotations, scan.annotation_columns)
    assert isinstance(node, (MappingNode, SequenceNode))
    return node


class TestCoerceScalar:
    """Plain values resolve like YAML would."""

    def test_types(self) -> None:
        assert coerce_scalar("8080") == 8080
        assert coerce_scalar("3.5") == 3.5
        assert coerce_scalar("true") is True
        assert coerce_scalar("null") is None
        assert coerce_scalar("hello world") == "hello world"

    def test_quoted(self) -> None:
        assert coerce_scalar("'8080'") == "8080"

    def test_unparseable_text_is_kept(self) -> None:
        assert coerce_scalar("[80, 443") == "[80, 443"

    def test_collections_are_kept_as_text(self) -> None:
        assert coerce_scalar("[1, 2]") == "[1, 2]"

    def test_values_rejected_by_their_tag_are_kept(self) -> None:
        assert coerce_scalar("!!int abc") == "!!int abc"
        assert coerce_scalar("!!bool maybe") == "!!bool maybe"
        assert coerce_scalar("!!timestamp nope") == "!!timestamp nope"

    def test_recursive_alias_is_kept_as_text(self) -> None:
        assert coerce_scalar("&x [*x]") == "&x [*x]"


class TestMappings:
    """``key: value`` lines and nesting by indentation."""

    def test_flat(self) -> None:
        root = _parse("a: 1\nb: two")
        assert isinstance(root, MappingNode)
        assert root.keys() == ["a", "b"]
        assert root.entries[0].value == ScalarNode(value=1)
        assert root.entries[1].value == ScalarNode(value="two")

    def test_nested(self) -> None:
        root = _parse("service:\n  name: web\n  labels:\n    app: web\nport: 80")
        assert isinstance(root, MappingNode)
        assert root.keys() == ["service", "port"]
        service = root.entries[0].value
        assert isinstance(service, MappingNode)
        assert service.keys() == ["name", "labels"]

    def test_nesting_looks_past_blank_lines(self) -> None:
        root = _parse("service:\n\n  name: web")
        assert isinstance(root, MappingNode)
        assert isinstance(root.entries[0].value, MappingNode)

    def test_empty_value_without_children(self) -> None:
        root = _parse("a:\nb: 1")
        assert isinstance(root, MappingNode)
        assert root.entries[0].value is None

    def test_quoted_keys(self) -> None:
        root = _parse('"my key": 1')
        assert isinstance(root, MappingNode)
        assert root.keys() == ["my key"]

    def test_misindented_lines_still_yield_keys(self) -> None:
        root = _parse("key1: value1\n  key2: value2\n    key3: value3")
        assert isinstance(root, MappingNode)
        assert root.keys() == ["key1", "key2", "key3"]

    def test_unrecognized_lines_are_skipped(self) -> None:
        root = _parse("a: 1\n{ not: [valid\nb: 2")
        assert isinstance(root, MappingNode)
        assert "b" in root.keys()

    def test_comments_are_skipped(self) -> None:
        root = _parse("# comment\na: 1")
        assert isinstance(root, MappingNode)
        assert root.keys() == ["a"]


class TestSequences:
    """``- item`` lines under a key."""

    def test_scalar_items(self) -> None:
        root = _parse("ports:\n  - 80\n  - 443\nname: x")
        assert isinstance(root, MappingNode)
        ports = root.entries[0].value
        assert isinstance(ports, SequenceNode)
        assert ports.items == [ScalarNode(value=80), ScalarNode(value=443)]
        assert root.keys() == ["ports", "name"]

    def test_unindented_items(self) -> None:
        root = _parse("ports:\n- 80\n- 443\nname: x")
        assert isinstance(root, MappingNode)
        assert root.keys() == ["ports", "name"]
        ports = root.entries[0].value
        assert isinstance(ports, SequenceNode)
        assert len(ports.items) == 2

    def test_mapping_items(self) -> None:
        root = _parse("containers:\n  - name: app\n    image: nginx\n  - name: sidecar")
        assert isinstance(root, MappingNode)
        containers = root.entries[0].value
        assert isinstance(containers, SequenceNode)
        assert len(containers.items) == 2
        first = containers.items[0]
        assert isinstance(first, MappingNode)
        assert first.keys() == ["name", "image"]

    def test_dash_only_items(self) -> None:
        root = _parse("services:\n  -\n    name: web\n  -\n    name: api")
        assert isinstance(root, MappingNode)
        services = root.entries[0].value
        assert isinstance(services, SequenceNode)
        assert [item.keys() for item in services.items if isinstance(item, MappingNode)] == [["name"], ["name"]]

    def test_empty_dash_item_is_null(self) -> None:
        root = _parse("items:\n  -\n  - b")
        assert isinstance(root, MappingNode)
        items = root.entries[0].value
        assert isinstance(items, SequenceNode)
        assert items.items == [ScalarNode(value=None), ScalarNode(value="b")]

    def test_nested_sequence(self) -> None:
        root = _parse("matrix:\n  -\n    - 1\n    - 2")
        assert isinstance(root, MappingNode)
        matrix = root.entries[0].value
        assert isinstance(matrix, SequenceNode)
        assert matrix.items == [SequenceNode(items=[ScalarNode(value=1), ScalarNode(value=2)])]

    def test_root_sequence(self) -> None:
        root = _parse("- a\n- b")
        assert isinstance(root, SequenceNode)
        assert root.items == [ScalarNode(value="a"), ScalarNode(value="b")]


class TestAnnotations:
    """Expressions and annotation lines survive a fallback parse."""

    def test_inline_expression(self) -> None:
        root = _parse("name: #@ data.values.name\nport: [80")
        assert isinstance(root, MappingNode)
        name = root.entries[0]
        assert name.value is None
        assert name.annotations == [Annotation(kind=AnnotationKind.EXPRESSION, text="data.values.name")]

    def test_expression_key_does_not_own_following_items(self) -> None:
        root = _parse("ports: #@ data.values.ports\n- 80")
        assert isinstance(root, MappingNode)
        assert root.entries[0].value is None

    def test_block_lines(self) -> None:
        text = "---\n#@ if data.values.enabled:\nservice:\n  name: [web\n#@ end\nother: 1"
        root = _parse(text)
        assert isinstance(root, MappingNode)
        service = root.entries[0]
        assert [a.keyword for a in service.annotations] == ["if", "end"]
        assert root.entries[1].annotations == []
