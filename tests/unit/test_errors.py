"""Tests for error formatting."""

from pathlib import Path

from yttkit.core.errors import (
    ConfigError,
    ErrorContext,
    ParseError,
    YttError,
    make_config_error,
    make_parse_error,
    source_snippet,
)


class TestErrorContext:
    def test_location_without_file(self) -> None:
        assert ErrorContext(line=3, column=7).format() == "line 3:7"

    def test_location_with_file(self) -> None:
        context = ErrorContext(line=3, column=7, file=Path("values.yml"))
        assert context.format() == "values.yml:3:7"

    def test_snippet_marker(self) -> None:
        lines = ["---", "a: 1", "b: [1", "c: 2"]
        context = ErrorContext(line=3, column=4, snippet=source_snippet(lines, 3))
        rendered = context.format().split("\n")
        assert rendered[0] == "line 3:4"
        assert rendered[1] == "   1 | ---"
        assert rendered[3] == "   3 | b: [1"
        assert rendered[4] == " " * 10 + "^^^"
        assert rendered[5] == "   4 | c: 2"


class TestSourceSnippet:
    def test_radius(self) -> None:
        lines = [f"line {n}" for n in range(1, 11)]
        assert source_snippet(lines, 5).split("\n") == ["line 3", "line 4", "line 5", "line 6", "line 7"]

    def test_clipped_at_start(self) -> None:
        lines = ["a", "b", "c"]
        assert source_snippet(lines, 1) == "a\nb\nc"


class TestErrors:
    def test_hierarchy(self) -> None:
        assert issubclass(ParseError, YttError)
        assert issubclass(ConfigError, YttError)

    def test_parse_error_message(self) -> None:
        error = make_parse_error("Failed to parse YAML: boom", line=4, column=2)
        assert error.message == "Failed to parse YAML: boom"
        assert str(error) == "line 4:2\nFailed to parse YAML: boom"

    def test_plain_message(self) -> None:
        assert str(YttError("plain")) == "plain"

    def test_config_error_names_file(self) -> None:
        error = make_config_error("bad value", Path("yttkit.toml"))
        assert str(error) == "yttkit.toml: bad value"
        assert error.context is None
