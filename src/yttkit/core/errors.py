"""
Error types for yttkit parsing and configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

SNIPPET_RADIUS = 2


class YttError(Exception):
    """Base exception for all yttkit errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(str(context) + "\n" + message if context else message)


class ParseError(YttError):
    """
    Raised when the YAML body of a template cannot be parsed in strict mode.

    Examples:
    - Inconsistent indentation
    - Unclosed flow collections
    - Tabs used for indentation

    Non-strict parsing never raises this; it degrades to the fallback parser.
    """


class ConfigError(YttError):
    """
    Raised when a yttkit.toml file cannot be read.

    Examples:
    - Invalid TOML syntax
    - Option values of the wrong type
    - Indent width below 1
    """


@dataclass
class ErrorContext:
    """
    Source location of an error.

    Attributes:
        line: Line number in the template (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional excerpt of the template around ``line``
        file: Optional path of the template being parsed
        snippet_start: Line number of the snippet's first line; defaults to
            ``SNIPPET_RADIUS`` lines above ``line``
    """

    line: int
    column: int
    snippet: str | None = None
    file: Path | None = None
    snippet_start: int | None = None

    def __str__(self) -> str:
        return self.format()

    def format(self) -> str:
        """
        Render the location, followed by the numbered snippet if there is one.

        Returns:
            ``values.yml:10:5`` with a file, ``line 10:5`` without
        """
        location = f"{self.line}:{self.column}"
        location = f"{self.file}:{location}" if self.file else f"line {location}"
        if not self.snippet:
            return location
        return f"{location}\n{self._format_snippet()}"

    def _format_snippet(self) -> str:
        start = self.snippet_start or max(1, self.line - SNIPPET_RADIUS)
        rendered: list[str] = []
        for number, text in enumerate((self.snippet or "").split("\n"), start=start):
            gutter = f"{number:4d} | "
            rendered.append(gutter + text)
            if number == self.line:
                rendered.append(" " * (len(gutter) + self.column - 1) + "^^^")
        return "\n".join(rendered)


def source_snippet(lines: list[str], line: int, radius: int = SNIPPET_RADIUS) -> str:
    """
    Cut the lines surrounding a 1-indexed line number out of a source.

    Args:
        lines: Source split into lines
        line: Line number (1-indexed) the snippet is centred on
        radius: Number of lines to include before and after

    Returns:
        The excerpt joined by newlines, starting at ``max(1, line - radius)``
    """
    start = max(1, line - radius)
    return "\n".join(lines[start - 1 : line + radius])


def make_parse_error(
    message: str,
    line: int,
    column: int,
    snippet: str | None = None,
    file: Path | None = None,
) -> ParseError:
    """
    Helper to create a ParseError with context.

    Args:
        message: Error description
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional excerpt from :func:`source_snippet`
        file: Optional source file path

    Returns:
        ParseError with context attached
    """
    return ParseError(message, ErrorContext(line=line, column=column, snippet=snippet, file=file))


def make_config_error(message: str, file: Path | None = None) -> ConfigError:
    """Create a ConfigError, prefixing the message with the offending file."""
    return ConfigError(f"{file}: {message}" if file else message)
