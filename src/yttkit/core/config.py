"""
Options and project configuration.

``parse`` and ``stringify`` take explicit options objects; nothing is read
from the environment. The command line additionally looks for a
``yttkit.toml`` next to (or above) the working directory::

    [parse]
    strict = true

    [format]
    indent = 4
    trailing_newline = true
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import make_config_error

CONFIG_FILE = "yttkit.toml"


class ParseOptions(BaseModel):
    """Options for :func:`yttkit.parse`."""

    strict: bool = False  # Raise ParseError instead of using the fallback parser

    model_config = ConfigDict(frozen=True, extra="ignore")


class StringifyOptions(BaseModel):
    """Options for :func:`yttkit.stringify`."""

    indent: int = Field(default=2, ge=1)  # Spaces per nesting level
    trailing_newline: bool = False

    model_config = ConfigDict(frozen=True, extra="ignore")


class YttkitConfig(BaseModel):
    """Contents of a yttkit.toml file."""

    parse: ParseOptions = Field(default_factory=ParseOptions)
    format: StringifyOptions = Field(default_factory=StringifyOptions)
    path: Path | None = None  # File the values came from

    model_config = ConfigDict(frozen=True)


def find_config(start: Path) -> Path | None:
    """
    Find the nearest yttkit.toml.

    Args:
        start: Directory to start from; parents are searched up to the root

    Returns:
        Path to the file, or None if there is none
    """
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None) -> YttkitConfig:
    """
    Load a yttkit.toml file.

    Args:
        path: File to read; None yields the defaults

    Returns:
        YttkitConfig with file values over defaults

    Raises:
        ConfigError: If the file is not valid TOML or holds invalid values
    """
    if path is None:
        return YttkitConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise make_config_error(str(e), path) from e

    parse_data: dict[str, Any] = data.get("parse", {})
    format_data: dict[str, Any] = data.get("format", {})

    try:
        return YttkitConfig(
            parse=ParseOptions(**parse_data),
            format=StringifyOptions(**format_data),
            path=path,
        )
    except (TypeError, ValidationError) as e:
        raise make_config_error(str(e), path) from e
