"""Package version lookup."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path

_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _checkout_version() -> str | None:
    # src/ checkouts carry pyproject.toml two levels up
    if not _PYPROJECT.is_file():
        return None
    with _PYPROJECT.open("rb") as f:
        project = tomllib.load(f).get("project", {})
    if project.get("name") != "yttkit":
        return None
    return project.get("version")


def get_version() -> str:
    """Get the version of a source checkout, else of the installed distribution."""
    checkout = _checkout_version()
    if checkout:
        return checkout
    try:
        return _metadata_version("yttkit")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = get_version()
