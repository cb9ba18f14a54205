"""Shared pytest fixtures for yttkit tests."""

from pathlib import Path

import pytest

CANONICAL_TEMPLATE = """#@ load("@ytt:data", "data")
---
name: #@ data.values.app_name
port: 8080"""


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def config_template(fixtures_dir: Path) -> str:
    """Return the supervisors config template used by the update workflow."""
    return (fixtures_dir / "config.yml").read_text(encoding="utf-8")


@pytest.fixture
def broken_template(fixtures_dir: Path) -> str:
    """Return a template whose YAML body PyYAML rejects."""
    return (fixtures_dir / "broken.yml").read_text(encoding="utf-8")


@pytest.fixture
def canonical_template() -> str:
    """Return the smallest template exercising a load, an expression and a scalar."""
    return CANONICAL_TEMPLATE
