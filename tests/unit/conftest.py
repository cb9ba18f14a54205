"""Conftest for unit tests: keep library logging at its defaults between tests."""

from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def _yttkit_log_level(caplog: pytest.LogCaptureFixture) -> None:
    """Capture yttkit warnings so tests can assert on them."""
    caplog.set_level(logging.DEBUG, logger="yttkit")
