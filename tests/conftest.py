"""Pytest configuration shared by all pushpull tests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
import structlog
from pushpull import reset_config
from pushpull._logging import clear_log_hooks

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def clean_runtime(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Start every test from an unconfigured runtime, default logging and no log hooks."""
    for var in ('PUSHPULL_LOG_LEVEL', 'PUSHPULL_LOG_FORMAT', 'PUSHPULL_TRACE'):
        monkeypatch.delenv(var, raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    reset_config()
    clear_log_hooks()
    yield
    reset_config()
    clear_log_hooks()
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
