"""
Pytest configuration and shared fixtures for Conveyor tests.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Generator

import pytest

from conveyor.core.pipeline.utils import AtomicCounter, BoundedChannel, Sink


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove CONVEYOR_* variables so settings tests see defaults."""
    for key in list(os.environ):
        if key.startswith("CONVEYOR_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Undo handlers installed by setup_structured_logger during a test."""
    yield
    logger = logging.getLogger("conveyor")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def channel() -> BoundedChannel:
    """Channel with room for ten items and a short poll interval."""
    return BoundedChannel(capacity=10, poll_interval=0.01)


@pytest.fixture
def sink() -> Sink:
    return Sink()


@pytest.fixture
def counter() -> AtomicCounter:
    return AtomicCounter()
