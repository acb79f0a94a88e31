"""Shared constants for Conveyor."""

from __future__ import annotations

from typing import Final


class _TerminationMarker:
    """Type of the single end-of-stream marker.

    Compared by identity; only one instance exists.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "<END_OF_STREAM>"


TERMINATION_MARKER: Final = _TerminationMarker()


class Pipeline:
    """Pipeline configuration constants."""

    SENTINEL = TERMINATION_MARKER
    DEFAULT_CAPACITY = 5
    DEFAULT_PRODUCERS = 2
    DEFAULT_CONSUMERS = 2
    DEFAULT_ITEM_COUNT = 20
    ITEM_PREFIX = "Item-"
    PRODUCER_PREFIX = "Producer-"
    CONSUMER_PREFIX = "Consumer-"


class Timeout:
    """Timeout constants in seconds."""

    POLL_INTERVAL = 0.05
    PRODUCER_JOIN = 30.0
    CONSUMER_JOIN = 30.0
    MARKER_PUT = 5.0
    CANCEL_JOIN = 2.0


class WorkDelay:
    """Simulated per-item work delay used by the demo command (seconds)."""

    DEMO_MIN = 0.05
    DEMO_MAX = 0.2


class CLIDefaults:
    """CLI defaults and exit codes."""

    APP_NAME = "conveyor"
    VERSION = "0.1.0"
    EXIT_ERROR = 1
    EXIT_CONFIG_ERROR = 2


__all__ = [
    "TERMINATION_MARKER",
    "CLIDefaults",
    "Pipeline",
    "Timeout",
    "WorkDelay",
]
