"""Conveyor configuration package.

Usage:
    from conveyor.config import Settings
"""

from __future__ import annotations

from conveyor.config.models import (
    ChannelSettings,
    LoggingSettings,
    TimeoutSettings,
    WorkerSettings,
)
from conveyor.config.settings import Settings

__all__ = [
    "ChannelSettings",
    "LoggingSettings",
    "Settings",
    "TimeoutSettings",
    "WorkerSettings",
]
