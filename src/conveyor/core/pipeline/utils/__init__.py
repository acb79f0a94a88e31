"""Pipeline utilities package.

This package provides the shared-state primitives of the pipeline:
- BoundedChannel: Fixed-capacity FIFO with blocking put/take
- CancellationToken: Per-worker cancellation flag
- AtomicCounter: Lock-protected fetch-and-increment counter
- Sink: Append-only thread-safe destination
"""

from __future__ import annotations

from conveyor.core.pipeline.utils.bounded_channel import BoundedChannel, ChannelStats
from conveyor.core.pipeline.utils.cancellation import CancellationToken
from conveyor.core.pipeline.utils.counters import AtomicCounter
from conveyor.core.pipeline.utils.sink import Sink

__all__ = [
    "AtomicCounter",
    "BoundedChannel",
    "CancellationToken",
    "ChannelStats",
    "Sink",
]
