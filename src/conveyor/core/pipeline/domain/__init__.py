"""Pipeline domain logic package.

This package contains the orchestration logic for the pipeline:
- lifecycle: Worker lifecycle management functions
- coordinator: Coordinator, RunResult and the run_pipeline entry point
- statistics: Run report formatting and aggregation
"""

from __future__ import annotations

from conveyor.core.pipeline.domain.coordinator import (
    Coordinator,
    RunResult,
    run_pipeline,
    split_items,
)
from conveyor.core.pipeline.domain.lifecycle import (
    cancel_workers,
    signal_consumer_shutdown,
    start_workers,
    wait_for_workers,
)
from conveyor.core.pipeline.domain.statistics import (
    StatisticsAggregator,
    format_statistics,
)

__all__ = [
    "Coordinator",
    "RunResult",
    "StatisticsAggregator",
    "cancel_workers",
    "format_statistics",
    "run_pipeline",
    "signal_consumer_shutdown",
    "split_items",
    "start_workers",
    "wait_for_workers",
]
