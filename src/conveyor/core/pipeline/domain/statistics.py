"""Pipeline statistics formatting and aggregation.

This module provides utilities for summarizing a finished run:
- format_statistics(): Format a RunResult into a human-readable report
- StatisticsAggregator: Export a RunResult as a dict or JSON
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from conveyor.core.pipeline.domain.coordinator import RunResult


def format_statistics(result: RunResult) -> str:
    """Format run statistics into a human-readable report.

    Args:
        result: RunResult of a finished (or partial) run.

    Returns:
        A formatted multi-line string.
    """
    stats = result.channel_stats
    lines = [
        "",
        "=" * 60,
        "                    PIPELINE STATISTICS",
        "=" * 60,
        "",
        "Timing:",
        f"  - Total run time:       {result.duration_seconds:.2f}s",
        "",
        "Items:",
        f"  - Produced:             {result.total_produced:,}",
        f"  - Consumed:             {result.total_consumed:,}",
        f"  - Sink size:            {len(result.sink_contents):,}",
        f"  - Items match:          {result.items_match}",
        "",
        "Channel:",
        f"  - Capacity:             {stats.capacity:,}",
        f"  - Peak size:            {stats.max_size_reached:,}",
        f"  - Items put:            {stats.total_put:,}",
        f"  - Items taken:          {stats.total_taken:,}",
        "",
        "Workers:",
        f"  - Completed run:        {result.completed}",
        f"  - Cancelled:            {', '.join(result.cancelled_workers) or '-'}",
        f"  - Failed:               {', '.join(result.failed_workers) or '-'}",
        "",
        "=" * 60,
        "",
    ]

    return "\n".join(lines)


class StatisticsAggregator:
    """Exports a RunResult in machine-readable form."""

    def __init__(self, result: RunResult) -> None:
        self.result = result

    def aggregate(self) -> dict[str, Any]:
        """Aggregate the run into a structured dictionary.

        The sink contents are rendered with ``str`` so any payload type
        can be serialized.
        """
        result = self.result
        stats = result.channel_stats
        return {
            "items": {
                "produced": result.total_produced,
                "consumed": result.total_consumed,
                "sink_size": len(result.sink_contents),
                "match": result.items_match,
            },
            "channel": {
                "capacity": stats.capacity,
                "size": stats.size,
                "peak_size": stats.max_size_reached,
                "total_put": stats.total_put,
                "total_taken": stats.total_taken,
            },
            "workers": {
                name: state.value for name, state in result.worker_states.items()
            },
            "completed": result.completed,
            "duration_seconds": round(result.duration_seconds, 4),
            "sink_contents": [str(item) for item in result.sink_contents],
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.aggregate(), indent=indent)
