"""Tests for run statistics formatting and aggregation."""

from __future__ import annotations

import json

import pytest

from conveyor.core.pipeline.components import WorkerState
from conveyor.core.pipeline.domain import (
    RunResult,
    StatisticsAggregator,
    format_statistics,
)
from conveyor.core.pipeline.utils import ChannelStats


@pytest.fixture
def result() -> RunResult:
    return RunResult(
        total_produced=3,
        total_consumed=2,
        sink_contents=["Item-1", "Item-2"],
        channel_stats=ChannelStats(
            size=1,
            capacity=5,
            total_put=3,
            total_taken=2,
            current_waiting=0,
            max_size_reached=3,
        ),
        worker_states={
            "Producer-1": WorkerState.TERMINATED,
            "Consumer-1": WorkerState.CANCELLED,
            "Consumer-2": WorkerState.FAILED,
        },
        duration_seconds=2.5,
    )


class TestRunResult:
    """Test cases for RunResult derived properties."""

    def test_incomplete_result(self, result: RunResult) -> None:
        assert result.cancelled_workers == ["Consumer-1"]
        assert result.failed_workers == ["Consumer-2"]
        assert not result.completed
        assert not result.items_match

    def test_empty_result_is_complete(self, result: RunResult) -> None:
        empty = RunResult(
            total_produced=0,
            total_consumed=0,
            sink_contents=[],
            channel_stats=result.channel_stats,
        )

        assert empty.completed
        assert empty.items_match


class TestFormatStatistics:
    """Test cases for format_statistics."""

    def test_report_sections(self, result: RunResult) -> None:
        report = format_statistics(result)

        assert "PIPELINE STATISTICS" in report
        assert "Produced:             3" in report
        assert "Consumed:             2" in report
        assert "Peak size:            3" in report
        assert "Total run time:       2.50s" in report
        assert "Cancelled:            Consumer-1" in report
        assert "Failed:               Consumer-2" in report


class TestStatisticsAggregator:
    """Test cases for StatisticsAggregator."""

    def test_aggregate(self, result: RunResult) -> None:
        data = StatisticsAggregator(result).aggregate()

        assert data["items"] == {
            "produced": 3,
            "consumed": 2,
            "sink_size": 2,
            "match": False,
        }
        assert data["channel"]["peak_size"] == 3
        assert data["workers"]["Consumer-2"] == "FAILED"
        assert data["completed"] is False
        assert data["duration_seconds"] == 2.5
        assert data["sink_contents"] == ["Item-1", "Item-2"]

    def test_to_json_renders_any_payload(self, result: RunResult) -> None:
        """Test that non-string payloads are serialized via str()."""
        payload_result = RunResult(
            total_produced=1,
            total_consumed=1,
            sink_contents=[("tuple", 1)],
            channel_stats=result.channel_stats,
        )

        data = json.loads(StatisticsAggregator(payload_result).to_json())

        assert data["sink_contents"] == ["('tuple', 1)"]
