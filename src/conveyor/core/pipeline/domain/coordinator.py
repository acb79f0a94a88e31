"""Pipeline coordination.

This module provides the Coordinator, which owns the channel and the sink
for one run:
1. Producers push their item groups into a shared BoundedChannel
2. Consumers drain the channel into a shared Sink
3. Once every producer is terminal, one termination marker is injected and
   forwarded from consumer to consumer until all of them have stopped
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, NoReturn

from conveyor.config import Settings
from conveyor.core.pipeline.components import (
    Consumer,
    PipelineWorker,
    Producer,
    WorkerState,
)
from conveyor.core.pipeline.domain.lifecycle import (
    cancel_workers,
    signal_consumer_shutdown,
    start_workers,
    wait_for_workers,
)
from conveyor.core.pipeline.domain.statistics import format_statistics
from conveyor.core.pipeline.utils import (
    AtomicCounter,
    BoundedChannel,
    ChannelStats,
    Sink,
)
from conveyor.shared.constants import Pipeline, Timeout
from conveyor.shared.errors import (
    CapacityTimeoutError,
    ErrorContext,
    LivenessTimeoutError,
    create_configuration_error,
)
from conveyor.shared.logging import (
    log_operation_error,
    log_operation_start,
    log_operation_success,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    """Final (or partial) outcome of a pipeline run."""

    total_produced: int
    total_consumed: int
    sink_contents: list[Any]
    channel_stats: ChannelStats
    worker_states: dict[str, WorkerState] = field(default_factory=dict)
    duration_seconds: float = 0.0

    @property
    def cancelled_workers(self) -> list[str]:
        """Workers that stopped before completing their workload."""
        return [
            name
            for name, state in self.worker_states.items()
            if state is WorkerState.CANCELLED
        ]

    @property
    def failed_workers(self) -> list[str]:
        return [
            name
            for name, state in self.worker_states.items()
            if state is WorkerState.FAILED
        ]

    @property
    def completed(self) -> bool:
        """True when every worker reached TERMINATED."""
        return all(
            state is WorkerState.TERMINATED for state in self.worker_states.values()
        )

    @property
    def items_match(self) -> bool:
        return (
            self.total_produced == self.total_consumed == len(self.sink_contents)
        )


class Coordinator:
    """Owns one channel and one sink per run and drives worker lifecycle.

    The coordinator never inspects item payloads. It blocks on joins with
    bounded timeouts; a worker that fails to terminate in time turns the
    run into a LivenessTimeoutError carrying the partial result.

    Args:
        producer_join_timeout: Seconds allowed for all producers to finish.
        consumer_join_timeout: Seconds allowed for all consumers to finish
            once the marker is in the channel.
        marker_put_timeout: Seconds allowed to enqueue the marker.
        cancel_join_timeout: Seconds given to cancelled workers to exit.
        poll_interval: Channel cancellation polling interval.
        work_delay: (min, max) simulated work per item for every worker.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        producer_join_timeout: float = Timeout.PRODUCER_JOIN,
        consumer_join_timeout: float = Timeout.CONSUMER_JOIN,
        marker_put_timeout: float = Timeout.MARKER_PUT,
        cancel_join_timeout: float = Timeout.CANCEL_JOIN,
        poll_interval: float = Timeout.POLL_INTERVAL,
        work_delay: tuple[float, float] = (0.0, 0.0),
    ) -> None:
        low, high = work_delay
        if low < 0 or high < low:
            raise create_configuration_error(
                "work_delay",
                work_delay,
                "must satisfy 0 <= min <= max",
            )
        timeouts = {
            "producer_join_timeout": producer_join_timeout,
            "consumer_join_timeout": consumer_join_timeout,
            "marker_put_timeout": marker_put_timeout,
            "poll_interval": poll_interval,
        }
        for name, value in timeouts.items():
            if value <= 0:
                raise create_configuration_error(name, value, "must be positive")
        if cancel_join_timeout < 0:
            raise create_configuration_error(
                "cancel_join_timeout",
                cancel_join_timeout,
                "must not be negative",
            )
        self.producer_join_timeout = producer_join_timeout
        self.consumer_join_timeout = consumer_join_timeout
        self.marker_put_timeout = marker_put_timeout
        self.cancel_join_timeout = cancel_join_timeout
        self.poll_interval = poll_interval
        self.work_delay = work_delay
        self._lock = threading.Lock()
        self._workers: list[PipelineWorker] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> Coordinator:
        """Build a coordinator from the timeout, channel and worker settings."""
        return cls(
            producer_join_timeout=settings.timeouts.producer_join,
            consumer_join_timeout=settings.timeouts.consumer_join,
            marker_put_timeout=settings.timeouts.marker_put,
            cancel_join_timeout=settings.timeouts.cancel_join,
            poll_interval=settings.channel.poll_interval,
            work_delay=settings.workers.work_delay,
        )

    @property
    def workers(self) -> list[PipelineWorker]:
        """Workers of the current (or last) run."""
        with self._lock:
            return list(self._workers)

    def cancel(self) -> None:
        """Cancel every worker of the current run."""
        for worker in self.workers:
            worker.cancel()

    def run(
        self,
        producer_groups: Sequence[Iterable[Any]],
        num_consumers: int,
        capacity: int,
    ) -> RunResult:
        """Run producers and consumers to completion.

        Args:
            producer_groups: One item sequence per producer.
            num_consumers: Number of consumer threads (>= 1).
            capacity: Channel capacity (>= 1).

        Returns:
            RunResult with final counters and sink contents. Cancelled or
            failed workers are listed there rather than raised.

        Raises:
            PipelineConfigurationError: On malformed inputs, before any
                thread starts.
            LivenessTimeoutError: If any worker fails to terminate in time.
        """
        groups = _validate_run_inputs(producer_groups, num_consumers, capacity)
        context = ErrorContext(
            operation="coordinator_run",
            additional_data={
                "num_producers": len(groups),
                "num_consumers": num_consumers,
                "capacity": capacity,
                "total_items": sum(len(group) for group in groups),
            },
        )
        log_operation_start(logger=logger, operation="coordinator_run", context=context)
        logger.info(
            "Starting pipeline: producers=%s, consumers=%s, capacity=%s",
            len(groups),
            num_consumers,
            capacity,
        )

        channel = BoundedChannel(capacity, poll_interval=self.poll_interval)
        sink = Sink()
        produced = AtomicCounter()
        consumed = AtomicCounter()

        producers = [
            Producer(
                group,
                channel,
                f"{Pipeline.PRODUCER_PREFIX}{i + 1}",
                produced,
                work_delay=self.work_delay,
            )
            for i, group in enumerate(groups)
        ]
        consumers = [
            Consumer(
                channel,
                sink,
                f"{Pipeline.CONSUMER_PREFIX}{i + 1}",
                consumed,
                work_delay=self.work_delay,
            )
            for i in range(num_consumers)
        ]
        all_workers: list[PipelineWorker] = [*producers, *consumers]
        with self._lock:
            self._workers = list(all_workers)

        start_time = time.time()

        def snapshot() -> RunResult:
            return RunResult(
                total_produced=produced.value,
                total_consumed=consumed.value,
                sink_contents=sink.snapshot(),
                channel_stats=channel.get_stats(),
                worker_states={worker.name: worker.state for worker in all_workers},
                duration_seconds=time.time() - start_time,
            )

        start_workers(producers, consumers)

        logger.info("Waiting for producers to complete...")
        stuck = wait_for_workers(producers, self.producer_join_timeout)
        if stuck:
            self._fail_liveness("producers", stuck, all_workers, snapshot, context)

        try:
            signal_consumer_shutdown(channel, self.marker_put_timeout)
        except CapacityTimeoutError:
            alive = [consumer for consumer in consumers if consumer.is_alive()]
            if alive:
                self._fail_liveness("consumers", alive, all_workers, snapshot, context)
            logger.warning("Termination marker not delivered: no consumer is running.")

        logger.info("Waiting for consumers to complete...")
        stuck = wait_for_workers(consumers, self.consumer_join_timeout)
        if stuck:
            self._fail_liveness("consumers", stuck, all_workers, snapshot, context)

        result = snapshot()
        if not result.completed:
            logger.warning(
                "Run finished with incomplete workers: cancelled=%s failed=%s",
                result.cancelled_workers,
                result.failed_workers,
            )
        logger.info(format_statistics(result))
        log_operation_success(
            logger=logger,
            operation="coordinator_run",
            duration_ms=result.duration_seconds * 1000,
            result_info={
                "total_produced": result.total_produced,
                "total_consumed": result.total_consumed,
                "completed": result.completed,
            },
            context=context,
        )
        return result

    def _fail_liveness(  # pylint: disable=too-many-arguments
        self,
        stage: str,
        stuck: list[PipelineWorker],
        all_workers: list[PipelineWorker],
        snapshot: Callable[[], RunResult],
        context: ErrorContext,
    ) -> NoReturn:
        still_alive = cancel_workers(all_workers, self.cancel_join_timeout)
        if still_alive:
            logger.error(
                "Workers ignored cancellation: %s",
                ", ".join(worker.name for worker in still_alive),
            )
        names = [worker.name for worker in stuck]
        error = LivenessTimeoutError(
            f"{stage.capitalize()} did not terminate in time: {', '.join(names)}",
            stuck_workers=names,
            partial_result=snapshot(),
            context=context,
        )
        log_operation_error(logger=logger, error=error, operation="coordinator_run")
        raise error


def _validate_run_inputs(
    producer_groups: Sequence[Iterable[Any]],
    num_consumers: int,
    capacity: int,
) -> list[tuple[Any, ...]]:
    """Check run parameters and materialize the producer groups.

    Raises:
        PipelineConfigurationError: On the first invalid parameter.
    """
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
        raise create_configuration_error("capacity", capacity, "must be an int >= 1")
    if (
        isinstance(num_consumers, bool)
        or not isinstance(num_consumers, int)
        or num_consumers < 1
    ):
        raise create_configuration_error(
            "num_consumers",
            num_consumers,
            "must be an int >= 1",
        )
    if isinstance(producer_groups, (str, bytes)) or not isinstance(
        producer_groups,
        Iterable,
    ):
        raise create_configuration_error(
            "producer_groups",
            type(producer_groups).__name__,
            "must be a sequence of item sequences",
        )

    groups: list[tuple[Any, ...]] = []
    for index, group in enumerate(producer_groups):
        if isinstance(group, (str, bytes)) or not isinstance(group, Iterable):
            raise create_configuration_error(
                f"producer_groups[{index}]",
                type(group).__name__,
                "must be a sequence of items",
            )
        items = tuple(group)
        for item in items:
            if item is None or item is Pipeline.SENTINEL:
                raise create_configuration_error(
                    f"producer_groups[{index}]",
                    item,
                    "items must not be None or the termination marker",
                )
        groups.append(items)
    return groups


def split_items(items: Sequence[Any], num_groups: int) -> list[list[Any]]:
    """Divide items into num_groups contiguous, near-equal groups.

    Example:
        >>> split_items(["a", "b", "c", "d", "e"], 2)
        [['a', 'b'], ['c', 'd', 'e']]
    """
    if num_groups < 1:
        raise create_configuration_error("num_groups", num_groups, "must be >= 1")
    total = len(items)
    return [
        list(items[i * total // num_groups : (i + 1) * total // num_groups])
        for i in range(num_groups)
    ]


def run_pipeline(
    producer_groups: Sequence[Iterable[Any]],
    num_consumers: int | None = None,
    capacity: int | None = None,
    settings: Settings | None = None,
) -> RunResult:
    """Run the complete producer/consumer pipeline.

    Args:
        producer_groups: One item sequence per producer.
        num_consumers: Consumer count; defaults to settings.workers.num_consumers.
        capacity: Channel capacity; defaults to settings.channel.capacity.
        settings: Settings to use; loaded from the environment if omitted.

    Returns:
        RunResult of the run.
    """
    settings = settings or Settings()
    coordinator = Coordinator.from_settings(settings)
    return coordinator.run(
        producer_groups,
        num_consumers if num_consumers is not None else settings.workers.num_consumers,
        capacity if capacity is not None else settings.channel.capacity,
    )
