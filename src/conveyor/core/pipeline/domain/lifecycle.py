"""Pipeline worker lifecycle management.

This module provides functions for managing the lifecycle of pipeline workers:
- Starting workers
- Waiting for workers with a bounded, shared deadline
- Signaling consumer shutdown with the termination marker
- Cancelling workers that must be stopped
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from conveyor.core.pipeline.components import Consumer, PipelineWorker, Producer
from conveyor.core.pipeline.utils import BoundedChannel
from conveyor.shared.constants import Pipeline
from conveyor.shared.errors import ErrorCode, ErrorContext, InfrastructureError
from conveyor.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)


def start_workers(
    producers: Sequence[Producer],
    consumers: Sequence[Consumer],
) -> None:
    """Start consumers first, then producers.

    Raises:
        InfrastructureError: If a thread cannot be started. Workers already
            started are cancelled before the error propagates.
    """
    context = ErrorContext(
        operation="start_workers",
        additional_data={
            "num_producers": len(producers),
            "num_consumers": len(consumers),
        },
    )
    started: list[PipelineWorker] = []

    try:
        logger.info("Starting %s consumers...", len(consumers))
        for consumer in consumers:
            consumer.start()
            started.append(consumer)

        logger.info("Starting %s producers...", len(producers))
        for producer in producers:
            producer.start()
            started.append(producer)

        log_operation_success(
            logger=logger,
            operation="start_workers",
            duration_ms=0.0,
            context=context,
        )

    except RuntimeError as e:
        for worker in started:
            worker.cancel()
        error = InfrastructureError(
            ErrorCode.PIPELINE_EXECUTION_ERROR,
            f"Failed to start pipeline workers: {e}",
            context,
            original_error=e,
        )
        log_operation_error(logger=logger, error=error, operation="start_workers")
        raise error from e


def wait_for_workers(
    workers: Sequence[PipelineWorker],
    timeout: float,
) -> list[PipelineWorker]:
    """Join workers against one deadline shared by the whole group.

    Args:
        workers: Workers to join.
        timeout: Total seconds allowed for the group.

    Returns:
        Workers still alive when the deadline passed (empty on success).
    """
    deadline = time.monotonic() + timeout
    for worker in workers:
        remaining = max(0.0, deadline - time.monotonic())
        worker.join(timeout=remaining)

    stuck = [worker for worker in workers if worker.is_alive()]
    if stuck:
        logger.warning(
            "Workers did not terminate within %.2fs: %s",
            timeout,
            ", ".join(worker.name for worker in stuck),
        )
    return stuck


def signal_consumer_shutdown(channel: BoundedChannel, timeout: float) -> None:
    """Put exactly one termination marker into the channel.

    Must only be called once every producer is terminal, otherwise a late
    item could land behind the marker and be stranded.

    Raises:
        CapacityTimeoutError: If the channel stayed full for timeout seconds.
    """
    logger.info("All producers finished. Sending termination signal...")
    channel.put(Pipeline.SENTINEL, timeout=timeout)
    log_operation_success(
        logger=logger,
        operation="signal_consumer_shutdown",
        duration_ms=0.0,
        context={"channel_size": channel.size()},
    )


def cancel_workers(
    workers: Sequence[PipelineWorker],
    join_timeout: float,
) -> list[PipelineWorker]:
    """Cancel every live worker and give them join_timeout to exit.

    Returns:
        Workers that are still alive afterwards.
    """
    alive = [worker for worker in workers if worker.is_alive()]
    for worker in alive:
        logger.warning("%s still alive, cancelling...", worker.name)
        worker.cancel()
    if not alive:
        return []
    return wait_for_workers(alive, join_timeout)
