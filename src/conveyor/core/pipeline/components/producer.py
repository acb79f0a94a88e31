"""Producer worker for the Conveyor pipeline.

A Producer pushes its private, ordered item sequence into the shared
BoundedChannel, blocking under back-pressure when the channel is full.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from conveyor.core.pipeline.components.worker import PipelineWorker
from conveyor.core.pipeline.utils import (
    AtomicCounter,
    BoundedChannel,
    CancellationToken,
)
from conveyor.shared.errors import ErrorCode

logger = logging.getLogger(__name__)


class Producer(PipelineWorker):
    """Worker thread that enqueues every source item exactly once, in order.

    Args:
        items: Ordered source items. Copied into a tuple at construction.
        channel: Shared BoundedChannel to put items into.
        name: Identifying label for logs and results.
        produced_counter: Shared counter incremented once per enqueued item.
        work_delay: (min, max) seconds of simulated work before each put.
        cancel_token: Optional token; cancel() uses it to stop the producer.
    """

    error_code = ErrorCode.PRODUCER_ERROR

    def __init__(  # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        items: Iterable[Any],
        channel: BoundedChannel,
        name: str,
        produced_counter: AtomicCounter,
        work_delay: tuple[float, float] = (0.0, 0.0),
        cancel_token: CancellationToken | None = None,
    ) -> None:
        super().__init__(channel, name, work_delay, cancel_token)
        self.items: tuple[Any, ...] = tuple(items)
        self.produced_counter = produced_counter
        self.items_produced = 0

    def _work(self) -> None:
        for item in self.items:
            self._simulate_work()
            self._on_channel(self.channel.put, item)
            self.items_produced += 1
            produced = self.produced_counter.increment()
            logger.debug(
                "%s produced: %s (Total produced: %s)",
                self.name,
                item,
                produced,
            )
        logger.info("%s finished producing %s items.", self.name, self.items_produced)

    def _result_info(self) -> dict[str, Any]:
        return {"items_produced": self.items_produced, "items_total": len(self.items)}
