"""Consumer worker for the Conveyor pipeline.

A Consumer takes items from the shared BoundedChannel and appends them to
the shared Sink until it pulls the termination marker. The marker is put
back before the consumer exits so every other consumer sees it too.
"""

from __future__ import annotations

import logging
from typing import Any

from conveyor.core.pipeline.components.worker import PipelineWorker
from conveyor.core.pipeline.utils import (
    AtomicCounter,
    BoundedChannel,
    CancellationToken,
    Sink,
)
from conveyor.shared.constants import Pipeline
from conveyor.shared.errors import ErrorCode

logger = logging.getLogger(__name__)


class Consumer(PipelineWorker):
    """Worker thread that drains the channel into the sink.

    A consumer stops as soon as it personally pulls the marker; it does not
    wait for the channel to be empty first.

    Args:
        channel: Shared BoundedChannel to take items from.
        sink: Shared Sink receiving consumed items.
        name: Identifying label for logs and results.
        consumed_counter: Shared counter incremented once per consumed item.
        work_delay: (min, max) seconds of simulated work per item.
        cancel_token: Optional token; cancel() uses it to stop the consumer.
    """

    error_code = ErrorCode.CONSUMER_ERROR

    def __init__(  # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        channel: BoundedChannel,
        sink: Sink,
        name: str,
        consumed_counter: AtomicCounter,
        work_delay: tuple[float, float] = (0.0, 0.0),
        cancel_token: CancellationToken | None = None,
    ) -> None:
        super().__init__(channel, name, work_delay, cancel_token)
        self.sink = sink
        self.consumed_counter = consumed_counter
        self.items_consumed = 0

    def _work(self) -> None:
        while True:
            item = self._on_channel(self.channel.take)

            if item is Pipeline.SENTINEL:
                logger.info("%s received termination signal.", self.name)
                # Forward the marker so the remaining consumers stop as well.
                # Not cancellable: taking the marker just freed a slot.
                self.channel.put(item, worker_name=self.name)
                break

            self._simulate_work()
            self.sink.append(item)
            self.items_consumed += 1
            consumed = self.consumed_counter.increment()
            logger.debug(
                "%s consumed: %s (Total consumed: %s)",
                self.name,
                item,
                consumed,
            )
        logger.info("%s finished consuming %s items.", self.name, self.items_consumed)

    def _result_info(self) -> dict[str, Any]:
        return {"items_consumed": self.items_consumed}
