"""Base thread class shared by producers and consumers.

A worker moves through::

    CREATED -> RUNNING -> (BLOCKED_ON_CHANNEL <-> RUNNING) -> TERMINATED

with CANCELLED reachable from RUNNING or BLOCKED_ON_CHANNEL when its
cancellation token fires, and FAILED when the work itself raises.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

from conveyor.core.pipeline.utils import BoundedChannel, CancellationToken
from conveyor.shared.errors import (
    ConveyorError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    WorkerCancelledError,
    create_cancelled_error,
)
from conveyor.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkerState(str, Enum):
    """Lifecycle states of a pipeline worker thread."""

    CREATED = "CREATED"
    RUNNING = "RUNNING"
    BLOCKED_ON_CHANNEL = "BLOCKED_ON_CHANNEL"
    TERMINATED = "TERMINATED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {WorkerState.TERMINATED, WorkerState.CANCELLED, WorkerState.FAILED},
)


class PipelineWorker(threading.Thread, ABC):
    """Worker thread operating on a shared BoundedChannel.

    Subclasses implement ``_work()``; this class drives the state machine,
    turns WorkerCancelledError into the CANCELLED state and logs any other
    failure before stopping.

    Args:
        channel: Shared BoundedChannel.
        name: Identifying label, also used as the thread name.
        work_delay: (min, max) seconds of simulated work per item.
        cancel_token: Token to observe; a fresh one is created if omitted.
    """

    error_code = ErrorCode.PIPELINE_EXECUTION_ERROR

    def __init__(
        self,
        channel: BoundedChannel,
        name: str,
        work_delay: tuple[float, float] = (0.0, 0.0),
        cancel_token: CancellationToken | None = None,
    ) -> None:
        super().__init__(name=name, daemon=True)
        low, high = work_delay
        if low < 0 or high < low:
            msg = f"work_delay must satisfy 0 <= min <= max, got {work_delay!r}"
            raise ValueError(msg)
        self.channel = channel
        self.work_delay = (low, high)
        self.cancel_token = cancel_token or CancellationToken()
        self.error: ConveyorError | None = None
        self._state = WorkerState.CREATED
        self._state_lock = threading.Lock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> WorkerState:
        with self._state_lock:
            return self._state

    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def _set_state(self, state: WorkerState) -> None:
        with self._state_lock:
            if self._state.is_terminal:
                return
            self._state = state

    def cancel(self) -> None:
        """Ask this worker to stop at its next suspension point."""
        logger.debug("%s: cancellation requested", self.name)
        self.cancel_token.cancel()

    # ------------------------------------------------------------------
    # Thread entry point
    # ------------------------------------------------------------------

    def run(self) -> None:
        context = ErrorContext(operation=f"{self.role}_run", worker_name=self.name)
        start_time = time.time()
        self._set_state(WorkerState.RUNNING)

        try:
            self._work()
        except WorkerCancelledError as e:
            self.error = e
            self._set_state(WorkerState.CANCELLED)
            logger.warning("%s was cancelled.", self.name)
            return
        except Exception as e:  # noqa: BLE001
            failure = InfrastructureError(
                self.error_code,
                f"{self.name} failed: {e}",
                context,
                original_error=e,
            )
            self.error = failure
            self._set_state(WorkerState.FAILED)
            log_operation_error(logger=logger, error=failure, operation=context.operation)
            return

        self._set_state(WorkerState.TERMINATED)
        log_operation_success(
            logger=logger,
            operation=context.operation or self.role,
            duration_ms=(time.time() - start_time) * 1000,
            result_info=self._result_info(),
            context=context,
        )

    @property
    def role(self) -> str:
        return type(self).__name__.lower()

    @abstractmethod
    def _work(self) -> None:
        """Process this worker's items; raise WorkerCancelledError to stop early."""

    def _result_info(self) -> dict[str, Any]:
        return {}

    # ------------------------------------------------------------------
    # Suspension points
    # ------------------------------------------------------------------

    def _on_channel(self, call: Callable[..., T], *args: Any) -> T:
        """Run a blocking channel call while reporting BLOCKED_ON_CHANNEL."""
        self._set_state(WorkerState.BLOCKED_ON_CHANNEL)
        try:
            return call(
                *args,
                cancel_token=self.cancel_token,
                worker_name=self.name,
            )
        finally:
            self._set_state(WorkerState.RUNNING)

    def _simulate_work(self) -> None:
        """Sleep for a random delay within work_delay, waking on cancel."""
        low, high = self.work_delay
        if high <= 0:
            return
        # Not security-sensitive: only paces the demo workload.
        delay = random.uniform(low, high)  # noqa: S311  # nosec B311
        if self.cancel_token.wait(delay):
            raise create_cancelled_error(f"{self.role}_work", self.name)
