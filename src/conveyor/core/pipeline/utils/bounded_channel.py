"""BoundedChannel - fixed-capacity FIFO handoff between worker threads.

Producers block in put() while the channel is full and consumers block in
take() while it is empty. Both calls accept a CancellationToken; waits are
sliced by ``poll_interval`` so a cancelled caller returns promptly.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from conveyor.core.pipeline.utils.cancellation import CancellationToken
from conveyor.shared.constants import Timeout
from conveyor.shared.errors import (
    create_cancelled_error,
    create_capacity_timeout_error,
    create_take_timeout_error,
)


@dataclass(frozen=True)
class ChannelStats:
    """Point-in-time statistics for a channel."""

    size: int
    capacity: int
    total_put: int
    total_taken: int
    current_waiting: int
    max_size_reached: int


class BoundedChannel:
    """Thread-safe bounded FIFO channel with blocking put/take.

    Features:
    - One lock shared by two conditions (not_empty / not_full)
    - Every wait re-checks its predicate in a loop
    - Optional timeouts and cancellation on both blocking calls
    - Statistics tracking (peak size, totals, waiters)

    Args:
        capacity: Maximum number of items the channel can hold (>= 1).
        poll_interval: Longest single wait before a cancellation check.
    """

    def __init__(
        self,
        capacity: int,
        *,
        poll_interval: float = Timeout.POLL_INTERVAL,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            msg = f"Capacity must be an int, got {type(capacity).__name__}"
            raise TypeError(msg)
        if capacity <= 0:
            msg = "Capacity must be positive"
            raise ValueError(msg)
        if poll_interval <= 0:
            msg = "poll_interval must be positive"
            raise ValueError(msg)

        self._capacity = capacity
        self._poll_interval = poll_interval

        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)

        self._buffer: deque[Any] = deque()

        self._total_put = 0
        self._total_taken = 0
        self._max_size_reached = 0
        self._current_waiting = 0

    # ------------------------------------------------------------------
    # Blocking operations
    # ------------------------------------------------------------------

    def put(
        self,
        item: Any,
        timeout: float | None = None,
        cancel_token: CancellationToken | None = None,
        *,
        worker_name: str | None = None,
    ) -> None:
        """Append an item, blocking while the channel is full.

        Args:
            item: Item to enqueue. None is not allowed.
            timeout: Maximum seconds to wait for space (None waits forever).
            cancel_token: Token checked before and during the wait.
            worker_name: Caller name used in error context.

        Raises:
            ValueError: If item is None or timeout is negative.
            CapacityTimeoutError: If the channel stayed full for timeout seconds.
            WorkerCancelledError: If cancel_token was cancelled.
        """
        self._validate_item(item)
        deadline = self._deadline(timeout)

        with self._not_full:
            self._raise_if_cancelled(cancel_token, "channel_put", worker_name)
            if not self._wait_while(
                self._not_full,
                self._is_full_locked,
                deadline,
                cancel_token,
                "channel_put",
                worker_name,
            ):
                raise create_capacity_timeout_error(
                    self._capacity,
                    timeout or 0.0,
                    worker_name,
                )

            self._buffer.append(item)
            self._total_put += 1
            self._max_size_reached = max(self._max_size_reached, len(self._buffer))
            self._not_empty.notify()

    def take(
        self,
        timeout: float | None = None,
        cancel_token: CancellationToken | None = None,
        *,
        worker_name: str | None = None,
    ) -> Any:
        """Remove and return the oldest item, blocking while empty.

        Args:
            timeout: Maximum seconds to wait for an item (None waits forever).
            cancel_token: Token checked before and during the wait.
            worker_name: Caller name used in error context.

        Returns:
            The oldest item in the channel.

        Raises:
            ValueError: If timeout is negative.
            ChannelTimeoutError: If the channel stayed empty for timeout seconds.
            WorkerCancelledError: If cancel_token was cancelled.
        """
        deadline = self._deadline(timeout)

        with self._not_empty:
            self._raise_if_cancelled(cancel_token, "channel_take", worker_name)
            if not self._wait_while(
                self._not_empty,
                self._is_empty_locked,
                deadline,
                cancel_token,
                "channel_take",
                worker_name,
            ):
                raise create_take_timeout_error(timeout or 0.0, worker_name)

            item = self._buffer.popleft()
            self._total_taken += 1
            self._not_full.notify()
            return item

    def offer(self, item: Any, timeout: float = 0.0) -> bool:
        """Try to enqueue within timeout.

        Args:
            item: Item to enqueue.
            timeout: Seconds to wait for space (0.0 = do not wait).

        Returns:
            True if the item was enqueued, False if the channel stayed full.
        """
        self._validate_item(item)
        deadline = self._deadline(timeout)
        with self._not_full:
            if not self._wait_while(
                self._not_full,
                self._is_full_locked,
                deadline,
                None,
                "channel_offer",
                None,
            ):
                return False
            self._buffer.append(item)
            self._total_put += 1
            self._max_size_reached = max(self._max_size_reached, len(self._buffer))
            self._not_empty.notify()
            return True

    def poll(self, timeout: float = 0.0) -> Any | None:
        """Take an item if one arrives within timeout.

        Returns:
            The oldest item, or None if the channel stayed empty.
        """
        deadline = self._deadline(timeout)
        with self._not_empty:
            if not self._wait_while(
                self._not_empty,
                self._is_empty_locked,
                deadline,
                None,
                "channel_poll",
                None,
            ):
                return None
            item = self._buffer.popleft()
            self._total_taken += 1
            self._not_full.notify()
            return item

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        """Maximum number of items the channel can hold."""
        return self._capacity

    def size(self) -> int:
        """Return the current number of items."""
        with self._lock:
            return len(self._buffer)

    def is_empty(self) -> bool:
        with self._lock:
            return not self._buffer

    def is_full(self) -> bool:
        with self._lock:
            return len(self._buffer) >= self._capacity

    def snapshot(self) -> list[Any]:
        """Return the buffered items in FIFO order without removing them."""
        with self._lock:
            return list(self._buffer)

    def get_stats(self) -> ChannelStats:
        """Return a consistent snapshot of the channel statistics."""
        with self._lock:
            return ChannelStats(
                size=len(self._buffer),
                capacity=self._capacity,
                total_put=self._total_put,
                total_taken=self._total_taken,
                current_waiting=self._current_waiting,
                max_size_reached=self._max_size_reached,
            )

    def __len__(self) -> int:
        return self.size()

    def __repr__(self) -> str:
        return f"BoundedChannel(size={self.size()}, capacity={self._capacity})"

    # ------------------------------------------------------------------
    # Internals (callers hold self._lock)
    # ------------------------------------------------------------------

    def _is_full_locked(self) -> bool:
        return len(self._buffer) >= self._capacity

    def _is_empty_locked(self) -> bool:
        return not self._buffer

    def _wait_while(
        self,
        condition: threading.Condition,
        blocked: Callable[[], bool],
        deadline: float | None,
        cancel_token: CancellationToken | None,
        operation: str,
        worker_name: str | None,
    ) -> bool:
        """Wait on condition while blocked() holds.

        Returns:
            True once blocked() is False, False if the deadline passed first.
        """
        if not blocked():
            return True

        self._current_waiting += 1
        try:
            while blocked():
                self._raise_if_cancelled(cancel_token, operation, worker_name)

                wait_for: float | None = None
                if cancel_token is not None:
                    wait_for = self._poll_interval
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return False
                    wait_for = remaining if wait_for is None else min(wait_for, remaining)

                condition.wait(wait_for)
            return True
        finally:
            self._current_waiting -= 1

    @staticmethod
    def _raise_if_cancelled(
        cancel_token: CancellationToken | None,
        operation: str,
        worker_name: str | None,
    ) -> None:
        if cancel_token is not None and cancel_token.is_cancelled():
            raise create_cancelled_error(operation, worker_name)

    @staticmethod
    def _deadline(timeout: float | None) -> float | None:
        if timeout is None:
            return None
        if timeout < 0:
            msg = "timeout must be non-negative"
            raise ValueError(msg)
        return time.monotonic() + timeout

    @staticmethod
    def _validate_item(item: Any) -> None:
        if item is None:
            msg = "Cannot put None into the channel"
            raise ValueError(msg)
