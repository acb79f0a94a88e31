"""Thread-safe counters shared by pipeline workers."""

from __future__ import annotations

import threading


class AtomicCounter:
    """Counter with atomic fetch-and-increment semantics.

    Uses its own lock, independent of any channel lock, so counting never
    contends with queue operations.
    """

    def __init__(self, initial_value: int = 0) -> None:
        """Initialize the counter.

        Args:
            initial_value: Starting value for the counter.
        """
        self._lock = threading.Lock()
        self._value = initial_value

    def increment(self, amount: int = 1) -> int:
        """Add amount and return the new value.

        Args:
            amount: Non-negative increment. Default is 1.

        Returns:
            The counter value after the increment.
        """
        if amount < 0:
            msg = "AtomicCounter only counts upwards"
            raise ValueError(msg)
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        """Get the current counter value."""
        with self._lock:
            return self._value

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"AtomicCounter(value={self.value})"
