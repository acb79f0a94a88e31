"""Append-only destination for consumed items."""

from __future__ import annotations

import threading
from typing import Any


class Sink:
    """Thread-safe, append-only collection of consumed items.

    Each append is atomic and none are lost. Order among concurrent writers
    is unspecified; order per writer is preserved.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[Any] = []

    def append(self, item: Any) -> None:
        """Append one item."""
        with self._lock:
            self._items.append(item)

    def snapshot(self) -> list[Any]:
        """Return a copy of the items appended so far."""
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, item: Any) -> bool:
        with self._lock:
            return item in self._items

    def __repr__(self) -> str:
        return f"Sink(size={len(self)})"
