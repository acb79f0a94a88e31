"""Cancellation token for pipeline workers.

Python threads cannot be interrupted from outside, so each worker owns a
token that every suspension point checks after waking up.
"""

from __future__ import annotations

import threading


class CancellationToken:
    """Advisory, per-worker cancellation flag.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.is_cancelled()
        True
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    def is_cancelled(self) -> bool:
        """Return True once cancel() has been called."""
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Sleep until cancelled or until timeout elapses.

        Args:
            timeout: Seconds to sleep; None sleeps until cancelled.

        Returns:
            True if the token was cancelled, False if the timeout elapsed.
        """
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled()})"
