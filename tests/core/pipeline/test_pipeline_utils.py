"""Tests for the pipeline's shared primitives: counters, sink, cancellation."""

from __future__ import annotations

import threading
import time

import pytest

from conveyor.core.pipeline.utils import AtomicCounter, CancellationToken, Sink
from tests.core.pipeline.concurrency_helpers import run_in_threads


class TestAtomicCounter:
    """Test cases for AtomicCounter."""

    def test_initial_value(self) -> None:
        assert AtomicCounter().value == 0
        assert AtomicCounter(initial_value=7).value == 7

    def test_increment_returns_new_value(self) -> None:
        counter = AtomicCounter()

        assert counter.increment() == 1
        assert counter.increment(5) == 6
        assert int(counter) == 6
        assert repr(counter) == "AtomicCounter(value=6)"

    def test_negative_increment_rejected(self) -> None:
        with pytest.raises(ValueError, match="upwards"):
            AtomicCounter().increment(-1)

    @pytest.mark.slow
    def test_concurrent_increments_are_not_lost(self) -> None:
        """Test that no increment is lost across 8 contending threads."""
        counter = AtomicCounter()

        def bump() -> None:
            for _ in range(1000):
                counter.increment()

        run_in_threads(bump, num_threads=8)

        assert counter.value == 8000


class TestSink:
    """Test cases for Sink."""

    def test_append_and_snapshot(self) -> None:
        sink = Sink()
        sink.append("a")
        sink.append("b")

        snapshot = sink.snapshot()

        assert snapshot == ["a", "b"]
        assert len(sink) == 2
        assert "a" in sink
        assert "z" not in sink

    def test_snapshot_is_a_copy(self) -> None:
        sink = Sink()
        sink.append("a")

        snapshot = sink.snapshot()
        snapshot.append("b")

        assert sink.snapshot() == ["a"]

    @pytest.mark.slow
    def test_concurrent_appends_are_not_lost(self) -> None:
        """Test atomic appends and per-writer ordering under contention."""
        sink = Sink()

        def append_many() -> None:
            name = threading.current_thread().name
            for i in range(500):
                sink.append((name, i))

        run_in_threads(append_many, num_threads=8)

        contents = sink.snapshot()
        assert len(contents) == 4000
        writers = {name for name, _ in contents}
        for writer in writers:
            assert [i for name, i in contents if name == writer] == list(range(500))


class TestCancellationToken:
    """Test cases for CancellationToken."""

    def test_cancel_is_idempotent(self) -> None:
        token = CancellationToken()
        assert not token.is_cancelled()

        token.cancel()
        token.cancel()

        assert token.is_cancelled()
        assert repr(token) == "CancellationToken(cancelled=True)"

    def test_wait_returns_false_on_timeout(self) -> None:
        assert CancellationToken().wait(0.01) is False

    def test_wait_wakes_on_cancel(self) -> None:
        """Test that a sleeping waiter wakes as soon as cancel() is called."""
        token = CancellationToken()
        timer = threading.Timer(0.05, token.cancel)

        start = time.monotonic()
        timer.start()
        woke = token.wait(5)
        elapsed = time.monotonic() - start
        timer.join()

        assert woke is True
        assert elapsed < 2
