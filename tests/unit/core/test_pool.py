"""Unit tests for the chunked worker pool."""

import random
import threading
import time

import pytest
from dnfctl.core.pool import ChunkedWorkerPool, SkippedItem, split_chunks
from dnfctl.core.progress import ProgressTracker


class TestSplitChunks:
    """Tests for split_chunks()."""

    def test_even_split(self) -> None:
        """Items divide into equal chunks."""
        assert split_chunks([1, 2, 3, 4], 2) == [[1, 2], [3, 4]]

    def test_last_chunk_shorter(self) -> None:
        """The final chunk holds the remainder."""
        assert split_chunks(["a", "b", "c"], 2) == [["a", "b"], ["c"]]

    def test_empty(self) -> None:
        """Empty input has no chunks."""
        assert split_chunks([], 5) == []

    def test_invalid_size(self) -> None:
        """Chunk size must be positive."""
        with pytest.raises(ValueError):
            split_chunks([1], 0)


class TestChunkedWorkerPool:
    """Tests for ChunkedWorkerPool.run()."""

    def test_rejects_invalid_configuration(self) -> None:
        """Zero chunk size or concurrency is a configuration error."""
        with pytest.raises(ValueError):
            ChunkedWorkerPool(chunk_size=0, max_concurrency=1)
        with pytest.raises(ValueError):
            ChunkedWorkerPool(chunk_size=1, max_concurrency=0)

    def test_sequential_order(self) -> None:
        """Chunk size 2 with one worker returns results in input order."""
        pool = ChunkedWorkerPool(chunk_size=2, max_concurrency=1)
        items = ["p1", "p2", "p3", "p4", "p5"]

        result = pool.run(items, lambda name: name + "-ok")

        assert result.results == ["p1-ok", "p2-ok", "p3-ok", "p4-ok", "p5-ok"]
        assert result.skipped == []

    def test_order_preserved_under_random_delays(self) -> None:
        """Output order matches input order whatever finishes first."""
        rng = random.Random(42)
        delays = {i: rng.uniform(0, 0.01) for i in range(60)}
        pool = ChunkedWorkerPool(chunk_size=3, max_concurrency=8)

        def worker(i: int) -> int:
            time.sleep(delays[i])
            return i * 10

        result = pool.run(list(range(60)), worker)

        assert result.results == [i * 10 for i in range(60)]

    def test_empty_input(self) -> None:
        """No items means no results and no threads."""
        pool = ChunkedWorkerPool(chunk_size=10, max_concurrency=4)
        with pytest.MonkeyPatch.context() as mp:
            mp.setattr(
                "dnfctl.core.pool.ThreadPoolExecutor",
                lambda *a, **k: pytest.fail("executor should not start"),
            )
            result = pool.run([], lambda x: x)
        assert result.results == []
        assert result.processed == 0

    def test_failures_are_skipped(self) -> None:
        """A raising item is recorded and the rest still complete."""
        pool = ChunkedWorkerPool(chunk_size=2, max_concurrency=2)

        def worker(name: str) -> str:
            if name == "bad":
                raise RuntimeError("not installed")
            return name.upper()

        result = pool.run(["a", "bad", "c", "d"], worker)

        assert result.results == ["A", "C", "D"]
        assert len(result.skipped) == 1
        skipped = result.skipped[0]
        assert isinstance(skipped, SkippedItem)
        assert skipped.item == "bad"
        assert skipped.reason == "not installed"
        assert result.processed == 4

    def test_concurrency_is_bounded(self) -> None:
        """No more than max_concurrency chunks run at the same time."""
        active = 0
        peak = 0
        lock = threading.Lock()

        def worker(item: int) -> int:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.005)
            with lock:
                active -= 1
            return item

        pool = ChunkedWorkerPool(chunk_size=1, max_concurrency=3)
        pool.run(list(range(20)), worker)

        assert 1 <= peak <= 3

    def test_progress_advanced_per_item(self) -> None:
        """The tracker is advanced once per item, including failures."""
        tracker = ProgressTracker(7, render=lambda _: None)
        pool = ChunkedWorkerPool(chunk_size=2, max_concurrency=3)

        def worker(i: int) -> int:
            if i == 3:
                raise ValueError("boom")
            return i

        pool.run(list(range(7)), worker, progress=tracker)

        assert tracker.snapshot() == (7, 7)
