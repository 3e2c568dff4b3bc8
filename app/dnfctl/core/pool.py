"""Chunked worker pool with ordered results.

Package queries are latency-bound subprocess calls, so items are
processed by a bounded set of threads. Output order always equals input
order, which keeps generated lock files byte-for-byte reproducible.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from dnfctl.core.progress import ProgressTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True, slots=True)
class SkippedItem(Generic[T]):
    """An item whose worker raised instead of producing a result.

    Attributes:
        item: The input item.
        error: The exception raised by the worker.
    """

    item: T
    error: Exception

    @property
    def reason(self) -> str:
        """Human-readable failure reason."""
        return str(self.error) or type(self.error).__name__


@dataclass(frozen=True, slots=True)
class PoolResult(Generic[T, R]):
    """Merged output of a pool run.

    Attributes:
        results: Successful results, in input order.
        skipped: Failed items, in input order.
    """

    results: list[R] = field(default_factory=list)
    skipped: list[SkippedItem[T]] = field(default_factory=list)

    @property
    def processed(self) -> int:
        """Number of items handled, successful or not."""
        return len(self.results) + len(self.skipped)


@dataclass(slots=True)
class _ChunkSink(Generic[T, R]):
    """Output of one chunk, owned exclusively by the thread running it."""

    index: int
    results: list[R] = field(default_factory=list)
    skipped: list[SkippedItem[T]] = field(default_factory=list)


def split_chunks(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into contiguous chunks of at most ``size`` elements.

    Args:
        items: Items to split.
        size: Maximum chunk length.

    Returns:
        Chunks in input order. Empty input gives an empty list.

    Raises:
        ValueError: If size is not positive.
    """
    if size < 1:
        msg = f"Chunk size must be positive, got {size}"
        raise ValueError(msg)
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


class ChunkedWorkerPool:
    """Run a worker over items in fixed-size chunks on bounded threads.

    Each chunk is processed sequentially by one thread. At most
    ``max_concurrency`` chunks run at the same time, and chunks start in
    index order. A failing item is recorded as skipped; it never aborts
    its chunk or the pool.

    Attributes:
        chunk_size: Maximum number of items per chunk.
        max_concurrency: Maximum number of chunks processed at once.

    Example:
        >>> pool = ChunkedWorkerPool(chunk_size=50, max_concurrency=8)
        >>> result = pool.run(names, adapter.metadata)
        >>> records = result.results
    """

    def __init__(self, chunk_size: int, max_concurrency: int) -> None:
        """Initialize the pool.

        Args:
            chunk_size: Maximum number of items per chunk.
            max_concurrency: Maximum number of chunks processed at once.

        Raises:
            ValueError: If either value is not positive.
        """
        if chunk_size < 1:
            msg = f"Chunk size must be positive, got {chunk_size}"
            raise ValueError(msg)
        if max_concurrency < 1:
            msg = f"Max concurrency must be positive, got {max_concurrency}"
            raise ValueError(msg)
        self.chunk_size = chunk_size
        self.max_concurrency = max_concurrency

    def run(
        self,
        items: Sequence[T],
        worker: Callable[[T], R],
        progress: ProgressTracker | None = None,
    ) -> PoolResult[T, R]:
        """Apply ``worker`` to every item and merge results in input order.

        Args:
            items: Items to process.
            worker: Function called once per item.
            progress: Optional tracker advanced once per processed item.

        Returns:
            PoolResult with ordered results and skipped items.
        """
        chunks = split_chunks(items, self.chunk_size)
        if not chunks:
            return PoolResult()

        workers = min(self.max_concurrency, len(chunks))
        logger.debug(
            "Processing %d items in %d chunks with %d workers",
            len(items),
            len(chunks),
            workers,
        )

        # The executor queue is FIFO, so chunks start in index order
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dnfctl-chunk") as executor:
            futures = [
                executor.submit(self._run_chunk, index, chunk, worker, progress)
                for index, chunk in enumerate(chunks)
            ]
        # Leaving the executor block joins every chunk
        sinks = [future.result() for future in futures]

        merged: PoolResult[T, R] = PoolResult()
        for sink in sorted(sinks, key=lambda s: s.index):
            merged.results.extend(sink.results)
            merged.skipped.extend(sink.skipped)

        if merged.skipped:
            logger.info("Skipped %d of %d items", len(merged.skipped), len(items))
        return merged

    @staticmethod
    def _run_chunk(
        index: int,
        chunk: list[T],
        worker: Callable[[T], R],
        progress: ProgressTracker | None,
    ) -> _ChunkSink[T, R]:
        """Process one chunk sequentially into its own sink."""
        sink: _ChunkSink[T, R] = _ChunkSink(index=index)
        for item in chunk:
            try:
                sink.results.append(worker(item))
            except Exception as e:
                logger.debug("Chunk %d: skipping %r: %s", index, item, e)
                sink.skipped.append(SkippedItem(item=item, error=e))
            finally:
                if progress is not None:
                    progress.advance(1)
        return sink
