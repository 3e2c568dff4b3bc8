"""Progress tracking for batch operations.

A ProgressTracker is created at the start of one batch operation,
shared by every worker of that operation, and finished at its end.
It is never reused across operations.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from types import TracebackType

from rich.control import Control
from rich.segment import ControlType

# Render callback receives a Rich markup line
Renderer = Callable[[str], None]

DEFAULT_CADENCE = 10

# Carriage return, then erase the whole line
_CLEAR_LINE = Control(ControlType.CARRIAGE_RETURN, (ControlType.ERASE_IN_LINE, 2))


class ConsoleLine:
    """Single progress line on the shared error console.

    On a terminal every update redraws the same line in place. Other
    outputs only receive the final line, so redirected logs stay short.
    """

    def update(self, line: str) -> None:
        """Redraw the progress line with new content."""
        from dnfctl.utils.formatting import err_console

        if not err_console.is_terminal:
            return
        err_console.control(_CLEAR_LINE)
        err_console.print(line, end="", highlight=False)

    def done(self, line: str) -> None:
        """Replace the progress line with a final line and end it."""
        from dnfctl.utils.formatting import err_console

        if err_console.is_terminal:
            err_console.control(_CLEAR_LINE)
        err_console.print(line, highlight=False)


def percent(completed: int, total: int) -> int:
    """Integer percentage of completed over total, 100 for an empty total."""
    if total <= 0:
        return 100
    return completed * 100 // total


class ProgressTracker:
    """Thread-safe completion counter with throttled rendering.

    Every worker calls advance() after each item. The counter is a single
    value guarded by a lock, so concurrent increments are never lost.
    Rendering only happens when the counter reaches a multiple of the
    cadence, plus a final line on finish().

    Example:
        >>> with ProgressTracker(total=120, operation="Gathering manual packages") as progress:
        ...     pool.run(names, worker, progress=progress)
    """

    def __init__(
        self,
        total: int,
        operation: str = "Processing",
        *,
        enabled: bool = True,
        cadence: int = DEFAULT_CADENCE,
        render: Renderer | None = None,
    ) -> None:
        """Initialize the tracker and render the starting line.

        Args:
            total: Number of items the operation will process.
            operation: Human-readable operation name.
            enabled: If False, counts without rendering anything.
            cadence: Render every time the counter reaches a multiple of this.
            render: Output callback for every line. Defaults to a
                ConsoleLine redrawn in place on the shared error console.

        Raises:
            ValueError: If total is negative or cadence is not positive.
        """
        if total < 0:
            msg = f"Progress total cannot be negative, got {total}"
            raise ValueError(msg)
        if cadence < 1:
            msg = f"Progress cadence must be positive, got {cadence}"
            raise ValueError(msg)

        self._total = total
        self._operation = operation
        self._enabled = enabled
        self._cadence = cadence
        if render is None:
            line = ConsoleLine()
            self._render, self._render_final = line.update, line.done
        else:
            self._render = self._render_final = render
        self._completed = 0
        self._finished = False
        self._lock = threading.Lock()

        self._emit(f"[info]{operation}: 0/{total} packages (0%)[/]")

    @property
    def total(self) -> int:
        """Number of items expected."""
        return self._total

    @property
    def finished(self) -> bool:
        """Whether finish() has been called."""
        return self._finished

    def advance(self, n: int = 1) -> int:
        """Record ``n`` completed items.

        Args:
            n: Number of items completed.

        Returns:
            The counter value after this increment.

        Raises:
            RuntimeError: If the tracker has already finished.
            ValueError: If n is negative.
        """
        if n < 0:
            msg = f"Cannot advance progress by a negative amount: {n}"
            raise ValueError(msg)

        with self._lock:
            if self._finished:
                msg = "Cannot advance a finished progress tracker"
                raise RuntimeError(msg)
            previous = self._completed
            self._completed = previous + n
            current = self._completed
            # Render under the lock so lines never interleave
            if current // self._cadence > previous // self._cadence:
                self._emit(
                    f"[info]Processing: {current}/{self._total} packages "
                    f"({percent(current, self._total)}%)[/]"
                )
        return current

    def snapshot(self) -> tuple[int, int]:
        """Return the current (completed, total) pair."""
        with self._lock:
            return self._completed, self._total

    def finish(self) -> None:
        """Render the final line and close the tracker.

        Calling finish() more than once has no further effect.
        """
        with self._lock:
            if self._finished:
                return
            self._finished = True
            completed = self._completed
        if self._enabled:
            self._render_final(
                f"[success]✓ Completed: {completed}/{self._total} packages (100%)[/]"
            )

    def _emit(self, line: str) -> None:
        if self._enabled:
            self._render(line)

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.finish()
