"""A minimal text progress bar that prints one star per percent."""

from __future__ import annotations

import sys
from typing import TextIO

PROGRESS_BANNER = (
    "----5---10---15---20---25---30---35---40---45---50"
    "---55---60---65---70---75---80---85---90---95--100\n"
)

_WIDTH = 100
_NEVER = (1 << 64) - 1
_STDERR = object()


class ProgressBar:
    """Progress toward ``complete`` units, drawn as up to 100 stars on ``out``.

    With no ``complete`` or a ``None`` output, nothing is printed.
    """

    def __init__(self, complete: int | None = None, out: TextIO | None | object = _STDERR,
                 message: str = "") -> None:
        self._current = 0
        self._stones = 0
        if complete is None:
            self._next = _NEVER
            self._complete = _NEVER
            self._out: TextIO | None = None
            return
        self._complete = complete
        self._next = complete // _WIDTH
        self._out = sys.stderr if out is _STDERR else out  # type: ignore[assignment]
        if self._out is None:
            self._next = _NEVER
            return
        if message:
            self._out.write(message + "\n")
        self._out.write(PROGRESS_BANNER)

    @property
    def current(self) -> int:
        """Units counted so far."""
        return self._current

    @property
    def complete(self) -> int:
        """Units that make up the whole task."""
        return self._complete

    def increment(self, amount: int = 1) -> ProgressBar:
        """Add ``amount`` units of progress."""
        self._current += amount
        if self._current >= self._next:
            self._milestone()
        return self

    def __iadd__(self, amount: int) -> ProgressBar:
        return self.increment(amount)

    def set(self, to: int) -> None:
        """Set the progress to ``to`` units."""
        self._current = to
        if self._current >= self._next:
            self._milestone()

    def finished(self) -> None:
        """Mark the task as complete, drawing any remaining stars."""
        self.set(self._complete)

    def close(self) -> None:
        """Finish the bar if it is still being drawn."""
        if self._out is not None:
            self.finished()

    def __enter__(self) -> ProgressBar:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _milestone(self) -> None:
        if self._out is None:
            self._current = 0
            return
        if not self._complete:
            return
        stone = min(_WIDTH, (self._current * _WIDTH) // self._complete)
        if stone > self._stones:
            self._out.write("*" * (stone - self._stones))
            self._stones = stone
        if stone == _WIDTH:
            self._out.write("\n")
            flush = getattr(self._out, "flush", None)
            if flush is not None:
                flush()
            self._next = _NEVER
            self._out = None
        else:
            self._next = max(self._next, ((stone + 1) * self._complete + _WIDTH - 1) // _WIDTH)