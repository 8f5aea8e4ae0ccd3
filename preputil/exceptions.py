"""Exception types that carry a growing message and an optional source location."""

from __future__ import annotations

import inspect
import os
from typing import Any

_OVERFLOW_MESSAGE = "Integer overflow detected.  This model is too big for 32-bit code."


class UtilError(Exception):
    """Base error whose message can be extended after construction."""

    def __init__(self, message: Any = "") -> None:
        super().__init__()
        self._what = str(message)

    @property
    def what(self) -> str:
        """The full message text."""
        return self._what

    def __str__(self) -> str:
        return self._what

    def append(self, data: Any) -> UtilError:
        """Append ``data`` to the message and return the error for chaining."""
        self._what += str(data)
        return self

    def set_location(
        self,
        file: str,
        line: int,
        func: str | None,
        child_name: str | None,
        condition: str | None,
    ) -> UtilError:
        """Put a description of where the error was raised before the existing text."""
        parts = [f"{file}:{line}"]
        if func is not None:
            parts.append(f" in {func} threw ")
        parts.append(child_name if child_name is not None else type(self).__name__)
        if condition is not None:
            parts.append(f" because `{condition}'")
        parts.append(".\n")
        self._what = "".join(parts) + self._what
        return self


class ErrnoError(UtilError):
    """Error that records an operating-system error number and its description."""

    def __init__(self, errnum: int | None = None, message: Any = "") -> None:
        super().__init__()
        self._errno = errnum
        if errnum is not None:
            self.append(os.strerror(errnum)).append(" ")
        if message:
            self.append(message)

    def error(self) -> int | None:
        """The recorded error number."""
        return self._errno


class FileOpenError(UtilError):
    """A file was missing or could not be opened."""


class IntegerOverflowError(UtilError):
    """A value does not fit in the requested integer width."""


def _locate(error: UtilError, condition: str | None = None) -> UtilError:
    """Stamp ``error`` with the caller's file, line and function."""
    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    try:
        if caller is None:
            return error.set_location("<unknown>", 0, None, type(error).__name__, condition)
        code = caller.f_code
        return error.set_location(
            code.co_filename, caller.f_lineno, code.co_name, type(error).__name__, condition
        )
    finally:
        del frame, caller


def check_overflow(value: int, size_bytes: int = 8) -> int:
    """Return ``value`` if it fits in an unsigned integer of ``size_bytes`` bytes."""
    if size_bytes == 8:
        return value
    limit = (1 << (8 * size_bytes)) - 1
    if value > limit:
        raise _locate(IntegerOverflowError(), "value > limit").append(_OVERFLOW_MESSAGE)
    return value