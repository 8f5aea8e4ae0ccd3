"""Buffered tokenising reader over files, descriptors and binary streams."""

from __future__ import annotations

import functools
import math
import mmap
import os
import re
from typing import BinaryIO, Iterable, Iterator, TextIO

from preputil.exceptions import UtilError
from preputil.fileops import (
    EndOfFileError,
    FDError,
    ScopedFd,
    advance,
    name_from_fd,
    open_read,
    partial_read,
    size_file,
)
from preputil.progress import ProgressBar
from preputil.strtod import strtof

SPACES = frozenset(b" \t\n\v\f\r")

_DEFAULT_MIN_BUFFER = 1 << 20
_PAGE_SIZE = mmap.PAGESIZE
_ULONG_MAX = (1 << 64) - 1
_LONG_MIN = -(1 << 63)
_LONG_MAX = (1 << 63) - 1

_FLOAT_RE = re.compile(rb"[+-]?(?:inf|NaN|(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_RE = re.compile(rb"[+-]?\d+")
_TOKEN_RE = re.compile(rb"[^ \t\n\v\f\r]*")


class ParseNumberError(UtilError):
    """Text at the read position could not be parsed as the requested number type."""

    def __init__(self, value: str, kind: str = "") -> None:
        super().__init__(f'Could not parse "{value}" into a ')
        if kind:
            self.append(kind)


def _as_delim(delim: Iterable[int] | str | bytes) -> frozenset[int]:
    if isinstance(delim, str):
        delim = delim.encode("latin-1")
    return delim if isinstance(delim, frozenset) else frozenset(delim)


@functools.lru_cache(maxsize=32)
def _delim_pattern(delim: frozenset[int]) -> re.Pattern[bytes]:
    if not delim:
        return re.compile(rb"(?!)")
    members = b"".join(re.escape(bytes([b])) for b in sorted(delim))
    return re.compile(b"[" + members + b"]")


def _single_byte(delim: str | bytes) -> bytes:
    raw = delim.encode("latin-1") if isinstance(delim, str) else bytes(delim)
    if len(raw) != 1:
        raise ValueError(f"single-byte delimiter expected, got {delim!r}")
    return raw


def _first_token(region: bytes) -> str:
    match = _TOKEN_RE.match(region)
    token = match.group() if match is not None else b""
    return token.decode("utf-8", "replace")


def _decimal_parts(body: bytes) -> tuple[str, int]:
    mantissa, _, exp = re.split(rb"([eE])", body, maxsplit=1) + [b"", b""] if re.search(
        rb"[eE]", body
    ) else [body, b"", b""]
    integral, _, fraction = mantissa.partition(b".")
    digits = (integral + fraction).decode("ascii")
    exponent = (int(exp) if exp else 0) - len(fraction)
    return digits, exponent


def _parse_real(region: bytes, kind: str, single: bool) -> tuple[float, int]:
    match = _FLOAT_RE.match(region)
    if match is None:
        value, used = math.nan, 0
    else:
        text = match.group()
        negative = text.startswith(b"-")
        body = text.lstrip(b"+-")
        if body == b"inf":
            value = math.inf
        elif body == b"NaN":
            value = math.nan
        elif single:
            value = strtof(*_decimal_parts(body))
        else:
            value = float(body)
        if negative:
            value = -value
        used = match.end()
    if math.isnan(value) and region not in (b"NaN", b"nan"):
        raise ParseNumberError(_first_token(region), kind)
    return value, used


def _parse_integer(region: bytes, kind: str, unsigned: bool) -> tuple[int, int]:
    match = _INT_RE.match(region)
    if match is None:
        raise ParseNumberError(_first_token(region), kind)
    value = int(match.group())
    if unsigned:
        if abs(value) > _ULONG_MAX:
            raise ParseNumberError(_first_token(region), kind)
        value %= 1 << 64
    elif not _LONG_MIN <= value <= _LONG_MAX:
        raise ParseNumberError(_first_token(region), kind)
    return value, match.end()


class FilePiece:
    """Reads lines, words and numbers from a path, an owned descriptor or a binary stream.

    Strings are decoded with ``encoding``; undecodable bytes are kept as surrogates.
    """

    def __init__(
        self,
        source: str | bytes | os.PathLike | int | BinaryIO,
        name: str | None = None,
        show_progress: TextIO | None = None,
        min_buffer: int = _DEFAULT_MIN_BUFFER,
        encoding: str = "utf-8",
    ) -> None:
        self._encoding = encoding
        self._chunk = _PAGE_SIZE * max(min_buffer // _PAGE_SIZE + 1, 2)
        self._buf = bytearray()
        self._pos = 0
        self._base = 0
        self._start = 0
        self._raw = 0
        self._last_space = -1
        self._at_end = False
        self._fd = ScopedFd()
        self._stream: BinaryIO | None = None

        if isinstance(source, int):
            self._fd = ScopedFd(source)
            self._name = name if name is not None else name_from_fd(source)
        elif isinstance(source, (str, bytes, os.PathLike)):
            path = os.fsdecode(source)
            self._fd = ScopedFd(open_read(path))
            self._name = path
        else:
            self._stream = source
            self._name = name if name is not None else "istream"
            self._progress = ProgressBar()
            return

        fd = self._fd.get()
        total = size_file(fd)
        try:
            self._start = advance(fd, 0)
            valid_offset = True
        except FDError:
            self._start = 0
            valid_offset = False
        self._base = self._start
        if total is None:
            self._progress = ProgressBar()
        else:
            self._progress = ProgressBar(total, show_progress, "Reading " + self._name)
        if (total is None or not valid_offset) and show_progress is not None:
            show_progress.write(
                f"File {self._name} isn't normal.  Using slower read() instead of mmap().  "
                "No progress bar.\n"
            )
            show_progress.flush()
        self._shift()

    # Buffer management

    def _read_more(self, amount: int) -> bytes:
        if self._stream is not None:
            data = self._stream.read(amount)
            if isinstance(data, str):
                data = data.encode(self._encoding, "surrogateescape")
            return data or b""
        return partial_read(self._fd.get(), amount)

    def _shift(self) -> None:
        if self._at_end:
            self._progress.finished()
            raise EndOfFileError()
        if self._pos:
            del self._buf[: self._pos]
            self._base += self._pos
            self._pos = 0
        if len(self._buf) >= self._chunk:
            self._chunk *= 2
        data = self._read_more(self._chunk - len(self._buf))
        self._raw += len(data)
        self._progress.set(self._start + self._raw)
        if data:
            self._buf += data
        else:
            self._at_end = True
        self._last_space = max(self._buf.rfind(bytes([c])) for c in SPACES)

    def _decode(self, start: int, stop: int) -> str:
        return self._buf[start:stop].decode(self._encoding, "surrogateescape")

    def _consume(self, to: int) -> str:
        text = self._decode(self._pos, to)
        self._pos = to
        return text

    def _find_delimiter_or_eof(self, delim: frozenset[int]) -> int:
        pattern = _delim_pattern(delim)
        skip = 0
        while True:
            match = pattern.search(self._buf, self._pos + skip)
            if match is not None:
                return match.start()
            if self._at_end:
                if self._pos == len(self._buf):
                    self._shift()
                return len(self._buf)
            skip = len(self._buf) - self._pos
            self._shift()

    # Public reading interface

    def peek(self) -> str:
        """The next byte, as a one-character string, without consuming it."""
        if self._pos == len(self._buf):
            self._shift()
            if self._pos == len(self._buf):
                raise EndOfFileError()
        return chr(self._buf[self._pos])

    def get(self) -> str:
        """Consume and return the next byte as a one-character string."""
        char = self.peek()
        self._pos += 1
        return char

    def skip_spaces(self, delim: Iterable[int] | str | bytes = SPACES) -> None:
        """Skip bytes that are in ``delim``."""
        delim = _as_delim(delim)
        while True:
            if self._pos == len(self._buf):
                self._shift()
                if self._pos == len(self._buf):
                    return
            if self._buf[self._pos] not in delim:
                return
            self._pos += 1

    def read_delimited(self, delim: Iterable[int] | str | bytes = SPACES) -> str:
        """Skip delimiters, then return text up to the next delimiter, which is left unread."""
        delim = _as_delim(delim)
        self.skip_spaces(delim)
        return self._consume(self._find_delimiter_or_eof(delim))

    def read_word_same_line(self, delim: Iterable[int] | str | bytes = SPACES) -> str | None:
        """The next word on the current line, or ``None`` at a newline or end of file."""
        delim = _as_delim(delim)
        if ord("\n") not in delim:
            raise ValueError("the delimiter set must contain a newline")
        while True:
            if self._pos == len(self._buf):
                try:
                    self._shift()
                except EndOfFileError:
                    return None
                if self._pos == len(self._buf):
                    return None
            byte = self._buf[self._pos]
            if byte not in delim:
                break
            if byte == ord("\n"):
                return None
            self._pos += 1
        return self._consume(self._find_delimiter_or_eof(delim))

    def read_line(self, delim: str | bytes = "\n", strip_cr: bool = True) -> str:
        """Read a line and consume its delimiter; raises EndOfFileError at end of file.

        With ``strip_cr`` a carriage return before the delimiter is dropped.
        """
        marker = _single_byte(delim)
        skip = 0
        while True:
            found = self._buf.find(marker, self._pos + skip)
            if found != -1:
                cut = found
                if strip_cr and found > self._pos and self._buf[found - 1] == ord("\r"):
                    cut -= 1
                line = self._decode(self._pos, cut)
                self._pos = found + 1
                return line
            if self._at_end:
                if self._pos == len(self._buf):
                    self._shift()
                return self._consume(len(self._buf))
            skip = len(self._buf) - self._pos
            self._shift()

    def read_line_or_eof(self, delim: str | bytes = "\n", strip_cr: bool = True) -> str | None:
        """Like read_line, but return ``None`` at end of file."""
        try:
            return self.read_line(delim, strip_cr)
        except EndOfFileError:
            return None

    def _read_number(self, parse) -> float | int:
        self.skip_spaces()
        while self._last_space < self._pos:
            if self._at_end:
                if self._pos == len(self._buf):
                    raise EndOfFileError()
                value, used = parse(bytes(self._buf[self._pos :]))
                self._pos += used
                return value
            self._shift()
        value, used = parse(bytes(self._buf[self._pos : self._last_space]))
        self._pos += used
        return value

    def read_float(self) -> float:
        """Read a number rounded to single precision."""
        return self._read_number(lambda region: _parse_real(region, "float", True))

    def read_double(self) -> float:
        """Read a double-precision number."""
        return self._read_number(lambda region: _parse_real(region, "double", False))

    def read_long(self) -> int:
        """Read a signed 64-bit decimal integer."""
        return self._read_number(lambda region: _parse_integer(region, "long int", False))

    def read_ulong(self) -> int:
        """Read an unsigned 64-bit decimal integer; a minus sign wraps around."""
        return self._read_number(
            lambda region: _parse_integer(region, "unsigned long int", True)
        )

    def offset(self) -> int:
        """Position of the next unread byte in the underlying file."""
        return self._base + self._pos

    def file_name(self) -> str:
        """Name used for messages."""
        return self._name

    def update_progress(self) -> None:
        """Move the progress bar to the current read position."""
        self._progress.set(self.offset())

    def close(self) -> None:
        """Finish the progress bar and close an owned descriptor."""
        self._progress.close()
        self._fd.close()

    def __iter__(self) -> Iterator[str]:
        while (line := self.read_line_or_eof()) is not None:
            yield line

    def __enter__(self) -> FilePiece:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()