"""File-descriptor operations that raise descriptive errors instead of returning codes."""

from __future__ import annotations

import errno
import os
import sys
import tempfile
from typing import BinaryIO

from preputil.exceptions import ErrnoError, UtilError, _locate

_INT_MAX = (1 << 31) - 1
_LIMITED_IO = sys.platform in ("win32", "darwin") or hasattr(sys, "getandroidapilevel")
_UNSUPPORTED_SYNC = {
    errno.EROFS,
    errno.EINVAL,
    getattr(errno, "ENOTSUP", errno.EINVAL),
    getattr(errno, "EOPNOTSUPP", errno.EINVAL),
}
_TEMP_ENV_VARS = ("TMPDIR", "TMP", "TEMPDIR", "TEMP")


class FDError(ErrnoError):
    """Error in an operation on a known file descriptor."""

    def __init__(self, fd: int, errnum: int | None = None, message: object = "") -> None:
        super().__init__(errnum)
        self.fd = fd
        self.name_guess = name_from_fd(fd)
        self.append(f"in {self.name_guess} ")
        if message:
            self.append(message)


class EndOfFileError(UtilError):
    """The end of a file was reached before the requested data."""

    def __init__(self, message: object = "") -> None:
        super().__init__("End of file")
        if message:
            self.append(message)


class UnsupportedOSError(UtilError):
    """The operation is not available on this operating system."""


class ScopedFd:
    """Owns a file descriptor and closes it when the scope ends."""

    def __init__(self, fd: int = -1) -> None:
        self._fd = fd

    def get(self) -> int:
        """The owned descriptor, or -1."""
        return self._fd

    def reset(self, to: int = -1) -> None:
        """Close the owned descriptor and take ownership of ``to``."""
        old, self._fd = self._fd, to
        _close(old)

    def release(self) -> int:
        """Give up ownership and return the descriptor without closing it."""
        fd, self._fd = self._fd, -1
        return fd

    def close(self) -> None:
        """Close the owned descriptor, if any."""
        self.reset()

    def __enter__(self) -> ScopedFd:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_fd", -1) != -1:
            try:
                os.close(self._fd)
            except OSError:
                pass
            self._fd = -1


def _close(fd: int) -> None:
    if fd == -1:
        return
    try:
        os.close(fd)
    except OSError as e:
        raise _locate(ErrnoError(e.errno, f"Could not close file {fd}"), "close(fd)") from e


class FileWriter:
    """Writes bytes to an owned descriptor."""

    def __init__(self, fd: int) -> None:
        self._fd = ScopedFd(fd)

    def write(self, data: bytes) -> None:
        """Write all of ``data``."""
        write_all(self._fd.get(), data)

    def flush(self) -> None:
        """Sync to disk where the descriptor supports it."""
        fsync_ignore_unsupported(self._fd.get())

    def close(self) -> None:
        """Close the descriptor."""
        self._fd.close()

    def __enter__(self) -> FileWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _binary_flag() -> int:
    return getattr(os, "O_BINARY", 0)


def open_read(name: str) -> int:
    """Open ``name`` read only and return the descriptor."""
    try:
        return os.open(name, os.O_RDONLY | _binary_flag())
    except OSError as e:
        raise _locate(ErrnoError(e.errno, f"while opening {name}"), "-1 == open") from e


def create(name: str) -> int:
    """Create or truncate ``name`` for reading and writing."""
    flags = os.O_CREAT | os.O_TRUNC | os.O_RDWR | _binary_flag()
    try:
        return os.open(name, flags, 0o644)
    except OSError as e:
        raise _locate(ErrnoError(e.errno, f"while creating {name}"), "-1 == open") from e


def input_is_stdin(path: str) -> bool:
    """Whether ``path`` denotes standard input."""
    return path in ("-", "/dev/stdin")


def output_is_stdout(path: str) -> bool:
    """Whether ``path`` denotes standard output."""
    return path in ("-", "/dev/stdout")


def size_file(fd: int) -> int | None:
    """Size of the file behind ``fd``, or ``None`` when it cannot be sized."""
    try:
        sb = os.fstat(fd)
    except OSError:
        return None
    if not sb.st_size and not os.path.stat.S_ISREG(sb.st_mode):
        return None
    return sb.st_size


def size_or_throw(fd: int) -> int:
    """Size of the file behind ``fd``; raises FDError when it cannot be sized."""
    size = size_file(fd)
    if size is None:
        raise _locate(FDError(fd, None, "Failed to size"), "ret == kBadSize")
    return size


def resize(fd: int, to: int) -> None:
    """Truncate or extend the file to ``to`` bytes."""
    try:
        os.ftruncate(fd, to)
    except OSError as e:
        raise _locate(FDError(fd, e.errno, f"while resizing to {to} bytes"), "ret") from e


def hole_punch(fd: int, offset: int, size: int) -> None:
    """Deallocate a byte range; not available without native fallocate flags."""
    raise _locate(
        UnsupportedOSError("fallocate hole punching requires Linux and glibc >= 2.18")
    )


def _guard_large(size: int) -> int:
    return min(size, _INT_MAX) if _LIMITED_IO else size


def partial_read(fd: int, amount: int) -> bytes:
    """Read up to ``amount`` bytes; an empty result means end of file."""
    try:
        return os.read(fd, _guard_large(amount))
    except OSError as e:
        raise _locate(FDError(fd, e.errno, f"while reading {amount} bytes"), "ret < 0") from e


def read_exact(fd: int, amount: int) -> bytes:
    """Read exactly ``amount`` bytes or raise EndOfFileError."""
    chunks: list[bytes] = []
    remaining = amount
    while remaining:
        chunk = partial_read(fd, remaining)
        if not chunk:
            raise _locate(
                EndOfFileError(
                    f" in {name_from_fd(fd)} but there should be {remaining} more bytes to read."
                ),
                "ret == 0",
            )
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_or_eof(fd: int, amount: int) -> bytes:
    """Read ``amount`` bytes, or fewer if the file ends first."""
    chunks: list[bytes] = []
    remaining = amount
    while remaining:
        chunk = partial_read(fd, remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def write_all(fd: int | BinaryIO, data: bytes) -> None:
    """Write all of ``data`` to a descriptor or a binary file object."""
    if not isinstance(fd, int):
        if not data:
            return
        try:
            written = fd.write(data)
        except OSError as e:
            raise _locate(
                ErrnoError(e.errno, f"Short write; requested size {len(data)}"), "fwrite"
            ) from e
        if written is not None and written != len(data):
            raise _locate(ErrnoError(None, f"Short write; requested size {len(data)}"), "fwrite")
        return
    view = memoryview(data)
    while view:
        try:
            written = os.write(fd, view[: _guard_large(len(view))])
        except OSError as e:
            raise _locate(
                FDError(fd, e.errno, f"while writing {len(view)} bytes"), "ret < 1"
            ) from e
        if written < 1:
            raise _locate(FDError(fd, None, f"while writing {len(view)} bytes"), "ret < 1")
        view = view[written:]


def _pread(fd: int, size: int, offset: int) -> bytes:
    if hasattr(os, "pread"):
        return os.pread(fd, size, offset)
    os.lseek(fd, offset, os.SEEK_SET)
    return os.read(fd, size)


def _pwrite(fd: int, data: memoryview, offset: int) -> int:
    if hasattr(os, "pwrite"):
        return os.pwrite(fd, data, offset)
    os.lseek(fd, offset, os.SEEK_SET)
    return os.write(fd, data)


def pread_exact(fd: int, size: int, offset: int) -> bytes:
    """Read exactly ``size`` bytes at ``offset`` without using the file position."""
    chunks: list[bytes] = []
    while size:
        try:
            chunk = _pread(fd, _guard_large(size), offset)
        except OSError as e:
            raise _locate(
                FDError(fd, e.errno, f"while reading {size} bytes at offset {offset}")
            ) from e
        if not chunk:
            raise _locate(
                EndOfFileError(
                    f" for reading {size} bytes at {offset} from {name_from_fd(fd)}"
                ),
                "ret == 0",
            )
        chunks.append(chunk)
        size -= len(chunk)
        offset += len(chunk)
    return b"".join(chunks)


def pwrite_all(fd: int, data: bytes, offset: int) -> None:
    """Write all of ``data`` at ``offset`` without using the file position."""
    view = memoryview(data)
    while view:
        try:
            written = _pwrite(fd, view[: _guard_large(len(view))], offset)
        except OSError as e:
            raise _locate(
                FDError(fd, e.errno, f"while writing {len(view)} bytes at offset {offset}")
            ) from e
        if written == 0:
            raise _locate(
                EndOfFileError(
                    f" for writing {len(view)} bytes at {offset} from {name_from_fd(fd)}"
                ),
                "ret == 0",
            )
        view = view[written:]
        offset += written


def fsync(fd: int) -> None:
    """Flush the file to disk."""
    try:
        os.fsync(fd)
    except OSError as e:
        raise _locate(FDError(fd, e.errno, "while syncing"), "-1 == fsync(fd)") from e


def fsync_ignore_unsupported(fd: int) -> None:
    """Flush the file to disk, ignoring descriptors that cannot be synced."""
    try:
        os.fsync(fd)
    except OSError as e:
        if e.errno in _UNSUPPORTED_SYNC:
            return
        raise _locate(FDError(fd, e.errno, f"while syncing fd {fd}")) from e


def _internal_seek(fd: int, offset: int, whence: int) -> int:
    try:
        return os.lseek(fd, offset, whence)
    except OSError as e:
        raise _locate(
            FDError(fd, e.errno, f"while seeking to {offset} whence {whence}"), "-1 == ret"
        ) from e


def seek(fd: int, offset: int) -> int:
    """Move to absolute ``offset``; returns the new position."""
    return _internal_seek(fd, offset, os.SEEK_SET)


def advance(fd: int, offset: int) -> int:
    """Move by ``offset`` relative to the current position; returns the new position."""
    return _internal_seek(fd, offset, os.SEEK_CUR)


def seek_end(fd: int) -> int:
    """Move to the end of the file; returns its size."""
    return _internal_seek(fd, 0, os.SEEK_END)


def normalize_temp_prefix(base: str) -> str:
    """Append a slash to ``base`` if it names an existing directory."""
    if not base or base.endswith("/"):
        return base
    if os.path.isdir(base):
        return base + "/"
    return base


def make_temp(prefix: str) -> int:
    """Create an anonymous temporary file whose name starts with ``prefix``."""
    directory, stem = os.path.split(prefix)
    try:
        fd, name = tempfile.mkstemp(prefix=stem, dir=directory or os.curdir)
    except OSError as e:
        raise _locate(
            ErrnoError(e.errno, f"while making a temporary based on {prefix}"), "-1 == ret"
        ) from e
    try:
        os.unlink(name)
    except OSError as e:
        os.close(fd)
        raise _locate(ErrnoError(e.errno, f"while deleting {name}"), "unlink") from e
    return fd


def fmake_temp(prefix: str) -> BinaryIO:
    """Create an anonymous temporary file and open it as a binary file object."""
    holder = ScopedFd(make_temp(prefix))
    try:
        handle = os.fdopen(holder.get(), "r+b")
    except OSError as e:
        raise _locate(FDError(holder.get(), e.errno, "Could not fdopen for write"), "!ret") from e
    holder.release()
    return handle


def default_temp_directory() -> str:
    """Directory for temporary files, taken from the environment or ``/tmp/``."""
    if os.name == "nt":
        return normalize_temp_prefix(tempfile.gettempdir())
    for var in _TEMP_ENV_VARS:
        value = os.environ.get(var)
        if value:
            return normalize_temp_prefix(value)
    return "/tmp/"


def dup(fd: int) -> int:
    """Duplicate a descriptor."""
    try:
        return os.dup(fd)
    except OSError as e:
        raise _locate(
            FDError(fd, e.errno, "in duplicating the file descriptor"), "ret == -1"
        ) from e


def _try_name(fd: int) -> str | None:
    try:
        target = os.readlink(f"/proc/self/fd/{fd}")
    except (OSError, ValueError):
        return None
    if target and not target.startswith("/"):
        return None
    return target


def name_from_fd(fd: int) -> str:
    """Best guess at the name of the file behind ``fd``, for messages only."""
    name = _try_name(fd)
    if name is not None:
        return name
    standard = {0: "stdin", 1: "stdout", 2: "stderr"}
    return standard.get(fd, f"fd {fd}")