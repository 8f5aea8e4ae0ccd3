# preputil

Building blocks for programs that read large text files: file-descriptor
helpers that raise instead of returning status codes, a buffered reader for
lines, tokens and numbers, exact decimal/binary number conversion, and a
plain-text progress bar. Only the standard library is needed.

## Installation

```
pip install preputil
```

With the test requirements:

```
pip install "preputil[test]"
```

## Modules

### `preputil.exceptions`

- `UtilError`: base error whose message can grow after construction.
  `append(data)` adds text and returns the error; `set_location(file, line,
  func, child_name, condition)` puts a `file:line in func threw Name because
  `condition'.` header before the existing text. The text is available as
  `what` and through `str()`.
- `ErrnoError(errnum, message)`: adds `os.strerror(errnum)` to the message;
  `error()` returns the number.
- `FileOpenError`, `IntegerOverflowError`.
- `check_overflow(value, size_bytes=8)`: returns `value`, or raises
  `IntegerOverflowError` when it does not fit in an unsigned integer of
  `size_bytes` bytes. Eight-byte checks always pass.

### `preputil.progress`

`ProgressBar(complete, out=sys.stderr, message="")` prints an optional message
and a 100-column banner, then one `*` per percent as progress is reported with
`increment(amount=1)`, `+=`, `set(to)` or `finished()`. With no `complete`, or
with `out=None`, nothing is printed. `close()` (also run on leaving a `with`
block) finishes a bar that is still drawing. `PROGRESS_BANNER` holds the
banner text.

### `preputil.float_to_string`

`to_string(value)` gives the shortest text that reads back as the same double;
`to_string_single(value)` does the same at single precision. Exponents from
-6 to 20 are written in plain decimal, others as `1.5e25`. Infinity is `inf`
or `-inf`, not-a-number is `NaN`.

### `preputil.fixed_dtoa`

`fast_fixed_dtoa(value, fractional_count)` returns `(digits, decimal_point)`
for `value` rounded to `fractional_count` places, halfway cases away from
zero, with leading and trailing zeros removed. It returns `None` for values of
2**73 or more, non-finite values, or more than 20 places, and raises
`ValueError` for a negative count.

### `preputil.strtod`

`strtod(digits, exponent)` and `strtof(digits, exponent)` give the double, or
the single-precision value (as a Python float), nearest to
`int(digits) * 10 ** exponent`, ties to even. `digits` must be decimal digits
only; anything else raises `ValueError`. Very large values become infinity and
very small ones zero.

### `preputil.fileops`

Functions on file descriptors: `open_read`, `create`, `size_file` (returns
`None` when the file cannot be sized), `size_or_throw`, `resize`,
`partial_read`, `read_exact`, `read_or_eof`, `write_all` (descriptor or binary
file object), `pread_exact`, `pwrite_all`, `fsync`,
`fsync_ignore_unsupported`, `seek`, `advance`, `seek_end`, `dup`,
`name_from_fd`, and path helpers `input_is_stdin`, `output_is_stdout`.

Temporary files: `make_temp(prefix)` creates a file next to `prefix`, deletes
its name and returns the open descriptor; `fmake_temp(prefix)` returns it as a
binary file object; `normalize_temp_prefix(base)` appends `/` to an existing
directory; `default_temp_directory()` reads `TMPDIR`, `TMP`, `TEMPDIR`,
`TEMP` in that order and falls back to `/tmp/`.

`ScopedFd` owns a descriptor (`get`, `reset`, `release`, `close`, usable with
`with`); `FileWriter` writes to an owned descriptor. Errors are `FDError`
(carries `fd` and `name_guess`), `EndOfFileError` and `UnsupportedOSError`.

### `preputil.file_piece`

`FilePiece(source, name=None, show_progress=None, min_buffer=1 << 20,
encoding="utf-8")` reads from a path, an owned descriptor or a binary stream.

- `read_line(delim="\n", strip_cr=True)`, `read_line_or_eof(...)`, and
  iteration over lines.
- `read_delimited(delim=SPACES)`, `read_word_same_line(delim=SPACES)`,
  `skip_spaces(delim=SPACES)`, `peek()`, `get()`.
- `read_float()` (rounded to single precision), `read_double()`,
  `read_long()`, `read_ulong()`; text that is not a number raises
  `ParseNumberError`.
- `offset()`, `file_name()`, `update_progress()`, `close()`; usable with `with`.

Reading past the end raises `EndOfFileError`.

## Example

```python
from preputil.file_piece import FilePiece
from preputil.fileops import EndOfFileError

with FilePiece("counts.txt") as piece:
    try:
        while True:
            word = piece.read_delimited()
            count = piece.read_ulong()
            print(word, count)
    except EndOfFileError:
        pass
```

```python
from preputil.strtod import strtod
from preputil.float_to_string import to_string

value = strtod("32", -1)   # 3.2
print(to_string(value))    # 3.2
```

## What it does not do

- `FilePiece` reads input as it is stored; it does not detect or decompress
  gzip or other compressed files.
- `hole_punch` is not available and always raises `UnsupportedOSError`.
- There is no command-line program; the package is a library only.