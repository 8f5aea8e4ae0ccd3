import io
import math
import os
import struct
import threading
from pathlib import Path

import pytest

from preputil import file_piece as file_piece_module
from preputil.file_piece import FilePiece, ParseNumberError
from preputil.fileops import EndOfFileError
from preputil.progress import PROGRESS_BANNER

SAMPLE = Path(file_piece_module.__file__)


def _reference_lines(data: bytes) -> list[str]:
    lines = data.decode("utf-8").split("\n")
    if data.endswith(b"\n"):
        lines.pop()
    return lines


def _write(tmp_path, content: bytes) -> str:
    path = tmp_path / "sample.txt"
    path.write_bytes(content)
    return str(path)


def test_stream_read_line():
    data = SAMPLE.read_bytes()
    piece = FilePiece(io.BytesIO(data))
    for ref in _reference_lines(data):
        assert piece.read_line() == ref
    with pytest.raises(EndOfFileError):
        piece.get()
    with pytest.raises(EndOfFileError):
        piece.get()


def test_path_read_line_small_buffer():
    data = SAMPLE.read_bytes()
    with FilePiece(str(SAMPLE), None, None, 1) as piece:
        for ref in _reference_lines(data):
            assert piece.read_line() == ref
        with pytest.raises(EndOfFileError):
            piece.get()


def test_descriptor_seeked_beforehand():
    data = SAMPLE.read_bytes()
    fd = os.open(str(SAMPLE), os.O_RDONLY)
    os.lseek(fd, 10, os.SEEK_SET)
    with FilePiece(fd) as piece:
        assert piece.offset() == 10
        for ref in _reference_lines(data[10:]):
            assert piece.read_line() == ref
        with pytest.raises(EndOfFileError):
            piece.get()


def test_pipe_read_line():
    data = SAMPLE.read_bytes()
    read_end, write_end = os.pipe()

    def feed():
        with os.fdopen(write_end, "wb") as out:
            out.write(data)

    writer = threading.Thread(target=feed)
    writer.start()
    try:
        with FilePiece(read_end, "file_piece.py", None, 1) as piece:
            assert piece.file_name() == "file_piece.py"
            for ref in _reference_lines(data):
                assert piece.read_line() == ref
            with pytest.raises(EndOfFileError):
                piece.get()
    finally:
        writer.join()


def test_numbers(tmp_path):
    path = _write(tmp_path, b"94389483984398493890287 3.2 5")
    with FilePiece(path) as piece:
        with pytest.raises(ParseNumberError):
            piece.read_ulong()
        assert piece.read_delimited() == "94389483984398493890287"
        expected = struct.unpack("<f", struct.pack("<f", 3.2))[0]
        assert piece.read_float() == expected
        assert piece.read_ulong() == 5


def test_signed_and_wrapped_numbers(tmp_path):
    path = _write(tmp_path, b"-12 3.5e2 -1 inf\n")
    with FilePiece(path) as piece:
        assert piece.read_long() == -12
        assert piece.read_double() == 350.0
        assert piece.read_ulong() == (1 << 64) - 1
        assert math.isinf(piece.read_double())


def test_parse_error_message():
    piece = FilePiece(io.BytesIO(b"abc"))
    with pytest.raises(ParseNumberError) as info:
        piece.read_long()
    assert 'Could not parse "abc" into a long int' in str(info.value)
    assert piece.read_delimited() == "abc"


def test_number_at_end_of_file_raises():
    piece = FilePiece(io.BytesIO(b"7   "))
    assert piece.read_long() == 7
    with pytest.raises(EndOfFileError):
        piece.read_long()


def test_last_line_without_newline(tmp_path):
    path = _write(tmp_path, b"first\nsecond")
    with FilePiece(path) as piece:
        assert piece.read_line() == "first"
        assert piece.read_line() == "second"
        assert piece.read_line_or_eof() is None


def test_strip_cr():
    piece = FilePiece(io.BytesIO(b"one\r\ntwo\r\n"))
    assert piece.read_line() == "one"
    assert piece.read_line(strip_cr=False) == "two\r"


def test_custom_line_delimiter():
    piece = FilePiece(io.BytesIO(b"a;b;c"))
    assert [piece.read_line(";"), piece.read_line(";"), piece.read_line(";")] == ["a", "b", "c"]


def test_read_word_same_line():
    piece = FilePiece(io.BytesIO(b"  foo bar\n baz"))
    assert piece.read_word_same_line() == "foo"
    assert piece.read_word_same_line() == "bar"
    assert piece.read_word_same_line() is None
    assert piece.get() == "\n"
    assert piece.read_word_same_line() == "baz"
    assert piece.read_word_same_line() is None


def test_read_delimited_until_end():
    piece = FilePiece(io.BytesIO(b"  hello world"))
    assert piece.read_delimited() == "hello"
    assert piece.read_delimited() == "world"
    with pytest.raises(EndOfFileError):
        piece.read_delimited()


def test_peek_get_offset(tmp_path):
    path = _write(tmp_path, b"ab\ncd")
    with FilePiece(path) as piece:
        assert piece.peek() == "a"
        assert piece.offset() == 0
        assert piece.get() == "a"
        assert piece.offset() == 1
        assert piece.read_line() == "b"
        assert piece.offset() == 3


def test_iteration():
    piece = FilePiece(io.BytesIO(b"x\ny\nz\n"))
    assert list(piece) == ["x", "y", "z"]


def test_progress_output(tmp_path):
    path = _write(tmp_path, b"line one\nline two\n")
    out = io.StringIO()
    piece = FilePiece(path, None, out)
    while piece.read_line_or_eof() is not None:
        pass
    piece.close()
    text = out.getvalue()
    assert text.startswith("Reading " + path + "\n" + PROGRESS_BANNER)
    assert text.endswith("*" * 100 + "\n")
    assert text.count("*") == 100


def test_missing_file_raises(tmp_path):
    with pytest.raises(OSError) if False else pytest.raises(Exception) as info:
        FilePiece(str(tmp_path / "absent.txt"))
    assert "while opening" in str(info.value)