import math
import struct

import pytest

from preputil.float_to_string import to_string, to_string_single


def _single(x):
    return struct.unpack("<f", struct.pack("<f", x))[0]


DOUBLES = [
    0.1,
    1 / 3,
    123.456,
    1e-300,
    5e-324,
    1.7976931348623157e308,
    float(2**53),
    1e-6,
    1e21,
    -2.5,
    6.02214076e23,
]


@pytest.mark.parametrize("value", DOUBLES)
def test_double_round_trip(value):
    assert float(to_string(value)) == value


@pytest.mark.parametrize("value", DOUBLES)
def test_not_longer_than_repr_digits(value):
    text = to_string(value)
    digits = text.lstrip("-").split("e")[0].replace(".", "").strip("0")
    repr_digits = repr(abs(value)).split("e")[0].replace(".", "").strip("0")
    assert len(digits) <= len(repr_digits)


@pytest.mark.parametrize("exponent", range(-6, 21))
def test_plain_notation_in_range(exponent):
    value = float(f"1e{exponent}")
    text = to_string(value)
    assert "e" not in text
    assert float(text) == value


@pytest.mark.parametrize("value", [1e-7, 1e21, 1e22, 3e-30, 1e300])
def test_exponential_notation_out_of_range(value):
    text = to_string(value)
    assert "e" in text
    assert float(text) == value


def test_pinned_forms():
    assert to_string(1e21) == "1e21"
    assert to_string(1e-7) == "1e-7"
    assert to_string(-0.0) == "-0"


def test_zero_matches_negative_zero_without_sign():
    assert to_string(0.0) == to_string(-0.0)[1:]


def test_integer_value_has_no_point():
    assert to_string(12345.0) == "12345"


@pytest.mark.parametrize("value", [0.1, 7.25, 1e-30, 4e25])
def test_negation_adds_sign(value):
    assert to_string(-value) == "-" + to_string(value)


def test_special_values():
    assert to_string(math.inf) == "inf"
    assert to_string(-math.inf) == "-" + "inf"
    assert to_string(math.nan) == "NaN"
    assert to_string_single(math.inf) == "inf"
    assert to_string_single(math.nan) == "NaN"


def test_single_source_value():
    assert to_string_single(3.2) == "3.2"


SINGLES = [0.1, 1 / 3, 3.2, 1e-40, 1.4e-45, 3.4028234663852886e38, 16777216.0, 123456.789, 2.5e-10]


@pytest.mark.parametrize("value", SINGLES)
def test_single_round_trip(value):
    assert _single(float(to_string_single(value))) == _single(value)


@pytest.mark.parametrize("value", SINGLES)
def test_single_no_longer_than_double_form(value):
    assert len(to_string_single(value)) <= len(to_string(_single(value)))


def test_single_overflow_becomes_infinity():
    assert to_string_single(1e300) == "inf"
    assert to_string_single(-1e300) == "-" + "inf"


def test_single_zero_sign():
    assert to_string_single(-0.0) == "-" + to_string_single(0.0)