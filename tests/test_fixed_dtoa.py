from decimal import Decimal

import pytest

from preputil.fixed_dtoa import fast_fixed_dtoa


def _reference(value: float, fractional_count: int) -> tuple[str, int]:
    text = format(value, f".{fractional_count}f")
    number = int(text.replace(".", ""))
    if number == 0:
        return "", -fractional_count
    digits = str(number)
    return digits.rstrip("0"), len(digits) - fractional_count


def test_documented_example_small_value():
    assert fast_fixed_dtoa(0.001, 5) == ("1", -2)


def test_exact_halfway_rounds_away_from_zero():
    assert fast_fixed_dtoa(0.125, 2) == ("13", 0)


def test_half_with_no_fraction_rounds_up_to_one():
    assert fast_fixed_dtoa(0.5, 0) == ("1", 1)


def test_zero_gives_empty_digits():
    assert fast_fixed_dtoa(0.0, 7) == ("", -7)


def test_tiny_value_rounds_to_nothing():
    assert fast_fixed_dtoa(1e-30, 20) == ("", -20)


@pytest.mark.parametrize(
    "value,count",
    [
        (1 / 3, 10),
        (123.456, 3),
        (123.456, 1),
        (2.0 / 7.0, 20),
        (1e20, 0),
        (1e20, 5),
        (float(2**72), 2),
        (4294967297.25, 4),
        (9.999, 2),
        (1e-21, 20),
        (5e-324, 20),
    ],
)
def test_matches_formatted_output(value, count):
    assert fast_fixed_dtoa(value, count) == _reference(value, count)


@pytest.mark.parametrize("value,count", [(0.1, 17), (3.14159, 4), (12345678.9, 6)])
def test_result_is_within_half_unit(value, count):
    digits, point = fast_fixed_dtoa(value, count)
    result = Decimal(f"0.{digits}") * Decimal(10) ** point
    assert abs(Decimal(value) - result) <= Decimal(10) ** -count / 2


@pytest.mark.parametrize("value,count", [(0.001, 5), (100.0, 3), (0.75, 4)])
def test_digits_have_no_surrounding_zeros(value, count):
    digits, _ = fast_fixed_dtoa(value, count)
    assert digits and digits[0] != "0" and digits[-1] != "0"


def test_negative_uses_magnitude():
    assert fast_fixed_dtoa(-2.5, 1) == fast_fixed_dtoa(2.5, 1)


def test_too_many_fractional_digits_unsupported():
    assert fast_fixed_dtoa(1.5, 21) is None


def test_too_large_value_unsupported():
    assert fast_fixed_dtoa(float(2**73), 0) is None


@pytest.mark.parametrize("value", [float("inf"), float("nan")])
def test_non_finite_unsupported(value):
    assert fast_fixed_dtoa(value, 3) is None


def test_negative_fractional_count_rejected():
    with pytest.raises(ValueError):
        fast_fixed_dtoa(1.0, -1)