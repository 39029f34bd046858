"""Tests for tolerant numeric coercion."""

import math
import random
from decimal import Decimal

import pytest

from src.chart_engine.transforms.numeric import (
    MAX_SAFE_VALUE,
    is_numeric_text,
    parse_numeric,
    parse_numeric_value,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("$1,234.50", 1234.5),
        ("12%", 12.0),
        ("abc", 0.0),
        ("", 0.0),
        (None, 0.0),
        (42, 42.0),
        (-3.5, -3.5),
        ("(1,200)", -1200.0),
        ("€ 9.99", 9.99),
        ("12.5kg", 12.5),
        ("1e3", 1000.0),
    ],
)
def test_parse_numeric(raw, expected):
    assert parse_numeric(raw) == pytest.approx(expected)


def test_booleans_are_not_numbers():
    assert parse_numeric_value(True) is None
    assert parse_numeric(False) == 0.0


def test_non_finite_and_huge_values_are_rejected():
    assert parse_numeric_value(float("nan")) is None
    assert parse_numeric_value(float("inf")) is None
    assert parse_numeric_value("1e20") is None
    assert parse_numeric_value(str(MAX_SAFE_VALUE)) == MAX_SAFE_VALUE


def test_parse_numeric_never_raises_on_arbitrary_input():
    rng = random.Random(7)
    alphabet = "0123456789.,-+()$%€eE abc"
    for _ in range(500):
        text = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 12)))
        result = parse_numeric(text)
        assert isinstance(result, float)
        assert math.isfinite(result)


def test_is_numeric_text_requires_the_whole_cell():
    assert is_numeric_text("$1,200")
    assert is_numeric_text("(35)")
    assert is_numeric_text(7)
    assert not is_numeric_text("2024-01-05")
    assert not is_numeric_text("12kg")
    assert not is_numeric_text(True)
    assert not is_numeric_text("")


def test_numbers_obey_the_same_range_as_text():
    assert parse_numeric_value(1e20) is None
    assert parse_numeric(1e20) == parse_numeric("1e20") == 0.0
    assert parse_numeric(-1e20) == 0.0
    assert parse_numeric(MAX_SAFE_VALUE) == MAX_SAFE_VALUE


def test_huge_integers_degrade_to_zero():
    assert parse_numeric_value(10**400) is None
    assert parse_numeric(10**400) == 0.0
    assert parse_numeric(-(10**400)) == 0.0
    assert not is_numeric_text(10**400)


def test_decimals_are_numbers():
    assert parse_numeric(Decimal("12.5")) == 12.5
    assert parse_numeric_value(Decimal("-3")) == -3.0
    assert parse_numeric_value(Decimal("NaN")) is None
    assert is_numeric_text(Decimal("4.25"))
