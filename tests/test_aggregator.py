"""Tests for category aggregation."""

import random

import pytest

from src.chart_engine.transforms.aggregator import Aggregator, aggregate
from src.chart_engine.transforms.numeric import parse_numeric

pytestmark = pytest.mark.unit


def test_sum_groups_in_first_seen_order(sales_rows):
    result = aggregate(sales_rows, "region", ["sales"], "sum")

    assert [r["region"] for r in result] == ["A", "B"]
    assert [r["sales"] for r in result] == [150.0, 300.0]


def test_other_columns_come_from_the_first_row(sales_rows):
    result = aggregate(sales_rows, "region", ["sales"], "sum")
    assert result[0]["units"] == 3


@pytest.mark.parametrize(
    "fn, expected",
    [
        ("avg", [75.0, 300.0]),
        ("count", [2, 1]),
        ("min", [50.0, 300.0]),
        ("max", [100.0, 300.0]),
        ("distinct", [2, 1]),
    ],
)
def test_reducers(sales_rows, fn, expected):
    result = aggregate(sales_rows, "region", ["sales"], fn)
    assert [r["sales"] for r in result] == expected


def test_count_and_distinct_are_integers(sales_rows):
    for fn in ("count", "distinct"):
        result = aggregate(sales_rows, "region", ["sales"], fn)
        assert all(isinstance(r["sales"], int) for r in result)


def test_avg_counts_unparsable_values_as_zero():
    rows = [{"k": "x", "v": 10}, {"k": "x", "v": "n/a"}]
    assert aggregate(rows, "k", ["v"], "avg")[0]["v"] == 5.0


def test_distinct_uses_raw_values():
    rows = [{"k": "x", "v": "1"}, {"k": "x", "v": "1.0"}, {"k": "x", "v": "1"}]
    assert aggregate(rows, "k", ["v"], "distinct")[0]["v"] == 2


def test_integer_categories_keep_their_type():
    rows = [{"year": 2023, "v": 1}, {"year": None, "v": 5}, {"year": 2023, "v": 2}]
    result = aggregate(rows, "year", ["v"], "sum")
    assert result == [{"year": 2023, "v": 3.0}]


def test_none_fn_is_identity(sales_rows):
    assert aggregate(sales_rows, "region", ["sales"], None) == sales_rows


def test_missing_category_column_returns_empty(sales_rows):
    assert aggregate(sales_rows, "country", ["sales"], "sum") == []


def test_unknown_function_falls_back_to_sum(sales_rows):
    result = Aggregator().aggregate(sales_rows, "region", ["sales"], "median")
    assert [r["sales"] for r in result] == [150.0, 300.0]


def test_empty_input():
    assert aggregate([], "region", ["sales"], "sum") == []


def test_each_group_sums_its_own_rows():
    rng = random.Random(11)
    cells = [lambda: rng.randint(-50, 50), lambda: f"${rng.randint(0, 900):,}", lambda: "n/a", lambda: None]
    for _ in range(50):
        rows = [
            {"k": rng.choice("abcdef"), "v": rng.choice(cells)()}
            for _ in range(rng.randint(1, 40))
        ]
        expected = {}
        for row in rows:
            expected[row["k"]] = expected.get(row["k"], 0.0) + parse_numeric(row["v"])

        result = aggregate(rows, "k", ["v"], "sum")

        assert [r["k"] for r in result] == list(expected)
        for row in result:
            assert row["v"] == pytest.approx(expected[row["k"]])


def test_malformed_rows_are_skipped():
    rows = [{"k": "a", "v": 1}, None, "junk", {"k": "a", "v": 2}, 42]
    assert aggregate(rows, "k", ["v"], "sum") == [{"k": "a", "v": 3.0}]
    assert aggregate([None, None], "k", ["v"], "sum") == []
