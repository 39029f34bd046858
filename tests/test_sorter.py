"""Tests for top-N / bottom-N selection."""

import random

import pytest

from src.chart_engine.transforms.sorter import SeriesLimiter, sort_and_limit

pytestmark = pytest.mark.unit


@pytest.fixture
def rows():
    return [{"k": c, "v": v, "units": u} for c, v, u in zip("abcde", [10, 50, 5, 90, 20], [5, 4, 3, 2, 1])]


def values(rows):
    return [r["v"] for r in rows]


def test_desc_keeps_top_n(rows):
    assert values(sort_and_limit(rows, "value", "desc", 3, value_key="v", label_key="k")) == [90, 50, 20]


def test_asc_keeps_bottom_n_in_ascending_order(rows):
    assert values(sort_and_limit(rows, "value", "asc", 3, value_key="v", label_key="k")) == [5, 10, 20]


def test_sort_by_label(rows):
    desc = sort_and_limit(rows, "label", "desc", 2, value_key="v", label_key="k")
    asc = sort_and_limit(rows, "label", "asc", 2, value_key="v", label_key="k")

    assert [r["k"] for r in desc] == ["e", "d"]
    assert [r["k"] for r in asc] == ["a", "b"]


def test_asc_reverses_the_bottom_slice_on_ties():
    tied = [{"k": "a", "v": 5}, {"k": "b", "v": 5}, {"k": "c", "v": 1}]
    result = sort_and_limit(tied, "value", "asc", 3, value_key="v", label_key="k")
    assert [r["k"] for r in result] == ["c", "b", "a"]


def test_sort_by_other_numeric_column(rows):
    result = sort_and_limit(rows, "units", "desc", 2, value_key="v", label_key="k")
    assert [r["k"] for r in result] == ["a", "b"]


def test_no_sort_keeps_source_order_and_limits(rows):
    result = sort_and_limit(rows, None, "desc", 2, value_key="v", label_key="k")
    assert [r["k"] for r in result] == ["a", "b"]


@pytest.mark.parametrize("limit", [None, 0, -3])
def test_missing_or_non_positive_limit_keeps_every_row(rows, limit):
    result = sort_and_limit(rows, "value", "desc", limit, value_key="v", label_key="k")
    assert values(result) == [90, 50, 20, 10, 5]


def test_metadata(rows):
    _, metadata = SeriesLimiter(value_key="v", label_key="k").sort_and_limit(rows, "value", "desc", 2)

    assert metadata["original_count"] == 5
    assert metadata["limited_count"] == 2
    assert metadata["rows_excluded"] == 3


def test_malformed_rows_are_skipped():
    mixed = [{"k": "a", "v": 1}, None, {"k": "b", "v": 9}, ["x"]]
    result, metadata = SeriesLimiter(value_key="v", label_key="k").sort_and_limit(mixed, "value", "desc", 5)

    assert [r["k"] for r in result] == ["b", "a"]
    assert metadata["rows_excluded"] == 2


def test_input_is_not_mutated(rows):
    snapshot = [dict(r) for r in rows]
    sort_and_limit(rows, "value", "asc", 2, value_key="v", label_key="k")
    assert rows == snapshot


def test_sort_and_limit_is_idempotent():
    rng = random.Random(3)
    for _ in range(100):
        data = [{"k": str(i), "v": rng.randint(0, 5)} for i in range(rng.randint(0, 15))]
        order = rng.choice(["asc", "desc"])
        limit = rng.choice([None, 1, 3, 10])

        once = sort_and_limit(data, "value", order, limit, value_key="v", label_key="k")
        twice = sort_and_limit(once, "value", order, limit, value_key="v", label_key="k")

        assert values(once) == values(twice)
        assert sorted(r["k"] for r in once) == sorted(r["k"] for r in twice)
        if order == "desc":
            assert once == twice
        assert len(once) == (len(data) if limit is None else min(limit, len(data)))
