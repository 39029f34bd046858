"""Tests for container sizing and responsive flags."""

import pytest

from src.chart_engine.layout.container import responsive_features, size_container

pytestmark = pytest.mark.unit


def test_height_raised_to_bar_minimum():
    sizing = size_container(500, 200, "bar")

    assert (sizing.width, sizing.height) == (500.0, 250.0)
    assert not sizing.meets_minimums
    assert sizing.is_constrained


def test_pie_is_square_when_it_meets_minimums():
    sizing = size_container(400, 300, "pie")
    assert (sizing.width, sizing.height) == (300.0, 300.0)
    assert sizing.meets_minimums


def test_constrained_pie_is_not_squared():
    sizing = size_container(200, 400, "pie")
    assert (sizing.width, sizing.height) == (280.0, 400.0)


@pytest.mark.parametrize("width, height", [(None, None), (float("nan"), 100), (-10, float("inf"))])
def test_unusable_sizes_use_minimums(width, height):
    sizing = size_container(width, height, "line")
    assert (sizing.width, sizing.height) == (350.0, 250.0)


def test_unknown_chart_types_use_bar_minimums():
    sizing = size_container(10, 10, "sunburst")
    assert (sizing.width, sizing.height) == (300.0, 250.0)


def test_responsive_breakpoints():
    wide = responsive_features(600)
    medium = responsive_features(300)
    narrow = responsive_features(200)

    assert wide.show_legend and wide.show_grid and wide.show_secondary_labels
    assert not medium.show_legend and medium.show_primary_labels
    assert not medium.use_fallback_view
    assert narrow.use_fallback_view and not narrow.show_primary_labels
