"""Tests for render plan variants."""

import pytest

from src.chart_engine.models.render_plan import (
    CartesianRenderPlan,
    HeatmapRenderPlan,
    PieRenderPlan,
    RenderPlanAdapter,
    ScatterRenderPlan,
    ScorecardRenderPlan,
    TableRenderPlan,
    build_render_plan,
    reduce_values,
)
from src.chart_engine.models.schema import FieldMapping, LayoutPlan, Series

pytestmark = pytest.mark.unit


def test_pie_shares_use_the_positive_total():
    series = Series(
        rows=({"r": "A", "s": 30}, {"r": "B", "s": 10}, {"r": "C", "s": -5}),
        category_key="r",
        metrics=["s"],
    )
    plan = build_render_plan("pie", series)

    assert isinstance(plan, PieRenderPlan)
    assert plan.total == 40.0
    assert [s.share for s in plan.slices] == [0.75, 0.25, 0.0]


def test_scorecard_reduces_raw_values():
    series = Series(rows=({"s": "$10"}, {"s": "20"}, {"s": None}), metrics=["s"])
    plan = build_render_plan("scorecard", series, mapping=FieldMapping(metric="s", aggregation="avg"))

    assert isinstance(plan, ScorecardRenderPlan)
    assert plan.value == 15.0


@pytest.mark.parametrize(
    "fn, expected",
    [("sum", 30.0), ("count", 2.0), ("distinct", 2.0), ("min", 10.0), ("max", 20.0), (None, 30.0)],
)
def test_reduce_values(fn, expected):
    assert reduce_values(["$10", "20", None], fn) == expected


def test_reduce_values_without_numbers():
    assert reduce_values(["n/a", None], "sum") is None


def test_table_uses_mapped_columns():
    series = Series(rows=({"a": 1, "b": 2},), category_key="a", metrics=["b"])
    plan = build_render_plan("table", series, mapping=FieldMapping(columns=["b"]))

    assert isinstance(plan, TableRenderPlan)
    assert plan.columns == ["b"]
    assert plan.rows == [{"b": 2}]


def test_scatter_skips_unparsable_points():
    series = Series(rows=({"x": 1, "y": 2}, {"x": "n/a", "y": 3}), category_key="x", metrics=["y"])
    plan = build_render_plan("scatter", series)

    assert isinstance(plan, ScatterRenderPlan)
    assert [(p.x, p.y) for p in plan.points] == [(1.0, 2.0)]


def test_heatmap_categories_in_first_seen_order():
    series = Series(
        rows=(
            {"day": "Tue", "team": "B", "hours": 4},
            {"day": "Mon", "team": "A", "hours": 3},
        ),
        category_key="day",
        metrics=["hours"],
        metadata={"y_key": "team"},
    )
    plan = build_render_plan("heatmap", series)

    assert isinstance(plan, HeatmapRenderPlan)
    assert plan.x_categories == ["Tue", "Mon"]
    assert plan.y_categories == ["B", "A"]


def test_other_types_are_cartesian():
    layout = LayoutPlan(rotation_angle=-30)
    plan = build_render_plan(None, Series(), layout)

    assert isinstance(plan, CartesianRenderPlan)
    assert plan.chart_type == "bar"
    assert plan.layout.rotation_angle == -30


def test_plans_are_validated_by_kind():
    plan = RenderPlanAdapter.validate_python({"kind": "pie", "slices": [{"label": "a", "value": 1}]})
    assert isinstance(plan, PieRenderPlan)
    assert plan.slices[0].label == "a"
