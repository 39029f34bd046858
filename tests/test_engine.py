"""End-to-end tests for the engine entry points."""

import copy

import plotly.graph_objects as go
import pytest

from src.chart_engine.core.engine_config import EngineConfig, PipelineConfig
from src.chart_engine.engine import ChartEngine, compute_layout, compute_series, score_template
from src.chart_engine.models.render_plan import CartesianRenderPlan, PieRenderPlan
from src.chart_engine.models.schema import ContainerSize, DatasetProfile, FieldMapping
from src.chart_engine.scoring.templates import get_template

pytestmark = pytest.mark.unit


def test_region_sales_sum():
    rows = [
        {"region": "A", "sales": "$100"},
        {"region": "A", "sales": "$50"},
        {"region": "B", "sales": "$300"},
    ]
    series = compute_series(rows, FieldMapping(category="region", metrics=["sales"], aggregation="sum"))

    assert list(series.rows) == [{"region": "A", "sales": 150.0}, {"region": "B", "sales": 300.0}]
    assert series.metadata["stages"] == ["aggregation"]
    assert not series.axes.dual_axis


def test_top_n_after_aggregation(sales_rows):
    mapping = {"xAxis": "region", "yAxis": "sales", "aggregation": "sum", "sortBy": "value", "limit": 1}
    series = compute_series(sales_rows, mapping)

    assert series.category_labels() == ["B"]
    assert series.metadata["after_aggregation"] == 2
    assert series.metadata["after_limit"] == 1


def test_month_granularity(monthly_rows):
    series = compute_series(
        monthly_rows, FieldMapping(category="date", metrics=["revenue"], granularity="month")
    )

    assert series.category_labels() == ["Jan 2024", "Feb 2024", "Mar 2024"]
    assert series.values("revenue") == [150.0, 200.0, 300.0]
    assert "granularity" in series.metadata["stages"]


def test_granularity_ignored_for_non_date_categories(sales_rows):
    series = compute_series(sales_rows, FieldMapping(category="region", metrics=["sales"], granularity="month"))
    assert len(series) == 3
    assert "granularity" not in series.metadata["stages"]


def test_date_categories_are_sorted_chronologically(monthly_rows):
    series = compute_series(monthly_rows, FieldMapping(category="date", metrics=["revenue"]))
    assert series.category_labels() == ["2024-01-03", "2024-01-20", "2024-02-11", "2024-03-15"]


def test_auto_dual_axis(monthly_rows):
    series = compute_series(monthly_rows, FieldMapping(category="date", metrics=["revenue", "orders"]))

    assert series.axes.left == ["revenue"]
    assert series.axes.right == ["orders"]


def test_explicit_axes(monthly_rows):
    mapping = {"xAxis": "date", "yAxis1": ["orders"], "yAxis2": ["revenue"], "yAxis2Label": "USD"}
    series = compute_series(monthly_rows, mapping)

    assert series.axes.source == "explicit"
    assert series.axes.right == ["revenue"]
    assert series.axes.right_label == "USD"


def test_row_cap():
    config = EngineConfig(pipeline=PipelineConfig(max_rows=2))
    rows = [{"k": str(i), "v": i} for i in range(5)]

    capped = compute_series(rows, FieldMapping(category="k", metrics=["v"]), config=config)
    uncapped = compute_series(rows, FieldMapping(chart_type="scorecard", metric="v"), config=config)

    assert capped.metadata["after_row_cap"] == 2
    assert "row_cap" in capped.metadata["stages"]
    assert uncapped.metadata["after_row_cap"] == 5


def test_heatmap_series():
    rows = [
        {"day": "Mon", "team": "A", "hours": 1},
        {"day": "Mon", "team": "A", "hours": 2},
        {"day": "Tue", "team": "B", "hours": 4},
    ]
    mapping = {"type": "heatmap", "xAxis": "day", "yCategory": "team", "value": "hours"}
    series = compute_series(rows, mapping)

    assert series.metadata["y_key"] == "team"
    assert series.metrics == ["hours"]
    assert list(series.rows) == [
        {"day": "Mon", "team": "A", "hours": 3.0},
        {"day": "Tue", "team": "B", "hours": 4.0},
    ]


def test_inputs_are_not_mutated_and_output_is_deterministic(sales_rows):
    mapping = {"xAxis": "region", "yAxis": "sales", "aggregation": "avg", "sortBy": "label"}
    rows_before = copy.deepcopy(sales_rows)
    mapping_before = copy.deepcopy(mapping)

    first = compute_series(sales_rows, mapping)
    second = compute_series(sales_rows, mapping)

    assert sales_rows == rows_before
    assert mapping == mapping_before
    assert first == second


def test_empty_input():
    series = compute_series([], FieldMapping(category="region", metrics=["sales"], aggregation="sum"))
    assert len(series) == 0
    assert series.metadata["input_rows"] == 0


def test_malformed_rows_are_dropped():
    rows = [{"k": "a", "v": 1}, None, {"k": "b", "v": 2}, "junk"]
    series = compute_series(rows, {"category": "k", "metrics": ["v"], "aggregation": "sum"})

    assert list(series.rows) == [{"k": "a", "v": 1.0}, {"k": "b", "v": 2.0}]
    assert series.metadata["input_rows"] == 4
    assert series.metadata["malformed_rows"] == 2


def test_malformed_rows_in_a_heatmap():
    rows = [{"x": "a", "y": "p", "v": 3}, None]
    series = compute_series(
        rows, {"chart_type": "heatmap", "category": "x", "y_category": "y", "metrics": ["v"]}
    )
    assert series.metadata["malformed_rows"] == 1
    assert len(series) == 1


def test_layout_uses_the_effective_container_size(measurer):
    plan = compute_layout(["a", "b"], (100, 100), chart_type="bar", measurer=measurer)
    assert plan.measurement == "fallback"

    plan = compute_layout(["a", "b"], {"width": 600, "height": 400}, measurer=measurer)
    assert plan.rotation_angle == 0

    plan = compute_layout(["a"], ContainerSize(width=600, height=400), measurer=measurer)
    assert plan.top_margin == 40.0


def test_score_template():
    result = score_template(
        get_template("bar-comparison"),
        DatasetProfile(column_count=2, number_columns=1, string_columns=1),
    )
    assert result.total == 70


class TestChartEngine:
    @pytest.fixture
    def engine(self, measurer):
        return ChartEngine(measurer=measurer)

    def test_render_plan_for_pie(self, engine, sales_rows):
        mapping = {"type": "pie", "xAxis": "region", "value": "sales", "aggregation": "sum"}
        plan = engine.render_plan(sales_rows, mapping, (400, 300))

        assert isinstance(plan, PieRenderPlan)
        assert plan.total == 450.0
        assert [s.label for s in plan.slices] == ["A", "B"]

    def test_render_plan_for_bar(self, engine, sales_rows):
        plan = engine.render_plan(sales_rows, {"type": "bar", "xAxis": "region", "yAxis": "sales"}, (600, 400))

        assert isinstance(plan, CartesianRenderPlan)
        assert plan.layout.measurement == "fallback"
        assert {"series", "layout", "render_plan"} <= set(engine.monitor.timings)

    def test_recommend_templates_from_rows(self, engine, sales_rows):
        ranked = engine.recommend_templates(rows=sales_rows)

        assert ranked
        assert all(s.compatible for s in ranked)
        assert [s.total for s in ranked] == sorted((s.total for s in ranked), reverse=True)

    def test_plotly_layout(self, engine, monthly_rows):
        mapping = FieldMapping(category="date", metrics=["revenue", "orders"])
        series = engine.compute_series(monthly_rows, mapping)
        plan = engine.layout_for_series(series, (600, 400))
        layout = engine.plotly_layout(series, plan, mapping, (600, 400))

        assert isinstance(layout, go.Layout)
        assert layout.width == 600
        assert layout.yaxis2.side == "right"
        assert layout.xaxis.title.text == "date"
        assert plan.right_margin == 60.0

    def test_axis_titles(self, engine):
        titles = engine.axis_titles({"xAxis": "region", "yAxis": ["sales"]}, 600)
        assert (titles.x, titles.y) == ("region", "sales")
