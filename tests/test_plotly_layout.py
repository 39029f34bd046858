"""Tests for the Plotly layout adapter."""

import plotly.graph_objects as go
import pytest

from src.chart_engine.adapters.plotly_layout import apply_layout, to_plotly_layout, trace_axis
from src.chart_engine.layout.label_truncation import AxisTitles
from src.chart_engine.models.schema import PRESERVE_START_END, AxisAssignment, LayoutPlan

pytestmark = pytest.mark.unit

DUAL = AxisAssignment(left=["sales"], right=["margin"], left_label="sales", right_label="margin")


def test_margins_and_rotation():
    layout = to_plotly_layout(LayoutPlan(rotation_angle=-45, bottom_margin=90, left_margin=60))

    assert layout.xaxis.tickangle == -45
    assert layout.margin.b == 90
    assert layout.margin.l == 60
    assert "yaxis2" not in layout.to_plotly_json()


def test_tick_interval_maps_to_dtick():
    layout = to_plotly_layout(LayoutPlan(tick_interval=2))
    assert layout.xaxis.dtick == 3


def test_preserve_start_end_keeps_first_and_last_labels():
    layout = to_plotly_layout(
        LayoutPlan(tick_interval=PRESERVE_START_END), category_labels=["a", "b", "c", "d"]
    )
    assert list(layout.xaxis.tickvals) == ["a", "d"]


def test_dual_axis_adds_a_right_axis():
    layout = to_plotly_layout(LayoutPlan(), DUAL)

    assert layout.yaxis2.overlaying == "y"
    assert layout.yaxis2.side == "right"
    assert layout.yaxis2.title.text == "margin"


def test_titles_and_size():
    layout = to_plotly_layout(
        LayoutPlan(), titles=AxisTitles(x="region", y="sales"), width=600, height=400
    )

    assert layout.xaxis.title.text == "region"
    assert layout.yaxis.title.text == "sales"
    assert (layout.width, layout.height) == (600, 400)


def test_apply_layout_moves_right_axis_traces():
    fig = go.Figure(
        [
            go.Bar(name="sales", x=["a"], y=[100]),
            go.Scatter(name="margin", x=["a"], y=[0.1]),
        ]
    )
    apply_layout(fig, LayoutPlan(), DUAL)

    assert fig.data[1].yaxis == "y2"
    assert fig.data[0].yaxis in (None, "y")
    assert trace_axis("margin", DUAL) == "y2"
    assert trace_axis("sales", DUAL) == "y"
