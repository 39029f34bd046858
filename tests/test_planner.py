"""Tests for the adaptive layout planner."""

import random

import pytest

from src.chart_engine.core.engine_config import LayoutConfig
from src.chart_engine.layout.planner import format_value_label, plan_layout
from src.chart_engine.models.schema import PRESERVE_START_END

pytestmark = pytest.mark.unit


def test_short_labels_stay_horizontal(measurer):
    plan = plan_layout(["Jan", "Feb", "Mar"], 600, 400, measurer=measurer)

    assert plan.rotation_angle == 0
    assert plan.tick_interval == 0
    assert plan.bottom_margin == 50.0
    assert plan.measurement == "fallback"


def test_long_labels_rotate_steeply(measurer):
    labels = [f"Category number {i:02d}" for i in range(20)]
    plan = plan_layout(labels, 600, 400, measurer=measurer)

    assert plan.rotation_angle == -45
    assert plan.bottom_margin == pytest.approx(75.6)


def test_many_short_labels_rotate_mildly_and_skip_ticks(measurer):
    labels = [f"L{i:02d}" for i in range(40)]
    plan = plan_layout(labels, 300, 400, measurer=measurer)

    assert plan.rotation_angle == -30
    assert plan.bottom_margin == 60.0
    assert plan.tick_interval == 7


def test_pinned_vertical(measurer):
    plan = plan_layout(["Alpha"], 600, 400, "vertical", measurer=measurer)

    assert plan.rotation_angle == -90
    assert plan.bottom_margin == 70.0


def test_pinned_diagonal_respects_bottom_cap(measurer):
    plan = plan_layout(["A" * 30], 600, 300, "diagonal", measurer=measurer)

    assert plan.rotation_angle == -45
    assert plan.bottom_margin == 80.0


def test_pinned_horizontal_never_rotates(measurer):
    labels = ["A very long category label"] * 10
    plan = plan_layout(labels, 300, 400, "horizontal", measurer=measurer)

    assert plan.rotation_angle == 0
    assert plan.tick_interval == PRESERVE_START_END


@pytest.mark.parametrize(
    "labels, width, height",
    [
        ([], 600, 400),
        (["a"], 200, 400),
        (["a"], float("nan"), 400),
        (["a"], 600, None),
    ],
)
def test_degenerate_input_uses_fallback_layout(measurer, labels, width, height):
    plan = plan_layout(labels, width, height, measurer=measurer)

    assert plan.measurement == "none"
    assert plan.rotation_angle == 0
    assert plan.tick_interval == PRESERVE_START_END


def test_fallback_layout_reserves_legend_space(measurer):
    plan = plan_layout([], 600, 400, measurer=measurer)
    assert (plan.bottom_margin, plan.left_margin, plan.right_margin, plan.top_margin) == (
        40.0,
        40.0,
        20.0,
        40.0,
    )


def test_left_margin_fits_value_labels(measurer):
    plan = plan_layout(["a", "b"], 600, 400, value_samples=[1234567, 10], measurer=measurer)
    assert plan.left_margin == 69.0


def test_secondary_axis_widens_right_margin(measurer):
    plan = plan_layout(["a", "b"], 600, 400, secondary_axis=True, measurer=measurer)
    assert plan.right_margin == 60.0


def test_one_session_per_pass(measurer):
    session = measurer.session()
    plan = plan_layout(["a", "b"], 600, 400, measurer=session)
    assert plan.measurement == session.mode


def test_custom_config(measurer):
    config = LayoutConfig(base_bottom_margin=30.0)
    plan = plan_layout(["a"], 600, 400, measurer=measurer, config=config)
    assert plan.bottom_margin == 30.0


def test_margins_never_exceed_their_caps(measurer):
    rng = random.Random(17)
    modes = [None, "auto", "horizontal", "diagonal", "vertical"]
    for _ in range(300):
        width = rng.uniform(100, 1200)
        height = rng.uniform(50, 900)
        labels = ["x" * rng.randint(1, 40) for _ in range(rng.randint(0, 60))]
        values = [rng.uniform(-1e9, 1e9) for _ in range(rng.randint(0, 5))]

        plan = plan_layout(
            labels,
            width,
            height,
            rng.choice(modes),
            value_samples=values,
            secondary_axis=rng.random() < 0.3,
            measurer=measurer,
        )

        assert plan.bottom_margin <= max(0.25 * height, 80) + 1e-9
        assert plan.left_margin <= 0.2 * width + 1e-9
        assert plan.right_margin <= 0.2 * width + 1e-9
        assert min(plan.bottom_margin, plan.left_margin, plan.right_margin, plan.top_margin) >= 0


@pytest.mark.parametrize(
    "value, text",
    [(1234567, "1,234,567"), (-0.125, "-0.125"), (2.5, "2.5"), (0, "0")],
)
def test_format_value_label(value, text):
    assert format_value_label(value) == text
