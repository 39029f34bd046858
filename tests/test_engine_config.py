"""Tests for engine tunables and environment settings."""

import pytest

from src.chart_engine.core import settings
from src.chart_engine.core.engine_config import (
    DualAxisConfig,
    EngineConfig,
    LayoutConfig,
    PipelineConfig,
    get_engine_config,
    reset_engine_config,
    set_engine_config,
)

pytestmark = pytest.mark.unit


def test_defaults():
    config = EngineConfig()

    assert config.dual_axis.ratio_threshold == 10.0
    assert config.dual_axis.inverse_ratio_threshold == pytest.approx(0.1)
    assert config.layout.bottom_margin_max_fraction == 0.25
    assert config.minimums_for("pie") == (280, 280)
    assert config.minimums_for("sunburst") == (300, 250)


@pytest.mark.parametrize(
    "factory",
    [
        lambda: LayoutConfig(label_sample_size=0),
        lambda: LayoutConfig(side_margin_max_fraction=0),
        lambda: LayoutConfig(base_left_margin=-1),
        lambda: LayoutConfig(breakpoint_small=600),
        lambda: DualAxisConfig(ratio_threshold=1),
        lambda: PipelineConfig(max_rows=0),
        lambda: PipelineConfig(heatmap_max_y=0),
    ],
)
def test_invalid_values_are_rejected(factory):
    with pytest.raises(ValueError):
        factory()


def test_ratio_environment_override(monkeypatch):
    monkeypatch.setenv("CHART_ENGINE_DUAL_AXIS_RATIO", "5")
    assert DualAxisConfig().ratio_threshold == 5.0


def test_row_cap_per_chart_type():
    pipeline = PipelineConfig(max_rows=10)
    assert pipeline.row_cap_for("bar") == 10
    assert pipeline.row_cap_for("treemap") is None


def test_process_wide_config():
    custom = EngineConfig(pipeline=PipelineConfig(max_rows=5))
    set_engine_config(custom)
    assert get_engine_config() is custom

    reset_engine_config()
    assert get_engine_config() is not custom


def test_settings_are_valid():
    assert settings.validate_settings()
