"""
Centralized tunables for the chart engine.

Every heuristic constant used by the layout planner, the dual-axis selector
and the data pipeline lives here as a named field, so each one can be tuned
and tested independently.

Features:
- Dataclass-based configuration with validation in ``__post_init__``
- Environment overrides for the most commonly tuned values
- Process-wide default instance (``get_engine_config``) that every entry
  point also accepts as an explicit argument
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple
import os

from src.chart_engine.core import settings


# ============================================================================
# LAYOUT
# ============================================================================


@dataclass
class LayoutConfig:
    """
    Constants for the adaptive layout planner.

    Attributes:
        label_sample_size: Number of category labels measured per pass
        label_font_size: Font size (px) used when measuring tick labels
        font_family: Font family used when measuring tick labels
        label_padding: Horizontal padding added to every measured label slot
        rotated_label_space: Slot width (px) assumed for a rotated label

    Example:
        >>> config = LayoutConfig()
        >>> config.diagonal_bottom_max
        100.0
    """

    label_sample_size: int = 15
    label_font_size: int = settings.LABEL_FONT_SIZE
    font_family: str = settings.FONT_FAMILY
    label_padding: float = 8.0
    rotated_label_space: float = 45.0

    # Margins used when there is nothing to plan (no labels, tiny container)
    fallback_bottom_margin: float = 40.0
    fallback_left_margin: float = 40.0
    fallback_right_margin: float = 20.0
    fallback_top_margin: float = 20.0

    # Starting margins for a normal pass
    base_bottom_margin: float = 50.0
    base_left_margin: float = 50.0
    base_right_margin: float = 20.0
    base_top_margin: float = 20.0
    legend_top_margin: float = 40.0

    # Rotation angles (degrees)
    horizontal_angle: int = 0
    mild_angle: int = -30
    diagonal_angle: int = -45
    vertical_angle: int = -90

    # Labels longer than this use the steep auto rotation
    long_label_chars: int = 12

    # Pinned diagonal: clamp(width * factor, min, max)
    diagonal_bottom_factor: float = 0.7
    diagonal_bottom_min: float = 60.0
    diagonal_bottom_max: float = 100.0

    # Pinned vertical: clamp(width + padding, min, max)
    vertical_bottom_padding: float = 10.0
    vertical_bottom_min: float = 70.0
    vertical_bottom_max: float = 120.0

    # Auto steep (-45) and mild (-30) escalation
    steep_bottom_factor: float = 0.7
    steep_bottom_min: float = 70.0
    steep_bottom_max: float = 100.0
    mild_bottom_factor: float = 0.5
    mild_bottom_min: float = 60.0
    mild_bottom_max: float = 80.0

    # Value axis
    value_label_padding: float = 15.0
    side_margin_max_fraction: float = 0.2

    # Bottom margin cap: max(height * fraction, floor)
    bottom_margin_max_fraction: float = 0.25
    bottom_margin_cap_floor: float = 80.0

    # Secondary (right) value axis
    secondary_axis_extra: float = 30.0
    secondary_axis_min: float = 60.0

    # Tick skipping only when more than this many labels fit
    min_tick_capacity: int = 2

    # Responsive breakpoints (container width, px)
    breakpoint_large: int = 500
    breakpoint_medium: int = 350
    breakpoint_small: int = 250

    # Axis title truncation: max(min_width, width * fraction)
    title_min_width: float = 100.0
    title_width_fraction: float = 0.3

    # Width per character when no measurement surface exists
    fallback_char_width: float = 6.0

    def __post_init__(self):
        """Validate layout bounds."""
        if self.label_sample_size < 1:
            raise ValueError(
                f"label_sample_size must be >= 1, got {self.label_sample_size}"
            )

        if self.label_font_size <= 0:
            raise ValueError(f"label_font_size must be > 0, got {self.label_font_size}")

        margins = [
            self.fallback_bottom_margin,
            self.fallback_left_margin,
            self.fallback_right_margin,
            self.fallback_top_margin,
            self.base_bottom_margin,
            self.base_left_margin,
            self.base_right_margin,
            self.base_top_margin,
            self.legend_top_margin,
        ]
        if any(m < 0 for m in margins):
            raise ValueError(f"Layout margins must be non-negative: {margins}")

        for name in ("side_margin_max_fraction", "bottom_margin_max_fraction"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ValueError(f"{name} must be in (0, 1], got {value}")

        if not (
            self.breakpoint_small <= self.breakpoint_medium <= self.breakpoint_large
        ):
            raise ValueError(
                "Breakpoints must satisfy small <= medium <= large, got "
                f"{self.breakpoint_small}/{self.breakpoint_medium}/{self.breakpoint_large}"
            )


# ============================================================================
# DUAL AXIS
# ============================================================================


@dataclass
class DualAxisConfig:
    """
    Constants for dual-axis auto detection.

    Attributes:
        ratio_threshold: Max-value ratio between two metrics that triggers a
                         second axis (the inverse bound is ``1 / ratio_threshold``)
        chart_types: Chart types that may auto-detect a second axis
    """

    ratio_threshold: float = 10.0
    chart_types: FrozenSet[str] = frozenset({"bar", "line", "area", "combo"})

    def __post_init__(self):
        """Validate and load environment overrides."""
        env_ratio = os.getenv("CHART_ENGINE_DUAL_AXIS_RATIO")
        if env_ratio:
            try:
                self.ratio_threshold = float(env_ratio)
            except ValueError:
                pass  # Invalid value keeps the default

        if self.ratio_threshold <= 1:
            raise ValueError(
                f"ratio_threshold must be > 1, got {self.ratio_threshold}"
            )

    @property
    def inverse_ratio_threshold(self) -> float:
        """Lower bound of the trigger band (0.1 for the default threshold)."""
        return 1.0 / self.ratio_threshold

    def supports(self, chart_type: Optional[str]) -> bool:
        """True when ``chart_type`` may get an automatic second axis."""
        return chart_type is None or chart_type in self.chart_types


# ============================================================================
# PIPELINE
# ============================================================================


@dataclass
class PipelineConfig:
    """
    Constants for the series pipeline.

    Attributes:
        max_rows: Row cap applied before aggregation
        uncapped_chart_types: Chart types that always see every row
                              (they aggregate over the full dataset)
        heatmap_max_x: Max x categories kept for heatmaps
        heatmap_max_y: Max y categories kept for heatmaps
    """

    max_rows: int = settings.MAX_ROWS
    uncapped_chart_types: FrozenSet[str] = frozenset(
        {"scorecard", "gauge", "heatmap", "treemap"}
    )
    heatmap_max_x: int = 30
    heatmap_max_y: int = 15

    def __post_init__(self):
        """Validate pipeline limits."""
        if self.max_rows < 1:
            raise ValueError(f"max_rows must be >= 1, got {self.max_rows}")

        if self.heatmap_max_x < 1 or self.heatmap_max_y < 1:
            raise ValueError(
                f"heatmap limits must be >= 1, got "
                f"x={self.heatmap_max_x}, y={self.heatmap_max_y}"
            )

    def row_cap_for(self, chart_type: Optional[str]) -> Optional[int]:
        """Row cap for ``chart_type`` (None means no cap)."""
        if chart_type in self.uncapped_chart_types:
            return None
        return self.max_rows


# ============================================================================
# CONTAINER MINIMUMS
# ============================================================================

# (width, height) minimums per chart type
CHART_MINIMUMS: Dict[str, Tuple[int, int]] = {
    "bar": (300, 250),
    "line": (350, 250),
    "pie": (280, 280),
    "area": (350, 250),
    "scatter": (350, 250),
    "scorecard": (200, 120),
    "table": (400, 300),
    "combo": (400, 300),
}


@dataclass
class EngineConfig:
    """Bundle of every engine tunable."""

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    dual_axis: DualAxisConfig = field(default_factory=DualAxisConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    chart_minimums: Dict[str, Tuple[int, int]] = field(
        default_factory=lambda: dict(CHART_MINIMUMS)
    )

    def minimums_for(self, chart_type: Optional[str]) -> Tuple[int, int]:
        """Minimum (width, height) for ``chart_type``; unknown types use bar."""
        return self.chart_minimums.get(chart_type or "bar", self.chart_minimums["bar"])


# ============================================================================
# GLOBAL DEFAULT (Singleton)
# ============================================================================

_CONFIG_STORE = {"config": None}


def get_engine_config() -> EngineConfig:
    """
    Return the process-wide default configuration.

    Entry points only fall back to this when no explicit config is passed.

    Returns:
        Shared EngineConfig instance
    """
    if _CONFIG_STORE["config"] is None:
        _CONFIG_STORE["config"] = EngineConfig()
    return _CONFIG_STORE["config"]


def set_engine_config(config: EngineConfig) -> None:
    """
    Replace the process-wide default configuration.

    Args:
        config: New EngineConfig instance
    """
    _CONFIG_STORE["config"] = config


def reset_engine_config() -> None:
    """Drop the process-wide configuration so the next read rebuilds defaults."""
    _CONFIG_STORE["config"] = None


__all__ = [
    "LayoutConfig",
    "DualAxisConfig",
    "PipelineConfig",
    "EngineConfig",
    "CHART_MINIMUMS",
    "get_engine_config",
    "set_engine_config",
    "reset_engine_config",
]
