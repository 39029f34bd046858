"""
Container sizing and responsive feature flags.

The raw container size reported by the host is first raised to the chart
type's minimum size; the effective width then decides which chart furniture
(legend, grid, labels) fits.
"""

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict

from src.chart_engine.core.engine_config import EngineConfig, LayoutConfig, get_engine_config


class ContainerSizing(BaseModel):
    """Effective chart size after minimums are applied."""

    model_config = ConfigDict(frozen=True)

    width: float
    height: float
    meets_minimums: bool
    is_constrained: bool


class ResponsiveFeatures(BaseModel):
    """What the renderer should draw at the current width."""

    model_config = ConfigDict(frozen=True)

    show_legend: bool
    show_grid: bool
    show_secondary_labels: bool
    show_primary_labels: bool
    use_fallback_view: bool


def _finite_or_zero(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) and number > 0 else 0.0


def size_container(
    width: Optional[float],
    height: Optional[float],
    chart_type: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> ContainerSizing:
    """
    Raise the raw container size to the chart type's minimums.

    Pie charts are kept square when the raw size already meets the minimums.

    Args:
        width: Raw container width (px)
        height: Raw container height (px)
        chart_type: Chart type (unknown types use the bar minimums)
        config: Engine configuration

    Returns:
        ContainerSizing

    Example:
        >>> size_container(500, 200, "bar").height
        250.0
    """
    config = config or get_engine_config()
    min_width, min_height = config.minimums_for(chart_type)

    raw_width = _finite_or_zero(width)
    raw_height = _finite_or_zero(height)

    meets_width = raw_width >= min_width
    meets_height = raw_height >= min_height

    final_width = max(raw_width, float(min_width))
    final_height = max(raw_height, float(min_height))

    if chart_type == "pie" and meets_width and meets_height:
        side = min(final_width, final_height)
        final_width = final_height = side

    return ContainerSizing(
        width=final_width,
        height=final_height,
        meets_minimums=meets_width and meets_height,
        is_constrained=not (meets_width and meets_height),
    )


def responsive_features(width: float, config: Optional[LayoutConfig] = None) -> ResponsiveFeatures:
    """
    Feature flags for a container ``width``.

    Args:
        width: Effective container width (px)
        config: Layout configuration (breakpoints)

    Returns:
        ResponsiveFeatures
    """
    config = config or get_engine_config().layout
    width = _finite_or_zero(width)

    return ResponsiveFeatures(
        show_legend=width >= config.breakpoint_medium,
        show_grid=width >= config.breakpoint_medium,
        show_secondary_labels=width >= config.breakpoint_large,
        show_primary_labels=width >= config.breakpoint_small,
        use_fallback_view=width < config.breakpoint_small,
    )


__all__ = ["ContainerSizing", "ResponsiveFeatures", "size_container", "responsive_features"]
