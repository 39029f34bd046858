"""
Adaptive layout planner for cartesian charts.

Decides label rotation, margins and tick density from the measured widths of
the category labels and the size of the container.

Process:
1. Degenerate input (no labels, container below the small breakpoint,
   non-finite size) -> fallback margins
2. Measure a sample of labels through one measurement session
3. Rotation: pinned by the user, or escalated automatically when labels do
   not fit side by side
4. Left margin sized to the widest formatted value label
5. Tick interval so drawn labels fit the available width
6. Caps: bottom and side margins never exceed their share of the container
"""

import math
from numbers import Real
from typing import Any, Iterable, List, Optional, Sequence, Union

from src.chart_engine.core.engine_config import LayoutConfig, get_engine_config
from src.chart_engine.layout.text_measurer import MeasurementSession, TextMeasurer
from src.chart_engine.models.schema import PRESERVE_START_END, LayoutPlan
from src.chart_engine.transforms.numeric import parse_numeric
from src.shared_lib.utils.logger import get_logger

logger = get_logger(__name__)

_DEFAULT_MEASURER: List[TextMeasurer] = []


def default_measurer() -> TextMeasurer:
    """Shared measurer so loaded fonts are reused across passes."""
    if not _DEFAULT_MEASURER:
        _DEFAULT_MEASURER.append(TextMeasurer())
    return _DEFAULT_MEASURER[0]


def open_session(
    measurer: Optional[Union[TextMeasurer, MeasurementSession]],
    config: LayoutConfig,
) -> MeasurementSession:
    """Return ``measurer`` itself when it is already a session, else open one."""
    if isinstance(measurer, MeasurementSession):
        return measurer
    measurer = measurer or default_measurer()
    return measurer.session(config.label_font_size, config.font_family)


def format_value_label(value: float) -> str:
    """
    Value axis tick text with thousands separators.

    Example:
        >>> format_value_label(1234567)
        '1,234,567'
        >>> format_value_label(-0.125)
        '-0.125'
    """
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def _clamp(value: float, lower: float, upper: float) -> float:
    return min(max(lower, value), upper)


def _is_usable_size(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _cap_margins(
    bottom: float,
    left: float,
    right: float,
    top: float,
    width: float,
    height: float,
    show_legend: bool,
    config: LayoutConfig,
):
    """Apply the per-margin caps shared by every code path."""
    bottom = min(
        bottom,
        max(height * config.bottom_margin_max_fraction, config.bottom_margin_cap_floor),
    )
    if width > 0:
        side_cap = width * config.side_margin_max_fraction
        left = min(left, side_cap)
        right = min(right, side_cap)
    if show_legend:
        top = max(top, config.legend_top_margin)
    return max(bottom, 0.0), max(left, 0.0), max(right, 0.0), max(top, 0.0)


def plan_layout(
    category_labels: Sequence[Any],
    container_width: float,
    container_height: float,
    rotation_mode: Optional[str] = None,
    *,
    value_samples: Optional[Iterable[Any]] = None,
    show_legend: Optional[bool] = None,
    secondary_axis: bool = False,
    measurer: Optional[Union[TextMeasurer, MeasurementSession]] = None,
    config: Optional[LayoutConfig] = None,
) -> LayoutPlan:
    """
    Compute rotation, margins and tick interval for one render pass.

    Args:
        category_labels: Category labels in display order
        container_width: Effective container width (px)
        container_height: Effective container height (px)
        rotation_mode: "auto" (or None), "horizontal", "diagonal" or "vertical"
        value_samples: Values of the first plotted metric (left margin sizing)
        show_legend: Legend visibility (default: width >= medium breakpoint)
        secondary_axis: A right value axis will be drawn
        measurer: TextMeasurer or an open MeasurementSession
        config: Layout configuration

    Returns:
        LayoutPlan

    Example:
        >>> plan = plan_layout(["Jan", "Feb", "Mar"], 600, 400,
        ...                    measurer=TextMeasurer(use_fonts=False))
        >>> plan.rotation_angle, plan.tick_interval
        (0, 0)
    """
    config = config or get_engine_config().layout
    labels = ["" if label is None else str(label) for label in (category_labels or [])]

    width = float(container_width) if _is_usable_size(container_width) else 0.0
    height = float(container_height) if _is_usable_size(container_height) else 0.0
    if show_legend is None:
        show_legend = width >= config.breakpoint_medium

    degenerate = (
        not labels
        or not _is_usable_size(container_width)
        or not _is_usable_size(container_height)
        or width < config.breakpoint_small
    )

    if degenerate:
        bottom, left, right, top = _cap_margins(
            config.fallback_bottom_margin,
            config.fallback_left_margin,
            config.fallback_right_margin,
            config.fallback_top_margin,
            width,
            height,
            show_legend,
            config,
        )
        logger.debug(
            f"[LayoutPlanner] Degenerate input (labels={len(labels)}, "
            f"size={container_width}x{container_height}), using fallback layout"
        )
        return LayoutPlan(
            rotation_angle=0,
            bottom_margin=bottom,
            left_margin=left,
            right_margin=right,
            top_margin=top,
            tick_interval=PRESERVE_START_END,
            measurement="none",
        )

    session = open_session(measurer, config)

    count = len(labels)
    sample = labels[: config.label_sample_size]
    widths = [session.measure(label) for label in sample]
    widest = max(widths, default=0.0)
    average = sum(widths) / len(widths) if widths else 0.0
    longest_chars = max((len(label) for label in sample), default=0)

    rotation = config.horizontal_angle
    bottom = config.base_bottom_margin
    left = config.base_left_margin
    right = config.base_right_margin
    top = config.base_top_margin

    available = width - left - right

    if rotation_mode == "horizontal":
        rotation = config.horizontal_angle
        bottom = config.base_bottom_margin
    elif rotation_mode == "diagonal":
        rotation = config.diagonal_angle
        bottom = _clamp(
            widest * config.diagonal_bottom_factor,
            config.diagonal_bottom_min,
            config.diagonal_bottom_max,
        )
    elif rotation_mode == "vertical":
        rotation = config.vertical_angle
        bottom = _clamp(
            widest + config.vertical_bottom_padding,
            config.vertical_bottom_min,
            config.vertical_bottom_max,
        )
    else:
        slot = average + config.label_padding
        capacity = math.floor(available / slot) if slot > 0 else count
        if count > capacity or widest > available / count:
            if longest_chars > config.long_label_chars:
                rotation = config.diagonal_angle
                bottom = _clamp(
                    widest * config.steep_bottom_factor,
                    config.steep_bottom_min,
                    config.steep_bottom_max,
                )
            else:
                rotation = config.mild_angle
                bottom = _clamp(
                    widest * config.mild_bottom_factor,
                    config.mild_bottom_min,
                    config.mild_bottom_max,
                )

    # Value axis labels
    values = [parse_numeric(v) for v in (value_samples or [])]
    if values:
        value_width = max(
            session.measure(format_value_label(max(values))),
            session.measure(format_value_label(min(values))),
        )
        left = max(left, value_width + config.value_label_padding)

    tick_interval: Union[int, str] = 0
    if available > 0:
        space = average + config.label_padding if rotation == 0 else config.rotated_label_space
        fit = math.floor(available / space) if space > 0 else count
        if count > fit and fit > config.min_tick_capacity:
            tick_interval = max(1, math.ceil(count / fit) - 1)
        elif count > fit:
            tick_interval = PRESERVE_START_END

    if secondary_axis:
        right = max(right + config.secondary_axis_extra, config.secondary_axis_min)

    bottom, left, right, top = _cap_margins(
        bottom, left, right, top, width, height, show_legend, config
    )

    plan = LayoutPlan(
        rotation_angle=rotation,
        bottom_margin=bottom,
        left_margin=left,
        right_margin=right,
        top_margin=top,
        tick_interval=tick_interval,
        measurement=session.mode,
    )

    logger.debug(
        f"[LayoutPlanner] {count} labels (widest={widest:.1f}px, avg={average:.1f}px) "
        f"in {width:.0f}x{height:.0f} -> rotation={plan.rotation_angle}, "
        f"bottom={plan.bottom_margin:.0f}, left={plan.left_margin:.0f}, "
        f"interval={plan.tick_interval}, mode={plan.measurement}"
    )
    return plan


__all__ = ["plan_layout", "format_value_label", "default_measurer", "open_session"]
