"""
Value-axis assignment for multi-metric charts.

Decides whether metrics share one value axis or are split across a left and
a right axis, either because the user assigned the groups explicitly or
because their magnitudes are too far apart to read on a single scale.
"""

import math
from typing import Dict, List, Optional, Sequence

from src.chart_engine.core.engine_config import DualAxisConfig, get_engine_config
from src.chart_engine.models.schema import AxisAssignment, Row, unique_names
from src.chart_engine.transforms.numeric import parse_numeric_value
from src.shared_lib.utils.logger import get_logger

logger = get_logger(__name__)

STRATEGY_POSITION = "position"
STRATEGY_MAGNITUDE = "magnitude"


def _join(names: Sequence[str]) -> str:
    return ", ".join(names)


def metric_maxima(metric_keys: Sequence[str], rows: Sequence[Row]) -> Dict[str, Optional[float]]:
    """
    Max of every metric over its non-zero, finite values.

    Args:
        metric_keys: Metrics to inspect
        rows: Series rows

    Returns:
        Mapping metric -> max (None when the metric has no usable value)
    """
    maxima: Dict[str, Optional[float]] = {}
    for metric in metric_keys:
        values = [parse_numeric_value(row.get(metric)) for row in rows]
        usable = [v for v in values if v is not None and v != 0]
        maxima[metric] = max(usable) if usable else None
    return maxima


def needs_dual_axis(maxima: Dict[str, Optional[float]], config: DualAxisConfig) -> bool:
    """
    True when any two metrics differ in scale by at least the ratio threshold.

    Pairs where either max is missing or not positive are ignored.
    """
    positives = [(name, value) for name, value in maxima.items() if value is not None and value > 0]

    for i, (name_i, max_i) in enumerate(positives):
        for name_j, max_j in positives[i + 1:]:
            ratio = max_i / max_j
            if ratio >= config.ratio_threshold or ratio <= config.inverse_ratio_threshold:
                logger.debug(
                    f"[DualAxis] {name_i}/{name_j} ratio {ratio:.3f} triggers a second axis"
                )
                return True
    return False


def _split_by_position(metric_keys: List[str]):
    midpoint = math.ceil(len(metric_keys) / 2)
    return metric_keys[:midpoint], metric_keys[midpoint:]


def _split_by_magnitude(metric_keys: List[str], maxima: Dict[str, Optional[float]]):
    """
    Split at the largest gap between log10 magnitudes.

    Metrics without a positive max stay with the first metric's group.
    """
    logs = {
        name: math.log10(value)
        for name, value in maxima.items()
        if name in metric_keys and value is not None and value > 0
    }
    ordered = sorted(logs.values())
    if len(ordered) < 2:
        return _split_by_position(metric_keys)

    gaps = [(ordered[i + 1] - ordered[i], i) for i in range(len(ordered) - 1)]
    _, index = max(gaps)
    cut = (ordered[index] + ordered[index + 1]) / 2

    def is_high(name: str) -> Optional[bool]:
        return logs[name] > cut if name in logs else None

    anchor = is_high(metric_keys[0])
    if anchor is None:
        # First metric has no magnitude: anchor on the first one that does
        anchor = next(is_high(n) for n in metric_keys if n in logs)

    left = [n for n in metric_keys if is_high(n) in (anchor, None)]
    right = [n for n in metric_keys if n not in left]
    return left, right


def select_axes(
    metric_keys: Sequence[str],
    series_rows: Sequence[Row],
    explicit_left: Optional[Sequence[str]] = None,
    explicit_right: Optional[Sequence[str]] = None,
    *,
    chart_type: Optional[str] = None,
    left_label: Optional[str] = None,
    right_label: Optional[str] = None,
    strategy: str = STRATEGY_POSITION,
    config: Optional[DualAxisConfig] = None,
) -> AxisAssignment:
    """
    Partition metrics between the left and right value axes.

    Decision order:
    1. Explicit: both groups given -> honored as assigned
    2. Auto: 2+ metrics on a chart type that supports a second axis, and
       some pair of metric maxima differs by the ratio threshold -> split
    3. Otherwise every metric on the left axis

    Args:
        metric_keys: Requested metrics, in display order
        series_rows: Rows the metrics are read from
        explicit_left: User-assigned left group
        explicit_right: User-assigned right group
        chart_type: Chart type (None is treated as supporting dual axes)
        left_label: Left axis title (default: metric names joined)
        right_label: Right axis title (default: metric names joined)
        strategy: "position" (first half left) or "magnitude" (largest
                  log-scale gap)
        config: Thresholds (defaults to the engine config)

    Returns:
        AxisAssignment whose left + right equals the requested metrics

    Example:
        >>> rows = [{"revenue": 1000, "margin": 10}]
        >>> select_axes(["revenue", "margin"], rows).right
        ['margin']
    """
    config = config or get_engine_config().dual_axis
    metrics = unique_names(list(metric_keys or []))

    if explicit_left and explicit_right:
        left = unique_names(list(explicit_left))
        right = [m for m in unique_names(list(explicit_right)) if m not in left]
        missing = [m for m in metrics if m not in left and m not in right]
        if missing:
            logger.debug(f"[DualAxis] Unassigned metrics placed on left axis: {missing}")
            left.extend(missing)

        return AxisAssignment(
            left=left,
            right=right,
            left_label=left_label or _join(left),
            right_label=(right_label or _join(right)) if right else None,
            source="explicit",
        )

    single = AxisAssignment(
        left=metrics,
        right=[],
        left_label=left_label or _join(metrics),
        right_label=None,
        source="single",
    )

    if len(metrics) < 2 or not config.supports(chart_type):
        return single

    maxima = metric_maxima(metrics, series_rows or [])
    if not needs_dual_axis(maxima, config):
        return single

    if strategy == STRATEGY_MAGNITUDE:
        left, right = _split_by_magnitude(metrics, maxima)
    else:
        if strategy != STRATEGY_POSITION:
            logger.warning(f"[DualAxis] Unknown strategy '{strategy}', using position split")
        left, right = _split_by_position(metrics)

    logger.info(f"[DualAxis] Auto-detected dual axis: left={left}, right={right}")

    return AxisAssignment(
        left=left,
        right=right,
        left_label=left_label or _join(left),
        right_label=right_label or _join(right),
        source="auto",
    )


__all__ = [
    "select_axes",
    "metric_maxima",
    "needs_dual_axis",
    "STRATEGY_POSITION",
    "STRATEGY_MAGNITUDE",
]
