"""
Field mapping validation.

Checks whether a chart has the data bindings its type needs before the
engine tries to compute a series for it. A chart that fails the check is
shown as "needs configuration" instead of rendering an empty plot.
"""

from typing import Any, Callable, Dict, Mapping, Optional, Union

from src.chart_engine.models.schema import FieldMapping

MappingInput = Union[FieldMapping, Mapping[str, Any]]


def as_mapping(mapping: Optional[MappingInput]) -> FieldMapping:
    """Accept a FieldMapping or a raw dict (camelCase keys allowed)."""
    if mapping is None:
        return FieldMapping()
    if isinstance(mapping, FieldMapping):
        return mapping
    return FieldMapping.model_validate(dict(mapping))


def heatmap_y_key(mapping: FieldMapping) -> Optional[str]:
    """Second heatmap dimension: ``y_category``, else the first y-axis column."""
    if mapping.y_category:
        return mapping.y_category
    return mapping.metrics[0] if mapping.metrics else None


def _has_x(m: FieldMapping) -> bool:
    return bool(m.category)


def _has_y(m: FieldMapping) -> bool:
    return bool(m.metrics or m.metrics_left)


def _has_any_field(m: FieldMapping) -> bool:
    return any(
        [
            m.category,
            m.metrics,
            m.metric,
            m.value,
            m.metrics_left,
            m.metrics_right,
            m.y_category,
            m.columns,
        ]
    )


# Required bindings per chart type
_RULES: Dict[str, Callable[[FieldMapping], bool]] = {
    "line": _has_x,
    "bar": _has_x,
    "area": lambda m: _has_x(m) and _has_y(m),
    "scatter": lambda m: _has_x(m) and _has_y(m),
    "pie": _has_x,
    "scorecard": lambda m: bool(m.metric),
    "gauge": lambda m: bool(m.metric),
    "table": lambda m: bool(m.columns or m.metrics),
    "combo": lambda m: _has_x(m) and _has_y(m),
    "heatmap": lambda m: bool(m.category and heatmap_y_key(m) and m.value),
    "treemap": lambda m: bool(m.category and m.value),
    "waterfall": lambda m: bool(m.category and m.value),
}


def is_mapping_configured(
    chart_type: Optional[str],
    mapping: Optional[MappingInput],
    overrides: Optional[MappingInput] = None,
) -> bool:
    """
    True when ``mapping`` binds every field ``chart_type`` needs.

    Args:
        chart_type: Chart type
        mapping: Base mapping (e.g. recommended configuration)
        overrides: User edits layered over ``mapping``

    Returns:
        True when the chart can be computed

    Example:
        >>> is_mapping_configured("area", {"xAxis": "month"})
        False
        >>> is_mapping_configured("area", {"xAxis": "month", "yAxis": "sales"})
        True
    """
    effective = as_mapping(mapping)
    if overrides is not None:
        effective = FieldMapping.merge(effective, as_mapping(overrides))

    if not _has_any_field(effective):
        return False

    rule = _RULES.get(chart_type or "")
    if rule is None:
        return True
    return rule(effective)


__all__ = ["is_mapping_configured", "as_mapping", "heatmap_y_key"]
