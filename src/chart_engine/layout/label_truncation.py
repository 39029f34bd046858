"""
Label truncation to a pixel budget.
"""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from src.chart_engine.core.engine_config import LayoutConfig, get_engine_config
from src.chart_engine.layout.text_measurer import MeasurementSession
from src.chart_engine.models.schema import FieldMapping

ELLIPSIS = "..."

DEFAULT_VALUE_TITLE = "Value"


class AxisTitles(BaseModel):
    """Axis titles after truncation, with the untruncated originals."""

    model_config = ConfigDict(frozen=True)

    x: str = ""
    y: str = ""
    x_truncated: bool = False
    y_truncated: bool = False
    x_original: str = ""
    y_original: str = ""


def truncate_label(label: str, max_width: float, session: MeasurementSession) -> Tuple[str, bool]:
    """
    Shorten ``label`` so that it fits ``max_width`` pixels.

    The longest prefix whose ``prefix + "..."`` fits is found by binary
    search. When not even one character fits, only the ellipsis is returned.

    Args:
        label: Label text
        max_width: Pixel budget
        session: Measurement session of the current layout pass

    Returns:
        (text, is_truncated)

    Example:
        >>> from src.chart_engine.layout.text_measurer import TextMeasurer
        >>> truncate_label("Quarterly revenue", 60, TextMeasurer(use_fonts=False).session())
        ('Quarter...', True)
    """
    label = "" if label is None else str(label)
    if session.measure(label) <= max_width:
        return label, False

    low, high = 0, len(label)
    best = 0
    while low <= high:
        middle = (low + high) // 2
        if session.measure(label[:middle] + ELLIPSIS) <= max_width:
            best = middle
            low = middle + 1
        else:
            high = middle - 1

    text = label[:best] + ELLIPSIS if best > 0 else ELLIPSIS
    return text, True


def axis_titles(
    mapping: Optional[FieldMapping],
    container_width: float,
    session: MeasurementSession,
    config: Optional[LayoutConfig] = None,
) -> AxisTitles:
    """
    Axis titles for a chart, truncated to max(100, 30% of the width).

    Title sources, in order: explicit ``x_label`` / ``y_label``, the mapped
    category / metric columns, then defaults.

    Args:
        mapping: Field mapping of the chart
        container_width: Effective container width (px)
        session: Measurement session of the current layout pass
        config: Layout configuration

    Returns:
        AxisTitles
    """
    config = config or get_engine_config().layout
    mapping = mapping or FieldMapping()

    x_title = mapping.x_label or mapping.category or ""
    y_title = mapping.y_label
    if not y_title and mapping.metrics:
        y_title = ", ".join(mapping.metrics)
    y_title = y_title or DEFAULT_VALUE_TITLE

    budget = max(config.title_min_width, container_width * config.title_width_fraction)
    x_text, x_cut = truncate_label(x_title, budget, session)
    y_text, y_cut = truncate_label(y_title, budget, session)

    return AxisTitles(
        x=x_text,
        y=y_text,
        x_truncated=x_cut,
        y_truncated=y_cut,
        x_original=x_title,
        y_original=y_title,
    )


__all__ = ["AxisTitles", "truncate_label", "axis_titles", "ELLIPSIS"]
