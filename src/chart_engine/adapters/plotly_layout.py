"""
Plotly adapter for layout plans.

Translates engine decisions (margins, label rotation, tick density, axis
assignment) into a ``plotly.graph_objects.Layout``. Traces are left to the
caller; this module never draws data.

Tick interval mapping:
- ``0``                  -> every category label drawn
- ``n > 0``              -> ``dtick = n + 1`` (n labels skipped between drawn ones)
- ``"preserveStartEnd"`` -> only the first and last category labels
"""

from typing import Any, Dict, List, Optional, Sequence

import plotly.graph_objects as go

from src.chart_engine.core import settings
from src.chart_engine.layout.label_truncation import AxisTitles
from src.chart_engine.models.schema import PRESERVE_START_END, AxisAssignment, LayoutPlan
from src.shared_lib.utils.logger import get_logger

logger = get_logger(__name__)

PLOT_BGCOLOR = "white"
PAPER_BGCOLOR = "white"
GRID_COLOR = "#eeeeee"


def _tick_settings(plan: LayoutPlan, category_labels: Optional[Sequence[Any]]) -> Dict[str, Any]:
    """Category-axis tick settings for the plan's interval."""
    interval = plan.tick_interval

    if interval == PRESERVE_START_END:
        labels = [str(label) for label in (category_labels or [])]
        if len(labels) > 2:
            return {"tickmode": "array", "tickvals": [labels[0], labels[-1]]}
        return {}

    if isinstance(interval, int) and interval > 0:
        return {"tickmode": "linear", "tick0": 0, "dtick": interval + 1}

    return {}


def to_plotly_layout(
    plan: LayoutPlan,
    axes: Optional[AxisAssignment] = None,
    *,
    category_labels: Optional[Sequence[Any]] = None,
    titles: Optional[AxisTitles] = None,
    width: Optional[float] = None,
    height: Optional[float] = None,
    show_legend: Optional[bool] = None,
    show_grid: bool = True,
) -> go.Layout:
    """
    Build a Plotly layout from a layout plan.

    Args:
        plan: Layout plan from the planner
        axes: Axis assignment; a right axis is added when it is dual
        category_labels: Category labels (needed for "preserveStartEnd")
        titles: Axis titles (default: no x title, left axis label for y)
        width: Figure width in pixels
        height: Figure height in pixels
        show_legend: Legend visibility
        show_grid: Draw value-axis grid lines

    Returns:
        plotly.graph_objects.Layout

    Example:
        >>> layout = to_plotly_layout(LayoutPlan(rotation_angle=-45, bottom_margin=90))
        >>> layout.xaxis.tickangle, layout.margin.b
        (-45, 90.0)
    """
    axes = axes or AxisAssignment()

    xaxis: Dict[str, Any] = {
        "type": "category",
        "tickangle": plan.rotation_angle,
        "automargin": False,
        "showgrid": False,
    }
    xaxis.update(_tick_settings(plan, category_labels))

    yaxis: Dict[str, Any] = {
        "automargin": False,
        "showgrid": show_grid,
        "gridcolor": GRID_COLOR,
    }

    x_title = titles.x if titles else ""
    y_title = titles.y if titles else axes.left_label
    if x_title:
        xaxis["title"] = {"text": x_title}
    if y_title:
        yaxis["title"] = {"text": y_title}

    layout_args: Dict[str, Any] = {
        "font": {"family": settings.FONT_FAMILY, "size": settings.LABEL_FONT_SIZE},
        "margin": {
            "l": plan.left_margin,
            "r": plan.right_margin,
            "t": plan.top_margin,
            "b": plan.bottom_margin,
        },
        "xaxis": xaxis,
        "yaxis": yaxis,
        "plot_bgcolor": PLOT_BGCOLOR,
        "paper_bgcolor": PAPER_BGCOLOR,
    }

    if axes.dual_axis:
        yaxis2: Dict[str, Any] = {
            "overlaying": "y",
            "side": "right",
            "automargin": False,
            "showgrid": False,
        }
        if axes.right_label:
            yaxis2["title"] = {"text": axes.right_label}
        layout_args["yaxis2"] = yaxis2

    if width:
        layout_args["width"] = width
    if height:
        layout_args["height"] = height
    if show_legend is not None:
        layout_args["showlegend"] = show_legend

    logger.debug(
        f"[PlotlyLayout] margins l={plan.left_margin:.0f} r={plan.right_margin:.0f} "
        f"t={plan.top_margin:.0f} b={plan.bottom_margin:.0f}, "
        f"tickangle={plan.rotation_angle}, dual_axis={axes.dual_axis}"
    )
    return go.Layout(**layout_args)


def trace_axis(metric: str, axes: AxisAssignment) -> str:
    """Plotly ``yaxis`` reference for a metric's trace ("y" or "y2")."""
    return "y2" if metric in axes.right else "y"


def apply_layout(
    fig: go.Figure,
    plan: LayoutPlan,
    axes: Optional[AxisAssignment] = None,
    **kwargs: Any,
) -> go.Figure:
    """
    Apply a layout plan to an existing figure.

    Traces whose name is a right-axis metric are moved to ``yaxis2``.

    Args:
        fig: Figure with one trace per metric (trace name = metric)
        plan: Layout plan
        axes: Axis assignment
        **kwargs: Forwarded to ``to_plotly_layout``

    Returns:
        The same figure
    """
    axes = axes or AxisAssignment()
    fig.update_layout(to_plotly_layout(plan, axes, **kwargs))

    if axes.dual_axis:
        moved: List[str] = []
        for trace in fig.data:
            if trace.name in axes.right and hasattr(trace, "yaxis"):
                trace.yaxis = "y2"
                moved.append(trace.name)
        logger.debug(f"[PlotlyLayout] Traces on right axis: {moved}")

    return fig


__all__ = ["to_plotly_layout", "apply_layout", "trace_axis"]
