"""
Render plans: everything a renderer needs to draw one chart.

Each chart family gets its own plan shape, tagged by ``kind``. Consumers
dispatch on the tag (or validate a raw dict through ``RenderPlanAdapter``)
instead of probing optional fields:

    cartesian  -> bar, line, area, combo
    pie        -> pie, treemap
    scatter    -> scatter
    scorecard  -> scorecard, gauge
    table      -> table
    heatmap    -> heatmap
"""

from typing import Annotated, Any, List, Literal, Optional, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from src.chart_engine.models.schema import (
    AxisAssignment,
    FieldMapping,
    LayoutPlan,
    Row,
    Series,
)
from src.chart_engine.transforms.numeric import parse_numeric, parse_numeric_value


# ============================================================================
# PLAN PARTS
# ============================================================================


class PieSlice(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: float
    share: float = Field(default=0.0, description="Fraction of the positive total")


class ScatterPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    label: Optional[str] = None


class HeatmapCell(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: str
    y: str
    value: float


# ============================================================================
# PLANS
# ============================================================================


class CartesianRenderPlan(BaseModel):
    """Category axis plus one or two value axes."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["cartesian"] = "cartesian"
    chart_type: str = "bar"
    series: Series
    layout: LayoutPlan = Field(default_factory=LayoutPlan)
    axes: AxisAssignment = Field(default_factory=AxisAssignment)


class PieRenderPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["pie"] = "pie"
    chart_type: str = "pie"
    slices: List[PieSlice] = Field(default_factory=list)
    total: float = 0.0


class ScatterRenderPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["scatter"] = "scatter"
    x_key: Optional[str] = None
    y_key: Optional[str] = None
    points: List[ScatterPoint] = Field(default_factory=list)
    layout: LayoutPlan = Field(default_factory=LayoutPlan)


class ScorecardRenderPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["scorecard"] = "scorecard"
    chart_type: str = "scorecard"
    metric: Optional[str] = None
    aggregation: str = "sum"
    value: Optional[float] = None


class TableRenderPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["table"] = "table"
    columns: List[str] = Field(default_factory=list)
    rows: List[Row] = Field(default_factory=list)


class HeatmapRenderPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["heatmap"] = "heatmap"
    x_categories: List[str] = Field(default_factory=list)
    y_categories: List[str] = Field(default_factory=list)
    cells: List[HeatmapCell] = Field(default_factory=list)
    layout: LayoutPlan = Field(default_factory=LayoutPlan)


RenderPlan = Annotated[
    Union[
        CartesianRenderPlan,
        PieRenderPlan,
        ScatterRenderPlan,
        ScorecardRenderPlan,
        TableRenderPlan,
        HeatmapRenderPlan,
    ],
    Field(discriminator="kind"),
]

RenderPlanAdapter = TypeAdapter(RenderPlan)


# ============================================================================
# BUILDERS
# ============================================================================

PIE_TYPES = ("pie", "treemap")
SCORECARD_TYPES = ("scorecard", "gauge")


def _first_metric(series: Series) -> Optional[str]:
    return series.metrics[0] if series.metrics else None


def _label(value: Any) -> str:
    return "" if value is None else str(value)


def reduce_values(values: List[Any], fn: Optional[str]) -> Optional[float]:
    """
    Reduce raw cell values to one number (scorecards).

    Unparsable cells are skipped; ``count`` counts every non-missing cell.
    """
    present = [v for v in values if v is not None and v != ""]
    if fn == "count":
        return float(len(present))
    if fn == "distinct":
        return float(len({str(v) for v in present}))

    numbers = pd.Series([parse_numeric_value(v) for v in present], dtype=float).dropna()
    if numbers.empty:
        return None
    if fn == "avg":
        return float(numbers.mean())
    if fn == "min":
        return float(numbers.min())
    if fn == "max":
        return float(numbers.max())
    return float(numbers.sum())


def _build_pie(series: Series, chart_type: str) -> PieRenderPlan:
    metric = _first_metric(series)
    labels = series.category_labels()
    values = series.values(metric) if metric else [0.0] * len(labels)
    positive_total = sum(v for v in values if v > 0)

    slices = [
        PieSlice(
            label=label,
            value=value,
            share=(value / positive_total) if positive_total > 0 and value > 0 else 0.0,
        )
        for label, value in zip(labels, values)
    ]
    return PieRenderPlan(chart_type=chart_type, slices=slices, total=positive_total)


def _build_scatter(series: Series, layout: Optional[LayoutPlan]) -> ScatterRenderPlan:
    x_key = series.category_key
    y_key = _first_metric(series)
    points = []
    for row in series.rows:
        x_value = parse_numeric_value(row.get(x_key)) if x_key else None
        y_value = parse_numeric_value(row.get(y_key)) if y_key else None
        if x_value is None or y_value is None:
            continue
        points.append(ScatterPoint(x=x_value, y=y_value, label=_label(row.get(x_key))))

    return ScatterRenderPlan(
        x_key=x_key, y_key=y_key, points=points, layout=layout or LayoutPlan()
    )


def _build_scorecard(series: Series, mapping: FieldMapping, chart_type: str) -> ScorecardRenderPlan:
    metric = mapping.metric or _first_metric(series)
    aggregation = mapping.aggregation or "sum"
    values = [row.get(metric) for row in series.rows] if metric else []
    return ScorecardRenderPlan(
        chart_type=chart_type,
        metric=metric,
        aggregation=aggregation,
        value=reduce_values(values, aggregation),
    )


def _build_table(series: Series, mapping: FieldMapping) -> TableRenderPlan:
    columns = list(mapping.columns or [])
    if not columns:
        columns = [c for c in [series.category_key] + list(series.metrics) if c]
    if not columns and series.rows:
        columns = list(series.rows[0].keys())

    rows = [{column: row.get(column) for column in columns} for row in series.rows]
    return TableRenderPlan(columns=columns, rows=rows)


def _build_heatmap(series: Series, layout: Optional[LayoutPlan]) -> HeatmapRenderPlan:
    x_key = series.category_key
    y_key = series.metadata.get("y_key")
    value_key = _first_metric(series)

    cells = [
        HeatmapCell(
            x=_label(row.get(x_key)),
            y=_label(row.get(y_key)),
            value=parse_numeric(row.get(value_key)),
        )
        for row in series.rows
    ]
    return HeatmapRenderPlan(
        x_categories=list(dict.fromkeys(cell.x for cell in cells)),
        y_categories=list(dict.fromkeys(cell.y for cell in cells)),
        cells=cells,
        layout=layout or LayoutPlan(),
    )


def build_render_plan(
    chart_type: Optional[str],
    series: Series,
    layout: Optional[LayoutPlan] = None,
    mapping: Optional[FieldMapping] = None,
):
    """
    Build the render plan variant for ``chart_type``.

    Args:
        chart_type: Chart type (None renders as a bar chart)
        series: Output of the series pipeline
        layout: Layout plan (cartesian, scatter and heatmap plans)
        mapping: Field mapping (scorecard metric/aggregation, table columns)

    Returns:
        One of the RenderPlan variants
    """
    mapping = mapping or FieldMapping()
    chart_type = chart_type or "bar"

    if chart_type in PIE_TYPES:
        return _build_pie(series, chart_type)
    if chart_type == "scatter":
        return _build_scatter(series, layout)
    if chart_type in SCORECARD_TYPES:
        return _build_scorecard(series, mapping, chart_type)
    if chart_type == "table":
        return _build_table(series, mapping)
    if chart_type == "heatmap":
        return _build_heatmap(series, layout)

    return CartesianRenderPlan(
        chart_type=chart_type,
        series=series,
        layout=layout or LayoutPlan(),
        axes=series.axes,
    )


__all__ = [
    "PieSlice",
    "ScatterPoint",
    "HeatmapCell",
    "CartesianRenderPlan",
    "PieRenderPlan",
    "ScatterRenderPlan",
    "ScorecardRenderPlan",
    "TableRenderPlan",
    "HeatmapRenderPlan",
    "RenderPlan",
    "RenderPlanAdapter",
    "build_render_plan",
    "reduce_values",
]
