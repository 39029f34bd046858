"""
Pydantic schemas for the chart engine.

This module defines the data structures exchanged with the rendering layer:
- Field mappings (input, versioned value objects)
- Column schema entries and dataset profiles (scoring input)
- Series, axis assignments and layout plans (pipeline output)
- Chart templates and compatibility scores (gallery)

Every output model is frozen: the engine builds new instances on each call
and never mutates one that a renderer may be reading.
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)

from src.chart_engine.transforms.numeric import parse_numeric


# ============================================================================
# LITERALS
# ============================================================================

AggregationFunction = Literal["sum", "avg", "count", "min", "max", "distinct"]

Granularity = Literal["day", "week", "month", "quarter", "year"]

SortOrder = Literal["asc", "desc"]

RotationMode = Literal["auto", "horizontal", "diagonal", "vertical"]

ColumnType = Literal["number", "string", "categorical", "date"]

TemplateDataType = Literal["string", "number", "date", "boolean"]

TemplateCategory = Literal[
    "comparison", "distribution", "trend", "relationship", "summary"
]

# Keep only first and last tick labels
PRESERVE_START_END = "preserveStartEnd"

TickInterval = Union[int, Literal["preserveStartEnd"]]

# "none" marks the degenerate layout, where no text is measured
MeasurementMode = Literal["font", "fallback", "none"]

Row = Dict[str, Any]


def _as_list(value: Any) -> List[str]:
    """Normalize a single column name or a list of names into a list."""

    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v is not None and v != ""]


def unique_names(names: List[str]) -> List[str]:
    """Drop repeated names, keeping first occurrence order."""

    seen = set()
    result = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
    return result


def mapping_rows(rows: Optional[Sequence[Any]]) -> List[Row]:
    """Keep only rows that are mappings (dicts), dropping None and other junk."""

    return [row for row in (rows or []) if isinstance(row, Mapping)]


# ============================================================================
# FIELD MAPPING
# ============================================================================


class FieldMapping(BaseModel):
    """
    Binding of chart roles to dataset columns for one chart instance.

    The mapping is an explicit, versioned value: edits produce a new mapping
    through ``evolve`` instead of mutating this one. Camel-case keys from the
    dashboard layer (``xAxis``, ``yAxis1``, ``sortBy``...) are accepted as
    aliases.

    Example:
        >>> mapping = FieldMapping(category="region", metrics="sales", aggregation="sum")
        >>> mapping.requested_metrics()
        ['sales']
        >>> mapping.evolve(limit=5).version
        2
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    chart_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("chart_type", "type")
    )

    category: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("category", "x_axis", "xAxis"),
        description="Column used as the category / x-axis key",
    )

    metrics: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("metrics", "values", "y_axis", "yAxis"),
        description="Metric columns plotted against the category",
    )

    metric: Optional[str] = Field(
        default=None, description="Single metric column (scorecards, gauges)"
    )

    value: Optional[str] = Field(
        default=None, description="Value column (pie, treemap, heatmap)"
    )

    metrics_left: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("metrics_left", "y_axis1", "yAxis1"),
    )

    metrics_right: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("metrics_right", "y_axis2", "yAxis2"),
    )

    left_label: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("left_label", "y_axis1_label", "yAxis1Label"),
    )

    right_label: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("right_label", "y_axis2_label", "yAxis2Label"),
    )

    y_category: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("y_category", "yCategory"),
        description="Second dimension of a heatmap",
    )

    columns: List[str] = Field(default_factory=list, description="Table columns")

    x_label: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("x_label", "xLabel")
    )

    y_label: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("y_label", "yLabel")
    )

    aggregation: Optional[AggregationFunction] = None

    granularity: Optional[Granularity] = None

    sort_by: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("sort_by", "sortBy"),
        description='"value", "label" or a column name',
    )

    sort_order: SortOrder = Field(
        default="desc", validation_alias=AliasChoices("sort_order", "sortOrder")
    )

    limit: Optional[int] = Field(default=None, ge=1)

    label_rotation: RotationMode = Field(
        default="auto", validation_alias=AliasChoices("label_rotation", "labelRotation")
    )

    version: int = Field(default=1, ge=1)

    @field_validator("metrics", "metrics_left", "metrics_right", "columns", mode="before")
    @classmethod
    def normalize_column_lists(cls, v: Any) -> List[str]:
        """Accept a single column name wherever a list is expected."""
        return _as_list(v)

    @field_validator("sort_order", "label_rotation", mode="before")
    @classmethod
    def default_when_missing(cls, v: Any, info) -> Any:
        """Treat None as "use the default" for enum-like fields."""
        if v is None:
            return "desc" if info.field_name == "sort_order" else "auto"
        return v

    @property
    def has_explicit_axes(self) -> bool:
        """True when both axis groups were assigned by the user."""
        return bool(self.metrics_left) and bool(self.metrics_right)

    def requested_metrics(self) -> List[str]:
        """
        Ordered, de-duplicated union of every metric the chart asks for.

        Returns:
            metrics, metric, value, left group, right group (in that order)
        """
        names = list(self.metrics)
        names.extend(_as_list(self.metric))
        names.extend(_as_list(self.value))
        names.extend(self.metrics_left)
        names.extend(self.metrics_right)
        if self.category:
            names = [n for n in names if n != self.category]
        return unique_names(names)

    def evolve(self, **changes: Any) -> "FieldMapping":
        """
        Return a new mapping with ``changes`` applied and the version bumped.

        Args:
            **changes: Field names and their new values

        Returns:
            New FieldMapping with ``version + 1``
        """
        data = self.model_dump()
        data.update(changes)
        data["version"] = self.version + 1
        return FieldMapping.model_validate(data)

    @classmethod
    def merge(cls, base: "FieldMapping", overrides: "FieldMapping") -> "FieldMapping":
        """
        Layer user edits over a base (e.g. recommended) mapping.

        Only fields explicitly set on ``overrides`` win; everything else comes
        from ``base``.

        Args:
            base: Lower priority mapping
            overrides: Higher priority mapping

        Returns:
            Effective mapping
        """
        data = base.model_dump()
        data.update(overrides.model_dump(include=overrides.model_fields_set))
        data["version"] = max(base.version, overrides.version)
        return cls.model_validate(data)


# ============================================================================
# DATASET SCHEMA
# ============================================================================


class ColumnSchemaEntry(BaseModel):
    """Name and type of one dataset column."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    type: ColumnType


class DatasetProfile(BaseModel):
    """Column-type counts of a dataset, as seen by the template scorer."""

    model_config = ConfigDict(frozen=True)

    column_count: int = Field(default=0, ge=0)
    number_columns: int = Field(default=0, ge=0)
    string_columns: int = Field(default=0, ge=0)
    date_columns: int = Field(default=0, ge=0)

    @property
    def has_numbers(self) -> bool:
        return self.number_columns > 0

    @property
    def has_strings(self) -> bool:
        return self.string_columns > 0

    @property
    def has_dates(self) -> bool:
        return self.date_columns > 0


# ============================================================================
# PIPELINE OUTPUT
# ============================================================================


class AxisAssignment(BaseModel):
    """
    Partition of the requested metrics between the left and right value axes.

    ``left + right`` always equals the requested metric set with no overlap.
    """

    model_config = ConfigDict(frozen=True)

    left: List[str] = Field(default_factory=list)
    right: List[str] = Field(default_factory=list)
    left_label: str = ""
    right_label: Optional[str] = None
    source: Literal["explicit", "auto", "single"] = "single"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def dual_axis(self) -> bool:
        """True when a right axis must be rendered."""
        return bool(self.right)

    def all_metrics(self) -> List[str]:
        return list(self.left) + list(self.right)


class Series(BaseModel):
    """
    Render-ready output of the series pipeline.

    Attributes:
        rows: Aggregated, sorted and limited rows
        category_key: Column holding the category labels
        metrics: Metrics carried by every row
        axes: Axis assignment for the metrics
        metadata: Row counts per stage and the stages applied
    """

    model_config = ConfigDict(frozen=True)

    rows: Tuple[Row, ...] = ()
    category_key: Optional[str] = None
    metrics: List[str] = Field(default_factory=list)
    axes: AxisAssignment = Field(default_factory=AxisAssignment)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.rows)

    def category_labels(self) -> List[str]:
        """String labels of the category column, in row order."""
        if not self.category_key:
            return []
        return [
            "" if row.get(self.category_key) is None else str(row.get(self.category_key))
            for row in self.rows
        ]

    def values(self, metric: str) -> List[float]:
        """Coerced values of ``metric``, in row order."""
        return [parse_numeric(row.get(metric)) for row in self.rows]


class ContainerSize(BaseModel):
    """Pixel size of the chart container."""

    model_config = ConfigDict(frozen=True)

    width: float = 0.0
    height: float = 0.0


class LayoutPlan(BaseModel):
    """
    Rotation, margins and tick density for one render pass.

    ``tick_interval`` is the number of labels skipped between two drawn
    labels, or ``"preserveStartEnd"`` to only keep the first and last.
    """

    model_config = ConfigDict(frozen=True)

    rotation_angle: int = 0
    bottom_margin: float = Field(default=40.0, ge=0)
    left_margin: float = Field(default=40.0, ge=0)
    right_margin: float = Field(default=20.0, ge=0)
    top_margin: float = Field(default=20.0, ge=0)
    tick_interval: TickInterval = PRESERVE_START_END
    measurement: MeasurementMode = "none"


# ============================================================================
# TEMPLATES & SCORING
# ============================================================================


class ChartTemplate(BaseModel):
    """Gallery entry describing what a chart kind needs from a dataset."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str
    type: str
    description: str = ""
    category: TemplateCategory = "comparison"
    required_data_types: List[TemplateDataType] = Field(
        default_factory=list,
        validation_alias=AliasChoices("required_data_types", "requiredDataTypes"),
    )
    min_columns: int = Field(
        default=1, ge=0, validation_alias=AliasChoices("min_columns", "minColumns")
    )
    max_columns: Optional[int] = Field(
        default=None, ge=1, validation_alias=AliasChoices("max_columns", "maxColumns")
    )


class ScoreFactors(BaseModel):
    """Breakdown of a compatibility score."""

    model_config = ConfigDict(frozen=True)

    data_type_match: int = Field(default=0, ge=0, le=40)
    column_confidence: int = Field(default=0, ge=0, le=30)
    user_correction_boost: int = Field(default=0, ge=0, le=20)
    clarity_score: int = Field(default=0, ge=0, le=10)

    def raw_total(self) -> int:
        return (
            self.data_type_match
            + self.column_confidence
            + self.user_correction_boost
            + self.clarity_score
        )


class CompatibilityScore(BaseModel):
    """
    Heuristic 0-100 fit between a chart template and a dataset profile.

    ``compatible`` decides gallery eligibility; ``total`` only ranks
    compatible templates.
    """

    model_config = ConfigDict(frozen=True)

    template_id: Optional[str] = None
    total: int = Field(..., ge=0, le=100)
    factors: ScoreFactors
    compatible: bool = True
    message: Optional[str] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def tier(self) -> Literal["high", "medium", "low"]:
        """Quality band shown next to the score."""
        if self.total >= 75:
            return "high"
        if self.total >= 50:
            return "medium"
        return "low"


__all__ = [
    "AggregationFunction",
    "Granularity",
    "SortOrder",
    "RotationMode",
    "ColumnType",
    "TickInterval",
    "PRESERVE_START_END",
    "Row",
    "unique_names",
    "mapping_rows",
    "FieldMapping",
    "ColumnSchemaEntry",
    "DatasetProfile",
    "AxisAssignment",
    "Series",
    "ContainerSize",
    "LayoutPlan",
    "ChartTemplate",
    "ScoreFactors",
    "CompatibilityScore",
]
