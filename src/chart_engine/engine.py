"""
Chart Engine - entry points of the chart data and layout engine.

Three independent, stateless queries:
- ``compute_series``: raw rows + field mapping -> render-ready Series
- ``compute_layout``: category labels + container size -> LayoutPlan
- ``score_template``: chart template + dataset profile -> CompatibilityScore

Series pipeline:
    row cap -> date granularity -> chronological order -> aggregation
    -> sort / limit -> axis assignment

``ChartEngine`` bundles the three with a shared text measurer, stage timing
and the render-plan / Plotly helpers used by hosts.
"""

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import plotly.graph_objects as go

from src.chart_engine.adapters.plotly_layout import to_plotly_layout
from src.chart_engine.axes.dual_axis_selector import select_axes
from src.chart_engine.core.engine_config import EngineConfig, get_engine_config
from src.chart_engine.layout.container import responsive_features, size_container
from src.chart_engine.layout.label_truncation import AxisTitles, axis_titles
from src.chart_engine.layout.planner import open_session, plan_layout
from src.chart_engine.layout.text_measurer import MeasurementSession, TextMeasurer
from src.chart_engine.models.render_plan import build_render_plan
from src.chart_engine.models.schema import (
    AxisAssignment,
    ChartTemplate,
    CompatibilityScore,
    ContainerSize,
    DatasetProfile,
    FieldMapping,
    LayoutPlan,
    Row,
    Series,
    mapping_rows,
)
from src.chart_engine.scoring.compatibility_scorer import recommend, score
from src.chart_engine.scoring.profile import build_profile
from src.chart_engine.scoring.templates import DEFAULT_TEMPLATES
from src.chart_engine.transforms.aggregator import aggregate
from src.chart_engine.transforms.matrix import aggregate_matrix, limit_matrix
from src.chart_engine.transforms.sorter import sort_and_limit
from src.chart_engine.transforms.temporal import (
    aggregate_by_granularity,
    looks_like_date,
    sort_chronologically,
)
from src.chart_engine.validators.mapping_validator import MappingInput, as_mapping, heatmap_y_key
from src.shared_lib.utils.logger import get_logger
from src.shared_lib.utils.performance_monitor import PerformanceMonitor

logger = get_logger(__name__)

SizeInput = Union[ContainerSize, Tuple[float, float], Mapping[str, float]]


def _as_size(container_size: SizeInput) -> ContainerSize:
    """Accept a ContainerSize, a (width, height) tuple or a dict."""
    if isinstance(container_size, ContainerSize):
        return container_size
    if isinstance(container_size, Mapping):
        return ContainerSize.model_validate(dict(container_size))
    width, height = container_size
    return ContainerSize(width=width, height=height)


# ============================================================================
# SERIES
# ============================================================================


def _heatmap_series(
    rows: List[Row],
    mapping: FieldMapping,
    config: EngineConfig,
    metadata: dict,
) -> Series:
    """2-D aggregation on (category, y) followed by matrix trimming."""
    x_key = mapping.category
    y_key = heatmap_y_key(mapping)
    value_key = mapping.value or next(
        (m for m in mapping.requested_metrics() if m != y_key), None
    )

    if not (x_key and y_key and value_key):
        logger.warning(
            f"[ChartEngine] Heatmap needs x, y and value columns "
            f"(x={x_key}, y={y_key}, value={value_key})"
        )
        return Series(rows=(), category_key=x_key, metadata=metadata)

    cells = aggregate_matrix(rows, x_key, y_key, value_key, mapping.aggregation or "sum")
    metadata["after_aggregation"] = len(cells)

    cells = limit_matrix(
        cells,
        x_key,
        y_key,
        value_key,
        max_x=config.pipeline.heatmap_max_x,
        max_y=config.pipeline.heatmap_max_y,
    )
    metadata["after_limit"] = len(cells)
    metadata["y_key"] = y_key

    return Series(
        rows=tuple(cells),
        category_key=x_key,
        metrics=[value_key],
        axes=AxisAssignment(left=[value_key], left_label=value_key, source="single"),
        metadata=metadata,
    )


def compute_series(
    rows: Sequence[Row],
    mapping: MappingInput,
    *,
    config: Optional[EngineConfig] = None,
) -> Series:
    """
    Turn raw rows into a render-ready series.

    Args:
        rows: Raw dataset rows
        mapping: FieldMapping (or a dict with mapping keys)
        config: Engine configuration (default: process-wide config)

    Returns:
        Series with aggregated, sorted, limited rows and the axis assignment

    Example:
        >>> rows = [
        ...     {"region": "A", "sales": "$100"},
        ...     {"region": "A", "sales": "$50"},
        ...     {"region": "B", "sales": "$300"},
        ... ]
        >>> mapping = FieldMapping(category="region", metrics=["sales"], aggregation="sum")
        >>> list(compute_series(rows, mapping).rows)
        [{'region': 'A', 'sales': 150.0}, {'region': 'B', 'sales': 300.0}]
    """
    config = config or get_engine_config()
    mapping = as_mapping(mapping)
    chart_type = mapping.chart_type
    category = mapping.category
    metrics = mapping.requested_metrics()

    raw = list(rows or [])
    data = mapping_rows(raw)
    metadata = {
        "input_rows": len(raw),
        "malformed_rows": len(raw) - len(data),
        "chart_type": chart_type,
        "stages": [],
    }
    if metadata["malformed_rows"]:
        logger.warning(
            f"[ChartEngine] Dropped {metadata['malformed_rows']} malformed row(s) (not mappings)"
        )

    cap = config.pipeline.row_cap_for(chart_type)
    if cap is not None and len(data) > cap:
        logger.info(f"[ChartEngine] Row cap: {len(data)} -> {cap} rows")
        data = data[:cap]
        metadata["stages"].append("row_cap")
    metadata["after_row_cap"] = len(data)

    if chart_type == "heatmap":
        metadata["stages"].append("matrix")
        return _heatmap_series(data, mapping, config, metadata)

    if mapping.granularity and category and data:
        if looks_like_date(data[0].get(category)):
            data = aggregate_by_granularity(data, mapping.granularity, date_column=category)
            metadata["stages"].append("granularity")
        else:
            logger.debug(
                f"[ChartEngine] Granularity '{mapping.granularity}' ignored: "
                f"'{category}' is not a date column"
            )

    if category:
        data = sort_chronologically(data, category)

    if mapping.aggregation and category and metrics:
        data = aggregate(data, category, metrics, mapping.aggregation)
        metadata["stages"].append("aggregation")
    metadata["after_aggregation"] = len(data)

    if mapping.sort_by or mapping.limit:
        data = sort_and_limit(
            data,
            mapping.sort_by,
            mapping.sort_order,
            mapping.limit,
            value_key=metrics[0] if metrics else None,
            label_key=category,
        )
        metadata["stages"].append("sort_limit")
    metadata["after_limit"] = len(data)

    axes = select_axes(
        metrics,
        data,
        mapping.metrics_left,
        mapping.metrics_right,
        chart_type=chart_type,
        left_label=mapping.left_label,
        right_label=mapping.right_label,
        config=config.dual_axis,
    )

    logger.debug(
        f"[ChartEngine] Series: {metadata['input_rows']} rows -> {len(data)} "
        f"(stages={metadata['stages']}, dual_axis={axes.dual_axis})"
    )

    return Series(
        rows=tuple(data),
        category_key=category,
        metrics=metrics,
        axes=axes,
        metadata=metadata,
    )


# ============================================================================
# LAYOUT
# ============================================================================


def compute_layout(
    category_labels: Sequence[Any],
    container_size: SizeInput,
    rotation_preference: Optional[str] = None,
    *,
    chart_type: Optional[str] = None,
    value_samples: Optional[Iterable[Any]] = None,
    axes: Optional[AxisAssignment] = None,
    measurer: Optional[Union[TextMeasurer, MeasurementSession]] = None,
    config: Optional[EngineConfig] = None,
) -> LayoutPlan:
    """
    Plan rotation, margins and tick density for a chart.

    The raw container size is first raised to the chart type's minimums.

    Args:
        category_labels: Category labels in display order
        container_size: ContainerSize, (width, height) or {"width", "height"}
        rotation_preference: "auto", "horizontal", "diagonal" or "vertical"
        chart_type: Chart type (container minimums)
        value_samples: Values of the first left-axis metric
        axes: Axis assignment (a dual axis widens the right margin)
        measurer: TextMeasurer or an open MeasurementSession
        config: Engine configuration

    Returns:
        LayoutPlan
    """
    config = config or get_engine_config()
    size = _as_size(container_size)

    sizing = size_container(size.width, size.height, chart_type, config)
    features = responsive_features(sizing.width, config.layout)

    return plan_layout(
        category_labels,
        sizing.width,
        sizing.height,
        rotation_preference,
        value_samples=value_samples,
        show_legend=features.show_legend,
        secondary_axis=bool(axes and axes.dual_axis),
        measurer=measurer,
        config=config.layout,
    )


# ============================================================================
# SCORING
# ============================================================================


def score_template(template: ChartTemplate, dataset_profile: DatasetProfile) -> CompatibilityScore:
    """
    Score a chart template against a dataset profile.

    Args:
        template: Chart template
        dataset_profile: Column-type counts of the dataset

    Returns:
        CompatibilityScore
    """
    return score(template, dataset_profile)


# ============================================================================
# ENGINE
# ============================================================================


class ChartEngine:
    """
    Facade over the series, layout and scoring queries.

    Owns a TextMeasurer (fonts are loaded once per engine) and a
    PerformanceMonitor timing every stage it runs.

    Example:
        >>> engine = ChartEngine(measurer=TextMeasurer(use_fonts=False))
        >>> rows = [{"region": "A", "sales": 10}, {"region": "B", "sales": 20}]
        >>> series = engine.compute_series(rows, {"xAxis": "region", "yAxis": "sales"})
        >>> plan = engine.compute_layout(series.category_labels(), (600, 400))
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        measurer: Optional[TextMeasurer] = None,
        monitor: Optional[PerformanceMonitor] = None,
    ):
        """
        Args:
            config: Engine configuration (default: process-wide config)
            measurer: Text measurer (default: one using real fonts when enabled)
            monitor: Stage timer
        """
        self.config = config or get_engine_config()
        self.measurer = measurer or TextMeasurer(
            fallback_char_width=self.config.layout.fallback_char_width
        )
        self.monitor = monitor or PerformanceMonitor()

        logger.info(
            f"[ChartEngine] Initialized (max_rows={self.config.pipeline.max_rows}, "
            f"dual_axis_ratio={self.config.dual_axis.ratio_threshold}, "
            f"fonts={'on' if self.measurer.use_fonts else 'off'})"
        )

    def compute_series(self, rows: Sequence[Row], mapping: MappingInput) -> Series:
        """See ``compute_series``."""
        with self.monitor.measure("series"):
            return compute_series(rows, mapping, config=self.config)

    def compute_layout(
        self,
        category_labels: Sequence[Any],
        container_size: SizeInput,
        rotation_preference: Optional[str] = None,
        *,
        chart_type: Optional[str] = None,
        value_samples: Optional[Iterable[Any]] = None,
        axes: Optional[AxisAssignment] = None,
    ) -> LayoutPlan:
        """See ``compute_layout``."""
        with self.monitor.measure("layout"):
            return compute_layout(
                category_labels,
                container_size,
                rotation_preference,
                chart_type=chart_type,
                value_samples=value_samples,
                axes=axes,
                measurer=self.measurer,
                config=self.config,
            )

    def layout_for_series(
        self,
        series: Series,
        container_size: SizeInput,
        rotation_preference: Optional[str] = None,
        chart_type: Optional[str] = None,
    ) -> LayoutPlan:
        """Layout plan for a computed series (labels, value samples and axes)."""
        first_left = series.axes.left[0] if series.axes.left else None
        return self.compute_layout(
            series.category_labels(),
            container_size,
            rotation_preference,
            chart_type=chart_type or series.metadata.get("chart_type"),
            value_samples=series.values(first_left) if first_left else None,
            axes=series.axes,
        )

    def score_template(self, template: ChartTemplate, dataset_profile: DatasetProfile) -> CompatibilityScore:
        """See ``score_template``."""
        with self.monitor.measure("scoring"):
            return score_template(template, dataset_profile)

    def recommend_templates(
        self,
        dataset_profile: Optional[DatasetProfile] = None,
        *,
        schema: Optional[Iterable[Any]] = None,
        rows: Optional[Sequence[Row]] = None,
        templates: Optional[Sequence[ChartTemplate]] = None,
        include_incompatible: bool = False,
    ) -> List[CompatibilityScore]:
        """
        Rank gallery templates for a dataset.

        Args:
            dataset_profile: Profile (built from ``schema`` or ``rows`` if omitted)
            schema: Column schema
            rows: Raw rows (profile inference fallback)
            templates: Catalog (default: DEFAULT_TEMPLATES)
            include_incompatible: Append incompatible templates at the end

        Returns:
            Scores, best first
        """
        with self.monitor.measure("scoring"):
            profile = dataset_profile or build_profile(schema=schema, rows=rows)
            return recommend(
                templates if templates is not None else DEFAULT_TEMPLATES,
                profile,
                include_incompatible=include_incompatible,
            )

    def axis_titles(self, mapping: MappingInput, container_width: float) -> AxisTitles:
        """Truncated axis titles for a chart."""
        session = open_session(self.measurer, self.config.layout)
        return axis_titles(as_mapping(mapping), container_width, session, self.config.layout)

    def render_plan(
        self,
        rows: Sequence[Row],
        mapping: MappingInput,
        container_size: SizeInput,
    ):
        """
        Series, layout and render-plan variant for one chart in a single call.

        Args:
            rows: Raw dataset rows
            mapping: Field mapping
            container_size: Raw container size

        Returns:
            RenderPlan variant for the mapping's chart type
        """
        mapping = as_mapping(mapping)
        series = self.compute_series(rows, mapping)
        layout = self.layout_for_series(
            series, container_size, mapping.label_rotation, mapping.chart_type
        )
        with self.monitor.measure("render_plan"):
            return build_render_plan(mapping.chart_type, series, layout, mapping)

    def plotly_layout(
        self,
        series: Series,
        plan: LayoutPlan,
        mapping: Optional[MappingInput] = None,
        container_size: Optional[SizeInput] = None,
    ) -> go.Layout:
        """Plotly layout for a computed series and its plan."""
        size = _as_size(container_size) if container_size is not None else None
        titles = None
        if mapping is not None and size is not None:
            titles = self.axis_titles(mapping, size.width)

        return to_plotly_layout(
            plan,
            series.axes,
            category_labels=series.category_labels(),
            titles=titles,
            width=size.width if size else None,
            height=size.height if size else None,
        )


__all__ = [
    "ChartEngine",
    "compute_series",
    "compute_layout",
    "score_template",
]
