"""Default chart template catalog for the gallery."""

from typing import Dict, List, Optional

from src.chart_engine.models.schema import ChartTemplate

DEFAULT_TEMPLATES: List[ChartTemplate] = [
    ChartTemplate(
        id="line-trend",
        name="Line Chart",
        type="line",
        description="Show trends and changes over time",
        category="trend",
        required_data_types=["number"],
        min_columns=2,
        max_columns=5,
    ),
    ChartTemplate(
        id="bar-comparison",
        name="Bar Chart",
        type="bar",
        description="Compare values across categories",
        category="comparison",
        required_data_types=["number"],
        min_columns=2,
        max_columns=4,
    ),
    ChartTemplate(
        id="pie-distribution",
        name="Pie Chart",
        type="pie",
        description="Show proportional distribution",
        category="distribution",
        required_data_types=["string", "number"],
        min_columns=1,
        max_columns=2,
    ),
    ChartTemplate(
        id="area-filled",
        name="Area Chart",
        type="area",
        description="Visualize cumulative trends",
        category="trend",
        required_data_types=["number"],
        min_columns=2,
        max_columns=4,
    ),
    ChartTemplate(
        id="scatter-relationship",
        name="Scatter Plot",
        type="scatter",
        description="Explore relationships between variables",
        category="relationship",
        required_data_types=["number"],
        min_columns=2,
        max_columns=3,
    ),
    ChartTemplate(
        id="scorecard-kpi",
        name="Scorecard",
        type="scorecard",
        description="Display key metrics and KPIs",
        category="summary",
        required_data_types=["number"],
        min_columns=1,
        max_columns=1,
    ),
    ChartTemplate(
        id="table-detailed",
        name="Data Table",
        type="table",
        description="Show detailed tabular data",
        category="summary",
        required_data_types=["string", "number"],
        min_columns=1,
    ),
]

_BY_ID: Dict[str, ChartTemplate] = {template.id: template for template in DEFAULT_TEMPLATES}


def get_template(template_id: str) -> Optional[ChartTemplate]:
    """Look up a default template by id."""
    return _BY_ID.get(template_id)


__all__ = ["DEFAULT_TEMPLATES", "get_template"]
