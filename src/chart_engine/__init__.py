"""
Chart Engine

Turns raw tabular rows plus a field mapping into render-ready chart data,
and plans how the chart fits its container.

Modules:
    - core: Settings and tunable heuristics
    - models: Pydantic schemas and render plans
    - transforms: Aggregation, date bucketing, sorting and limiting
    - axes: Dual-axis selection
    - layout: Text measurement, container sizing and the layout planner
    - scoring: Template compatibility scoring
    - validators: Field mapping checks
    - adapters: Plotly layout output
"""

from pathlib import Path

__version__ = "0.1.0"
__all__ = ["__version__"]

MODULE_ROOT = Path(__file__).parent
