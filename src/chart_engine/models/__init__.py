"""
Models module - Schemas exchanged with the rendering layer.
"""

from src.chart_engine.models.schema import (
    FieldMapping,
    ColumnSchemaEntry,
    DatasetProfile,
    AxisAssignment,
    Series,
    ContainerSize,
    LayoutPlan,
    ChartTemplate,
    ScoreFactors,
    CompatibilityScore,
)

__all__ = [
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
