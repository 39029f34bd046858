"""
Layout module - Text measurement, container sizing and margin planning.
"""

from src.chart_engine.layout.text_measurer import TextMeasurer, MeasurementSession
from src.chart_engine.layout.planner import plan_layout

__all__ = ["TextMeasurer", "MeasurementSession", "plan_layout"]
