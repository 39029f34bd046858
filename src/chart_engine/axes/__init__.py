"""
Axes module - Left/right value axis assignment.
"""

from src.chart_engine.axes.dual_axis_selector import select_axes

__all__ = ["select_axes"]
