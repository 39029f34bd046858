"""
Chart Engine - data transformation and adaptive layout for dashboard charts.

Architecture:
    src/
    ├── shared_lib/     # Logging, stage timing and JSON helpers
    └── chart_engine/   # Series pipeline, layout planner, template scoring
"""

__version__ = "0.1.0"
