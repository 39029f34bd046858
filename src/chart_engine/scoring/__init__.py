"""
Scoring module - Chart template compatibility with a dataset.
"""

from src.chart_engine.scoring.compatibility_scorer import recommend, score
from src.chart_engine.scoring.profile import build_profile
from src.chart_engine.scoring.templates import DEFAULT_TEMPLATES

__all__ = ["score", "recommend", "build_profile", "DEFAULT_TEMPLATES"]
