"""
Environment settings for the chart engine.

Defines module-level constants loaded from the environment (and from a local
``.env`` file when present). Values here are process-wide defaults; the
tunable heuristics live in ``engine_config``.
"""

import os
from pathlib import Path
from typing import List
from dotenv import load_dotenv

load_dotenv()

# settings.py lives in src/chart_engine/core/, project root is 4 parents up
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent

# Logging Configuration
LOG_LEVEL: str = os.getenv("CHART_ENGINE_LOG_LEVEL", "INFO")
LOG_FILE: str = os.getenv(
    "CHART_ENGINE_LOG_FILE", str(PROJECT_ROOT / "logs" / "chart_engine_errors.log")
)

# Pipeline limits
MAX_ROWS: int = int(os.getenv("CHART_ENGINE_MAX_ROWS", "1000"))

# Text measurement
FONT_FAMILY: str = os.getenv("CHART_ENGINE_FONT_FAMILY", "system-ui")
LABEL_FONT_SIZE: int = int(os.getenv("CHART_ENGINE_LABEL_FONT_SIZE", "11"))
USE_FONTS: bool = os.getenv("CHART_ENGINE_USE_FONTS", "true").lower() == "true"

# Resize handling
DEBOUNCE_SECONDS: float = float(os.getenv("CHART_ENGINE_DEBOUNCE_SECONDS", "0.25"))

# Chart types known to the engine
SUPPORTED_CHART_TYPES: List[str] = [
    "bar",
    "line",
    "area",
    "combo",
    "pie",
    "scatter",
    "scorecard",
    "gauge",
    "table",
    "heatmap",
    "treemap",
]

# Valid aggregation functions
VALID_AGGREGATIONS = ["sum", "avg", "count", "min", "max", "distinct"]

# Valid sort orders
VALID_SORT_ORDERS = ["asc", "desc"]

# Valid label rotation modes
VALID_ROTATION_MODES = ["auto", "horizontal", "diagonal", "vertical"]


def validate_settings() -> bool:
    """
    Validate the environment-driven settings.

    Returns:
        True if every setting is usable

    Raises:
        ValueError: If a setting is out of range
    """
    if MAX_ROWS < 1:
        raise ValueError(f"CHART_ENGINE_MAX_ROWS must be positive, got: {MAX_ROWS}")

    if LABEL_FONT_SIZE <= 0:
        raise ValueError(
            f"CHART_ENGINE_LABEL_FONT_SIZE must be positive, got: {LABEL_FONT_SIZE}"
        )

    if DEBOUNCE_SECONDS < 0:
        raise ValueError(
            f"CHART_ENGINE_DEBOUNCE_SECONDS must be >= 0, got: {DEBOUNCE_SECONDS}"
        )

    if not FONT_FAMILY or not isinstance(FONT_FAMILY, str):
        raise ValueError("CHART_ENGINE_FONT_FAMILY must be a non-empty string")

    return True
