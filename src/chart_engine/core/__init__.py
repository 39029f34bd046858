"""
Core module - Settings and tunables of the chart engine.
"""

from src.chart_engine.core.settings import (
    MAX_ROWS,
    SUPPORTED_CHART_TYPES,
    validate_settings,
)
from src.chart_engine.core.engine_config import (
    EngineConfig,
    LayoutConfig,
    DualAxisConfig,
    PipelineConfig,
    get_engine_config,
    set_engine_config,
    reset_engine_config,
)

__all__ = [
    "MAX_ROWS",
    "SUPPORTED_CHART_TYPES",
    "validate_settings",
    "EngineConfig",
    "LayoutConfig",
    "DualAxisConfig",
    "PipelineConfig",
    "get_engine_config",
    "set_engine_config",
    "reset_engine_config",
]
