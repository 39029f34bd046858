"""Utilities module for shared helper functions."""

from .logger import setup_logging, get_logger
from .performance_monitor import PerformanceMonitor
from .json_serialization import sanitize_for_json, json_dumps

__all__ = [
    "setup_logging",
    "get_logger",
    "PerformanceMonitor",
    "sanitize_for_json",
    "json_dumps",
]
