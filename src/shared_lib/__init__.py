"""
Shared Library - Common components used across the chart engine.

Logging setup, stage timing and JSON helpers that are not specific to any
single engine component.
"""

__all__ = ["utils"]
