"""Shared JSON serialization helpers.

Series rows come straight from user datasets, so they may hold values the
stdlib `json` module cannot encode (numpy scalars, pandas timestamps, dates).
Engine outputs are pydantic models.

This module provides:
- `sanitize_for_json`: recursively converts objects into JSON-serializable types
- `json_dumps`: `json.dumps` wrapper using `sanitize_for_json` as default hook
"""

from __future__ import annotations

import json
import math
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd
from pydantic import BaseModel


def sanitize_for_json(obj: Any) -> Any:
    """Recursively convert *obj* to JSON-serializable primitives.

    Converts:
    - pydantic models -> dicts (``model_dump``)
    - datetime/date/pd.Timestamp -> ISO-8601 strings
    - numpy scalars/arrays -> Python scalars/lists
    - Decimal -> float (or int when exact)
    - NaN/inf floats -> None

    Falls back to `str(obj)` for unknown objects.
    """

    if obj is None or isinstance(obj, (str, bool, int)):
        return obj

    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None

    if isinstance(obj, BaseModel):
        return sanitize_for_json(obj.model_dump())

    if isinstance(obj, pd.Timestamp):
        return obj.isoformat() if pd.notna(obj) else None

    if isinstance(obj, (datetime, date)):
        return obj.isoformat()

    if isinstance(obj, Decimal):
        if obj == obj.to_integral_value():
            return int(obj)
        return float(obj)

    if isinstance(obj, Enum):
        return sanitize_for_json(obj.value)

    if isinstance(obj, np.ndarray):
        return [sanitize_for_json(v) for v in obj.tolist()]

    if isinstance(obj, np.generic):
        return sanitize_for_json(obj.item())

    if isinstance(obj, dict):
        return {str(k): sanitize_for_json(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set, frozenset)):
        return [sanitize_for_json(v) for v in obj]

    return str(obj)


def json_dumps(data: Any, **kwargs: Any) -> str:
    """`json.dumps` wrapper that sanitizes *data* first."""

    return json.dumps(sanitize_for_json(data), **kwargs)


__all__ = [
    "sanitize_for_json",
    "json_dumps",
]
