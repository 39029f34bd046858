"""Tests for the shared JSON and timing helpers."""

import json
from datetime import date

import numpy as np
import pandas as pd
import pytest

from src.chart_engine.models.schema import AxisAssignment
from src.shared_lib.utils.json_serialization import json_dumps, sanitize_for_json
from src.shared_lib.utils.performance_monitor import PerformanceMonitor

pytestmark = pytest.mark.unit


def test_sanitize_dataset_values():
    payload = {
        "int": np.int64(3),
        "float": np.float64(1.5),
        "nan": float("nan"),
        "when": pd.Timestamp("2024-01-05"),
        "day": date(2024, 1, 5),
        "array": np.array([1, 2]),
        "axes": AxisAssignment(left=["a"]),
    }
    clean = sanitize_for_json(payload)

    assert clean["int"] == 3
    assert clean["float"] == 1.5
    assert clean["nan"] is None
    assert clean["when"] == "2024-01-05T00:00:00"
    assert clean["day"] == "2024-01-05"
    assert clean["array"] == [1, 2]
    assert clean["axes"]["dual_axis"] is False


def test_json_dumps_round_trips_through_json():
    assert json.loads(json_dumps({"v": np.float32(2.0)})) == {"v": 2.0}


def test_performance_monitor_accumulates_stages():
    monitor = PerformanceMonitor()
    with monitor.measure("series"):
        pass
    with monitor.measure("series"):
        pass

    summary = monitor.get_summary_dict()
    assert set(summary) == {"series_ms", "total_ms"}
    assert "series" in monitor.get_report()

    monitor.reset()
    assert monitor.timings == {}
