"""Shared fixtures for the chart engine tests."""

import pytest

from src.chart_engine.core.engine_config import reset_engine_config
from src.chart_engine.layout.text_measurer import TextMeasurer


@pytest.fixture(autouse=True)
def clean_engine_config(monkeypatch):
    """Every test starts from default tunables."""
    monkeypatch.delenv("CHART_ENGINE_DUAL_AXIS_RATIO", raising=False)
    reset_engine_config()
    yield
    reset_engine_config()


@pytest.fixture
def measurer():
    """Deterministic measurer: 6px per character."""
    return TextMeasurer(use_fonts=False)


@pytest.fixture
def session(measurer):
    return measurer.session()


@pytest.fixture
def sales_rows():
    return [
        {"region": "A", "sales": "$100", "units": 3},
        {"region": "A", "sales": "$50", "units": 1},
        {"region": "B", "sales": "$300", "units": 2},
    ]


@pytest.fixture
def monthly_rows():
    return [
        {"date": "2024-03-15", "revenue": 300, "orders": 3},
        {"date": "2024-01-03", "revenue": 100, "orders": 1},
        {"date": "2024-01-20", "revenue": 50, "orders": 2},
        {"date": "2024-02-11", "revenue": 200, "orders": 4},
    ]
