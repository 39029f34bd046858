"""Tests for label width measurement."""

import pytest

from src.chart_engine.layout.text_measurer import (
    MODE_FALLBACK,
    MODE_FONT,
    TextMeasurer,
    _resolve_family,
)

pytestmark = pytest.mark.unit


def test_fallback_width_is_six_pixels_per_character(measurer):
    assert measurer.measure_width("Revenue") == 42.0
    assert measurer.measure_width("") == 0.0
    assert measurer.session().mode == MODE_FALLBACK


def test_custom_fallback_width():
    assert TextMeasurer(use_fonts=False, fallback_char_width=7.5).measure_width("ab") == 15.0


@pytest.mark.parametrize(
    "family, expected",
    [
        ("system-ui", "sans-serif"),
        ("system-ui, -apple-system, sans-serif", "sans-serif"),
        ("'DejaVu Sans', Arial", "DejaVu Sans"),
        ("ui-monospace", "monospace"),
        ("", "sans-serif"),
    ],
)
def test_css_families_map_to_matplotlib_families(family, expected):
    assert _resolve_family(family) == expected


@pytest.mark.fonts
def test_font_metrics_when_a_font_is_available():
    measurer = TextMeasurer(use_fonts=True)
    session = measurer.session(11, "sans-serif")
    if session.mode != MODE_FONT:
        pytest.skip("No TrueType font could be loaded")

    assert session.measure("WWWW") > session.measure("iiii") > 0
    assert session.measure("") == 0.0
    # Same session, same mode for every label
    assert measurer.session(11, "sans-serif").mode == MODE_FONT


def test_font_loading_is_cached():
    measurer = TextMeasurer(use_fonts=True)
    measurer.session(11, "sans-serif")
    measurer.session(11.2, "sans-serif")
    assert len(measurer._fonts) == 1
