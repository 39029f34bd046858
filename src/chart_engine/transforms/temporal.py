"""
Date handling for time-series charts.

Features:
- Date value parsing and date-column detection
- Bucketing of rows by day / week / month / quarter / year with readable labels
- Chronological ordering of rows whose category is a date
"""

import re
from numbers import Real
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from src.chart_engine.models.schema import Row
from src.shared_lib.utils.logger import get_logger

logger = get_logger(__name__)

_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}|\d{2}/\d{2}/\d{4}|\d{4}/\d{2}/\d{2}")
_PURE_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")
_YEAR_LIKE = re.compile(r"^\d{4}$")
_HAS_DIGIT = re.compile(r"\d")

# Dates outside this range are treated as misparsed numbers or codes
MIN_YEAR = 1900
MAX_YEAR = 2100

GRANULARITIES = ("day", "week", "month", "quarter", "year")


# ============================================================================
# PARSING
# ============================================================================


def parse_date(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse a cell into a naive Timestamp.

    Args:
        value: String, datetime-like or 4-digit year

    Returns:
        Timestamp, or None when the value is not a date
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Real):
        # Only bare years are dates; other numbers would parse as epoch offsets
        text = str(value)
        if not _YEAR_LIKE.match(text):
            return None
        value = text

    if isinstance(value, str):
        value = value.strip()
        if not value or not _HAS_DIGIT.search(value):
            return None

    try:
        parsed = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None

    if parsed is None or pd.isna(parsed):
        return None

    parsed = pd.Timestamp(parsed)
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert(None)
    return parsed


def is_valid_date(value: Any) -> bool:
    """True when ``value`` is a date string (or datetime) between 1900 and 2100."""
    if not isinstance(value, (str, pd.Timestamp)) and not hasattr(value, "year"):
        return False

    parsed = parse_date(value)
    if parsed is None:
        return False
    return MIN_YEAR <= parsed.year <= MAX_YEAR


def looks_like_date(value: Any) -> bool:
    """
    Heuristic used for date-column detection.

    Pure numbers are rejected unless they are 4-digit years.
    """
    if value is None or value == "" or isinstance(value, bool):
        return False

    text = str(value).strip()
    if _PURE_NUMBER.match(text) and not _YEAR_LIKE.match(text):
        return False

    if isinstance(value, str) and _DATE_PATTERN.search(value):
        return True

    return parse_date(value) is not None


def detect_date_column(rows: Sequence[Row]) -> Optional[str]:
    """
    Find the first column of the first row holding a date-like value.

    Args:
        rows: Input rows

    Returns:
        Column name or None
    """
    if not rows:
        return None

    for column, value in rows[0].items():
        if looks_like_date(value):
            return column
    return None


# ============================================================================
# BUCKETING
# ============================================================================


def week_start(date: pd.Timestamp) -> pd.Timestamp:
    """Sunday on or before ``date`` (midnight)."""
    day = date.normalize()
    return day - pd.Timedelta(days=(day.dayofweek + 1) % 7)


def _bucket(date: pd.Timestamp, granularity: str):
    """Return (bucket start, display label) for one date."""
    if granularity == "day":
        start = date.normalize()
        return start, f"{date:%b} {date.day}, {date.year}"

    if granularity == "week":
        start = week_start(date)
        return start, f"{start:%b} {start.day}, {start.year}"

    if granularity == "month":
        start = pd.Timestamp(year=date.year, month=date.month, day=1)
        return start, f"{date:%b} {date.year}"

    if granularity == "quarter":
        quarter = (date.month - 1) // 3 + 1
        start = pd.Timestamp(year=date.year, month=3 * (quarter - 1) + 1, day=1)
        return start, f"Q{quarter} {date.year}"

    start = pd.Timestamp(year=date.year, month=1, day=1)
    return start, f"{date.year}"


def _merge_column(values: List[Any]) -> Any:
    """
    Combine one column of a bucket.

    All-numeric columns are summed; otherwise the single shared value (or the
    first value) is kept.
    """
    present = [v for v in values if v is not None and not (isinstance(v, float) and pd.isna(v))]
    if not present:
        return None

    numeric = pd.to_numeric(pd.Series(present, dtype=object), errors="coerce")
    all_numeric = not any(isinstance(v, bool) for v in present) and bool(numeric.notna().all())
    if all_numeric:
        return float(numeric.sum())

    return present[0]


def aggregate_by_granularity(
    rows: Sequence[Row],
    granularity: Optional[str],
    date_column: Optional[str] = None,
) -> List[Row]:
    """
    Bucket rows by calendar period and merge each bucket into one row.

    Args:
        rows: Input rows
        granularity: day, week, month, quarter or year (None = unchanged)
        date_column: Date column; detected from the first row when omitted

    Returns:
        One row per bucket in chronological order, with the date column
        relabeled ("Jan 5, 2024", "Jan 2024", "Q1 2024", "2024")

    Example:
        >>> rows = [{"d": "2024-01-03", "v": 1}, {"d": "2024-01-20", "v": 2}]
        >>> aggregate_by_granularity(rows, "month")
        [{'d': 'Jan 2024', 'v': 3.0}]
    """
    rows = list(rows or [])
    if not rows or granularity is None:
        return rows

    if granularity not in GRANULARITIES:
        logger.warning(f"[Temporal] Unknown granularity '{granularity}', rows unchanged")
        return rows

    date_column = date_column or detect_date_column(rows)
    if not date_column:
        logger.debug("[Temporal] No date column detected, rows unchanged")
        return rows

    buckets: Dict[pd.Timestamp, Dict[str, Any]] = {}
    skipped = 0

    for row in rows:
        parsed = parse_date(row.get(date_column))
        if parsed is None:
            skipped += 1
            continue

        start, label = _bucket(parsed, granularity)
        bucket = buckets.setdefault(start, {"label": label, "rows": []})
        bucket["rows"].append(row)

    result: List[Row] = []
    for start in sorted(buckets):
        bucket = buckets[start]
        members = bucket["rows"]

        merged: Row = {date_column: bucket["label"]}
        for column in members[0]:
            if column == date_column:
                continue
            merged[column] = _merge_column([member.get(column) for member in members])
        result.append(merged)

    if skipped:
        logger.debug(f"[Temporal] Skipped {skipped} rows with unparseable dates")

    logger.debug(
        f"[Temporal] {granularity}: {len(rows)} rows -> {len(result)} buckets "
        f"(column={date_column})"
    )
    return result


# ============================================================================
# ORDERING
# ============================================================================


def sort_chronologically(rows: Sequence[Row], key: Optional[str]) -> List[Row]:
    """
    Order rows by the date in ``key`` when its first value is a date.

    Stable; rows with unparseable dates keep their relative order at the end.

    Args:
        rows: Input rows
        key: Category column

    Returns:
        Sorted copy (or an unchanged copy when ``key`` is not a date column)
    """
    rows = list(rows or [])
    if not rows or not key:
        return rows

    if not is_valid_date(rows[0].get(key)):
        return rows

    def sort_key(row: Row):
        parsed = parse_date(row.get(key))
        if parsed is None:
            return (1, pd.Timestamp.max)
        return (0, parsed)

    return sorted(rows, key=sort_key)


__all__ = [
    "GRANULARITIES",
    "parse_date",
    "is_valid_date",
    "looks_like_date",
    "detect_date_column",
    "week_start",
    "aggregate_by_granularity",
    "sort_chronologically",
]
