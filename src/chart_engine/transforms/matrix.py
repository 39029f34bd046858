"""
Two-dimensional aggregation for heatmaps.

A heatmap reads one cell per (x, y) pair. Rows are grouped on both keys and
the value column is reduced per cell; oversized matrices are then trimmed to
the most significant categories so the chart stays readable.
"""

from typing import List, Optional, Sequence

import pandas as pd

from src.chart_engine.models.schema import Row, mapping_rows
from src.chart_engine.transforms.aggregator import AGGREGATION_FUNCTIONS
from src.chart_engine.transforms.numeric import parse_numeric, parse_numeric_value
from src.chart_engine.transforms.temporal import is_valid_date, parse_date, week_start
from src.shared_lib.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_X = 30
DEFAULT_MAX_Y = 15


def aggregate_matrix(
    rows: Sequence[Row],
    x_key: str,
    y_key: str,
    value_key: str,
    fn: Optional[str] = "sum",
) -> List[Row]:
    """
    Reduce ``value_key`` over every (x, y) pair.

    Values are coerced with ``parse_numeric_value``; unparsable or missing
    values are skipped and pairs without any value produce no cell.

    Args:
        rows: Input rows
        x_key: Column for the x categories
        y_key: Column for the y categories
        value_key: Column holding the cell value
        fn: sum, avg, count, min, max or distinct (None means sum)

    Returns:
        Cells as ``{x_key: x, y_key: y, value_key: reduced}`` in first-seen order
    """
    rows = mapping_rows(rows)
    if not rows or not (x_key and y_key and value_key):
        return []

    fn = fn or "sum"
    if fn not in AGGREGATION_FUNCTIONS:
        logger.warning(f"[Matrix] Unknown aggregation '{fn}', using 'sum'")
        fn = "sum"

    records = []
    for row in rows:
        x_value = row.get(x_key)
        y_value = row.get(y_key)
        number = parse_numeric_value(row.get(value_key))
        if x_value is None or y_value is None or number is None:
            continue
        records.append({"x": x_value, "y": y_value, "value": number})

    if not records:
        return []

    frame = pd.DataFrame.from_records(records).astype({"x": object, "y": object})
    grouped = frame.groupby(["x", "y"], sort=False)["value"]

    if fn == "avg":
        reduced = grouped.mean()
    elif fn == "count":
        reduced = grouped.size()
    elif fn == "distinct":
        reduced = grouped.nunique()
    elif fn == "min":
        reduced = grouped.min()
    elif fn == "max":
        reduced = grouped.max()
    else:
        reduced = grouped.sum()

    cells = [
        {x_key: x_value, y_key: y_value, value_key: float(value)}
        for (x_value, y_value), value in reduced.items()
    ]

    logger.debug(
        f"[Matrix] {fn}: {len(rows)} rows -> {len(cells)} cells "
        f"({frame['x'].nunique()} x {frame['y'].nunique()})"
    )
    return cells


def _top_categories(cells: List[Row], key: str, value_key: str, limit: int) -> List[str]:
    """Category labels of ``key`` ranked by total value, highest first."""
    totals = pd.Series(
        [parse_numeric(cell.get(value_key)) for cell in cells],
        index=[str(cell.get(key)) for cell in cells],
        dtype=float,
    )
    ranked = totals.groupby(level=0, sort=False).sum()
    ranked = ranked.sort_values(ascending=False, kind="stable")
    return list(ranked.index[:limit])


def _bucket_weeks(cells: List[Row], x_key: str, y_key: str, value_key: str) -> List[Row]:
    """Sum cells into (week start, y) buckets; weeks start on Sunday."""
    weekly = {}
    for cell in cells:
        parsed = parse_date(cell.get(x_key))
        if parsed is None:
            continue
        week = week_start(parsed).strftime("%Y-%m-%d")
        key = (week, str(cell.get(y_key)))
        weekly[key] = weekly.get(key, 0.0) + parse_numeric(cell.get(value_key))

    return [
        {x_key: week, y_key: y_value, value_key: total}
        for (week, y_value), total in weekly.items()
    ]


def limit_matrix(
    cells: Sequence[Row],
    x_key: str,
    y_key: str,
    value_key: str,
    max_x: int = DEFAULT_MAX_X,
    max_y: int = DEFAULT_MAX_Y,
) -> List[Row]:
    """
    Trim a heatmap matrix to a readable size.

    - More than ``max_y`` y categories: keep the top ``max_y`` by total value
    - More than ``max_x`` x categories: dates are re-bucketed into weeks,
      other categories are limited to the top ``max_x`` by total value

    Args:
        cells: Output of ``aggregate_matrix``
        x_key: Column for the x categories
        y_key: Column for the y categories
        value_key: Column holding the cell value
        max_x: Max distinct x categories
        max_y: Max distinct y categories

    Returns:
        Trimmed cells
    """
    cells = list(cells or [])
    if not cells:
        return []

    unique_x = {str(cell.get(x_key)) for cell in cells}
    unique_y = {str(cell.get(y_key)) for cell in cells}

    if len(unique_y) > max_y:
        keep_y = set(_top_categories(cells, y_key, value_key, max_y))
        cells = [cell for cell in cells if str(cell.get(y_key)) in keep_y]
        logger.info(
            f"[Matrix] Limited y categories: {len(unique_y)} -> {len(keep_y)}"
        )

    if len(unique_x) > max_x:
        if is_valid_date(cells[0].get(x_key)):
            cells = _bucket_weeks(cells, x_key, y_key, value_key)
            logger.info(
                f"[Matrix] Bucketed {len(unique_x)} x dates into "
                f"{len({c[x_key] for c in cells})} weeks"
            )
        else:
            keep_x = set(_top_categories(cells, x_key, value_key, max_x))
            cells = [cell for cell in cells if str(cell.get(x_key)) in keep_x]
            logger.info(
                f"[Matrix] Limited x categories: {len(unique_x)} -> {len(keep_x)}"
            )

    return cells


__all__ = ["aggregate_matrix", "limit_matrix", "DEFAULT_MAX_X", "DEFAULT_MAX_Y"]
