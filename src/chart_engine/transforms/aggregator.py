"""
Group-and-reduce of chart rows by a category key.

Groups rows by the string form of the category value (first-occurrence order)
and reduces each requested metric with one named aggregation function. Other
columns of the first row of each group are carried along unchanged so
renderers can still read labels, colors, etc.

Reducers:
- sum: arithmetic sum of coerced values
- avg: sum / group size (every row counts, coercion failures contribute 0)
- count: number of rows in the group
- min / max: over coerced values
- distinct: number of unique raw (pre-coercion) string forms
"""

import math
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from src.chart_engine.models.schema import Row, mapping_rows
from src.chart_engine.transforms.numeric import parse_numeric
from src.shared_lib.utils.logger import get_logger

logger = get_logger(__name__)

AGGREGATION_FUNCTIONS = ("sum", "avg", "count", "min", "max", "distinct")


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def _raw_token(value: Any) -> str:
    """String form used by ``distinct`` (missing cells count as one empty token)."""
    return "" if _is_missing(value) else str(value)


def _object_frame(rows: Sequence[Row], columns: Sequence[str]) -> pd.DataFrame:
    """
    Build a DataFrame of raw cell values without dtype inference.

    Integer columns with gaps would otherwise be upcast to float and
    ``1`` would group as ``"1.0"``.
    """
    data = {
        column: pd.Series([row.get(column) for row in rows], dtype=object)
        for column in dict.fromkeys(columns)
    }
    return pd.DataFrame(data)


class Aggregator:
    """
    Reduces rows into one row per category.

    Example:
        >>> rows = [
        ...     {"region": "A", "sales": "$100"},
        ...     {"region": "A", "sales": "$50"},
        ...     {"region": "B", "sales": "$300"},
        ... ]
        >>> Aggregator().aggregate(rows, "region", ["sales"], "sum")
        [{'region': 'A', 'sales': 150.0}, {'region': 'B', 'sales': 300.0}]
    """

    def aggregate(
        self,
        rows: Sequence[Row],
        category_key: str,
        metric_keys: Sequence[str],
        fn: Optional[str],
    ) -> List[Row]:
        """
        Group ``rows`` by ``category_key`` and reduce every metric with ``fn``.

        Args:
            rows: Input rows
            category_key: Column to group by
            metric_keys: Columns to reduce
            fn: Aggregation function name, or None for pass-through

        Returns:
            One row per distinct category (rows unchanged when ``fn`` is None)
        """
        rows = list(rows or [])
        valid = mapping_rows(rows)
        if len(valid) != len(rows):
            logger.warning(f"[Aggregator] Skipping {len(rows) - len(valid)} malformed row(s)")
            rows = valid

        if fn is None:
            return rows

        if not rows or not category_key:
            return []

        if fn not in AGGREGATION_FUNCTIONS:
            logger.warning(f"[Aggregator] Unknown aggregation '{fn}', using 'sum'")
            fn = "sum"

        metric_keys = [m for m in dict.fromkeys(metric_keys or []) if m != category_key]

        available = set().union(*(row.keys() for row in rows))
        if category_key not in available:
            logger.warning(
                f"[Aggregator] Category column '{category_key}' not found. "
                f"Available columns: {sorted(available)}"
            )
            return []

        frame = _object_frame(rows, [category_key] + metric_keys)

        present = ~frame[category_key].map(_is_missing)
        frame = frame[present]
        if frame.empty:
            return []

        group_keys = frame[category_key].map(str)
        first_positions = group_keys[~group_keys.duplicated()]
        sizes = group_keys.groupby(group_keys, sort=False).size()

        reduced: Dict[str, pd.Series] = {}
        for metric in metric_keys:
            reduced[metric] = self._reduce(frame, group_keys, sizes, metric, fn)

        result: List[Row] = []
        for position, key in first_positions.items():
            row = dict(rows[position])
            for metric in metric_keys:
                value = reduced[metric].loc[key]
                row[metric] = int(value) if fn in ("count", "distinct") else float(value)
            result.append(row)

        logger.debug(
            f"[Aggregator] {fn}: {len(rows)} rows -> {len(result)} groups "
            f"(category={category_key}, metrics={metric_keys})"
        )
        return result

    def _reduce(
        self,
        frame: pd.DataFrame,
        group_keys: pd.Series,
        sizes: pd.Series,
        metric: str,
        fn: str,
    ) -> pd.Series:
        """Reduce one metric column; returns a Series indexed by group key."""
        if fn == "count":
            return sizes

        if metric in frame.columns:
            raw = frame[metric]
        else:
            raw = pd.Series([None] * len(frame), index=frame.index, dtype=object)

        if fn == "distinct":
            return raw.map(_raw_token).groupby(group_keys, sort=False).nunique()

        coerced = pd.Series(
            [parse_numeric(v) for v in raw], index=frame.index, dtype=float
        )
        grouped = coerced.groupby(group_keys, sort=False)

        if fn == "sum":
            return grouped.sum()
        if fn == "avg":
            return grouped.sum() / sizes
        if fn == "min":
            return grouped.min()
        return grouped.max()


def aggregate(
    rows: Sequence[Row],
    category_key: str,
    metric_keys: Sequence[str],
    fn: Optional[str],
) -> List[Row]:
    """
    Convenience wrapper around ``Aggregator().aggregate``.

    Args:
        rows: Input rows
        category_key: Column to group by
        metric_keys: Columns to reduce
        fn: One of sum, avg, count, min, max, distinct (None = identity)

    Returns:
        Aggregated rows
    """
    return Aggregator().aggregate(rows, category_key, metric_keys, fn)


__all__ = ["Aggregator", "aggregate", "AGGREGATION_FUNCTIONS"]
