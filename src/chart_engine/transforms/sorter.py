"""
Top-N / bottom-N selection for chart series.

Characteristics:
- Sorts by the plotted value, by the category label, or by any numeric column
- Always ranks descending first, then slices, so "asc" means "bottom N of the
  descending ranking, reversed" rather than "first N of an ascending sort";
  tied rows therefore come out in reverse source order
- Never aggregates: already-aggregated input is only reordered and sliced
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from src.chart_engine.models.schema import Row, mapping_rows
from src.chart_engine.transforms.numeric import parse_numeric
from src.shared_lib.utils.logger import get_logger

logger = get_logger(__name__)

SORT_BY_VALUE = "value"
SORT_BY_LABEL = "label"


class SeriesLimiter:
    """
    Sorts rows and keeps the top or bottom N.

    Example:
        >>> rows = [{"k": c, "v": v} for c, v in zip("abcde", [10, 50, 5, 90, 20])]
        >>> limiter = SeriesLimiter(value_key="v", label_key="k")
        >>> [r["v"] for r in limiter.sort_and_limit(rows, "value", "desc", 3)[0]]
        [90, 50, 20]
        >>> [r["v"] for r in limiter.sort_and_limit(rows, "value", "asc", 3)[0]]
        [5, 10, 20]
    """

    def __init__(self, value_key: Optional[str] = None, label_key: Optional[str] = None):
        """
        Args:
            value_key: Column used when sorting by "value"
            label_key: Column used when sorting by "label"
        """
        self.value_key = value_key
        self.label_key = label_key

    def _sort_key(self, sort_by: str):
        if sort_by == SORT_BY_LABEL:
            column = self.label_key
            return lambda row: "" if row.get(column) is None else str(row.get(column))

        column = self.value_key if sort_by == SORT_BY_VALUE else sort_by
        return lambda row: parse_numeric(row.get(column))

    def sort_and_limit(
        self,
        rows: Sequence[Row],
        sort_by: Optional[str],
        sort_order: str = "desc",
        limit: Optional[int] = None,
    ) -> Tuple[List[Row], Dict[str, Any]]:
        """
        Order rows and keep at most ``limit`` of them.

        Args:
            rows: Input rows (usually aggregated)
            sort_by: "value", "label", a numeric column name, or None
            sort_order: "desc" keeps the highest N, "asc" the lowest N
            limit: Max rows to keep; None or non-positive means all

        Returns:
            Tuple of (rows, metadata)
        """
        rows = list(rows or [])
        original_count = len(rows)
        valid = mapping_rows(rows)
        if len(valid) != len(rows):
            logger.warning(f"[SeriesLimiter] Skipping {len(rows) - len(valid)} malformed row(s)")
            rows = valid

        if limit is not None and limit <= 0:
            logger.debug(f"[SeriesLimiter] Ignoring non-positive limit {limit}")
            limit = None

        if not rows:
            return [], self._metadata(0, 0, sort_by, sort_order, limit)

        if sort_by is None:
            # No ordering requested: keep source order, limit still applies
            result = rows[:limit] if limit is not None else rows
            return result, self._metadata(original_count, len(result), None, sort_order, limit)

        if sort_by == SORT_BY_VALUE and not self.value_key:
            logger.warning("[SeriesLimiter] sort_by='value' without a value column, rows unchanged")
            result = rows[:limit] if limit is not None else rows
            return result, self._metadata(original_count, len(result), None, sort_order, limit)

        key = self._sort_key(sort_by)
        ranked = sorted(rows, key=key, reverse=True)

        if sort_order == "asc":
            bottom = ranked[-limit:] if limit is not None else ranked
            result = list(reversed(bottom))
        else:
            result = ranked[:limit] if limit is not None else ranked

        logger.debug(
            f"[SeriesLimiter] sort_by={sort_by} order={sort_order} limit={limit}: "
            f"{original_count} -> {len(result)} rows"
        )
        return result, self._metadata(original_count, len(result), sort_by, sort_order, limit)

    @staticmethod
    def _metadata(original, limited, sort_by, sort_order, limit) -> Dict[str, Any]:
        return {
            "original_count": original,
            "limited_count": limited,
            "rows_excluded": original - limited,
            "sort_by": sort_by,
            "sort_order": sort_order,
            "limit": limit,
        }


def sort_and_limit(
    rows: Sequence[Row],
    sort_by: Optional[str],
    sort_order: str = "desc",
    limit: Optional[int] = None,
    *,
    value_key: Optional[str] = None,
    label_key: Optional[str] = None,
) -> List[Row]:
    """
    Sort ``rows`` and keep the top (desc) or bottom (asc) ``limit``.

    Args:
        rows: Input rows
        sort_by: "value", "label", a numeric column name, or None
        sort_order: "asc" or "desc"
        limit: Max rows to keep
        value_key: Column used for "value"
        label_key: Column used for "label"

    Returns:
        Ordered, limited rows
    """
    limiter = SeriesLimiter(value_key=value_key, label_key=label_key)
    result, _ = limiter.sort_and_limit(rows, sort_by, sort_order, limit)
    return result


__all__ = ["SeriesLimiter", "sort_and_limit", "SORT_BY_VALUE", "SORT_BY_LABEL"]
