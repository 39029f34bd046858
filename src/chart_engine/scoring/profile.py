"""
Dataset profiles for template scoring.

A profile only counts columns by type. It is built from the dataset schema
when one is available, and inferred from the first data row otherwise.
"""

from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from src.chart_engine.models.schema import ColumnSchemaEntry, DatasetProfile, Row
from src.chart_engine.transforms.numeric import is_numeric_text
from src.chart_engine.transforms.temporal import looks_like_date
from src.shared_lib.utils.logger import get_logger

logger = get_logger(__name__)

SchemaInput = Union[ColumnSchemaEntry, Mapping[str, Any]]


def profile_from_schema(columns: Iterable[SchemaInput]) -> DatasetProfile:
    """
    Count columns per type from a schema.

    Categorical columns count as text columns.

    Args:
        columns: ColumnSchemaEntry objects or ``{"name", "type"}`` dicts

    Returns:
        DatasetProfile
    """
    entries = [
        entry if isinstance(entry, ColumnSchemaEntry) else ColumnSchemaEntry.model_validate(entry)
        for entry in columns or []
    ]

    return DatasetProfile(
        column_count=len(entries),
        number_columns=sum(1 for e in entries if e.type == "number"),
        string_columns=sum(1 for e in entries if e.type in ("string", "categorical")),
        date_columns=sum(1 for e in entries if e.type == "date"),
    )


def profile_from_rows(
    rows: Sequence[Row],
    columns: Optional[Sequence[str]] = None,
) -> DatasetProfile:
    """
    Infer column types from the first row.

    A column may count as both text and date (e.g. "2024-01-05").

    Args:
        rows: Raw data rows
        columns: Columns to profile (default: keys of the first row)

    Returns:
        DatasetProfile (empty when there are no rows)
    """
    if not rows:
        return DatasetProfile()

    sample = rows[0]
    columns = list(columns) if columns is not None else list(sample.keys())
    if not columns:
        return DatasetProfile()

    number_columns = 0
    string_columns = 0
    date_columns = 0

    for column in columns:
        value = sample.get(column)
        if is_numeric_text(value):
            number_columns += 1
        elif isinstance(value, str):
            string_columns += 1

        if looks_like_date(value):
            date_columns += 1

    profile = DatasetProfile(
        column_count=len(columns),
        number_columns=number_columns,
        string_columns=string_columns,
        date_columns=date_columns,
    )
    logger.debug(f"[Profile] Inferred from first row: {profile.model_dump()}")
    return profile


def build_profile(
    schema: Optional[Iterable[SchemaInput]] = None,
    rows: Optional[Sequence[Row]] = None,
    columns: Optional[Sequence[str]] = None,
) -> DatasetProfile:
    """
    Profile from the schema when given, otherwise inferred from rows.

    Args:
        schema: Column schema (preferred)
        rows: Raw rows (fallback)
        columns: Columns to profile when inferring

    Returns:
        DatasetProfile
    """
    if schema:
        return profile_from_schema(schema)
    return profile_from_rows(rows or [], columns)


__all__ = ["profile_from_schema", "profile_from_rows", "build_profile"]
