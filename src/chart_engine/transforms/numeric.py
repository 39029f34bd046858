"""
Tolerant numeric coercion for chart values.

Dataset cells arrive heterogeneously formatted ("$1,200", "12%", "(350)",
plain numbers). Every numeric-consuming stage of the engine goes through
this module.

IMPORTANT: ``parse_numeric`` is a lossy "render something" default, not a
validation layer. Unparsable input silently becomes ``0.0`` so a chart can
still render with partial data; a displayed 0 may therefore mean "missing"
rather than "actually zero". Use ``parse_numeric_value`` when the caller
needs to tell the two apart.
"""

import math
import re
from decimal import Decimal
from numbers import Real
from typing import Any, Optional

# Currency symbols, thousands separators, whitespace and percent signs
_STRIP_PATTERN = re.compile(r"[€$£¥,\s%]")

# Leading numeric prefix, parsed the way a float parser reads "12.5kg" as 12.5
_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# Absolute values above this are treated as garbage input
MAX_SAFE_VALUE = 1e15


def _finite_float(value: Any) -> Optional[float]:
    """Float for a numeric object, or None when it overflows or is out of range."""
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(number) or abs(number) > MAX_SAFE_VALUE:
        return None
    return number


def parse_numeric_value(value: Any) -> Optional[float]:
    """
    Coerce ``value`` to a float, returning None when it is not numeric.

    Rules:
    - Real numbers and Decimals pass through when finite and in range
      (booleans are not numbers)
    - Strings drop currency symbols, commas, whitespace and ``%``
    - ``"(1,200)"`` (accounting format) is negative
    - Non-finite results and magnitudes above ``MAX_SAFE_VALUE`` are rejected

    Args:
        value: Raw cell value

    Returns:
        Parsed float or None

    Example:
        >>> parse_numeric_value("(1,200.50)")
        -1200.5
        >>> parse_numeric_value("n/a") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (Real, Decimal)):
        return _finite_float(value)

    if not isinstance(value, str):
        return None

    cleaned = value.strip()

    is_negative = len(cleaned) >= 2 and cleaned.startswith("(") and cleaned.endswith(")")
    if is_negative:
        cleaned = cleaned[1:-1].strip()

    cleaned = _STRIP_PATTERN.sub("", cleaned)

    match = _NUMBER_PREFIX.match(cleaned)
    if not match:
        return None

    number = float(match.group(0))
    if not math.isfinite(number) or abs(number) > MAX_SAFE_VALUE:
        return None

    return -number if is_negative else number


def is_numeric_text(value: Any) -> bool:
    """
    True when the whole cell is a number (after currency/percent cleanup).

    Stricter than ``parse_numeric_value``, which accepts a numeric prefix:
    "2024-01-05" and "12kg" are not numeric text.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, (Real, Decimal)):
        return _finite_float(value) is not None
    if not isinstance(value, str):
        return False

    cleaned = value.strip()
    if len(cleaned) >= 2 and cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = cleaned[1:-1]
    cleaned = _STRIP_PATTERN.sub("", cleaned)
    return bool(cleaned) and _NUMBER_PREFIX.fullmatch(cleaned) is not None


def parse_numeric(value: Any) -> float:
    """
    Coerce ``value`` to a float, degrading to ``0.0`` instead of failing.

    Never raises. See the module docstring for why the silent zero is
    intentional.

    Args:
        value: Raw cell value (string, number, None, ...)

    Returns:
        Parsed float, or 0.0 for empty/unparsable input

    Example:
        >>> parse_numeric("$1,234.50")
        1234.5
        >>> parse_numeric("12%")
        12.0
        >>> parse_numeric("abc")
        0.0
    """
    number = parse_numeric_value(value)
    return 0.0 if number is None else number


__all__ = ["parse_numeric", "parse_numeric_value", "is_numeric_text", "MAX_SAFE_VALUE"]
