"""
Text and number helpers for spreadsheet cell values.

Cells arrive as strings (empty string when absent). These helpers turn
them into the optional strings, integers and decimals used by the models.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def or_none(value: Optional[str]) -> Optional[str]:
    """Return the value unchanged, or None when it is empty."""
    return value if value else None


def first_present(*values: Optional[str]) -> Optional[str]:
    """Return the first non-empty value, or None."""
    for value in values:
        if value:
            return value
    return None


def parse_int(value: Optional[str], default: int = 0) -> int:
    """
    Parse the leading integer of a cell value.

    Matches how spreadsheet exports are usually read by hand:
    - "3" → 3
    - "2.0" → 2
    - " 12 units" → 12
    - "" / "abc" → default

    Args:
        value: Raw cell value
        default: Returned when no leading integer is found

    Returns:
        Parsed integer or default
    """
    if value is None:
        return default

    match = _LEADING_INT.match(str(value))
    if not match:
        return default

    return int(match.group(1))


def parse_decimal(value, default: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
    """
    Convert a cell value to Decimal safely.

    Thousands separators are removed. Empty, unparseable and non-finite
    values return the default.
    """
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default

    text = str(value).strip().replace(",", "")
    if not text:
        return default

    try:
        number = Decimal(text)
    except (InvalidOperation, ValueError):
        return default

    if not number.is_finite():
        return default
    return number
