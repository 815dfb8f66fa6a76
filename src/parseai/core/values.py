"""Scalar helpers shared by the tabular sniffer, the document parser and the chart engine."""

import math
from typing import Any


def is_number(value: Any) -> bool:
    """True for int/float values (bool excluded, NaN excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and not math.isnan(value)


def coerce_number(value: Any) -> Any:
    """
    Return the numeric value of a text cell, or the cell unchanged.

    "100" -> 100, "2.5" -> 2.5, "Jan" -> "Jan". Non-finite parses
    ("nan", "inf") and Python-only spellings ("1_000", non-ASCII digits)
    stay strings.
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    if "_" in text or not text.isascii():
        return value
    try:
        number = float(text)
    except ValueError:
        return value
    if not math.isfinite(number):
        return value
    if number.is_integer() and text.lstrip("+-").isdigit():
        return int(text)
    return number


def to_float(value: Any, default: float = 0.0) -> float:
    """Best-effort float conversion used when a chart needs a value column."""
    if is_number(value):
        return float(value)
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default
