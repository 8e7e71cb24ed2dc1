"""
Numeric coercion helpers for permissive option handling.

Options arrive from JSON forms and may be strings, booleans, missing or
garbage. These helpers turn them into finite floats or a fallback and keep
every stage free of validation errors.
"""

import math
from typing import Any, Optional


def parse_number(value: Any, fallback: Optional[float]) -> Optional[float]:
    """
    Parse a value into a finite float.

    Args:
        value: Raw option value
        fallback: Returned when the value is missing, non-numeric or not finite

    Returns:
        Parsed float or fallback

    Example:
        >>> parse_number("12.5", 0)
        12.5
        >>> parse_number("abc", 100)
        100
    """
    if value is None:
        return fallback
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, str) and not value.strip():
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return number


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to nearest integer with halves going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))
