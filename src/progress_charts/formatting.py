"""
Formatting helpers for Progress Charts.

PURPOSE: Human-readable numbers and dates for labels and summaries.
AI CONTEXT: Pure functions - no I/O, no locale lookups.

RULES:
- Thousands separator is always ',' so output never depends on OS locale
- Rounding is half-up (2.345 -> 2.35), not Python's banker's rounding
- Dates are always dd/mm/yyyy, zero padded

USAGE:
    format_count(1234567)          # '1,234,567'
    format_scaled_amount(1500)     # '1.50 kB'
    format_day_label(datetime(2025, 3, 1))  # '01/03/2025'
"""

from __future__ import annotations

import math
from datetime import datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from .models import coerce_number, parse_timestamp

__all__ = [
    "round_half_up",
    "format_count",
    "format_scaled_amount",
    "format_day_label",
    "format_percentage",
    "format_ratio",
]

INFINITY_SYMBOL = "∞"


def round_half_up(value: float, digits: int = 0) -> Decimal:
    """
    Round a number half-up to a fixed number of decimals.

    Goes through the shortest repr of the float so that 2.675 rounds
    to 2.68 the way a person reading the label would expect.

    Args:
        value: Number to round.
        digits: Decimal places to keep.

    Returns:
        Decimal quantized to the requested precision.

    Example:
        >>> str(round_half_up(2.345, 2))
        '2.35'
        >>> str(round_half_up(0.5))
        '1'
    """
    exponent = Decimal(1).scaleb(-digits)
    return Decimal(repr(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def format_count(n: Any) -> str:
    """
    Format an integer with grouped thousands.

    Args:
        n: Integer count. Malformed values are treated as 0; floats are
            rounded half-up first.

    Returns:
        String like '1,234,567'.

    Example:
        >>> format_count(1234567)
        '1,234,567'
        >>> format_count(None)
        '0'
    """
    value = coerce_number(n)
    if isinstance(value, float):
        value = int(round_half_up(value))
    return f"{value:,}"


def format_scaled_amount(n: Any) -> str:
    """
    Format an amount with B / kB / MB scaling.

    Business context: Point amounts on the platform are expressed in
    byte-like units; the profile shows them as 1.50 kB rather than 1500.

    Args:
        n: Integer amount. Malformed values are treated as 0.

    Returns:
        '{n/1e6:.2f} MB' for n >= 1,000,000, '{n/1e3:.2f} kB' for
        n >= 1,000, else '{n} B'.

    Example:
        >>> format_scaled_amount(999)
        '999 B'
        >>> format_scaled_amount(1500)
        '1.50 kB'
        >>> format_scaled_amount(2_500_000)
        '2.50 MB'
    """
    value = coerce_number(n)
    if value >= 1_000_000:
        return f"{round_half_up(value / 1_000_000, 2)} MB"
    if value >= 1_000:
        return f"{round_half_up(value / 1_000, 2)} kB"
    if isinstance(value, float):
        value = int(round_half_up(value))
    return f"{value} B"


def format_day_label(instant: datetime | str, tz: tzinfo | None = None) -> str:
    """
    Format an instant as a local dd/mm/yyyy label.

    Aware datetimes are converted to ``tz`` (the host's local zone when
    None) before the calendar day is taken. Naive datetimes are assumed
    to already be local.

    Args:
        instant: datetime or ISO 8601 string.
        tz: Target zone for aware datetimes.

    Returns:
        Zero-padded 'dd/mm/yyyy', or '' when the string cannot be parsed.

    Example:
        >>> from datetime import UTC
        >>> format_day_label('2025-03-01T23:30:00Z', tz=UTC)
        '01/03/2025'
    """
    parsed = parse_timestamp(instant)
    if parsed is None:
        return ""
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz)
    return f"{parsed.day:02d}/{parsed.month:02d}/{parsed.year:04d}"


def format_percentage(value: float, digits: int = 1) -> str:
    """
    Format a percentage with half-up rounding.

    Example:
        >>> format_percentage(62.25)
        '62.3%'
    """
    return f"{round_half_up(coerce_number(value), digits)}%"


def format_ratio(ratio: float) -> str:
    """
    Format a ratio to two decimals, or the infinity symbol.

    Example:
        >>> format_ratio(1.5)
        '1.50'
        >>> format_ratio(float('inf'))
        '∞'
    """
    if math.isinf(ratio):
        return INFINITY_SYMBOL
    return str(round_half_up(ratio, 2))
