"""Utility functions for the finance calculator.

This module provides helpers for turning user input into Python data types
and for calendar arithmetic: adding months to a date, counting the days of a
month and rendering the ``"Mon YYYY"`` labels carried by schedule rows. It
uses Python's ``datetime`` and ``calendar`` modules for month offsets.
"""

from __future__ import annotations

import calendar
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Union

Number = Union[Decimal, int, float, str]


def parse_year_month(ym: str) -> date:
    """Parse a YYYY-MM string into a ``date`` object (first day of month).

    Raises
    ------
    ValueError
        If the string is not a valid year-month.
    """
    try:
        parts = ym.split("-")
        if len(parts) < 2:
            raise ValueError
        return date(int(parts[0]), int(parts[1]), 1)
    except Exception as exc:
        raise ValueError(f"Invalid year-month string: {ym}") from exc


def parse_date(value: str) -> date:
    """Parse ``YYYY-MM-DD`` or ``YYYY-MM`` into a ``date``.

    A bare year-month is normalized to the first day of that month.
    """
    value = value.strip()
    parts = value.split("-")
    if len(parts) == 2:
        return parse_year_month(value)
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_in_month(dt: date) -> int:
    """Number of calendar days in the month containing ``dt``."""
    return calendar.monthrange(dt.year, dt.month)[1]


def month_label(dt: date) -> str:
    """Short month and year, e.g. ``"Mar 2027"``."""
    return f"{calendar.month_abbr[dt.month]} {dt.year}"


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.replace(",", "").strip()
        return Decimal(cleaned)
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def to_decimal(value: Number) -> Decimal:
    """Coerce an engine input into a ``Decimal``.

    Floats go through ``str`` so that ``8.5`` becomes ``Decimal("8.5")``
    rather than its binary expansion. ``None`` and empty strings, as sent by
    blank form fields, count as zero.
    """
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return Decimal(0)
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value}")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    return decimal_from_str(value)


# Input bounds the CLI and web callers enforce before calling the engine.
PRINCIPAL_RANGE = (Decimal(0), None)
INSTALLMENT_RANGE = (Decimal(0), None)
RATE_RANGE = (Decimal(0), Decimal(100))
TENURE_YEARS_RANGE = (Decimal("0.1"), Decimal(100))
TENURE_MONTHS_RANGE = (Decimal("0.1"), Decimal(1200))
DEPOSIT_TERM_RANGE = (Decimal(1), Decimal(100))


def check_range(name: str, value: Decimal, bounds) -> Decimal:
    """Return ``value`` if it is finite and within ``bounds`` (inclusive).

    ``bounds`` is a ``(low, high)`` pair; ``None`` leaves a side open.
    Raises ``ValueError`` naming the field otherwise.
    """
    low, high = bounds
    if not value.is_finite() or (low is not None and value < low) or (high is not None and value > high):
        upper = "" if high is None else f" and {high}"
        lower = f"at least {low}" if high is None else f"between {low}"
        raise ValueError(f"{name} must be {lower}{upper}; got {value}")
    return value
