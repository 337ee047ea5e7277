"""Number + date normalisation for raw cell values.

Both parsers return ``None`` for "absent" so callers can tell a real zero
from a missing value and apply their own per-field defaults.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd

# ── Numbers ──────────────────────────────────────────────────────

_CURRENCY_PREFIX_RE = re.compile(r"^(RS\.?|INR)", re.IGNORECASE)
_STRIP_RE = re.compile(r"[₹$€£,%\s]")
_LEADING_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def parse_number(value: Any) -> int | float | None:
    """Return *value* as a number, or ``None`` if it carries no number.

    Numeric input is returned unchanged. Text has currency symbols,
    thousands separators, whitespace and ``%`` removed; the leading numeric
    token is then parsed, so trailing noise such as ``"50000/-"`` is ignored.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value

    token = _STRIP_RE.sub("", str(value))
    token = _CURRENCY_PREFIX_RE.sub("", token)
    if not token:
        return None
    match = _LEADING_NUMBER_RE.match(token)
    if match is None:
        return None
    return float(match.group(0))


# ── Dates ────────────────────────────────────────────────────────

# Day 0 of the 1900 date system once the phantom 1900-02-29 is accounted for.
EXCEL_EPOCH = date(1899, 12, 30)
SERIAL_THRESHOLD = 1000

DATE_FORMATS: tuple[str, ...] = (
    "%d.%m.%Y",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
)


def serial_to_date(serial: float) -> date:
    """Convert a 1900-system spreadsheet serial to a calendar date."""
    return EXCEL_EPOCH + timedelta(days=int(math.floor(serial)))


def parse_date(value: Any) -> date | None:
    """Return the calendar date carried by *value*, or ``None``.

    Accepts date/datetime objects, spreadsheet serials (numbers above 1000)
    and strings in one of :data:`DATE_FORMATS`, tried strictly in order.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        if value > SERIAL_THRESHOLD:
            try:
                return serial_to_date(value)
            except OverflowError:
                return None
        return None

    text = str(value).strip()
    if not text:
        return None
    for fmt in DATE_FORMATS:
        parsed = pd.to_datetime(text, format=fmt, errors="coerce")
        if not pd.isna(parsed):
            return parsed.date()
    return None
