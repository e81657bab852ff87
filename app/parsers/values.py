"""
app/parsers/values.py

Best-effort cell coercion shared by the ledger parsers.

Every helper returns a default (``None``, ``0`` or ``Unknown``) instead of
raising; one bad cell never aborts a file.
"""

from __future__ import annotations

import math
import numbers
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pandas as pd

from app.domain.records import BusinessUnit

# Spreadsheet day-count epoch (1900 date system, leap-year bug included).
SPREADSHEET_EPOCH = datetime(1899, 12, 30)
_SERIAL_PATTERN = re.compile(r"\d+(\.\d+)?")

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
)

# Checked in order; the first substring hit wins.
BUSINESS_UNIT_KEYWORDS: tuple[tuple[str, BusinessUnit], ...] = (
    ("sea", BusinessUnit.SEA),
    ("air", BusinessUnit.AIR),
    ("overland", BusinessUnit.OVERLAND),
)

MONTH_NAMES: dict[str, int] = {
    name: index
    for index, names in enumerate(
        (
            ("jan", "january"),
            ("feb", "february"),
            ("mar", "march"),
            ("apr", "april"),
            ("may",),
            ("jun", "june"),
            ("jul", "july"),
            ("aug", "august"),
            ("sep", "sept", "september"),
            ("oct", "october"),
            ("nov", "november"),
            ("dec", "december"),
        ),
        start=1,
    )
    for name in names
}


def is_blank(value: Any) -> bool:
    """
    Return True for ``None``, NaN/NaT and whitespace-only strings.
    """

    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def clean_string(value: Any) -> str | None:
    if is_blank(value):
        return None
    return str(value).strip()


def to_float(value: Any) -> float | None:
    """
    Parse a numeric cell or numeric string. Returns None on failure or NaN.
    """

    if is_blank(value) or isinstance(value, bool):
        return None
    if is_number(value):
        parsed = float(value)
    else:
        raw = str(value).strip().replace(",", "").lstrip("$")
        try:
            parsed = float(raw)
        except ValueError:
            return None
    if math.isnan(parsed) or math.isinf(parsed):
        return None
    return parsed


def parse_spreadsheet_date(value: Any) -> datetime | None:
    """
    Interpret a booking-date cell.

    Numbers, and plain numeric strings as read from CSV, are spreadsheet
    serial day counts (fractions are time of day);
    datetime-like cells pass through; strings are tried against
    ``DATE_FORMATS`` and then a general parser. Result is naive.
    """

    if is_blank(value) or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value.to_pydatetime() if isinstance(value, pd.Timestamp) else value
        return _as_naive(parsed)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    if is_number(value):
        return _from_serial(float(value))

    raw = str(value).strip()
    if _SERIAL_PATTERN.fullmatch(raw):
        return _from_serial(float(raw))

    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        return _as_naive(datetime.fromisoformat(normalized))
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue

    try:
        fallback = pd.to_datetime(raw, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if fallback is None or pd.isna(fallback):
        return None
    return _as_naive(fallback.to_pydatetime())


def month_key(value: datetime | None) -> str | None:
    if value is None:
        return None
    return f"{value.year:04d}-{value.month:02d}"


def parse_premium(value: Any) -> int:
    """
    Premium amount rounded half-up to a whole unit; 0 when unparseable.
    """

    parsed = to_float(value)
    if parsed is None:
        return 0
    return int(math.floor(parsed + 0.5))


def parse_shipment_count(value: Any) -> int | None:
    """
    Shipment cell as a truncated integer.

    Returns None for empty, zero, NaN or non-numeric cells so the caller
    emits no record for them.
    """

    parsed = to_float(value)
    if parsed is None or parsed == 0:
        return None
    return int(parsed)


def parse_year(value: Any) -> int | None:
    parsed = to_float(value)
    if parsed is None or parsed <= 0:
        return None
    return int(parsed)


def parse_month(value: Any) -> int | None:
    """
    Month header cell as 1-12; accepts numbers and English month names.
    """

    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, (datetime, date)):
        return value.month
    parsed = to_float(value)
    if parsed is not None:
        month = int(parsed)
        return month if 1 <= month <= 12 else None
    return MONTH_NAMES.get(str(value).strip().lower().rstrip("."))


def standardize_business_unit(value: Any) -> BusinessUnit:
    if is_blank(value):
        return BusinessUnit.UNKNOWN
    lowered = str(value).lower()
    for keyword, unit in BUSINESS_UNIT_KEYWORDS:
        if keyword in lowered:
            return unit
    return BusinessUnit.UNKNOWN


def _as_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _from_serial(serial: float) -> datetime | None:
    if serial == 0 or math.isnan(serial):
        return None
    try:
        return SPREADSHEET_EPOCH + timedelta(days=serial)
    except OverflowError:
        return None
