"""
app/domain/filters.py

Filter selection and the filtered dataset it produces.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from app.domain.records import PolicyRecord, ShipmentRecord

ALL = "all"

DATE_RANGE_PRESETS: tuple[str, ...] = (
    "all",
    "last3months",
    "last6months",
    "last12months",
    "ytd",
    "custom",
)


@dataclass(frozen=True)
class Filters:
    """
    User-selected predicate applied to both ledgers.

    ``"all"`` disables the corresponding filter. ``start_date`` and
    ``end_date`` are only read when ``date_range == "custom"``.
    """

    region: str = ALL
    business_unit: str = ALL
    country: str = ALL
    date_range: str = ALL
    start_date: date | None = None
    end_date: date | None = None


@dataclass(frozen=True)
class FilterOptions:
    """
    Distinct values available for each equality filter.
    """

    regions: tuple[str, ...]
    business_units: tuple[str, ...]
    countries: tuple[str, ...]


@dataclass(frozen=True)
class FilteredData:
    """
    Subsets of both ledgers matching one filter selection.
    """

    policies: tuple[PolicyRecord, ...]
    shipments: tuple[ShipmentRecord, ...]
