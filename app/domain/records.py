"""
app/domain/records.py

Typed record shapes produced by the ledger parsers and the metrics engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class BusinessUnit(str, Enum):
    """
    Shipping mode used as a join dimension.
    """

    SEA = "Sea"
    AIR = "Air"
    OVERLAND = "Overland"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class PolicyRecord:
    """
    One row of the insurance-policy ledger after normalization.
    """

    certificate_number: str | None
    date_booked: datetime | None
    month_year: str | None
    total_premium_usd: int
    named_assured: str
    named_assured_country: str | None
    operating_country: str | None
    region: str | None
    status: str | None
    business_unit: BusinessUnit
    is_booked: bool


@dataclass(frozen=True)
class ShipmentRecord:
    """
    Shipment volume for one (month, country, business unit) cell.
    """

    country: str | None
    business_unit: BusinessUnit
    month_year: str
    shipment_count: int
    region: str | None


@dataclass(frozen=True)
class ConversionRecord:
    """
    Shipment record joined with the booked policies of the same bucket.

    ``opportunity`` is not clamped at zero: when more policies than
    shipments land in one bucket it goes negative.
    """

    country: str | None
    business_unit: BusinessUnit
    month_year: str
    shipment_count: int
    region: str | None
    insured_count: int
    conversion_rate: float
    opportunity: int


@dataclass(frozen=True)
class RegionMetrics:
    """
    Rollup for one region across both ledgers.
    """

    total_shipments: int = 0
    insured_shipments: int = 0
    total_premium: int = 0
    booked_policies: int = 0
    conversion_rate: float = 0.0


@dataclass(frozen=True)
class CountryMetrics:
    """
    Rollup for one canonical (or pending) country across both ledgers.
    """

    total_shipments: int = 0
    insured_shipments: int = 0
    total_premium: int = 0
    conversion_rate: float = 0.0
    avg_premium: float = 0.0


@dataclass(frozen=True)
class ConversionMetrics:
    """
    Aggregate output of the metrics engine for one filtered dataset.
    """

    total_shipments: int
    total_insured: int
    overall_conversion_rate: float
    total_premium: int
    conversion_data: tuple[ConversionRecord, ...]
    region_metrics: dict[str, RegionMetrics] = field(default_factory=dict)
    country_metrics: dict[str, CountryMetrics] = field(default_factory=dict)


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parsing one uploaded ledger.
    """

    records: tuple
    rows_read: int
    rows_skipped: int
    sheets_parsed: tuple[str, ...] = ()
    sheets_skipped: tuple[str, ...] = ()
