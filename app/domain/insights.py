"""
app/domain/insights.py

Derived views computed on top of the conversion metrics.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.records import ConversionRecord


@dataclass(frozen=True)
class MonthlyTrendPoint:
    month_year: str
    shipments: int
    insured: int
    premium: int
    conversion_rate: float


@dataclass(frozen=True)
class BusinessUnitSummary:
    business_unit: str
    shipments: int
    insured: int
    conversion_rate: float


@dataclass(frozen=True)
class CustomerActivity:
    """
    Policy activity of one named assured within one business unit.
    """

    customer: str
    country: str | None
    business_unit: str
    total_policies: int
    booked_policies: int
    conversion_rate: float


@dataclass(frozen=True)
class CustomerSegment:
    """
    Customers bucketed by yearly policy volume.

    ``max_policies`` is ``None`` for the open-ended top bucket.
    """

    code: str
    label: str
    min_policies: int
    max_policies: int | None
    customer_count: int
    total_policies: int
    booked_policies: int
    conversion_rate: float
    customers: tuple[CustomerActivity, ...]


@dataclass(frozen=True)
class TopCustomer:
    customer: str
    country: str | None
    business_unit: str
    total_premium: int
    policy_count: int
    avg_premium: float


@dataclass(frozen=True)
class RebateOpportunity:
    """
    Rebate a country could earn if its uninsured shipments were covered.
    """

    country: str
    total_shipments: int
    insured_shipments: int
    conversion_rate: float
    uninsured_shipments: int
    synergy_score: float
    potential_rebate: float


@dataclass(frozen=True)
class CountryConversion:
    country: str
    shipments: int
    insured: int
    conversion_rate: float


@dataclass(frozen=True)
class GeographicSummary:
    countries_covered: int
    countries_with_shipments: int
    market_penetration: float
    top_region: str | None
    top_region_premium: int
    low_conversion_countries: tuple[CountryConversion, ...]


@dataclass(frozen=True)
class MarketShare:
    total_market_size: float
    total_premium: int
    share_pct: float


@dataclass(frozen=True)
class InsightsReport:
    """
    Every insight view for one filter selection.
    """

    monthly_trend: tuple[MonthlyTrendPoint, ...]
    business_units: tuple[BusinessUnitSummary, ...]
    customer_segments: tuple[CustomerSegment, ...]
    top_customers: tuple[TopCustomer, ...]
    top_opportunities: tuple[ConversionRecord, ...]
    rebate_potential: tuple[RebateOpportunity, ...]
    geographic: GeographicSummary
    market_share: MarketShare
