"""
app/schemas/analytics.py

Filter request and metrics/insights response schemas.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from app.domain.filters import ALL, Filters
from app.domain.records import BusinessUnit


class FiltersRequest(BaseModel):
    """
    Filter selection; ``"all"`` disables a filter.
    """

    region: str = ALL
    business_unit: str = ALL
    country: str = ALL
    date_range: str = ALL
    start_date: date | None = None
    end_date: date | None = None

    def to_filters(self) -> Filters:
        return Filters(
            region=self.region,
            business_unit=self.business_unit,
            country=self.country,
            date_range=self.date_range,
            start_date=self.start_date,
            end_date=self.end_date,
        )


class ConversionRecordResponse(BaseModel):
    country: str | None = None
    business_unit: BusinessUnit
    month_year: str
    shipment_count: int
    region: str | None = None
    insured_count: int = Field(..., ge=0)
    conversion_rate: float
    opportunity: int


class RegionMetricsResponse(BaseModel):
    total_shipments: int
    insured_shipments: int
    total_premium: int
    booked_policies: int = Field(..., ge=0)
    conversion_rate: float


class CountryMetricsResponse(BaseModel):
    total_shipments: int
    insured_shipments: int
    total_premium: int
    conversion_rate: float
    avg_premium: float


class ConversionMetricsResponse(BaseModel):
    total_shipments: int
    total_insured: int = Field(..., ge=0)
    overall_conversion_rate: float
    total_premium: int
    conversion_data: list[ConversionRecordResponse] = Field(default_factory=list)
    region_metrics: dict[str, RegionMetricsResponse] = Field(default_factory=dict)
    country_metrics: dict[str, CountryMetricsResponse] = Field(default_factory=dict)


class MetricsEnvelopeResponse(BaseModel):
    """
    ``available`` is false when either filtered ledger is empty.
    """

    available: bool
    revision: int = Field(..., ge=0)
    metrics: ConversionMetricsResponse | None = None


class MonthlyTrendPointResponse(BaseModel):
    month_year: str
    shipments: int
    insured: int
    premium: int
    conversion_rate: float


class BusinessUnitSummaryResponse(BaseModel):
    business_unit: str
    shipments: int
    insured: int
    conversion_rate: float


class CustomerActivityResponse(BaseModel):
    customer: str
    country: str | None = None
    business_unit: str
    total_policies: int
    booked_policies: int
    conversion_rate: float


class CustomerSegmentResponse(BaseModel):
    code: str
    label: str
    min_policies: int
    max_policies: int | None = None
    customer_count: int
    total_policies: int
    booked_policies: int
    conversion_rate: float
    customers: list[CustomerActivityResponse] = Field(default_factory=list)


class TopCustomerResponse(BaseModel):
    customer: str
    country: str | None = None
    business_unit: str
    total_premium: int
    policy_count: int
    avg_premium: float


class RebateOpportunityResponse(BaseModel):
    country: str
    total_shipments: int
    insured_shipments: int
    conversion_rate: float
    uninsured_shipments: int = Field(..., ge=0)
    synergy_score: float
    potential_rebate: float


class CountryConversionResponse(BaseModel):
    country: str
    shipments: int
    insured: int
    conversion_rate: float


class GeographicSummaryResponse(BaseModel):
    countries_covered: int
    countries_with_shipments: int
    market_penetration: float
    top_region: str | None = None
    top_region_premium: int
    low_conversion_countries: list[CountryConversionResponse] = Field(default_factory=list)


class MarketShareResponse(BaseModel):
    total_market_size: float
    total_premium: int
    share_pct: float


class InsightsReportResponse(BaseModel):
    monthly_trend: list[MonthlyTrendPointResponse] = Field(default_factory=list)
    business_units: list[BusinessUnitSummaryResponse] = Field(default_factory=list)
    customer_segments: list[CustomerSegmentResponse] = Field(default_factory=list)
    top_customers: list[TopCustomerResponse] = Field(default_factory=list)
    top_opportunities: list[ConversionRecordResponse] = Field(default_factory=list)
    rebate_potential: list[RebateOpportunityResponse] = Field(default_factory=list)
    geographic: GeographicSummaryResponse
    market_share: MarketShareResponse


class InsightsEnvelopeResponse(BaseModel):
    available: bool
    revision: int = Field(..., ge=0)
    insights: InsightsReportResponse | None = None
