"""
app/domain package marker.
"""

from app.domain.enrichment import (
    LatestValue,
    MerchandiseValue,
    MonthlyMerchandise,
    OpennessValue,
    TariffValue,
    TradeProfile,
)
from app.domain.filters import ALL, DATE_RANGE_PRESETS, FilteredData, FilterOptions, Filters
from app.domain.insights import (
    BusinessUnitSummary,
    CountryConversion,
    CustomerActivity,
    CustomerSegment,
    GeographicSummary,
    InsightsReport,
    MarketShare,
    MonthlyTrendPoint,
    RebateOpportunity,
    TopCustomer,
)
from app.domain.records import (
    BusinessUnit,
    ConversionMetrics,
    ConversionRecord,
    CountryMetrics,
    ParseResult,
    PolicyRecord,
    RegionMetrics,
    ShipmentRecord,
)

__all__ = [
    "ALL",
    "BusinessUnit",
    "BusinessUnitSummary",
    "ConversionMetrics",
    "ConversionRecord",
    "CountryConversion",
    "CountryMetrics",
    "CustomerActivity",
    "CustomerSegment",
    "DATE_RANGE_PRESETS",
    "FilteredData",
    "FilterOptions",
    "Filters",
    "GeographicSummary",
    "InsightsReport",
    "LatestValue",
    "MarketShare",
    "MerchandiseValue",
    "MonthlyMerchandise",
    "MonthlyTrendPoint",
    "OpennessValue",
    "ParseResult",
    "PolicyRecord",
    "RebateOpportunity",
    "RegionMetrics",
    "ShipmentRecord",
    "TariffValue",
    "TopCustomer",
    "TradeProfile",
]
