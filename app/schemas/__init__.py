"""
app/schemas package marker.
"""

from app.schemas.analytics import (
    ConversionMetricsResponse,
    FiltersRequest,
    InsightsEnvelopeResponse,
    InsightsReportResponse,
    MetricsEnvelopeResponse,
)
from app.schemas.enrichment import CountryListResponse, CountryReferenceResponse, TradeProfileResponse
from app.schemas.sessions import (
    CountryMappingRequest,
    CountryMappingResponse,
    FilterOptionsResponse,
    ParseSummaryResponse,
    SessionResponse,
    UnmatchedCountriesResponse,
)

__all__ = [
    "ConversionMetricsResponse",
    "CountryListResponse",
    "CountryMappingRequest",
    "CountryMappingResponse",
    "CountryReferenceResponse",
    "FilterOptionsResponse",
    "FiltersRequest",
    "InsightsEnvelopeResponse",
    "InsightsReportResponse",
    "MetricsEnvelopeResponse",
    "ParseSummaryResponse",
    "SessionResponse",
    "TradeProfileResponse",
    "UnmatchedCountriesResponse",
]
