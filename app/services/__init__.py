"""
app/services package marker.
"""

from app.services.analytics_session import (
    AnalyticsSession,
    SessionLimitError,
    SessionNotFoundError,
    SessionStore,
    get_session_store,
)
from app.services.enrichment_service import EnrichmentService, get_enrichment_service
from app.services.filter_service import FilterService, InvalidFilterError
from app.services.insights_service import InsightsService
from app.services.metrics_service import MetricsService

__all__ = [
    "AnalyticsSession",
    "EnrichmentService",
    "FilterService",
    "InsightsService",
    "InvalidFilterError",
    "MetricsService",
    "SessionLimitError",
    "SessionNotFoundError",
    "SessionStore",
    "get_enrichment_service",
    "get_session_store",
]
