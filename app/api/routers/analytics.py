"""
app/api/routers/analytics.py

Filtered conversion metrics and insights endpoints.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_analytics_session
from app.schemas.analytics import (
    ConversionMetricsResponse,
    FiltersRequest,
    InsightsEnvelopeResponse,
    InsightsReportResponse,
    MetricsEnvelopeResponse,
)
from app.services.analytics_session import AnalyticsSession
from app.services.filter_service import InvalidFilterError

router = APIRouter(prefix="/sessions", tags=["analytics"])


@router.post("/{session_id}/metrics", response_model=MetricsEnvelopeResponse)
def compute_metrics(
    filters: FiltersRequest | None = None,
    session: AnalyticsSession = Depends(get_analytics_session),
) -> MetricsEnvelopeResponse:
    """
    Conversion metrics for the filtered ledgers.

    ``available`` is false while either ledger is missing or filtered empty.
    """

    selection = (filters or FiltersRequest()).to_filters()
    try:
        metrics = session.compute_metrics(selection)
    except InvalidFilterError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.to_dict(),
        ) from exc

    return MetricsEnvelopeResponse(
        available=metrics is not None,
        revision=session.revision,
        metrics=ConversionMetricsResponse.model_validate(asdict(metrics)) if metrics is not None else None,
    )


@router.post("/{session_id}/insights", response_model=InsightsEnvelopeResponse)
def compute_insights(
    filters: FiltersRequest | None = None,
    session: AnalyticsSession = Depends(get_analytics_session),
) -> InsightsEnvelopeResponse:
    selection = (filters or FiltersRequest()).to_filters()
    try:
        report = session.insights(selection)
    except InvalidFilterError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.to_dict(),
        ) from exc

    return InsightsEnvelopeResponse(
        available=report is not None,
        revision=session.revision,
        insights=InsightsReportResponse.model_validate(asdict(report)) if report is not None else None,
    )
