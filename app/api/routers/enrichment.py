"""
app/api/routers/enrichment.py

Country reference and trade enrichment endpoints.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status

from app.mappers.country_reference import COUNTRY_TO_ISO3, COUNTRY_TO_REGION, REGIONS, STANDARD_COUNTRIES
from app.schemas.enrichment import CountryListResponse, CountryReferenceResponse, TradeProfileResponse
from app.services.enrichment_service import EnrichmentService, get_enrichment_service

router = APIRouter(tags=["enrichment"])


@router.get("/countries", response_model=CountryListResponse)
def list_countries() -> CountryListResponse:
    """
    Canonical country list with region and ISO3 code.
    """

    return CountryListResponse(
        regions=list(REGIONS),
        countries=[
            CountryReferenceResponse(
                name=name,
                region=COUNTRY_TO_REGION[name],
                iso3=COUNTRY_TO_ISO3.get(name),
            )
            for name in STANDARD_COUNTRIES
        ],
    )


@router.get("/enrichment/{iso3}", response_model=TradeProfileResponse)
def get_trade_profile(
    iso3: str,
    enrichment_service: EnrichmentService = Depends(get_enrichment_service),
) -> TradeProfileResponse:
    """
    Best-effort WTO and World Bank figures for one country.
    """

    try:
        profile = enrichment_service.get_trade_profile(iso3)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return TradeProfileResponse.model_validate(asdict(profile))
