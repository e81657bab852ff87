"""
app/schemas/enrichment.py

Response schemas for country reference and trade enrichment endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class MerchandiseValueResponse(BaseModel):
    period: str
    value_usd_bn: float
    url: str


class MonthlyMerchandiseResponse(BaseModel):
    exports: MerchandiseValueResponse | None = None
    imports: MerchandiseValueResponse | None = None


class TariffValueResponse(BaseModel):
    year: str
    simple_avg_pct: float
    url: str


class OpennessValueResponse(BaseModel):
    year: int
    value: float
    url: str


class TradeProfileResponse(BaseModel):
    """
    API response model for best-effort trade enrichment; any part may be null.
    """

    iso3: str = Field(..., min_length=3, max_length=3)
    monthly_merchandise: MonthlyMerchandiseResponse
    mfn_tariff: TariffValueResponse | None = None
    trade_openness: OpennessValueResponse | None = None


class CountryReferenceResponse(BaseModel):
    name: str
    region: str
    iso3: str | None = None


class CountryListResponse(BaseModel):
    regions: list[str] = Field(default_factory=list)
    countries: list[CountryReferenceResponse] = Field(default_factory=list)
