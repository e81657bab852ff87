"""
app/domain/enrichment.py

Best-effort trade statistics attached to a country.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LatestValue:
    """
    Most recent observation of one external indicator series.
    """

    period: str
    value: float
    url: str
    unit: str | None = None


@dataclass(frozen=True)
class MerchandiseValue:
    """
    Merchandise trade flow converted to USD billions.
    """

    period: str
    value_usd_bn: float
    url: str


@dataclass(frozen=True)
class MonthlyMerchandise:
    exports: MerchandiseValue | None = None
    imports: MerchandiseValue | None = None


@dataclass(frozen=True)
class TariffValue:
    """
    MFN simple average applied tariff.
    """

    year: str
    simple_avg_pct: float
    url: str


@dataclass(frozen=True)
class OpennessValue:
    """
    Trade as a percentage of GDP.
    """

    year: int
    value: float
    url: str


@dataclass(frozen=True)
class TradeProfile:
    """
    Enrichment bundle for one ISO3 code. Every part may be missing.
    """

    iso3: str
    monthly_merchandise: MonthlyMerchandise
    mfn_tariff: TariffValue | None = None
    trade_openness: OpennessValue | None = None
