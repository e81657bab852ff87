"""
tests/conftest.py

Shared record builders for the analytics test-suite.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

import pytest

from app.domain.records import BusinessUnit, PolicyRecord, ShipmentRecord
from app.mappers.country_mapper import CountryMapper


def build_policy(
    *,
    country: str | None = "GERMANY",
    region: str | None = "Europe",
    business_unit: BusinessUnit = BusinessUnit.SEA,
    date_booked: datetime | None = datetime(2024, 1, 15),
    premium: int = 100,
    booked: bool = True,
    named_assured: str = "Acme GmbH",
    named_assured_country: str | None = "GERMANY",
    certificate_number: str | None = "C-0001",
) -> PolicyRecord:
    return PolicyRecord(
        certificate_number=certificate_number,
        date_booked=date_booked,
        month_year=None if date_booked is None else f"{date_booked.year:04d}-{date_booked.month:02d}",
        total_premium_usd=premium,
        named_assured=named_assured,
        named_assured_country=named_assured_country,
        operating_country=country,
        region=region,
        status="Booked" if booked else "Quoted",
        business_unit=business_unit,
        is_booked=booked,
    )


def build_shipment(
    *,
    country: str | None = "GERMANY",
    region: str | None = "Europe",
    business_unit: BusinessUnit = BusinessUnit.SEA,
    month_year: str = "2024-01",
    count: int = 100,
) -> ShipmentRecord:
    return ShipmentRecord(
        country=country,
        business_unit=business_unit,
        month_year=month_year,
        shipment_count=count,
        region=region,
    )


@pytest.fixture()
def make_policy() -> Callable[..., PolicyRecord]:
    return build_policy


@pytest.fixture()
def make_shipment() -> Callable[..., ShipmentRecord]:
    return build_shipment


@pytest.fixture()
def mapper() -> CountryMapper:
    """Fresh mapper with the default threshold and built-in aliases."""
    return CountryMapper()
