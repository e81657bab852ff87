"""
app/schemas/sessions.py

Request and response schemas for analytics session endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SessionResponse(BaseModel):
    """
    API response model for a newly created session.
    """

    session_id: str
    created_at: datetime


class ParseSummaryResponse(BaseModel):
    """
    API response model for one parsed upload.
    """

    records: int = Field(..., ge=0)
    rows_read: int = Field(..., ge=0)
    rows_skipped: int = Field(..., ge=0)
    sheets_parsed: list[str] = Field(default_factory=list)
    sheets_skipped: list[str] = Field(default_factory=list)
    unmatched_countries: list[str] = Field(default_factory=list)
    revision: int = Field(..., ge=0)


class UnmatchedCountriesResponse(BaseModel):
    unmatched_countries: list[str] = Field(default_factory=list)
    user_mappings: dict[str, str] = Field(default_factory=dict)


class CountryMappingRequest(BaseModel):
    """
    Raw country strings mapped to canonical country names.
    """

    mappings: dict[str, str] = Field(..., min_length=1)


class CountryMappingResponse(BaseModel):
    applied: dict[str, str] = Field(default_factory=dict)
    unmatched_countries: list[str] = Field(default_factory=list)
    revision: int = Field(..., ge=0)
    policy_records: int | None = Field(default=None, ge=0)
    shipment_records: int | None = Field(default=None, ge=0)


class FilterOptionsResponse(BaseModel):
    regions: list[str] = Field(default_factory=list)
    business_units: list[str] = Field(default_factory=list)
    countries: list[str] = Field(default_factory=list)
