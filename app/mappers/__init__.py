"""
app/mappers package marker.
"""

from app.mappers.country_mapper import DEFAULT_MATCH_THRESHOLD, CountryMapper, similarity
from app.mappers.country_reference import (
    COUNTRY_TO_ISO3,
    COUNTRY_TO_REGION,
    PREDEFINED_COUNTRY_MAPPINGS,
    REGIONS,
    STANDARD_COUNTRIES,
)

__all__ = [
    "COUNTRY_TO_ISO3",
    "COUNTRY_TO_REGION",
    "CountryMapper",
    "DEFAULT_MATCH_THRESHOLD",
    "PREDEFINED_COUNTRY_MAPPINGS",
    "REGIONS",
    "STANDARD_COUNTRIES",
    "similarity",
]
