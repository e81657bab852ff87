"""
app/parsers/policy_parser.py

Insurance-policy ledger parser.

Turns rows keyed by column header into ``PolicyRecord`` values. Country
cells go through the session's ``CountryMapper``; every other field is
coerced with the best-effort helpers in ``app.parsers.values``.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from app.domain.records import ParseResult, PolicyRecord
from app.logging_utils import log_event
from app.mappers.country_mapper import CountryMapper
from app.parsers.values import (
    clean_string,
    is_blank,
    month_key,
    parse_premium,
    parse_spreadsheet_date,
    standardize_business_unit,
)

logger = logging.getLogger(__name__)

COLUMN_CERTIFICATE = "Certificate Number"
COLUMN_DATE_BOOKED = "Date Booked"
COLUMN_PREMIUM = "Total Premium USD"
COLUMN_NAMED_ASSURED = "Named Assured"
COLUMN_NAMED_ASSURED_COUNTRY = "Named Assured Country"
COLUMN_OPERATING_COUNTRY = "Primary Assured Country"
COLUMN_RAW_REGION = "REPORTING: NacoraRegion"
COLUMN_STATUS = "Status"
COLUMN_CONVEYANCE = "Conveyance (Custom)"

BOOKED_STATUS = "Booked"


class PolicyLedgerParser:
    """
    Stateless parser for the policy ledger; country state lives in the mapper.
    """

    def __init__(self, country_mapper: CountryMapper) -> None:
        self._countries = country_mapper

    def parse_row(self, row: Mapping[str, Any]) -> PolicyRecord:
        """
        Build one record. Never raises for bad cell values.
        """

        date_booked = parse_spreadsheet_date(row.get(COLUMN_DATE_BOOKED))
        operating_country = self._countries.normalize(row.get(COLUMN_OPERATING_COUNTRY))
        raw_status = row.get(COLUMN_STATUS)
        status = None if is_blank(raw_status) else str(raw_status)

        return PolicyRecord(
            certificate_number=clean_string(row.get(COLUMN_CERTIFICATE)),
            date_booked=date_booked,
            month_year=month_key(date_booked),
            total_premium_usd=parse_premium(row.get(COLUMN_PREMIUM)),
            named_assured=clean_string(row.get(COLUMN_NAMED_ASSURED)) or "",
            named_assured_country=self._countries.normalize(row.get(COLUMN_NAMED_ASSURED_COUNTRY)),
            operating_country=operating_country,
            region=self._resolve_region(operating_country, row.get(COLUMN_RAW_REGION)),
            status=status,
            business_unit=standardize_business_unit(row.get(COLUMN_CONVEYANCE)),
            is_booked=status == BOOKED_STATUS,
        )

    def parse_rows(self, rows: Iterable[Mapping[str, Any]]) -> ParseResult:
        """
        Parse every row; completely empty rows are skipped.
        """

        records: list[PolicyRecord] = []
        rows_read = 0
        rows_skipped = 0
        for row in rows:
            rows_read += 1
            if all(is_blank(value) for value in row.values()):
                rows_skipped += 1
                continue
            records.append(self.parse_row(row))

        log_event(
            logger,
            logging.INFO,
            "policy_ledger_parsed",
            rows_read=rows_read,
            rows_skipped=rows_skipped,
            records=len(records),
            booked=sum(1 for record in records if record.is_booked),
        )
        return ParseResult(records=tuple(records), rows_read=rows_read, rows_skipped=rows_skipped)

    def _resolve_region(self, operating_country: str | None, raw_region: Any) -> str | None:
        # Pending (non-canonical) countries get no region; only a missing
        # country falls back to the ledger's own region column.
        if operating_country is not None:
            return self._countries.region_for(operating_country)
        return clean_string(raw_region)


def parse_policy_rows(rows: Iterable[Mapping[str, Any]], country_mapper: CountryMapper) -> list[PolicyRecord]:
    """
    Convenience wrapper returning only the parsed records.
    """

    return list(PolicyLedgerParser(country_mapper).parse_rows(rows).records)
