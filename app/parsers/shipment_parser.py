"""
app/parsers/shipment_parser.py

Shipment-volume workbook parser.

Each relevant sheet carries a sparse two-row time header (years, then
months) directly above the first business-line row. Every numeric cell in a
time column becomes one ``ShipmentRecord``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from app.config import ShipmentParserSettings, get_shipment_parser_settings
from app.domain.records import ParseResult, ShipmentRecord
from app.logging_utils import log_event
from app.mappers.country_mapper import CountryMapper
from app.parsers.values import (
    is_blank,
    parse_month,
    parse_shipment_count,
    parse_year,
    standardize_business_unit,
)

logger = logging.getLogger(__name__)

Grid = Sequence[Sequence[Any]]


@dataclass(frozen=True)
class TimeColumn:
    """
    One data column of the sheet and the month it reports.
    """

    column: int
    year: int
    month: int

    @property
    def month_key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def _cell(row: Sequence[Any], index: int) -> Any:
    if index < 0 or index >= len(row):
        return None
    return row[index]


class ShipmentWorkbookParser:
    """
    Parser for the multi-sheet shipment ledger.
    """

    def __init__(
        self,
        country_mapper: CountryMapper,
        settings: ShipmentParserSettings | None = None,
    ) -> None:
        self._countries = country_mapper
        self._settings = settings or get_shipment_parser_settings()

    def find_boundary(self, grid: Grid) -> int | None:
        """
        Index of the first row whose label cell names a business line.
        """

        for index, row in enumerate(grid):
            label = _cell(row, self._settings.label_column)
            if isinstance(label, str) and any(
                marker in label for marker in self._settings.business_line_markers
            ):
                return index
        return None

    def time_columns(self, year_row: Sequence[Any], month_row: Sequence[Any]) -> list[TimeColumn]:
        """
        Resolve the sparse header rows into ``(column, year, month)`` triples.

        A year cell applies to every following column until the next year
        cell; columns before the first year are ignored.
        """

        columns: list[TimeColumn] = []
        current_year: int | None = None
        width = max(len(year_row), len(month_row))
        for column in range(self._settings.first_time_column, width):
            year = parse_year(_cell(year_row, column))
            if year is not None:
                current_year = year
            if current_year is None:
                continue
            month = parse_month(_cell(month_row, column))
            if month is not None:
                columns.append(TimeColumn(column=column, year=current_year, month=month))
        return columns

    def parse_sheet(self, sheet_name: str, grid: Grid) -> tuple[list[ShipmentRecord], int, int] | None:
        """
        Parse one sheet. Returns ``None`` when the sheet layout is unusable.
        """

        boundary = self.find_boundary(grid)
        if boundary is None or boundary < 2:
            log_event(
                logger,
                logging.WARNING,
                "shipment_sheet_skipped",
                sheet=sheet_name,
                reason="business_line_marker_not_found" if boundary is None else "missing_time_header",
            )
            return None

        columns = self.time_columns(grid[boundary - 2], grid[boundary - 1])
        if not columns:
            log_event(
                logger,
                logging.WARNING,
                "shipment_sheet_without_time_columns",
                sheet=sheet_name,
                boundary_row=boundary,
            )

        records: list[ShipmentRecord] = []
        rows_read = 0
        rows_skipped = 0
        for row in grid[boundary:]:
            rows_read += 1
            label = _cell(row, self._settings.label_column)
            raw_country = _cell(row, self._settings.country_column)
            if is_blank(label) or is_blank(raw_country):
                rows_skipped += 1
                continue

            business_unit = standardize_business_unit(label)
            country = self._countries.normalize(raw_country)
            region = self._countries.region_for(country)
            for time_column in columns:
                count = parse_shipment_count(_cell(row, time_column.column))
                if count is None:
                    continue
                records.append(
                    ShipmentRecord(
                        country=country,
                        business_unit=business_unit,
                        month_year=time_column.month_key,
                        shipment_count=count,
                        region=region,
                    )
                )
        return records, rows_read, rows_skipped

    def parse_workbook(self, sheets: Mapping[str, Grid]) -> ParseResult:
        """
        Parse every configured sheet present in ``sheets``; others are ignored.
        """

        records: list[ShipmentRecord] = []
        rows_read = 0
        rows_skipped = 0
        parsed: list[str] = []
        skipped: list[str] = []

        for sheet_name in self._settings.sheet_names:
            grid = sheets.get(sheet_name)
            if grid is None:
                logger.info("Shipment sheet not present sheet=%s", sheet_name)
                skipped.append(sheet_name)
                continue
            outcome = self.parse_sheet(sheet_name, grid)
            if outcome is None:
                skipped.append(sheet_name)
                continue
            sheet_records, sheet_rows, sheet_skipped = outcome
            records.extend(sheet_records)
            rows_read += sheet_rows
            rows_skipped += sheet_skipped
            parsed.append(sheet_name)

        log_event(
            logger,
            logging.INFO,
            "shipment_workbook_parsed",
            sheets_parsed=parsed,
            sheets_skipped=skipped,
            rows_read=rows_read,
            rows_skipped=rows_skipped,
            records=len(records),
        )
        return ParseResult(
            records=tuple(records),
            rows_read=rows_read,
            rows_skipped=rows_skipped,
            sheets_parsed=tuple(parsed),
            sheets_skipped=tuple(skipped),
        )


def parse_shipment_workbook(
    sheets: Mapping[str, Grid],
    country_mapper: CountryMapper,
    settings: ShipmentParserSettings | None = None,
) -> list[ShipmentRecord]:
    """
    Convenience wrapper returning only the parsed records.
    """

    return list(ShipmentWorkbookParser(country_mapper, settings).parse_workbook(sheets).records)
