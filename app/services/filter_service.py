"""
app/services/filter_service.py

Filter engine for the parsed ledgers.

Filtering is always a full pass over the unfiltered collections; nothing is
patched in place. Equality filters and the date window compose by
conjunction.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, time
from typing import Iterable, Sequence

from app.domain.filters import ALL, DATE_RANGE_PRESETS, FilteredData, FilterOptions, Filters
from app.domain.records import PolicyRecord, ShipmentRecord

logger = logging.getLogger(__name__)

_TRAILING_MONTHS = {
    "last3months": 3,
    "last6months": 6,
    "last12months": 12,
}


class InvalidFilterError(ValueError):
    """
    Raised for a filter selection the engine cannot interpret.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict[str, str | None]:
        return {"message": self.message, "field": self.field}


def subtract_months(value: datetime, months: int) -> datetime:
    """
    Move ``value`` back by whole calendar months, clamping the day.
    """

    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def month_start(month_year: str) -> datetime | None:
    """
    First instant of a ``YYYY-MM`` month key.
    """

    try:
        year_text, month_text = month_year.split("-", 1)
        return datetime(int(year_text), int(month_text), 1)
    except (AttributeError, TypeError, ValueError):
        return None


class FilterService:
    """
    Stateless filter engine shared by every session.
    """

    def resolve_window(
        self,
        filters: Filters,
        now: datetime | None = None,
    ) -> tuple[datetime, datetime] | None:
        """
        Concrete ``[start, end]`` window for the selected date preset.

        Returns ``None`` when no date filtering applies: the ``all`` preset,
        or ``custom`` without both bounds.
        """

        preset = filters.date_range
        if preset not in DATE_RANGE_PRESETS:
            raise InvalidFilterError(f"Unknown date range preset: {preset!r}", field="date_range")
        if preset == ALL:
            return None

        if preset == "custom":
            if filters.start_date is None or filters.end_date is None:
                return None
            start = _start_of(filters.start_date)
            end = datetime.combine(_as_date(filters.end_date), time.max)
            if start > end:
                raise InvalidFilterError("start_date must not be after end_date.", field="start_date")
            return start, end

        current = now or datetime.now()
        if current.tzinfo is not None:
            current = current.replace(tzinfo=None)
        if preset == "ytd":
            return datetime(current.year, 1, 1), current
        return subtract_months(current, _TRAILING_MONTHS[preset]), current

    def apply(
        self,
        policies: Sequence[PolicyRecord],
        shipments: Sequence[ShipmentRecord],
        filters: Filters,
        now: datetime | None = None,
    ) -> FilteredData:
        """
        Filter both ledgers with the same selection.
        """

        window = self.resolve_window(filters, now=now)

        filtered_policies = [
            policy for policy in policies if self._policy_matches(policy, filters, window)
        ]
        filtered_shipments = [
            shipment for shipment in shipments if self._shipment_matches(shipment, filters, window)
        ]

        logger.debug(
            "Filters applied policies=%d/%d shipments=%d/%d window=%s",
            len(filtered_policies),
            len(policies),
            len(filtered_shipments),
            len(shipments),
            window,
        )
        return FilteredData(policies=tuple(filtered_policies), shipments=tuple(filtered_shipments))

    def filter_options(
        self,
        policies: Iterable[PolicyRecord],
        shipments: Iterable[ShipmentRecord],
    ) -> FilterOptions:
        """
        Sorted distinct values for the region, business-unit and country filters.
        """

        regions: set[str] = set()
        business_units: set[str] = set()
        countries: set[str] = set()

        for policy in policies:
            if policy.region:
                regions.add(policy.region)
            business_units.add(policy.business_unit.value)
            if policy.operating_country:
                countries.add(policy.operating_country)
        for shipment in shipments:
            if shipment.region:
                regions.add(shipment.region)
            business_units.add(shipment.business_unit.value)
            if shipment.country:
                countries.add(shipment.country)

        return FilterOptions(
            regions=tuple(sorted(regions)),
            business_units=tuple(sorted(business_units)),
            countries=tuple(sorted(countries)),
        )

    @staticmethod
    def _policy_matches(
        policy: PolicyRecord,
        filters: Filters,
        window: tuple[datetime, datetime] | None,
    ) -> bool:
        if window is not None:
            if policy.date_booked is None:
                return False
            if not window[0] <= policy.date_booked <= window[1]:
                return False
        if filters.region != ALL and policy.region != filters.region:
            return False
        if filters.business_unit != ALL and policy.business_unit.value != filters.business_unit:
            return False
        if filters.country != ALL and policy.operating_country != filters.country:
            return False
        return True

    @staticmethod
    def _shipment_matches(
        shipment: ShipmentRecord,
        filters: Filters,
        window: tuple[datetime, datetime] | None,
    ) -> bool:
        if window is not None:
            first_day = month_start(shipment.month_year)
            if first_day is None or not window[0] <= first_day <= window[1]:
                return False
        if filters.region != ALL and shipment.region != filters.region:
            return False
        if filters.business_unit != ALL and shipment.business_unit.value != filters.business_unit:
            return False
        if filters.country != ALL and shipment.country != filters.country:
            return False
        return True


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _start_of(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return datetime.combine(value, time.min)
