"""
app/services/metrics_service.py

Deterministic conversion metrics engine.

Joins filtered policies and shipments on ``(month, country, business unit)``
and rolls the result up by region and by country. Operates on in-memory
records only; the caller supplies the filtered collections.

Formulas
--------
Conversion Rate  = 100 * insured_count / shipment_count   (0 when count is 0)
Opportunity      = shipment_count - insured_count          (not clamped)
Overall Rate     = 100 * booked_policies / total_shipments (0 when total is 0)
Total Premium    = sum of premium over booked policies
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Sequence

from app.domain.records import (
    BusinessUnit,
    ConversionMetrics,
    ConversionRecord,
    CountryMetrics,
    PolicyRecord,
    RegionMetrics,
    ShipmentRecord,
)

logger = logging.getLogger(__name__)

JoinKey = tuple[str, str, BusinessUnit]


def conversion_rate(insured: int, total: int) -> float:
    """
    Percentage of ``total`` covered by ``insured``; 0 when ``total`` is not positive.
    """

    if total <= 0:
        return 0.0
    return 100.0 * insured / total


class MetricsService:
    """
    Stateless metrics engine.

    Usage::

        service = MetricsService()
        metrics = service.compute(filtered.policies, filtered.shipments)
        if metrics is not None:
            print(metrics.overall_conversion_rate)
    """

    # ------------------------------------------------------------------
    # Join
    # ------------------------------------------------------------------

    def insured_index(self, policies: Sequence[PolicyRecord]) -> Counter[JoinKey]:
        """
        Count booked policies per join key.

        Policies missing a month key or an operating country cannot be
        joined and are left out of the index (they still count towards
        ``total_insured``).
        """

        index: Counter[JoinKey] = Counter()
        for policy in policies:
            if not policy.is_booked:
                continue
            if not policy.month_year or not policy.operating_country:
                continue
            index[(policy.month_year, policy.operating_country, policy.business_unit)] += 1
        return index

    def conversion_records(
        self,
        policies: Sequence[PolicyRecord],
        shipments: Sequence[ShipmentRecord],
    ) -> list[ConversionRecord]:
        index = self.insured_index(policies)
        records: list[ConversionRecord] = []
        for shipment in shipments:
            insured = 0
            if shipment.country is not None:
                insured = index.get((shipment.month_year, shipment.country, shipment.business_unit), 0)
            records.append(
                ConversionRecord(
                    country=shipment.country,
                    business_unit=shipment.business_unit,
                    month_year=shipment.month_year,
                    shipment_count=shipment.shipment_count,
                    region=shipment.region,
                    insured_count=insured,
                    conversion_rate=conversion_rate(insured, shipment.shipment_count) if insured > 0 else 0.0,
                    opportunity=shipment.shipment_count - insured,
                )
            )
        return records

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def compute(
        self,
        policies: Sequence[PolicyRecord],
        shipments: Sequence[ShipmentRecord],
    ) -> ConversionMetrics | None:
        """
        Compute conversion metrics for one filtered dataset.

        Returns
        -------
        ConversionMetrics | None
            ``None`` when either collection is empty (nothing to report).
        """

        if not policies or not shipments:
            logger.debug(
                "Metrics skipped: insufficient data policies=%d shipments=%d",
                len(policies),
                len(shipments),
            )
            return None

        conversion_data = self.conversion_records(policies, shipments)
        booked = [policy for policy in policies if policy.is_booked]

        total_shipments = sum(shipment.shipment_count for shipment in shipments)
        total_insured = len(booked)
        total_premium = sum(policy.total_premium_usd for policy in booked)

        metrics = ConversionMetrics(
            total_shipments=total_shipments,
            total_insured=total_insured,
            overall_conversion_rate=conversion_rate(total_insured, total_shipments),
            total_premium=total_premium,
            conversion_data=tuple(conversion_data),
            region_metrics=self.region_rollup(conversion_data, policies),
            country_metrics=self.country_rollup(shipments, booked),
        )
        logger.debug(
            "Metrics computed shipments=%d insured=%d premium=%d regions=%d",
            total_shipments,
            total_insured,
            total_premium,
            len(metrics.region_metrics),
        )
        return metrics

    # ------------------------------------------------------------------
    # Rollups
    # ------------------------------------------------------------------

    def region_rollup(
        self,
        conversion_data: Sequence[ConversionRecord],
        policies: Sequence[PolicyRecord],
    ) -> dict[str, RegionMetrics]:
        """
        Fold shipments and booked policies into one entry per region.

        Every region seen in either collection gets an entry; the side with
        no data stays zero. Records without a region are not rolled up.
        """

        totals: dict[str, list[int]] = {}

        def bucket(region: str) -> list[int]:
            # [shipments, insured, premium, booked policies]
            return totals.setdefault(region, [0, 0, 0, 0])

        for record in conversion_data:
            if not record.region:
                continue
            entry = bucket(record.region)
            entry[0] += record.shipment_count
            entry[1] += record.insured_count

        for policy in policies:
            if not policy.region:
                continue
            entry = bucket(policy.region)
            if policy.is_booked:
                entry[2] += policy.total_premium_usd
                entry[3] += 1

        return {
            region: RegionMetrics(
                total_shipments=shipments,
                insured_shipments=insured,
                total_premium=premium,
                booked_policies=booked,
                conversion_rate=conversion_rate(insured, shipments),
            )
            for region, (shipments, insured, premium, booked) in totals.items()
        }

    def country_rollup(
        self,
        shipments: Sequence[ShipmentRecord],
        booked_policies: Sequence[PolicyRecord],
    ) -> dict[str, CountryMetrics]:
        """
        Shipment volume per shipment country against booked policies per
        operating country.
        """

        totals: dict[str, list[int]] = {}
        for shipment in shipments:
            if not shipment.country:
                continue
            totals.setdefault(shipment.country, [0, 0, 0])[0] += shipment.shipment_count
        for policy in booked_policies:
            if not policy.operating_country:
                continue
            entry = totals.setdefault(policy.operating_country, [0, 0, 0])
            entry[1] += 1
            entry[2] += policy.total_premium_usd

        return {
            country: CountryMetrics(
                total_shipments=shipment_total,
                insured_shipments=insured,
                total_premium=premium,
                conversion_rate=conversion_rate(insured, shipment_total),
                avg_premium=premium / insured if insured > 0 else 0.0,
            )
            for country, (shipment_total, insured, premium) in totals.items()
        }
