"""
app/services/insights_service.py

Derived insight views over computed conversion metrics.

Each view is a pure function of a ``ConversionMetrics`` object and/or the
filtered ledgers that produced it. Nothing here reads the clock or mutates
its inputs.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Sequence

import pandas as pd

from app.domain.filters import FilteredData
from app.domain.insights import (
    BusinessUnitSummary,
    CountryConversion,
    CustomerActivity,
    CustomerSegment,
    GeographicSummary,
    InsightsReport,
    MarketShare,
    MonthlyTrendPoint,
    RebateOpportunity,
    TopCustomer,
)
from app.domain.records import ConversionMetrics, ConversionRecord, PolicyRecord, ShipmentRecord
from app.services.metrics_service import conversion_rate

logger = logging.getLogger(__name__)

UNKNOWN_CUSTOMER = "Unknown"

# (code, label, minimum policies, maximum policies)
SEGMENT_BANDS: tuple[tuple[str, str, int, int | None], ...] = (
    ("A", "Enterprise (1k+/yr)", 1000, None),
    ("B", "Large (100-999/yr)", 100, 999),
    ("C", "Medium (20-99/yr)", 20, 99),
    ("D", "Small (1-19/yr)", 1, 19),
)

ASSUMED_PREMIUM_PER_SHIPMENT = 150.0
REBATE_RATE = 0.15
GLOBAL_CARGO_MARKET_USD = 22.1e9

LOW_CONVERSION_RATE_PCT = 5.0
LOW_CONVERSION_MIN_SHIPMENTS = 100
OPPORTUNITY_MIN_SHIPMENTS = 50


class InsightsService:
    """
    Stateless builder for the dashboard insight views.

    Responsibilities:
        - Time, business-unit and geographic breakdowns of the metrics.
        - Customer segmentation and ranking from the policy ledger.
        - Rebate and market-share estimates from fixed assumptions.

    Not responsible for:
        - Filtering (see ``FilterService``).
        - The join itself (see ``MetricsService``).
    """

    def monthly_trend(
        self,
        metrics: ConversionMetrics,
        policies: Sequence[PolicyRecord],
    ) -> list[MonthlyTrendPoint]:
        """
        Shipments, insured count, premium and rate per month, oldest first.

        Premium is only attributed to months that already appear in the
        shipment data.
        """

        if not metrics.conversion_data:
            return []

        frame = pd.DataFrame(
            [(record.month_year, record.shipment_count, record.insured_count) for record in metrics.conversion_data],
            columns=["month_year", "shipments", "insured"],
        )
        grouped = frame.groupby("month_year", sort=True)[["shipments", "insured"]].sum()

        premium_by_month: dict[str, int] = defaultdict(int)
        for policy in policies:
            if policy.is_booked and policy.month_year in grouped.index:
                premium_by_month[policy.month_year] += policy.total_premium_usd

        return [
            MonthlyTrendPoint(
                month_year=str(month),
                shipments=int(row.shipments),
                insured=int(row.insured),
                premium=premium_by_month.get(str(month), 0),
                conversion_rate=conversion_rate(int(row.insured), int(row.shipments)),
            )
            for month, row in grouped.iterrows()
        ]

    def business_unit_breakdown(self, metrics: ConversionMetrics) -> list[BusinessUnitSummary]:
        """
        Shipments, insured count and rate per business unit, in first-seen order.
        """

        if not metrics.conversion_data:
            return []

        frame = pd.DataFrame(
            [
                (record.business_unit.value, record.shipment_count, record.insured_count)
                for record in metrics.conversion_data
            ],
            columns=["business_unit", "shipments", "insured"],
        )
        grouped = frame.groupby("business_unit", sort=False)[["shipments", "insured"]].sum()
        return [
            BusinessUnitSummary(
                business_unit=str(unit),
                shipments=int(row.shipments),
                insured=int(row.insured),
                conversion_rate=conversion_rate(int(row.insured), int(row.shipments)),
            )
            for unit, row in grouped.iterrows()
        ]

    def customer_segments(self, policies: Sequence[PolicyRecord]) -> list[CustomerSegment]:
        """
        Bucket ``(named assured, business unit)`` pairs by policy volume.

        Args:
            policies: Filtered policy records, booked or not.

        Returns:
            One segment per band in ``SEGMENT_BANDS`` order, including empty
            bands. Customers inside a band keep first-seen order.
        """

        activity: dict[tuple[str, str], list] = {}
        for policy in policies:
            customer = policy.named_assured or UNKNOWN_CUSTOMER
            key = (customer, policy.business_unit.value)
            # [country, total policies, booked policies]
            entry = activity.setdefault(key, [policy.named_assured_country, 0, 0])
            entry[1] += 1
            if policy.is_booked:
                entry[2] += 1

        members: dict[str, list[CustomerActivity]] = {code: [] for code, _, _, _ in SEGMENT_BANDS}
        for (customer, business_unit), (country, total, booked) in activity.items():
            band = self._band_for(total)
            if band is None:
                continue
            members[band].append(
                CustomerActivity(
                    customer=customer,
                    country=country,
                    business_unit=business_unit,
                    total_policies=total,
                    booked_policies=booked,
                    conversion_rate=conversion_rate(booked, total),
                )
            )

        segments: list[CustomerSegment] = []
        for code, label, minimum, maximum in SEGMENT_BANDS:
            customers = members[code]
            total = sum(customer.total_policies for customer in customers)
            booked = sum(customer.booked_policies for customer in customers)
            segments.append(
                CustomerSegment(
                    code=code,
                    label=label,
                    min_policies=minimum,
                    max_policies=maximum,
                    customer_count=len(customers),
                    total_policies=total,
                    booked_policies=booked,
                    conversion_rate=conversion_rate(booked, total),
                    customers=tuple(customers),
                )
            )
        return segments

    def top_customers(self, policies: Sequence[PolicyRecord], limit: int | None = 10) -> list[TopCustomer]:
        """
        Named assureds ranked by booked premium, highest first.
        """

        totals: dict[str, list] = {}
        for policy in policies:
            if not policy.is_booked:
                continue
            customer = policy.named_assured or UNKNOWN_CUSTOMER
            # [country, business unit, premium, policies]
            entry = totals.setdefault(
                customer,
                [policy.named_assured_country, policy.business_unit.value, 0, 0],
            )
            entry[2] += policy.total_premium_usd
            entry[3] += 1

        ranked = sorted(
            (
                TopCustomer(
                    customer=customer,
                    country=country,
                    business_unit=business_unit,
                    total_premium=premium,
                    policy_count=count,
                    avg_premium=premium / count if count > 0 else 0.0,
                )
                for customer, (country, business_unit, premium, count) in totals.items()
            ),
            key=lambda item: item.total_premium,
            reverse=True,
        )
        return ranked if limit is None else ranked[:limit]

    def top_opportunities(
        self,
        metrics: ConversionMetrics,
        *,
        min_shipments: int = OPPORTUNITY_MIN_SHIPMENTS,
        limit: int = 20,
    ) -> list[ConversionRecord]:
        """
        Largest uninsured buckets among those with more than ``min_shipments``.
        """

        candidates = [record for record in metrics.conversion_data if record.shipment_count > min_shipments]
        candidates.sort(key=lambda record: record.opportunity, reverse=True)
        return candidates[:limit]

    def rebate_potential(
        self,
        metrics: ConversionMetrics,
        *,
        premium_per_shipment: float = ASSUMED_PREMIUM_PER_SHIPMENT,
        rebate_rate: float = REBATE_RATE,
    ) -> list[RebateOpportunity]:
        """
        Per-country rebate estimate from uninsured shipment volume.

        ``synergy_score = (shipments / 1000) * (100 - rate) / 100`` so large,
        poorly converted countries rank high. Uninsured volume is clamped at
        zero here even though ``opportunity`` itself is not.
        """

        totals: dict[str, list[int]] = {}
        for record in metrics.conversion_data:
            if not record.country:
                continue
            entry = totals.setdefault(record.country, [0, 0])
            entry[0] += record.shipment_count
            entry[1] += record.insured_count

        opportunities: list[RebateOpportunity] = []
        for country, (shipments, insured) in totals.items():
            rate = conversion_rate(insured, shipments)
            uninsured = max(0, shipments - insured)
            opportunities.append(
                RebateOpportunity(
                    country=country,
                    total_shipments=shipments,
                    insured_shipments=insured,
                    conversion_rate=rate,
                    uninsured_shipments=uninsured,
                    synergy_score=(shipments / 1000) * ((100 - rate) / 100),
                    potential_rebate=uninsured * premium_per_shipment * rebate_rate,
                )
            )
        opportunities.sort(key=lambda item: item.potential_rebate, reverse=True)
        return opportunities

    def geographic_summary(
        self,
        metrics: ConversionMetrics,
        policies: Sequence[PolicyRecord],
        shipments: Sequence[ShipmentRecord],
    ) -> GeographicSummary:
        """
        Coverage and penetration across countries and regions.

        Penetration is the share of shipping countries that also have booked
        policies; it can exceed 100 when policies cover countries with no
        shipments in the filtered data.
        """

        shipping_countries = {shipment.country for shipment in shipments if shipment.country}
        covered_countries = {
            policy.operating_country for policy in policies if policy.is_booked and policy.operating_country
        }

        top_region: str | None = None
        top_premium = 0
        for region, region_metrics in metrics.region_metrics.items():
            if top_region is None or region_metrics.total_premium > top_premium:
                top_region = region
                top_premium = region_metrics.total_premium

        low_conversion = sorted(
            (
                CountryConversion(
                    country=country,
                    shipments=country_metrics.total_shipments,
                    insured=country_metrics.insured_shipments,
                    conversion_rate=country_metrics.conversion_rate,
                )
                for country, country_metrics in metrics.country_metrics.items()
                if country_metrics.conversion_rate < LOW_CONVERSION_RATE_PCT
                and country_metrics.total_shipments > LOW_CONVERSION_MIN_SHIPMENTS
            ),
            key=lambda item: item.shipments,
            reverse=True,
        )

        return GeographicSummary(
            countries_covered=len(covered_countries),
            countries_with_shipments=len(shipping_countries),
            market_penetration=conversion_rate(len(covered_countries), len(shipping_countries)),
            top_region=top_region,
            top_region_premium=top_premium,
            low_conversion_countries=tuple(low_conversion),
        )

    def market_share(
        self,
        metrics: ConversionMetrics,
        *,
        total_market_size: float = GLOBAL_CARGO_MARKET_USD,
    ) -> MarketShare:
        share = 100.0 * metrics.total_premium / total_market_size if total_market_size > 0 else 0.0
        return MarketShare(
            total_market_size=total_market_size,
            total_premium=metrics.total_premium,
            share_pct=share,
        )

    def build_report(self, metrics: ConversionMetrics, filtered: FilteredData) -> InsightsReport:
        """
        Assemble every insight view for one filter selection.
        """

        report = InsightsReport(
            monthly_trend=tuple(self.monthly_trend(metrics, filtered.policies)),
            business_units=tuple(self.business_unit_breakdown(metrics)),
            customer_segments=tuple(self.customer_segments(filtered.policies)),
            top_customers=tuple(self.top_customers(filtered.policies)),
            top_opportunities=tuple(self.top_opportunities(metrics)),
            rebate_potential=tuple(self.rebate_potential(metrics)),
            geographic=self.geographic_summary(metrics, filtered.policies, filtered.shipments),
            market_share=self.market_share(metrics),
        )
        logger.debug(
            "Insights built months=%d customers=%d countries=%d",
            len(report.monthly_trend),
            len(report.top_customers),
            len(report.rebate_potential),
        )
        return report

    @staticmethod
    def _band_for(policy_count: int) -> str | None:
        for code, _label, minimum, _maximum in SEGMENT_BANDS:
            if policy_count >= minimum:
                return code
        return None
