"""
tests/test_insights_service.py

Pytest unit tests for InsightsService.

Metrics are produced by MetricsService from in-memory records so every
view is checked against the same joined data it sees in production.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from app.domain.filters import FilteredData
from app.domain.records import BusinessUnit
from app.services.insights_service import InsightsService
from app.services.metrics_service import MetricsService


@pytest.fixture()
def svc() -> InsightsService:
    return InsightsService()


@pytest.fixture()
def dataset(make_policy, make_shipment):
    policies = [
        make_policy(date_booked=datetime(2024, 2, 3), premium=200, named_assured="Acme"),
        make_policy(date_booked=datetime(2024, 2, 9), premium=200, named_assured="Acme"),
        make_policy(
            business_unit=BusinessUnit.AIR,
            date_booked=datetime(2024, 1, 20),
            premium=100,
            named_assured="Globex",
        ),
        make_policy(date_booked=datetime(2024, 5, 1), premium=999, named_assured="Initech"),
        make_policy(date_booked=datetime(2024, 2, 10), booked=False, named_assured="Acme"),
    ]
    shipments = [
        make_shipment(month_year="2024-02", count=100),
        make_shipment(business_unit=BusinessUnit.AIR, month_year="2024-01", count=50),
    ]
    metrics = MetricsService().compute(policies, shipments)
    assert metrics is not None
    return policies, shipments, metrics


class TestTrends:
    def test_monthly_trend_is_sorted_and_ignores_months_without_shipments(self, svc, dataset) -> None:
        policies, _, metrics = dataset

        trend = svc.monthly_trend(metrics, policies)

        assert [point.month_year for point in trend] == ["2024-01", "2024-02"]
        assert (trend[0].shipments, trend[0].insured, trend[0].premium) == (50, 1, 100)
        assert (trend[1].shipments, trend[1].insured, trend[1].premium) == (100, 2, 400)
        assert trend[1].conversion_rate == pytest.approx(2.0)

    def test_business_units_in_first_seen_order(self, svc, dataset) -> None:
        _, _, metrics = dataset

        units = svc.business_unit_breakdown(metrics)

        assert [unit.business_unit for unit in units] == ["Sea", "Air"]
        assert units[1].conversion_rate == pytest.approx(2.0)


class TestCustomers:
    def test_segments_cover_every_band(self, svc, make_policy) -> None:
        policies = [make_policy(named_assured="Big") for _ in range(25)]
        policies.append(make_policy(named_assured="Small", booked=False))

        segments = svc.customer_segments(policies)

        assert [segment.code for segment in segments] == ["A", "B", "C", "D"]
        by_code = {segment.code: segment for segment in segments}
        assert by_code["A"].customer_count == 0
        assert by_code["C"].customer_count == 1
        assert by_code["C"].customers[0].customer == "Big"
        assert by_code["C"].conversion_rate == pytest.approx(100.0)
        assert by_code["D"].booked_policies == 0
        assert by_code["D"].conversion_rate == 0.0

    def test_top_customers_ranked_by_booked_premium(self, svc, dataset) -> None:
        policies, _, _ = dataset

        ranked = svc.top_customers(policies)

        assert [customer.customer for customer in ranked] == ["Initech", "Acme", "Globex"]
        acme = ranked[1]
        assert (acme.total_premium, acme.policy_count, acme.avg_premium) == (400, 2, 200.0)
        assert len(svc.top_customers(policies, limit=1)) == 1


class TestOpportunities:
    def test_top_opportunities_need_more_than_fifty_shipments(self, svc, make_policy, make_shipment) -> None:
        shipments = [make_shipment(count=51), make_shipment(month_year="2024-02", count=50)]
        metrics = MetricsService().compute([make_policy()], shipments)

        opportunities = svc.top_opportunities(metrics)

        assert [record.shipment_count for record in opportunities] == [51]
        assert opportunities[0].opportunity == 50

    def test_rebate_potential(self, svc, make_policy, make_shipment) -> None:
        policies = [make_policy() for _ in range(100)]
        metrics = MetricsService().compute(policies, [make_shipment(count=1000)])

        (rebate,) = svc.rebate_potential(metrics)

        assert rebate.country == "GERMANY"
        assert rebate.conversion_rate == pytest.approx(10.0)
        assert rebate.uninsured_shipments == 900
        assert rebate.potential_rebate == pytest.approx(900 * 150 * 0.15)
        assert rebate.synergy_score == pytest.approx(0.9)

    def test_rebate_clamps_overinsured_countries(self, svc, make_policy, make_shipment) -> None:
        metrics = MetricsService().compute([make_policy() for _ in range(3)], [make_shipment(count=2)])

        (rebate,) = svc.rebate_potential(metrics)

        assert rebate.uninsured_shipments == 0
        assert rebate.potential_rebate == 0.0


class TestGeography:
    def test_penetration_can_exceed_one_hundred(self, svc, make_policy, make_shipment) -> None:
        policies = [make_policy(), make_policy(country="FRANCE", premium=500)]
        shipments = [make_shipment()]
        metrics = MetricsService().compute(policies, shipments)

        summary = svc.geographic_summary(metrics, policies, shipments)

        assert summary.countries_covered == 2
        assert summary.countries_with_shipments == 1
        assert summary.market_penetration == pytest.approx(200.0)
        assert summary.top_region == "Europe"
        assert summary.top_region_premium == 600

    def test_low_conversion_countries(self, svc, make_policy, make_shipment) -> None:
        shipments = [make_shipment(count=500), make_shipment(country="SPAIN", count=90)]
        policies = [make_policy()]
        metrics = MetricsService().compute(policies, shipments)

        summary = svc.geographic_summary(metrics, policies, shipments)

        assert [item.country for item in summary.low_conversion_countries] == ["GERMANY"]

    def test_market_share(self, svc, make_policy, make_shipment) -> None:
        metrics = MetricsService().compute([make_policy(premium=50)], [make_shipment()])

        share = svc.market_share(metrics, total_market_size=1000)

        assert share.share_pct == pytest.approx(5.0)
        assert svc.market_share(metrics, total_market_size=0).share_pct == 0.0


def test_build_report_assembles_every_view(svc, dataset) -> None:
    policies, shipments, metrics = dataset

    report = svc.build_report(metrics, FilteredData(policies=tuple(policies), shipments=tuple(shipments)))

    assert len(report.monthly_trend) == 2
    assert len(report.customer_segments) == 4
    assert report.top_customers[0].customer == "Initech"
    assert report.top_opportunities[0].shipment_count == 100
    assert report.market_share.total_premium == metrics.total_premium
