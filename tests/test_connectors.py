"""
tests/test_connectors.py

HTTP connectors against a scripted fake ``requests`` session.

No network access: every response is a real ``requests.Response`` built in
memory, and retries sleep through a recording no-op.
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any

import pytest
import requests

from app.config import ExternalHTTPSettings, WorldBankSettings, WTOSettings
from app.connectors.base import ConnectorRequestError, sanitize_url
from app.connectors.resilience import RetryPolicy
from app.connectors.world_bank_connector import WorldBankConnector
from app.connectors.wto_connector import (
    DimensionInfo,
    WTOConnector,
    find_indicator_code,
    infer_dimensions,
    pick_latest,
    to_usd_bn,
)

HTTP_SETTINGS = ExternalHTTPSettings(rate_limit_per_second=0)


def make_response(status_code: int, payload: Any = None, *, text: str | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    body = text if text is not None else json.dumps(payload)
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    response.url = "https://example.test/"
    return response


class FakeSession:
    def __init__(self, *responses: requests.Response | Exception) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def request(self, method, url, params=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": dict(params or {}), "timeout": timeout})
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture()
def sleeps() -> list[float]:
    return []


@pytest.fixture()
def retry_policy(sleeps: list[float]) -> RetryPolicy:
    return RetryPolicy(max_retries=2, backoff_initial_seconds=0.5, jitter_seconds=0.0, sleep=sleeps.append)


def _world_bank(session: FakeSession, retry_policy: RetryPolicy) -> WorldBankConnector:
    return WorldBankConnector(
        settings=WorldBankSettings(),
        http_settings=HTTP_SETTINGS,
        session=session,  # type: ignore[arg-type]
        retry_policy=retry_policy,
    )


def _wto(session: FakeSession, retry_policy: RetryPolicy, **overrides: Any) -> WTOConnector:
    settings = WTOSettings(primary_api_key="key-1", secondary_api_key="key-2", **overrides)
    return WTOConnector(
        settings=settings,
        http_settings=HTTP_SETTINGS,
        session=session,  # type: ignore[arg-type]
        retry_policy=retry_policy,
        today=lambda: date(2024, 5, 1),
    )


OPENNESS_PAYLOAD = [
    {"page": 1, "pages": 1},
    [
        {"date": "2023", "value": None},
        {"date": "2022", "value": 55.5},
        {"date": "2021", "value": 51.0},
    ],
]


# ---------------------------------------------------------------------------
# Shared retry loop
# ---------------------------------------------------------------------------


class TestRetryLoop:
    def test_retryable_status_then_success(self, retry_policy, sleeps) -> None:
        session = FakeSession(make_response(503, {}), make_response(200, OPENNESS_PAYLOAD))

        result = _world_bank(session, retry_policy).fetch_trade_openness("deu")

        assert result is not None
        assert len(session.calls) == 2
        assert sleeps == [0.5]

    def test_timeouts_are_retried(self, retry_policy, sleeps) -> None:
        session = FakeSession(requests.Timeout("slow"), make_response(200, OPENNESS_PAYLOAD))

        assert _world_bank(session, retry_policy).fetch_trade_openness("DEU") is not None
        assert sleeps == [0.5]

    def test_non_retryable_status_fails_fast(self, retry_policy, sleeps) -> None:
        session = FakeSession(make_response(404, {"message": "not found"}))

        with pytest.raises(ConnectorRequestError) as exc_info:
            _world_bank(session, retry_policy).fetch_trade_openness("DEU")

        assert exc_info.value.status_code == 404
        assert len(session.calls) == 1
        assert sleeps == []

    def test_non_json_body_exhausts_retries(self, retry_policy, sleeps) -> None:
        session = FakeSession(*(make_response(200, text="<html>busy</html>") for _ in range(3)))

        with pytest.raises(ConnectorRequestError):
            _world_bank(session, retry_policy).fetch_trade_openness("DEU")

        assert len(session.calls) == 3
        assert sleeps == [0.5, 1.0]


def test_sanitize_url_drops_credentials() -> None:
    url = "https://api.wto.org/timeseries/v1/data?i=X&subscription-key=secret&r=276"

    assert sanitize_url(url) == "https://api.wto.org/timeseries/v1/data?i=X&r=276"
    assert sanitize_url("https://example.test/path") == "https://example.test/path"


# ---------------------------------------------------------------------------
# World Bank
# ---------------------------------------------------------------------------


class TestWorldBankConnector:
    def test_first_non_null_value_wins(self, retry_policy) -> None:
        session = FakeSession(make_response(200, OPENNESS_PAYLOAD))

        result = _world_bank(session, retry_policy).fetch_trade_openness("deu")

        assert result is not None
        assert (result.year, result.value) == (2022, 55.5)
        assert "/country/DEU/indicator/TG.VAL.TOTL.GD.ZS" in result.url
        assert "MRV=10" in result.url
        assert session.calls[0]["params"] == {"format": "json", "MRV": 10}

    def test_error_payload_shape_returns_none(self, retry_policy) -> None:
        session = FakeSession(make_response(200, [{"message": [{"id": "120", "value": "Invalid value"}]}]))

        assert _world_bank(session, retry_policy).fetch_trade_openness("XXX") is None

    def test_all_null_values_return_none(self, retry_policy) -> None:
        session = FakeSession(make_response(200, [{}, [{"date": "2023", "value": None}]]))

        assert _world_bank(session, retry_policy).fetch_trade_openness("DEU") is None


# ---------------------------------------------------------------------------
# WTO payload helpers
# ---------------------------------------------------------------------------


class TestWTOHelpers:
    def test_find_indicator_code_tries_labels_in_order(self) -> None:
        catalogue = [
            {"code": "Q", "name": "Total merchandise exports - quarterly"},
            {"code": "M", "name": "Total merchandise exports - monthly"},
        ]

        assert find_indicator_code(catalogue, ("exports - monthly", "exports - quarterly")) == "M"
        assert find_indicator_code(catalogue, ("TOTAL MERCHANDISE EXPORTS - QUARTERLY",)) == "Q"
        assert find_indicator_code(catalogue, ("tariff",)) is None

    def test_infer_dimensions(self) -> None:
        metadata = {
            "dimensions": [
                {"id": "p", "values": [{"code": "000", "label": "World"}]},
                {"id": "pc", "values": [{"code": "TO", "label": "Total"}]},
            ]
        }

        assert infer_dimensions(metadata) == DimensionInfo("p", "000", "pc", "TO")
        assert infer_dimensions(None) == DimensionInfo()

    def test_pick_latest_across_series(self) -> None:
        payload = {
            "Dataset": [
                {"Unit": "US$ million", "Data": [{"TIME_PERIOD": "2023M12", "Value": 90}]},
                {"Unit": "US$ million", "Data": [{"TIME_PERIOD": "2024M03", "Value": 130000}]},
            ]
        }

        assert pick_latest(payload) == ("2024M03", 130000.0, "US$ million")

    def test_pick_latest_flat_rows(self) -> None:
        payload = {"Dataset": [{"Year": 2022, "Value": 5.1}, {"Year": 2023, "Value": "4.8"}]}

        assert pick_latest(payload) == ("2023", 4.8, None)

    def test_pick_latest_without_data(self) -> None:
        assert pick_latest({"Dataset": []}) is None
        assert pick_latest({"Dataset": [{"Year": 2023, "Value": "n/a"}]}) is None

    @pytest.mark.parametrize(
        ("value", "unit", "expected"),
        [
            (130000, "US$ million", 130.0),
            (2_500_000, "US$ thousand", 2.5),
            (1.26, "US$ billion", 1.3),
            (3.2e9, None, 3.2),
        ],
    )
    def test_to_usd_bn(self, value: float, unit: str | None, expected: float) -> None:
        assert to_usd_bn(value, unit) == pytest.approx(expected)


# ---------------------------------------------------------------------------
# WTO connector
# ---------------------------------------------------------------------------


class TestWTOConnector:
    def test_disabled_without_keys(self, retry_policy) -> None:
        connector = WTOConnector(
            settings=WTOSettings(),
            http_settings=HTTP_SETTINGS,
            session=FakeSession(),  # type: ignore[arg-type]
            retry_policy=retry_policy,
        )

        assert connector.enabled is False
        with pytest.raises(ConnectorRequestError):
            connector.fetch_indicators()

    def test_rejected_primary_key_rotates_to_secondary(self, retry_policy) -> None:
        session = FakeSession(
            make_response(401, {"statusCode": 401}),
            make_response(200, [{"code": "ITS_MTV_MX", "name": "Total merchandise exports - monthly"}]),
        )

        indicators = _wto(session, retry_policy).fetch_indicators()

        assert indicators[0]["code"] == "ITS_MTV_MX"
        assert [call["params"]["subscription-key"] for call in session.calls] == ["key-1", "key-2"]

    def test_param_variants_are_distinct(self, retry_policy) -> None:
        connector = _wto(FakeSession(), retry_policy)

        variants = connector.param_variants(
            "ITS_MTV_MX",
            "DEU",
            dimensions=DimensionInfo(partner_key="p", world_code="000"),
            need_partner=True,
        )

        assert variants[0] == {"i": "ITS_MTV_MX", "r": "DEU", "ps": "2018-2024", "p": "000"}
        assert len(variants) == 4
        assert len({tuple(sorted(variant.items())) for variant in variants}) == 4

    def test_fetch_latest_walks_variants(self, retry_policy) -> None:
        session = FakeSession(
            make_response(200, {"Dataset": []}),
            make_response(
                200,
                {
                    "Dataset": [
                        {
                            "Unit": "US$ million",
                            "Data": [
                                {"TIME_PERIOD": "2024M02", "Value": 120000},
                                {"TIME_PERIOD": "2024M03", "Value": 130000},
                            ],
                        }
                    ]
                },
            ),
        )

        latest = _wto(session, retry_policy).fetch_latest("ITS_MTV_MX", "DEU")

        assert latest is not None
        assert (latest.period, latest.value, latest.unit) == ("2024M03", 130000.0, "US$ million")
        assert "p=000" in latest.url
        assert "subscription-key" not in latest.url
        assert session.calls[1]["params"]["p"] == "000"

    def test_failed_variant_is_skipped(self, sleeps) -> None:
        session = FakeSession(
            make_response(400, {"message": "bad dimension"}),
            make_response(200, {"Dataset": [{"Year": 2023, "Value": 4.1}]}),
        )

        latest = _wto(session, RetryPolicy(max_retries=0, sleep=sleeps.append)).fetch_latest("TP_A_0010", "DEU")

        assert latest is not None
        assert latest.value == pytest.approx(4.1)

    def test_economies_map_iso3_to_reporter_code(self, retry_policy) -> None:
        session = FakeSession(
            make_response(200, [{"Alpha3Code": "deu", "Code": "276"}, {"Code": "000"}]),
        )

        assert _wto(session, retry_policy).fetch_economies() == {"DEU": "276"}
