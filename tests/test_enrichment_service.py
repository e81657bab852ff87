"""
tests/test_enrichment_service.py

EnrichmentService with in-memory connector doubles.

Coverage
--------
- Full trade profile assembly and unit conversion
- Partial failure isolation
- Shared caching of the indicator catalogue
- Reporter-code fallback through the economies map
- Disabled sources and invalid ISO3 input
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pytest

from app.config import EnrichmentSettings
from app.connectors.base import ConnectorRequestError
from app.domain.enrichment import LatestValue, OpennessValue
from app.services.enrichment_service import EnrichmentService, normalize_iso3

INDICATORS = [
    {"code": "ITS_MTV_MX", "name": "Total merchandise exports - monthly"},
    {"code": "ITS_MTV_MM", "name": "Total merchandise imports - monthly"},
    {"code": "TP_A_0010", "name": "MFN - Simple average duty - All products"},
]


class FakeWTO:
    def __init__(self, *, enabled: bool = True, reporters: dict[str, str] | None = None) -> None:
        self.enabled = enabled
        self.reporters = reporters or {}
        self.values: dict[tuple[str, str], LatestValue] = {}
        self.indicator_calls = 0
        self.latest_calls: list[tuple[str, str]] = []
        self.economies_calls = 0
        self._lock = threading.Lock()

    def fetch_indicators(self) -> list[dict[str, Any]]:
        with self._lock:
            self.indicator_calls += 1
        return INDICATORS

    def fetch_indicator_metadata(self, indicator_code: str) -> dict[str, Any] | None:
        return None

    def fetch_economies(self) -> dict[str, str]:
        with self._lock:
            self.economies_calls += 1
        return self.reporters

    def fetch_latest(self, indicator_code, reporter, *, dimensions=None, need_partner=False, need_product=False):
        with self._lock:
            self.latest_calls.append((indicator_code, reporter))
        return self.values.get((indicator_code, reporter))


class FakeWorldBank:
    def __init__(self, *, enabled: bool = True, fail: bool = False) -> None:
        self.enabled = enabled
        self.fail = fail
        self.calls = 0

    def fetch_trade_openness(self, iso3: str) -> OpennessValue | None:
        self.calls += 1
        if self.fail:
            raise ConnectorRequestError("world_bank: request failed after retries.")
        return OpennessValue(year=2022, value=88.4, url=f"https://wb.test/{iso3}")


def _latest(period: str, value: float, unit: str | None = "US$ million") -> LatestValue:
    return LatestValue(period=period, value=value, url="https://wto.test/data", unit=unit)


@pytest.fixture()
def executor():
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=True)


def _service(wto: FakeWTO, world_bank: FakeWorldBank, executor: ThreadPoolExecutor) -> EnrichmentService:
    return EnrichmentService(
        wto=wto,  # type: ignore[arg-type]
        world_bank=world_bank,  # type: ignore[arg-type]
        settings=EnrichmentSettings(),
        executor=executor,
    )


def test_normalize_iso3() -> None:
    assert normalize_iso3(" deu ") == "DEU"
    with pytest.raises(ValueError):
        normalize_iso3("DE")
    with pytest.raises(ValueError):
        normalize_iso3("D3U")


class TestTradeProfile:
    def test_full_profile(self, executor) -> None:
        wto = FakeWTO()
        wto.values[("ITS_MTV_MX", "DEU")] = _latest("2024M03", 130000)
        wto.values[("ITS_MTV_MM", "DEU")] = _latest("2024M03", 110000)
        wto.values[("TP_A_0010", "DEU")] = _latest("2023", 4.2, unit="Percent")

        profile = _service(wto, FakeWorldBank(), executor).get_trade_profile("deu")

        assert profile.iso3 == "DEU"
        assert profile.monthly_merchandise.exports is not None
        assert profile.monthly_merchandise.exports.value_usd_bn == pytest.approx(130.0)
        assert profile.monthly_merchandise.imports is not None
        assert profile.monthly_merchandise.imports.period == "2024M03"
        assert profile.mfn_tariff is not None
        assert (profile.mfn_tariff.year, profile.mfn_tariff.simple_avg_pct) == ("2023", 4.2)
        assert profile.trade_openness is not None
        assert profile.trade_openness.value == pytest.approx(88.4)

    def test_failing_source_only_blanks_its_part(self, executor) -> None:
        wto = FakeWTO()
        wto.values[("ITS_MTV_MX", "DEU")] = _latest("2024M03", 130000)

        profile = _service(wto, FakeWorldBank(fail=True), executor).get_trade_profile("DEU")

        assert profile.trade_openness is None
        assert profile.monthly_merchandise.exports is not None
        assert profile.monthly_merchandise.imports is None
        assert profile.mfn_tariff is None

    def test_invalid_iso3_raises(self, executor) -> None:
        with pytest.raises(ValueError):
            _service(FakeWTO(), FakeWorldBank(), executor).get_trade_profile("Germany")

    def test_disabled_sources_make_no_calls(self, executor) -> None:
        wto = FakeWTO(enabled=False)
        world_bank = FakeWorldBank(enabled=False)

        profile = _service(wto, world_bank, executor).get_trade_profile("DEU")

        assert profile.monthly_merchandise.exports is None
        assert profile.trade_openness is None
        assert wto.indicator_calls == 0
        assert world_bank.calls == 0


class TestCaching:
    def test_repeat_lookups_hit_the_cache(self, executor) -> None:
        wto = FakeWTO()
        wto.values[("ITS_MTV_MX", "DEU")] = _latest("2024M03", 130000)
        world_bank = FakeWorldBank()
        service = _service(wto, world_bank, executor)

        service.get_trade_profile("DEU")
        calls_after_first = len(wto.latest_calls)
        service.get_trade_profile("DEU")

        assert wto.indicator_calls == 1
        assert len(wto.latest_calls) == calls_after_first
        assert world_bank.calls == 1

    def test_clear_cache_forces_refetch(self, executor) -> None:
        world_bank = FakeWorldBank()
        service = _service(FakeWTO(enabled=False), world_bank, executor)

        service.trade_openness("DEU")
        service.clear_cache()
        service.trade_openness("DEU")

        assert world_bank.calls == 2


class TestReporterFallback:
    def test_falls_back_to_wto_reporter_code(self, executor) -> None:
        wto = FakeWTO(reporters={"DEU": "276"})
        wto.values[("ITS_MTV_MX", "276")] = _latest("2024M01", 125000)

        exports = _service(wto, FakeWorldBank(), executor).latest_exports("DEU")

        assert exports is not None
        assert exports.value_usd_bn == pytest.approx(125.0)
        assert wto.latest_calls == [("ITS_MTV_MX", "DEU"), ("ITS_MTV_MX", "276")]

    def test_unknown_reporter_returns_none(self, executor) -> None:
        wto = FakeWTO(reporters={})

        assert _service(wto, FakeWorldBank(), executor).latest_imports("XYZ") is None
        assert wto.economies_calls == 1
