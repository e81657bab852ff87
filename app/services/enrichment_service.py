"""
app/services/enrichment_service.py

Best-effort trade enrichment for a country.

Combines WTO merchandise trade and tariff figures with World Bank trade
openness into one ``TradeProfile``. Lookups run on a small shared thread
pool, results are cached (long for hits, short for misses) and concurrent
lookups for the same key share one fetch. Every failure degrades to
``None``; nothing here raises to the caller except an invalid ISO3 code.
"""

from __future__ import annotations

import logging
import re
import time
from concurrent.futures import Future, ThreadPoolExecutor
from functools import lru_cache
from typing import Any, Callable

from app.config import (
    EnrichmentSettings,
    get_enrichment_settings,
    get_external_http_settings,
    get_world_bank_settings,
    get_wto_settings,
)
from app.connectors.resilience import CircuitBreaker, CircuitOpenError, TTLCache
from app.connectors.world_bank_connector import WorldBankConnector
from app.connectors.wto_connector import (
    EXPORTS_LABELS,
    IMPORTS_LABELS,
    TARIFF_LABELS,
    DimensionInfo,
    WTOConnector,
    find_indicator_code,
    infer_dimensions,
    to_usd_bn,
)
from app.domain.enrichment import (
    LatestValue,
    MerchandiseValue,
    MonthlyMerchandise,
    OpennessValue,
    TariffValue,
    TradeProfile,
)
from app.logging_utils import log_event

logger = logging.getLogger(__name__)

ISO3_PATTERN = re.compile(r"^[A-Z]{3}$")


def normalize_iso3(value: str) -> str:
    """
    Uppercase and validate a three-letter country code.

    Raises:
        ValueError: If ``value`` is not three ASCII letters.
    """

    iso3 = (value or "").strip().upper()
    if not ISO3_PATTERN.match(iso3):
        raise ValueError(f"Invalid ISO3 country code: {value!r}")
    return iso3


class EnrichmentService:
    """
    Coordinates cached, bounded-concurrency lookups against both connectors.
    """

    def __init__(
        self,
        *,
        wto: WTOConnector,
        world_bank: WorldBankConnector,
        settings: EnrichmentSettings,
        clock: Callable[[], float] = time.monotonic,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self._wto = wto
        self._world_bank = world_bank
        self._settings = settings
        self._cache: TTLCache[Any] = TTLCache(
            positive_ttl_seconds=settings.positive_ttl_seconds,
            negative_ttl_seconds=settings.negative_ttl_seconds,
            clock=clock,
        )
        self._economies_breaker = CircuitBreaker(
            name="wto_economies",
            cooldown_seconds=settings.breaker_cooldown_seconds,
            clock=clock,
        )
        self._executor = executor or ThreadPoolExecutor(
            max_workers=settings.max_parallel,
            thread_name_prefix="enrichment",
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_trade_profile(self, iso3: str) -> TradeProfile:
        """
        Fetch every enrichment part for ``iso3`` in parallel.

        Raises:
            ValueError: If ``iso3`` is not a three-letter code.
        """

        code = normalize_iso3(iso3)
        futures: dict[str, Future] = {
            "exports": self._executor.submit(self._safe, "exports", code, self.latest_exports),
            "imports": self._executor.submit(self._safe, "imports", code, self.latest_imports),
            "mfn_tariff": self._executor.submit(self._safe, "mfn_tariff", code, self.mfn_tariff),
            "trade_openness": self._executor.submit(self._safe, "trade_openness", code, self.trade_openness),
        }
        results = {name: future.result() for name, future in futures.items()}

        profile = TradeProfile(
            iso3=code,
            monthly_merchandise=MonthlyMerchandise(
                exports=results["exports"],
                imports=results["imports"],
            ),
            mfn_tariff=results["mfn_tariff"],
            trade_openness=results["trade_openness"],
        )
        log_event(
            logger,
            logging.INFO,
            "trade_profile_fetched",
            iso3=code,
            parts={name: value is not None for name, value in results.items()},
        )
        return profile

    def latest_exports(self, iso3: str) -> MerchandiseValue | None:
        return self._merchandise(iso3, EXPORTS_LABELS)

    def latest_imports(self, iso3: str) -> MerchandiseValue | None:
        return self._merchandise(iso3, IMPORTS_LABELS)

    def mfn_tariff(self, iso3: str) -> TariffValue | None:
        if not self._wto.enabled:
            return None
        indicator = self._indicator_code(TARIFF_LABELS)
        if indicator is None:
            return None
        latest = self._latest_value(indicator, iso3, need_partner=False, need_product=True)
        if latest is None:
            return None
        return TariffValue(year=latest.period, simple_avg_pct=latest.value, url=latest.url)

    def trade_openness(self, iso3: str) -> OpennessValue | None:
        if not self._world_bank.enabled:
            return None
        return self._cache.get_or_load(
            ("openness", iso3),
            lambda: self._guard("world_bank_openness", lambda: self._world_bank.fetch_trade_openness(iso3)),
        )

    def clear_cache(self) -> None:
        self._cache.clear()
        self._economies_breaker.reset()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)

    # ------------------------------------------------------------------
    # WTO lookups
    # ------------------------------------------------------------------

    def _merchandise(self, iso3: str, labels: tuple[str, ...]) -> MerchandiseValue | None:
        if not self._wto.enabled:
            return None
        indicator = self._indicator_code(labels)
        if indicator is None:
            return None
        latest = self._latest_value(indicator, iso3, need_partner=True, need_product=False)
        if latest is None:
            return None
        return MerchandiseValue(
            period=latest.period,
            value_usd_bn=to_usd_bn(latest.value, latest.unit),
            url=latest.url,
        )

    def _indicator_code(self, labels: tuple[str, ...]) -> str | None:
        def load() -> str | None:
            catalogue = self._cache.get_or_load(
                ("wto_indicators",),
                lambda: self._guard("wto_indicators", self._wto.fetch_indicators) or None,
            )
            if not catalogue:
                return None
            return find_indicator_code(catalogue, labels)

        return self._cache.get_or_load(("wto_indicator_code", labels), load)

    def _dimensions(self, indicator: str) -> DimensionInfo | None:
        metadata = self._cache.get_or_load(
            ("wto_indicator_meta", indicator),
            lambda: self._guard("wto_indicator_meta", lambda: self._wto.fetch_indicator_metadata(indicator)),
        )
        if metadata is None:
            return None
        return infer_dimensions(metadata)

    def _economies(self) -> dict[str, str]:
        """
        ISO3 to WTO reporter map, guarded by the circuit breaker.
        """

        def load() -> dict[str, str] | None:
            try:
                return self._economies_breaker.call(self._wto.fetch_economies) or None
            except CircuitOpenError:
                logger.info("WTO economies lookup skipped; circuit open.")
                return None
            except Exception as exc:  # noqa: BLE001
                logger.warning("WTO economies lookup failed error=%s", exc)
                return None

        return self._cache.get_or_load(("wto_economies",), load) or {}

    def _latest_value(
        self,
        indicator: str,
        iso3: str,
        *,
        need_partner: bool,
        need_product: bool,
    ) -> LatestValue | None:
        def load() -> LatestValue | None:
            dimensions = self._dimensions(indicator)

            def fetch(reporter: str) -> LatestValue | None:
                return self._guard(
                    "wto_data",
                    lambda: self._wto.fetch_latest(
                        indicator,
                        reporter,
                        dimensions=dimensions,
                        need_partner=need_partner,
                        need_product=need_product,
                    ),
                )

            latest = fetch(iso3)
            if latest is not None:
                return latest
            reporter = self._economies().get(iso3)
            if reporter and reporter != iso3:
                return fetch(reporter)
            return None

        return self._cache.get_or_load(("wto_latest", indicator, iso3, need_partner, need_product), load)

    # ------------------------------------------------------------------
    # Failure isolation
    # ------------------------------------------------------------------

    @staticmethod
    def _guard(label: str, func: Callable[[], Any]) -> Any:
        try:
            return func()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Enrichment lookup failed step=%s error=%s", label, exc)
            return None

    @staticmethod
    def _safe(label: str, iso3: str, func: Callable[[str], Any]) -> Any:
        try:
            return func(iso3)
        except Exception as exc:  # noqa: BLE001
            logger.error("Enrichment part failed part=%s iso3=%s error=%s", label, iso3, exc)
            return None


@lru_cache(maxsize=1)
def get_enrichment_service() -> EnrichmentService:
    """
    Build the process-wide enrichment service from environment settings.
    """

    http_settings = get_external_http_settings()
    return EnrichmentService(
        wto=WTOConnector(settings=get_wto_settings(), http_settings=http_settings),
        world_bank=WorldBankConnector(settings=get_world_bank_settings(), http_settings=http_settings),
        settings=get_enrichment_settings(),
    )
