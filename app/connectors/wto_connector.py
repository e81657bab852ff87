"""
app/connectors/wto_connector.py

WTO timeseries API connector for merchandise trade and tariff indicators.

Indicator codes are discovered by label search rather than hard-coded, and
each data query walks a short list of dimension variants because WTO
indicators disagree on which partner/product dimensions they require.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, Sequence

import requests

from app.config import ExternalHTTPSettings, WTOSettings
from app.connectors.base import BaseConnector, ConnectorRequestError, build_url, sanitize_url
from app.connectors.resilience import RetryPolicy
from app.domain.enrichment import LatestValue

logger = logging.getLogger(__name__)

COMMON_PARAMS = {"fmt": "json", "mode": "full", "lang": "1", "meta": "false"}
KEY_REJECTED_STATUS_CODES = {401, 403}

EXPORTS_LABELS = ("Total merchandise exports - monthly", "Total merchandise exports - quarterly")
IMPORTS_LABELS = ("Total merchandise imports - monthly", "Total merchandise imports - quarterly")
TARIFF_LABELS = ("Simple average duty", "HS MFN - Simple average ad valorem duty")

WORLD_CODE = "000"

_PERIOD_FIELDS = ("TIME_PERIOD", "Time", "Year", "Period", "TIME")
_VALUE_FIELDS = ("Value", "OBS_VALUE", "VALUE", "value")


@dataclass(frozen=True)
class DimensionInfo:
    """
    Dimension ids an indicator uses for partner (world) and product (total).
    """

    partner_key: str | None = None
    world_code: str | None = None
    product_key: str | None = None
    total_code: str | None = None


def _dataset(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        rows = payload.get("Dataset", payload.get("dataset"))
        if isinstance(rows, list):
            return rows
    return []


def _first_present(row: dict[str, Any], fields: Sequence[str]) -> Any:
    for name in fields:
        if row.get(name) is not None:
            return row[name]
    return None


def find_indicator_code(indicators: Iterable[Any], label_substrings: Sequence[str]) -> str | None:
    """
    Code of the first indicator whose label contains one of the substrings.

    Substrings are tried in order; matching is case-insensitive.
    """

    catalogue = [item for item in indicators if isinstance(item, dict)]
    for substring in label_substrings:
        needle = substring.lower()
        for indicator in catalogue:
            label = str(indicator.get("label") or indicator.get("name") or "")
            code = indicator.get("code")
            if code and needle in label.lower():
                return str(code)
    return None


def infer_dimensions(metadata: Any) -> DimensionInfo:
    """
    Find which dimensions take a world partner or a total product code.
    """

    partner_key = world_code = product_key = total_code = None
    dimensions = metadata.get("dimensions") if isinstance(metadata, dict) else None
    for dimension in dimensions or []:
        if not isinstance(dimension, dict):
            continue
        values = [value for value in dimension.get("values") or [] if isinstance(value, dict)]
        dimension_id = dimension.get("id")
        if any(value.get("code") == WORLD_CODE or value.get("label") == "World" for value in values):
            partner_key, world_code = dimension_id, WORLD_CODE
        if any(value.get("code") == "TO" or value.get("label") == "Total" for value in values):
            product_key, total_code = dimension_id, "TO"
        elif any(value.get("code") == "all" or value.get("label") == "All" for value in values):
            product_key, total_code = dimension_id, "all"
    return DimensionInfo(
        partner_key=partner_key,
        world_code=world_code,
        product_key=product_key,
        total_code=total_code,
    )


def pick_latest(payload: Any) -> tuple[str, float, str | None] | None:
    """
    Latest ``(period, value, unit)`` across every series in a data payload.

    Periods are compared as strings (``2024M03`` > ``2023M12``).
    """

    best: tuple[str, float, str | None] | None = None
    fallback_rows = payload.get("Value") if isinstance(payload, dict) else None
    for series in _dataset(payload):
        if not isinstance(series, dict):
            continue
        unit = series.get("Unit") or series.get("unit")
        rows: Any = series.get("Data")
        if not isinstance(rows, list):
            rows = series.get("Value")
        if not isinstance(rows, list):
            rows = fallback_rows
        if not isinstance(rows, list):
            # Flat payloads list observations directly in ``Dataset``.
            rows = [series]
        for row in rows:
            if not isinstance(row, dict):
                continue
            period_raw = _first_present(row, _PERIOD_FIELDS)
            value_raw = _first_present(row, _VALUE_FIELDS)
            if period_raw is None or value_raw is None:
                continue
            try:
                value = float(value_raw)
            except (TypeError, ValueError):
                continue
            if not math.isfinite(value):
                continue
            period = str(period_raw)
            if best is None or period > best[0]:
                best = (period, value, unit or row.get("Unit"))
    return best


def to_usd_bn(value: float, unit: str | None) -> float:
    """
    Convert a WTO value to USD billions, one decimal, based on its unit label.
    """

    lowered = (unit or "").lower()
    if "million" in lowered:
        return round(value / 1_000, 1)
    if "thousand" in lowered:
        return round(value / 1_000_000, 1)
    if "billion" in lowered:
        return round(value, 1)
    return round(value / 1_000_000_000, 1)


class WTOConnector(BaseConnector):
    """
    Connector for the WTO timeseries API.

    Requests carry the subscription key as a query parameter; the primary
    key is tried first and the secondary one only when the primary is
    rejected (401/403).
    """

    def __init__(
        self,
        *,
        settings: WTOSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
        retry_policy: RetryPolicy | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__(
            source="wto",
            http_settings=http_settings,
            session=session,
            retry_policy=retry_policy,
        )
        self._settings = settings
        self._today = today

    @property
    def enabled(self) -> bool:
        return self._settings.enabled and bool(self._settings.api_keys)

    def fetch_indicators(self) -> list[dict[str, Any]]:
        payload, _ = self._wto_json("/indicators", {})
        return [item for item in _dataset(payload) if isinstance(item, dict)]

    def fetch_indicator_metadata(self, indicator_code: str) -> dict[str, Any] | None:
        payload, _ = self._wto_json(f"/indicators/{indicator_code}", {})
        if isinstance(payload, list):
            payload = payload[0] if payload else None
        return payload if isinstance(payload, dict) else None

    def fetch_economies(self) -> dict[str, str]:
        """
        Map ISO3 codes to WTO reporter codes.
        """

        payload, _ = self._wto_json("/economies", {})
        mapping: dict[str, str] = {}
        for row in _dataset(payload):
            if not isinstance(row, dict):
                continue
            alpha3 = str(row.get("Alpha3Code") or row.get("iso3A") or "").upper()
            code = str(row.get("Code") or row.get("code") or "")
            if alpha3 and code:
                mapping[alpha3] = code
        return mapping

    def fetch_latest(
        self,
        indicator_code: str,
        reporter: str,
        *,
        dimensions: DimensionInfo | None = None,
        need_partner: bool = False,
        need_product: bool = False,
    ) -> LatestValue | None:
        """
        Latest observation for one reporter, trying each dimension variant.

        A variant that fails or returns no rows moves on to the next one;
        ``None`` means no variant produced data.
        """

        for params in self.param_variants(
            indicator_code,
            reporter,
            dimensions=dimensions,
            need_partner=need_partner,
            need_product=need_product,
        ):
            try:
                payload, url = self._wto_json("/data", params)
            except ConnectorRequestError as exc:
                logger.warning(
                    "WTO data variant failed indicator=%s reporter=%s params=%s error=%s",
                    indicator_code,
                    reporter,
                    sorted(params.items()),
                    exc,
                )
                continue
            latest = pick_latest(payload)
            if latest is not None:
                period, value, unit = latest
                return LatestValue(period=period, value=value, url=url, unit=unit)
        return None

    def param_variants(
        self,
        indicator_code: str,
        reporter: str,
        *,
        dimensions: DimensionInfo | None = None,
        need_partner: bool = False,
        need_product: bool = False,
    ) -> list[dict[str, str]]:
        """
        Distinct query-parameter sets to try for one data lookup, in order.
        """

        year = self._today().year
        base = {
            "i": indicator_code,
            "r": reporter,
            "ps": f"{year - self._settings.lookback_years}-{year}",
        }
        if need_partner and dimensions and dimensions.partner_key and dimensions.world_code:
            base[dimensions.partner_key] = dimensions.world_code
        if need_product and dimensions and dimensions.product_key and dimensions.total_code:
            base[dimensions.product_key] = dimensions.total_code

        candidates = [
            base,
            {**base, "p": WORLD_CODE},
            {**base, "p": WORLD_CODE, "px": "TO"},
            {**base, "p": WORLD_CODE, "pc": "TO"},
            {**base, "p": WORLD_CODE, "pc": "all"},
        ]
        variants: list[dict[str, str]] = []
        seen: set[tuple[tuple[str, str], ...]] = set()
        for candidate in candidates:
            marker = tuple(sorted(candidate.items()))
            if marker in seen:
                continue
            seen.add(marker)
            variants.append(candidate)
        return variants

    def _wto_json(self, path: str, params: dict[str, str]) -> tuple[Any, str]:
        """
        GET a WTO endpoint, rotating API keys on rejection.

        Returns the parsed payload and the sanitized request URL.
        """

        keys = self._settings.api_keys
        if not keys:
            raise ConnectorRequestError("wto: API keys are not configured.")

        url = f"{self._settings.base_url.rstrip('/')}{path}"
        last_error: ConnectorRequestError | None = None
        for index, key in enumerate(keys):
            query = {**COMMON_PARAMS, **params, "subscription-key": key}
            try:
                payload = self._request_json(
                    method="GET",
                    url=url,
                    params=query,
                    headers={"Accept": "application/json"},
                )
            except ConnectorRequestError as exc:
                last_error = exc
                if exc.status_code in KEY_REJECTED_STATUS_CODES and index + 1 < len(keys):
                    logger.warning("WTO key rejected status=%s; rotating to next key.", exc.status_code)
                    continue
                raise
            return payload, sanitize_url(build_url(url, query))

        raise last_error or ConnectorRequestError("wto: request failed.")
