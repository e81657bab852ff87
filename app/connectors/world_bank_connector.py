"""
app/connectors/world_bank_connector.py

World Bank connector for the trade-openness indicator.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import ExternalHTTPSettings, WorldBankSettings
from app.connectors.base import BaseConnector, build_url
from app.connectors.resilience import RetryPolicy
from app.domain.enrichment import OpennessValue

logger = logging.getLogger(__name__)


class WorldBankConnector(BaseConnector):
    """
    Connector for trade (% of GDP) figures from the World Bank API.
    """

    def __init__(
        self,
        *,
        settings: WorldBankSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        super().__init__(
            source="world_bank",
            http_settings=http_settings,
            session=session,
            retry_policy=retry_policy,
        )
        self._settings = settings

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    def fetch_trade_openness(self, iso3: str) -> OpennessValue | None:
        """
        Most recent non-null openness value among the latest periods.

        Raises:
            ConnectorRequestError: When the request fails after retries.
        """

        endpoint = (
            f"{self._settings.base_url.rstrip('/')}/country/"
            f"{iso3.upper()}/indicator/{self._settings.openness_indicator_code}"
        )
        params = {"format": "json", "MRV": self._settings.latest_periods}
        payload = self._request_json(method="GET", url=endpoint, params=params)

        if not isinstance(payload, list) or len(payload) < 2 or not isinstance(payload[1], list):
            logger.warning("Unexpected World Bank payload shape iso3=%s", iso3)
            return None

        for row in payload[1]:
            normalized = self._normalize_row(row, url=build_url(endpoint, params))
            if normalized is not None:
                return normalized
        return None

    @staticmethod
    def _normalize_row(row: Any, *, url: str) -> OpennessValue | None:
        if not isinstance(row, dict) or row.get("value") is None:
            return None
        try:
            year = int(str(row.get("date") or "")[:4])
            value = float(row["value"])
        except (TypeError, ValueError):
            return None
        return OpennessValue(year=year, value=value, url=url)
