"""
app/connectors/base.py

Base connector abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from app.config import ExternalHTTPSettings
from app.connectors.resilience import RetryPolicy

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
SECRET_QUERY_PARAMS = {"subscription-key", "api_key", "apikey"}


class ConnectorRequestError(RuntimeError):
    """
    Raised when a connector cannot fetch data after retries.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def sanitize_url(url: str) -> str:
    """
    Drop credential query parameters so the URL can be shown to users.
    """

    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key.lower() not in SECRET_QUERY_PARAMS
    ]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def build_url(url: str, params: dict[str, Any] | None = None) -> str:
    """
    Render ``url`` with ``params`` the way ``requests`` would send it.
    """

    prepared = requests.Request("GET", url, params=params or {}).prepare()
    return prepared.url or url


class BaseConnector:
    """
    Shared HTTP plumbing for external statistics connectors.

    Subclasses call ``_request_json``; transport failures, retryable status
    codes and non-JSON bodies are retried through the ``RetryPolicy``.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._timeout_seconds = http_settings.timeout_seconds
        self._retry_policy = retry_policy or RetryPolicy.from_settings(http_settings)
        self._min_request_interval_seconds = (
            1.0 / http_settings.rate_limit_per_second if http_settings.rate_limit_per_second > 0 else 0.0
        )
        self._last_request_monotonic: float = 0.0
        self._rate_lock = threading.Lock()

    def _request_json(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Execute an HTTP request and return parsed JSON with retry support.
        """

        response = self._request(method=method, url=url, params=params, headers=headers, expect_json=True)
        return response.json()

    def _request(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        expect_json: bool = False,
    ) -> requests.Response:
        """
        Execute an HTTP request with rate limiting and exponential backoff.
        """

        safe_url = sanitize_url(url)
        policy = self._retry_policy
        last_error: Exception | None = None
        for attempt in range(policy.total_attempts):
            self._apply_rate_limit()
            try:
                response = self._session.request(
                    method=method,
                    url=url,
                    params=params,
                    headers=headers,
                    timeout=self._timeout_seconds,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable HTTP status code: {response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                if expect_json:
                    response.json()
                return response
            except requests.HTTPError as exc:
                last_error = exc
                status_code = exc.response.status_code if exc.response is not None else None
                is_retryable = status_code in RETRYABLE_STATUS_CODES
                if not is_retryable:
                    logger.error(
                        "Connector request failed source=%s status=%s url=%s error=%s",
                        self.source,
                        status_code,
                        safe_url,
                        exc,
                    )
                    raise ConnectorRequestError(
                        f"{self.source}: non-retryable request failure.",
                        status_code=status_code,
                    ) from exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc
            except ValueError as exc:
                # Body was not JSON (HTML error pages, truncated payloads).
                last_error = exc

            if attempt >= policy.max_retries:
                break

            backoff_seconds = policy.delay_for(attempt)
            logger.warning(
                "Connector request retry source=%s attempt=%s/%s wait_seconds=%.2f url=%s",
                self.source,
                attempt + 1,
                policy.max_retries,
                backoff_seconds,
                safe_url,
            )
            policy.sleep(backoff_seconds)

        logger.error(
            "Connector request exhausted retries source=%s url=%s error=%s",
            self.source,
            safe_url,
            last_error,
        )
        raise ConnectorRequestError(f"{self.source}: request failed after retries.") from last_error

    def _apply_rate_limit(self) -> None:
        """
        Enforce minimum interval between outbound requests.
        """

        if self._min_request_interval_seconds <= 0:
            return

        with self._rate_lock:
            now = time.monotonic()
            elapsed = now - self._last_request_monotonic
            remaining = self._min_request_interval_seconds - elapsed
            if remaining > 0:
                self._retry_policy.sleep(remaining)
            self._last_request_monotonic = time.monotonic()
