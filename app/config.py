"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class NormalizerSettings:
    """
    Country normalization settings.
    """

    match_threshold: float = 85.0


@dataclass(frozen=True)
class ShipmentParserSettings:
    """
    Layout of the shipment-volume workbook.
    """

    sheet_names: tuple[str, ...] = ("Seafreight excl. APEX", "Airfreight excl. APEX")
    business_line_markers: tuple[str, ...] = ("Air Logistics", "Sea Logistics")
    label_column: int = 1
    country_column: int = 2
    first_time_column: int = 5


@dataclass(frozen=True)
class UploadSettings:
    """
    Upload limits for ledger files.
    """

    max_bytes: int = 25 * 1024 * 1024


@dataclass(frozen=True)
class SessionSettings:
    """
    In-memory analytics session limits.
    """

    memo_size: int = 32
    max_sessions: int = 100


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for external connectors.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    jitter_seconds: float = 0.1
    rate_limit_per_second: float = 5.0


@dataclass(frozen=True)
class EnrichmentSettings:
    """
    Caching and concurrency settings for trade enrichment lookups.
    """

    max_parallel: int = 2
    positive_ttl_seconds: float = 12 * 60 * 60
    negative_ttl_seconds: float = 5 * 60
    breaker_cooldown_seconds: float = 15 * 60


@dataclass(frozen=True)
class WTOSettings:
    """
    WTO timeseries API connector settings.
    """

    enabled: bool = True
    base_url: str = "https://api.wto.org/timeseries/v1"
    primary_api_key: str | None = None
    secondary_api_key: str | None = None
    lookback_years: int = 6

    @property
    def api_keys(self) -> tuple[str, ...]:
        return tuple(key for key in (self.primary_api_key, self.secondary_api_key) if key)


@dataclass(frozen=True)
class WorldBankSettings:
    """
    World Bank indicator API connector settings.
    """

    enabled: bool = True
    base_url: str = "https://api.worldbank.org/v2"
    openness_indicator_code: str = "TG.VAL.TOTL.GD.ZS"
    latest_periods: int = 10


@lru_cache(maxsize=1)
def get_normalizer_settings() -> NormalizerSettings:
    """
    Return cached country normalization settings.
    """

    threshold = _get_float_env("COUNTRY_MATCH_THRESHOLD", 85.0)
    return NormalizerSettings(match_threshold=max(0.0, min(100.0, threshold)))


@lru_cache(maxsize=1)
def get_shipment_parser_settings() -> ShipmentParserSettings:
    """
    Return cached shipment workbook layout settings.
    """

    defaults = ShipmentParserSettings()
    return ShipmentParserSettings(
        sheet_names=_get_list_env("SHIPMENT_SHEETS", defaults.sheet_names),
        business_line_markers=_get_list_env("SHIPMENT_MARKERS", defaults.business_line_markers),
        label_column=max(0, _get_int_env("SHIPMENT_LABEL_COLUMN", defaults.label_column)),
        country_column=max(0, _get_int_env("SHIPMENT_COUNTRY_COLUMN", defaults.country_column)),
        first_time_column=max(0, _get_int_env("SHIPMENT_FIRST_TIME_COLUMN", defaults.first_time_column)),
    )


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached upload limits.
    """

    return UploadSettings(
        max_bytes=max(1024, _get_int_env("UPLOAD_MAX_BYTES", 25 * 1024 * 1024)),
    )


@lru_cache(maxsize=1)
def get_session_settings() -> SessionSettings:
    """
    Return cached analytics session limits.
    """

    return SessionSettings(
        memo_size=max(1, _get_int_env("SESSION_MEMO_SIZE", 32)),
        max_sessions=max(1, _get_int_env("SESSION_MAX_SESSIONS", 100)),
    )


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared connector HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        jitter_seconds=max(0.0, _get_float_env("EXTERNAL_HTTP_JITTER_SECONDS", 0.1)),
        rate_limit_per_second=max(0.1, _get_float_env("EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", 5.0)),
    )


@lru_cache(maxsize=1)
def get_enrichment_settings() -> EnrichmentSettings:
    """
    Return enrichment caching and concurrency settings.
    """

    return EnrichmentSettings(
        max_parallel=max(1, _get_int_env("ENRICHMENT_MAX_PARALLEL", 2)),
        positive_ttl_seconds=max(0.0, _get_float_env("ENRICHMENT_POSITIVE_TTL_SECONDS", 12 * 60 * 60)),
        negative_ttl_seconds=max(0.0, _get_float_env("ENRICHMENT_NEGATIVE_TTL_SECONDS", 5 * 60)),
        breaker_cooldown_seconds=max(0.0, _get_float_env("ENRICHMENT_BREAKER_COOLDOWN_SECONDS", 15 * 60)),
    )


@lru_cache(maxsize=1)
def get_wto_settings() -> WTOSettings:
    """
    Return WTO connector settings from environment variables.
    """

    return WTOSettings(
        enabled=_get_bool_env("WTO_ENABLED", True),
        base_url=_get_str_env("WTO_BASE_URL", "https://api.wto.org/timeseries/v1"),
        primary_api_key=_get_optional_str_env("WTO_API_KEY_PRIMARY"),
        secondary_api_key=_get_optional_str_env("WTO_API_KEY_SECONDARY"),
        lookback_years=max(1, _get_int_env("WTO_LOOKBACK_YEARS", 6)),
    )


@lru_cache(maxsize=1)
def get_world_bank_settings() -> WorldBankSettings:
    """
    Return World Bank connector settings from environment variables.
    """

    return WorldBankSettings(
        enabled=_get_bool_env("WORLD_BANK_ENABLED", True),
        base_url=_get_str_env("WORLD_BANK_BASE_URL", "https://api.worldbank.org/v2"),
        openness_indicator_code=_get_str_env("WORLD_BANK_OPENNESS_INDICATOR", "TG.VAL.TOTL.GD.ZS"),
        latest_periods=max(1, _get_int_env("WORLD_BANK_LATEST_PERIODS", 10)),
    )
