"""
app/services/analytics_session.py

Per-session analytics state.

A session owns everything that changes while a user works: the country
mapper (with its user-mapping layer and unmatched set), the raw uploaded
rows, the parsed record tuples and a memo of filtered results. Country
mapping updates trigger a full re-parse of every raw input; parsed records
are never patched.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Mapping, Sequence

from app.config import (
    NormalizerSettings,
    SessionSettings,
    ShipmentParserSettings,
    get_normalizer_settings,
    get_session_settings,
    get_shipment_parser_settings,
)
from app.domain.filters import FilteredData, FilterOptions, Filters
from app.domain.insights import InsightsReport
from app.domain.records import ConversionMetrics, ParseResult, PolicyRecord, ShipmentRecord
from app.logging_utils import log_event
from app.mappers.country_mapper import CountryMapper
from app.parsers.policy_parser import PolicyLedgerParser
from app.parsers.shipment_parser import ShipmentWorkbookParser
from app.services.filter_service import FilterService
from app.services.insights_service import InsightsService
from app.services.metrics_service import MetricsService

logger = logging.getLogger(__name__)

_EMPTY_RESULT = ParseResult(records=(), rows_read=0, rows_skipped=0)


class SessionNotFoundError(KeyError):
    """
    Raised when a session id is unknown or has been deleted.
    """

    def __init__(self, session_id: str) -> None:
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"Analytics session not found: {self.session_id}"


class SessionLimitError(RuntimeError):
    """
    Raised when the store already holds the configured number of sessions.
    """


@dataclass(frozen=True)
class _MemoEntry:
    filtered: FilteredData
    metrics: ConversionMetrics | None


@dataclass
class _RawInputs:
    policy_rows: tuple[Mapping[str, Any], ...] | None = None
    shipment_sheets: Mapping[str, Sequence[Sequence[Any]]] | None = None


@dataclass(frozen=True)
class MappingUpdate:
    """
    Outcome of applying user country mappings.
    """

    applied: dict[str, str]
    unmatched: tuple[str, ...]
    revision: int
    policy_summary: ParseResult | None = None
    shipment_summary: ParseResult | None = None


class AnalyticsSession:
    """
    Owns one user's ledgers and derived results.

    Thread-safe: FastAPI runs sync endpoints on a worker pool, so every
    public method takes the session lock.
    """

    def __init__(
        self,
        *,
        session_id: str | None = None,
        normalizer_settings: NormalizerSettings | None = None,
        parser_settings: ShipmentParserSettings | None = None,
        session_settings: SessionSettings | None = None,
        filter_service: FilterService | None = None,
        metrics_service: MetricsService | None = None,
        insights_service: InsightsService | None = None,
    ) -> None:
        normalizer_settings = normalizer_settings or get_normalizer_settings()
        self.session_id = session_id or uuid.uuid4().hex
        self.created_at = datetime.now(tz=timezone.utc)
        self._mapper = CountryMapper(default_threshold=normalizer_settings.match_threshold)
        self._parser_settings = parser_settings or get_shipment_parser_settings()
        self._memo_size = (session_settings or get_session_settings()).memo_size
        self._filters = filter_service or FilterService()
        self._metrics = metrics_service or MetricsService()
        self._insights = insights_service or InsightsService()

        self._lock = threading.RLock()
        self._raw = _RawInputs()
        self._policies: tuple[PolicyRecord, ...] = ()
        self._shipments: tuple[ShipmentRecord, ...] = ()
        self._revision = 0
        self._memo: OrderedDict[tuple[Filters, int, str | None], _MemoEntry] = OrderedDict()

    # ------------------------------------------------------------------
    # State snapshots
    # ------------------------------------------------------------------

    @property
    def revision(self) -> int:
        with self._lock:
            return self._revision

    @property
    def country_mapper(self) -> CountryMapper:
        return self._mapper

    @property
    def policies(self) -> tuple[PolicyRecord, ...]:
        with self._lock:
            return self._policies

    @property
    def shipments(self) -> tuple[ShipmentRecord, ...]:
        with self._lock:
            return self._shipments

    def unmatched_countries(self) -> list[str]:
        return self._mapper.unmatched()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_policies(self, rows: Sequence[Mapping[str, Any]]) -> ParseResult:
        """
        Replace the policy ledger wholesale.
        """

        with self._lock:
            self._raw.policy_rows = tuple(dict(row) for row in rows)
            policy_summary, _ = self._rederive()
            return policy_summary

    def load_shipments(self, sheets: Mapping[str, Sequence[Sequence[Any]]]) -> ParseResult:
        """
        Replace the shipment ledger wholesale.
        """

        with self._lock:
            self._raw.shipment_sheets = {
                name: tuple(tuple(row) for row in grid) for name, grid in sheets.items()
            }
            _, shipment_summary = self._rederive()
            return shipment_summary

    def apply_country_mappings(self, mappings: Mapping[str, str]) -> MappingUpdate:
        """
        Add user mappings and re-derive every record from the raw inputs.

        Raises:
            ValueError: If a mapping targets a non-canonical country name.
        """

        with self._lock:
            applied = self._mapper.add_mappings(mappings)
            policy_summary, shipment_summary = self._rederive()
            update = MappingUpdate(
                applied=applied,
                unmatched=tuple(self._mapper.unmatched()),
                revision=self._revision,
                policy_summary=policy_summary if self._raw.policy_rows is not None else None,
                shipment_summary=shipment_summary if self._raw.shipment_sheets is not None else None,
            )

        log_event(
            logger,
            logging.INFO,
            "country_mappings_applied",
            session_id=self.session_id,
            applied=len(update.applied),
            still_unmatched=len(update.unmatched),
            revision=update.revision,
        )
        return update

    def reset(self) -> None:
        """
        Drop both ledgers, user mappings and memoized results.
        """

        with self._lock:
            self._raw = _RawInputs()
            self._policies = ()
            self._shipments = ()
            self._mapper.reset()
            self._bump_revision()

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def filter_options(self) -> FilterOptions:
        with self._lock:
            return self._filters.filter_options(self._policies, self._shipments)

    def filtered(self, filters: Filters, now: datetime | None = None) -> FilteredData:
        return self._evaluate(filters, now).filtered

    def compute_metrics(self, filters: Filters, now: datetime | None = None) -> ConversionMetrics | None:
        """
        Metrics for ``filters``; ``None`` when either filtered ledger is empty.
        """

        return self._evaluate(filters, now).metrics

    def insights(self, filters: Filters, now: datetime | None = None) -> InsightsReport | None:
        entry = self._evaluate(filters, now)
        if entry.metrics is None:
            return None
        return self._insights.build_report(entry.metrics, entry.filtered)

    def _evaluate(self, filters: Filters, now: datetime | None) -> _MemoEntry:
        with self._lock:
            # Relative presets depend on the clock, so the resolved window
            # is part of the key.
            window = self._filters.resolve_window(filters, now=now)
            key = (filters, self._revision, repr(window))
            cached = self._memo.get(key)
            if cached is not None:
                self._memo.move_to_end(key)
                return cached

            filtered = self._filters.apply(self._policies, self._shipments, filters, now=now)
            entry = _MemoEntry(
                filtered=filtered,
                metrics=self._metrics.compute(filtered.policies, filtered.shipments),
            )
            self._memo[key] = entry
            while len(self._memo) > self._memo_size:
                self._memo.popitem(last=False)
            return entry

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _rederive(self) -> tuple[ParseResult, ParseResult]:
        """
        Re-parse both raw ledgers from scratch with the current mappings.

        The unmatched set is rebuilt by the parse itself, so it only ever
        lists names present in the loaded files.
        """

        self._mapper.clear_unmatched()
        policy_summary = _EMPTY_RESULT
        shipment_summary = _EMPTY_RESULT
        if self._raw.policy_rows is not None:
            policy_summary = PolicyLedgerParser(self._mapper).parse_rows(self._raw.policy_rows)
        if self._raw.shipment_sheets is not None:
            shipment_summary = ShipmentWorkbookParser(self._mapper, self._parser_settings).parse_workbook(
                self._raw.shipment_sheets
            )
        self._policies = policy_summary.records
        self._shipments = shipment_summary.records
        self._bump_revision()
        return policy_summary, shipment_summary

    def _bump_revision(self) -> None:
        self._revision += 1
        self._memo.clear()


class SessionStore:
    """
    Thread-safe in-memory registry of analytics sessions.
    """

    def __init__(self, settings: SessionSettings | None = None) -> None:
        self._settings = settings or get_session_settings()
        self._sessions: dict[str, AnalyticsSession] = {}
        self._lock = threading.Lock()

    def create(self) -> AnalyticsSession:
        session = AnalyticsSession(session_settings=self._settings)
        with self._lock:
            if len(self._sessions) >= self._settings.max_sessions:
                raise SessionLimitError(
                    f"Session limit reached ({self._settings.max_sessions}); delete a session first."
                )
            self._sessions[session.session_id] = session
        logger.info("Analytics session created session_id=%s", session.session_id)
        return session

    def get(self, session_id: str) -> AnalyticsSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is None:
            raise SessionNotFoundError(session_id)
        logger.info("Analytics session deleted session_id=%s", session_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    """
    Return the process-wide session store.
    """

    return SessionStore()
