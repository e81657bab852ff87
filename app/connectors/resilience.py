"""
app/connectors/resilience.py

Retry, caching and circuit-breaking primitives for external lookups.

All three take injectable clocks/sleepers so tests can drive them without
waiting.
"""

from __future__ import annotations

import enum
import logging
import random
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable, Generic, Hashable, TypeVar

from app.config import ExternalHTTPSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry with exponential backoff and additive jitter.

    Total attempts = 1 + ``max_retries``. The wait before retry ``n``
    (0-based) is ``backoff_initial_seconds * backoff_multiplier ** n`` plus a
    uniform random jitter in ``[0, jitter_seconds]``.
    """

    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    jitter_seconds: float = 0.1
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False, repr=False)
    jitter: Callable[[float, float], float] = field(default=random.uniform, compare=False, repr=False)

    @classmethod
    def from_settings(
        cls,
        settings: ExternalHTTPSettings,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "RetryPolicy":
        return cls(
            max_retries=settings.max_retries,
            backoff_initial_seconds=settings.backoff_initial_seconds,
            backoff_multiplier=settings.backoff_multiplier,
            jitter_seconds=settings.jitter_seconds,
            sleep=sleep,
        )

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        base = self.backoff_initial_seconds * (self.backoff_multiplier**attempt)
        if self.jitter_seconds <= 0:
            return base
        return base + self.jitter(0.0, self.jitter_seconds)


# ---------------------------------------------------------------------------
# Circuit breaker
# ---------------------------------------------------------------------------


class CircuitState(str, enum.Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(RuntimeError):
    """
    Raised when a call is rejected because the breaker is open.
    """


class CircuitBreaker:
    """
    Closed -> Open -> HalfOpen state machine.

    ``failure_threshold`` consecutive failures open the circuit. After
    ``cooldown_seconds`` one trial call is let through (half-open); its
    success closes the circuit, its failure re-opens it.
    """

    def __init__(
        self,
        *,
        name: str,
        cooldown_seconds: float,
        failure_threshold: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self._cooldown_seconds = cooldown_seconds
        self._failure_threshold = max(1, failure_threshold)
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = 0.0
        self._trial_in_flight = False
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        with self._lock:
            self._maybe_half_open()
            return self._state

    def allow_request(self) -> bool:
        with self._lock:
            self._maybe_half_open()
            if self._state == CircuitState.CLOSED:
                return True
            if self._state == CircuitState.HALF_OPEN and not self._trial_in_flight:
                self._trial_in_flight = True
                return True
            return False

    def record_success(self) -> None:
        with self._lock:
            if self._state != CircuitState.CLOSED:
                logger.info("Circuit closed name=%s", self.name)
            self._state = CircuitState.CLOSED
            self._failures = 0
            self._trial_in_flight = False

    def record_failure(self) -> None:
        with self._lock:
            self._trial_in_flight = False
            self._failures += 1
            if self._state == CircuitState.HALF_OPEN or self._failures >= self._failure_threshold:
                self._state = CircuitState.OPEN
                self._opened_at = self._clock()
                logger.warning(
                    "Circuit opened name=%s cooldown_seconds=%.0f",
                    self.name,
                    self._cooldown_seconds,
                )

    def call(self, func: Callable[[], T]) -> T:
        """
        Run ``func`` through the breaker.

        Raises:
            CircuitOpenError: If the circuit rejects the call.
        """

        if not self.allow_request():
            raise CircuitOpenError(f"Circuit '{self.name}' is open.")
        try:
            result = func()
        except Exception:
            self.record_failure()
            raise
        self.record_success()
        return result

    def reset(self) -> None:
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failures = 0
            self._trial_in_flight = False

    def _maybe_half_open(self) -> None:
        if self._state == CircuitState.OPEN and self._clock() - self._opened_at >= self._cooldown_seconds:
            self._state = CircuitState.HALF_OPEN
            self._trial_in_flight = False


# ---------------------------------------------------------------------------
# TTL cache with in-flight de-duplication
# ---------------------------------------------------------------------------


class TTLCache(Generic[T]):
    """
    Key/value cache where hits and misses expire on separate schedules.

    ``None`` is the "no data" value: it is kept for ``negative_ttl_seconds``,
    anything else for ``positive_ttl_seconds``. Concurrent ``get_or_load``
    calls for the same key share a single loader invocation.
    """

    def __init__(
        self,
        *,
        positive_ttl_seconds: float,
        negative_ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._positive_ttl_seconds = positive_ttl_seconds
        self._negative_ttl_seconds = negative_ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[T | None, float]] = {}
        self._in_flight: dict[Hashable, Future] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> tuple[bool, T | None]:
        """
        Return ``(hit, value)`` without loading.
        """

        with self._lock:
            return self._lookup(key)

    def get_or_load(self, key: Hashable, loader: Callable[[], T | None]) -> T | None:
        """
        Return the cached value for ``key`` or run ``loader`` once to fill it.

        Exceptions raised by ``loader`` propagate to every waiting caller and
        are not cached.
        """

        with self._lock:
            hit, value = self._lookup(key)
            if hit:
                return value
            pending = self._in_flight.get(key)
            if pending is None:
                pending = Future()
                self._in_flight[key] = pending
                owner = True
            else:
                owner = False

        if not owner:
            return pending.result()

        try:
            value = loader()
        except BaseException as exc:
            with self._lock:
                self._in_flight.pop(key, None)
            pending.set_exception(exc)
            raise

        with self._lock:
            self._store(key, value)
            self._in_flight.pop(key, None)
        pending.set_result(value)
        return value

    def set(self, key: Hashable, value: T | None) -> None:
        with self._lock:
            self._store(key, value)

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _lookup(self, key: Hashable) -> tuple[bool, T | None]:
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return False, None
        return True, value

    def _store(self, key: Hashable, value: T | None) -> None:
        ttl = self._negative_ttl_seconds if value is None else self._positive_ttl_seconds
        if ttl <= 0:
            self._entries.pop(key, None)
            return
        self._entries[key] = (value, self._clock() + ttl)
