"""
app/mappers/country_mapper.py

Country-name normalization into the canonical UN member taxonomy.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Mapping, Sequence

from rapidfuzz.distance import Levenshtein

from app.mappers.country_reference import (
    COUNTRY_TO_ISO3,
    COUNTRY_TO_REGION,
    PREDEFINED_COUNTRY_MAPPINGS,
    STANDARD_COUNTRIES,
)

logger = logging.getLogger(__name__)

DEFAULT_MATCH_THRESHOLD = 85.0


def normalize_country_key(value: object) -> str:
    """
    Uppercase and trim a raw country cell for comparison.
    """

    return str(value).strip().upper()


def similarity(first: str, second: str) -> float:
    """
    Levenshtein similarity on a 0-100 scale.

    ``100 * (max_len - distance) / max_len`` over the uppercased, trimmed
    inputs. Returns 0 when either side is empty.
    """

    if not first or not second:
        return 0.0
    left = normalize_country_key(first)
    right = normalize_country_key(second)
    if left == right:
        return 100.0
    max_len = max(len(left), len(right))
    if max_len == 0:
        return 0.0
    distance = Levenshtein.distance(left, right)
    return 100.0 * (max_len - distance) / max_len


class CountryMapper:
    """
    Resolves raw country strings to canonical names.

    Lookup order: built-in aliases, user mappings, exact canonical name,
    then fuzzy match against the canonical list. Names that clear no layer
    are kept (uppercased) and recorded as unmatched until a user mapping
    resolves them.
    """

    def __init__(
        self,
        *,
        canonical_countries: Sequence[str] = STANDARD_COUNTRIES,
        aliases: Mapping[str, str] | None = None,
        default_threshold: float = DEFAULT_MATCH_THRESHOLD,
    ) -> None:
        self._canonical: tuple[str, ...] = tuple(canonical_countries)
        self._canonical_set = frozenset(self._canonical)
        self._aliases: dict[str, str] = dict(PREDEFINED_COUNTRY_MAPPINGS if aliases is None else aliases)
        self._default_threshold = self._validate_threshold(default_threshold)
        self._user_mappings: dict[str, str] = {}
        self._unmatched: dict[str, None] = {}
        self._lock = threading.Lock()

    @property
    def canonical_countries(self) -> tuple[str, ...]:
        return self._canonical

    def normalize(self, raw: object, threshold: float | None = None) -> str | None:
        """
        Return the canonical name for ``raw``, or the uppercased input when
        nothing clears ``threshold``.
        """

        if raw is None or (isinstance(raw, float) and math.isnan(raw)):
            return None
        key = normalize_country_key(raw)
        if not key:
            return None

        effective_threshold = (
            self._default_threshold if threshold is None else self._validate_threshold(threshold)
        )

        aliased = self._aliases.get(key)
        if aliased is not None:
            return aliased
        with self._lock:
            user_mapped = self._user_mappings.get(key)
        if user_mapped is not None:
            return user_mapped
        if key in self._canonical_set:
            return key

        best_match, best_score = self.best_match(key)
        if best_match is not None and best_score >= effective_threshold:
            return best_match

        with self._lock:
            if key not in self._unmatched:
                self._unmatched[key] = None
                logger.info(
                    "Country pending manual mapping value=%s best_candidate=%s score=%.1f",
                    key,
                    best_match,
                    best_score,
                )
        return key

    def best_match(self, value: str) -> tuple[str | None, float]:
        """
        Highest-similarity canonical name; ties keep the earliest entry.
        """

        best_match: str | None = None
        best_score = -1.0
        for candidate in self._canonical:
            score = similarity(value, candidate)
            if score > best_score:
                best_score = score
                best_match = candidate
        return best_match, max(best_score, 0.0)

    def add_mappings(self, mappings: Mapping[str, str]) -> dict[str, str]:
        """
        Add user mappings from raw strings to canonical names.

        Existing mappings are kept; a raw string already mapped by any
        layer cannot be remapped within the session.
        """

        accepted: dict[str, str] = {}
        invalid: list[str] = []
        for raw, target in mappings.items():
            key = normalize_country_key(raw)
            canonical = normalize_country_key(target) if target is not None else ""
            if not key or not canonical:
                continue
            if canonical not in self._canonical_set:
                invalid.append(f"{key}->{canonical}")
                continue
            accepted[key] = canonical

        if invalid:
            raise ValueError(
                "Country mappings must target canonical country names: " + ", ".join(sorted(invalid))
            )

        applied: dict[str, str] = {}
        with self._lock:
            for key, canonical in accepted.items():
                if key in self._aliases or key in self._user_mappings or key in self._canonical_set:
                    continue
                self._user_mappings[key] = canonical
                applied[key] = canonical
        return applied

    def user_mappings(self) -> dict[str, str]:
        with self._lock:
            return dict(self._user_mappings)

    def unmatched(self) -> list[str]:
        with self._lock:
            return list(self._unmatched)

    def clear_unmatched(self) -> None:
        with self._lock:
            self._unmatched.clear()

    def reset(self) -> None:
        """
        Drop user mappings and the unmatched set.
        """

        with self._lock:
            self._user_mappings.clear()
            self._unmatched.clear()

    def is_canonical(self, name: str | None) -> bool:
        return name is not None and name in self._canonical_set

    @staticmethod
    def region_for(name: str | None) -> str | None:
        if name is None:
            return None
        return COUNTRY_TO_REGION.get(name)

    @staticmethod
    def iso3_for(name: str | None) -> str | None:
        if name is None:
            return None
        return COUNTRY_TO_ISO3.get(name)

    @staticmethod
    def _validate_threshold(threshold: float) -> float:
        value = float(threshold)
        if not 0.0 <= value <= 100.0:
            raise ValueError("Country match threshold must be between 0 and 100.")
        return value
