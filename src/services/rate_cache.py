# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""In-memory exchange rate cache."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)

# Entries older than this are ignored (but kept until cleared)
CACHE_DURATION = timedelta(hours=24)


@dataclass(frozen=True)
class RateEntry:
    """Directed rate and the moment it was cached."""

    rate: float
    timestamp: datetime


@dataclass(frozen=True)
class RateTableEntry:
    """All rates for a base currency and the moment they were cached."""

    rates: dict[str, float]
    timestamp: datetime


class RateCache:
    """Process-wide cache of resolved rates.

    Keys are ordered ``(from, to)`` pairs. Freshness is decided purely by
    comparing the entry timestamp against ``max_age``; stale entries are
    never returned but also never evicted. Access is not locked, callers
    are expected to share one event loop.
    """

    def __init__(
        self,
        max_age: timedelta = CACHE_DURATION,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self.max_age = max_age
        self._clock = clock
        self._entries: dict[tuple[str, str], RateEntry] = {}
        self._tables: dict[str, RateTableEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, timestamp: datetime) -> bool:
        return self._clock() - timestamp < self.max_age

    def get(self, from_currency: str, to_currency: str) -> float | None:
        """Return the cached rate for the pair if it is still fresh."""
        entry = self._entries.get((from_currency, to_currency))
        if entry is None or not self._is_fresh(entry.timestamp):
            return None
        return entry.rate

    def set(self, from_currency: str, to_currency: str, rate: float) -> None:
        """Cache a rate for one direction only."""
        self._entries[(from_currency, to_currency)] = RateEntry(
            rate=rate, timestamp=self._clock()
        )

    def set_pair(self, from_currency: str, to_currency: str, rate: float) -> None:
        """Cache a rate together with its reciprocal."""
        self.set(from_currency, to_currency, rate)
        self.set(to_currency, from_currency, 1 / rate)

    def invalidate(self, from_currency: str, to_currency: str) -> None:
        """Drop both directions of a pair."""
        self._entries.pop((from_currency, to_currency), None)
        self._entries.pop((to_currency, from_currency), None)

    def get_table(self, base_currency: str, allow_stale: bool = False) -> dict[str, float] | None:
        """Return the cached rate table for a base currency."""
        entry = self._tables.get(base_currency)
        if entry is None:
            return None
        if not allow_stale and not self._is_fresh(entry.timestamp):
            return None
        return dict(entry.rates)

    def set_table(self, base_currency: str, rates: dict[str, float]) -> None:
        self._tables[base_currency] = RateTableEntry(rates=dict(rates), timestamp=self._clock())

    def clear(self) -> None:
        """Wipe every cached rate and rate table."""
        logger.debug(f"Clearing {len(self._entries)} cached rates")
        self._entries.clear()
        self._tables.clear()
