# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Rate sources consulted, in order, when the in-memory cache misses.

Each source answers a lookup with a ``LookupResult`` instead of raising,
so the resolver can walk the chain without try/except around every step.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from src.integrations.backend import BackendRateClient
from src.integrations.base import (
    AuthenticationError,
    MalformedResponseError,
    RateProviderError,
)
from src.integrations.external import ExternalRateProvider
from src.services.local_rate_store import LocalRateStore

logger = logging.getLogger(__name__)


class LookupStatus(str, Enum):
    """Outcome of a single source lookup."""

    HIT = "hit"
    MISS = "miss"
    ERROR = "error"


class LookupErrorKind(str, Enum):
    """Why a source lookup failed."""

    NOT_READY = "not_ready"
    STORAGE = "storage"
    AUTH = "auth"
    TRANSIENT = "transient"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class LookupResult:
    """Tagged result of asking one source for a rate."""

    status: LookupStatus
    rate: float | None = None
    error_kind: LookupErrorKind | None = None
    detail: str = ""

    @classmethod
    def hit(cls, rate: float) -> "LookupResult":
        return cls(status=LookupStatus.HIT, rate=rate)

    @classmethod
    def miss(cls) -> "LookupResult":
        return cls(status=LookupStatus.MISS)

    @classmethod
    def error(cls, kind: LookupErrorKind, detail: str = "") -> "LookupResult":
        return cls(status=LookupStatus.ERROR, error_kind=kind, detail=detail)

    @property
    def is_hit(self) -> bool:
        return self.status == LookupStatus.HIT


def provider_error_kind(error: RateProviderError) -> LookupErrorKind:
    """Map a provider exception onto a lookup error kind."""
    if isinstance(error, AuthenticationError):
        return LookupErrorKind.AUTH
    if isinstance(error, MalformedResponseError):
        return LookupErrorKind.MALFORMED
    return LookupErrorKind.TRANSIENT


class RateSource(ABC):
    """One step of the resolution chain."""

    #: Short name used in logs
    name: str = "source"
    #: Cache the reciprocal rate alongside a hit
    reciprocal: bool = False
    #: Write hits back into the local store
    persist: bool = False

    @abstractmethod
    async def lookup(self, from_currency: str, to_currency: str) -> LookupResult:
        """Try to find a direct rate for the pair."""
        ...


class LocalStoreSource(RateSource):
    """Rates persisted on the device (manual and previously fetched)."""

    name = "local_store"

    def __init__(self, store: LocalRateStore) -> None:
        self.store = store

    async def lookup(self, from_currency: str, to_currency: str) -> LookupResult:
        if not self.store.is_ready():
            return LookupResult.error(LookupErrorKind.NOT_READY, "local store not initialized")
        try:
            rate = self.store.get_rate(from_currency, to_currency)
        except SQLAlchemyError as e:
            return LookupResult.error(LookupErrorKind.STORAGE, str(e))
        if rate is None or rate <= 0:
            return LookupResult.miss()
        return LookupResult.hit(rate)


class BackendSource(RateSource):
    """Authoritative rates from the backend, only when signed in."""

    name = "backend"
    reciprocal = True
    persist = True

    def __init__(
        self,
        client: BackendRateClient,
        token_getter: Callable[[], str | None],
    ) -> None:
        self.client = client
        self.token_getter = token_getter

    async def lookup(self, from_currency: str, to_currency: str) -> LookupResult:
        try:
            token = self.token_getter()
        except SQLAlchemyError as e:
            return LookupResult.error(LookupErrorKind.STORAGE, f"reading token: {e}")
        if not token:
            return LookupResult.miss()

        try:
            rate = await self.client.get_rate(from_currency, to_currency, token)
        except RateProviderError as e:
            return LookupResult.error(provider_error_kind(e), str(e))
        return LookupResult.hit(rate)


class ExternalProviderSource(RateSource):
    """Public market rates, no authentication needed."""

    name = "external"
    reciprocal = True

    def __init__(self, provider: ExternalRateProvider) -> None:
        self.provider = provider

    async def lookup(self, from_currency: str, to_currency: str) -> LookupResult:
        try:
            rate = await self.provider.get_rate(from_currency, to_currency)
        except RateProviderError as e:
            return LookupResult.error(provider_error_kind(e), str(e))
        return LookupResult.hit(rate)
