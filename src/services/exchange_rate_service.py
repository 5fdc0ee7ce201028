# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Exchange rate resolution with layered caching and cross rates."""

import logging
from collections.abc import Callable
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import Settings
from src.integrations.backend import BackendRateClient
from src.integrations.base import ProviderUnavailableError, RateProviderError
from src.integrations.external import ExternalRateProvider
from src.models.enums import RatesMode
from src.schemas.exchange_rate import LastUpdateInfo, UserRate
from src.services.local_rate_store import LocalRateStore
from src.services.rate_cache import RateCache
from src.services.rate_sources import (
    BackendSource,
    ExternalProviderSource,
    LocalStoreSource,
    LookupErrorKind,
    LookupResult,
    LookupStatus,
    RateSource,
)

logger = logging.getLogger(__name__)

# Currency used to build cross rates when no direct rate is known
PIVOT_CURRENCY = "USD"


def normalize_currency(code: str) -> str:
    """Strip and upper-case a currency code."""
    return code.strip().upper()


class ExchangeRateService:
    """Resolves and converts between currencies.

    A rate is looked up in the in-memory cache first, then in each source
    of ``sources`` in order (local store, backend, external provider by
    default). When none of them knows the pair, a cross rate is built
    through ``pivot_currency``. Lookup failures are logged and never
    raised: callers get ``None`` and ``convert`` falls back to the
    unconverted amount.
    """

    def __init__(
        self,
        cache: RateCache,
        store: LocalRateStore,
        backend: BackendRateClient,
        external: ExternalRateProvider,
        pivot_currency: str = PIVOT_CURRENCY,
        sources: list[RateSource] | None = None,
    ) -> None:
        """Initialize the exchange rate service.

        Args:
            cache: In-memory cache shared by every caller of this service.
            store: Device-local persisted store.
            backend: Client for the authenticated backend.
            external: Client for the public market-rate provider.
            pivot_currency: Currency used for cross rates.
            sources: Resolution chain override; built from the clients above
                when omitted.
        """
        self.cache = cache
        self.store = store
        self.backend = backend
        self.external = external
        self.pivot_currency = normalize_currency(pivot_currency)
        self.external_source = ExternalProviderSource(external)
        if sources is None:
            sources = [
                LocalStoreSource(store),
                BackendSource(backend, self._get_token),
                self.external_source,
            ]
        self.sources = sources

    async def close(self) -> None:
        """Close the HTTP clients."""
        await self.backend.close()
        await self.external.close()

    def _get_token(self) -> str | None:
        return self.store.get_token()

    def _safe_token(self) -> str | None:
        try:
            return self._get_token()
        except SQLAlchemyError as e:
            logger.warning(f"Could not read auth token: {e}")
            return None

    def _persist(self, from_currency: str, to_currency: str, rate: float) -> None:
        """Write a rate into the local store, ignoring storage failures."""
        try:
            self.store.save_rate(from_currency, to_currency, rate)
        except SQLAlchemyError as e:
            logger.warning(
                f"Failed to save rate {from_currency}->{to_currency} locally: {e}"
            )

    async def get_rate(self, from_currency: str, to_currency: str) -> float | None:
        """Get the conversion rate from one currency to another.

        Returns:
            The rate, or None when no source (direct or via the pivot
            currency) can provide one.
        """
        from_currency = normalize_currency(from_currency)
        to_currency = normalize_currency(to_currency)
        if not from_currency or not to_currency:
            logger.warning("Empty currency code in rate lookup")
            return None

        if from_currency == to_currency:
            return 1.0

        cached = self.cache.get(from_currency, to_currency)
        if cached is not None:
            logger.debug(f"Cache hit for {from_currency}->{to_currency}")
            return cached

        rate = await self._resolve_direct(from_currency, to_currency)
        if rate is not None:
            return rate

        if self.pivot_currency in (from_currency, to_currency):
            logger.info(f"No rate available for {from_currency}->{to_currency}")
            return None

        return await self._resolve_cross(from_currency, to_currency)

    async def _resolve_direct(self, from_currency: str, to_currency: str) -> float | None:
        """Walk the source chain and return the first direct rate found."""
        for source in self.sources:
            result = await self._lookup(source, from_currency, to_currency)
            if result.is_hit:
                logger.debug(
                    f"Rate {from_currency}->{to_currency} = {result.rate} from {source.name}"
                )
                self._remember(source, from_currency, to_currency, result.rate)
                return result.rate
            if result.status == LookupStatus.ERROR:
                self._log_lookup_error(source, from_currency, to_currency, result)
        return None

    async def _lookup(
        self, source: RateSource, from_currency: str, to_currency: str
    ) -> LookupResult:
        try:
            return await source.lookup(from_currency, to_currency)
        except Exception as e:
            logger.exception(f"Unexpected error in {source.name} rate source")
            return LookupResult.error(LookupErrorKind.TRANSIENT, str(e))

    def _remember(
        self, source: RateSource, from_currency: str, to_currency: str, rate: float
    ) -> None:
        if source.reciprocal:
            self.cache.set_pair(from_currency, to_currency, rate)
        else:
            self.cache.set(from_currency, to_currency, rate)
        if source.persist:
            self._persist(from_currency, to_currency, rate)

    @staticmethod
    def _log_lookup_error(
        source: RateSource, from_currency: str, to_currency: str, result: LookupResult
    ) -> None:
        message = (
            f"{source.name} lookup {from_currency}->{to_currency} failed "
            f"({result.error_kind.value}): {result.detail}"
        )
        if result.error_kind == LookupErrorKind.NOT_READY:
            logger.debug(message)
        else:
            logger.warning(message)

    async def _resolve_cross(self, from_currency: str, to_currency: str) -> float | None:
        """Build a rate through the pivot currency.

        Both legs go through the full ``get_rate`` chain. Each leg has the
        pivot on one side, so this recurses at most one level.
        """
        to_pivot = await self.get_rate(from_currency, self.pivot_currency)
        if to_pivot is None:
            logger.info(f"No rate available for {from_currency}->{to_currency}")
            return None
        from_pivot = await self.get_rate(self.pivot_currency, to_currency)
        if from_pivot is None:
            logger.info(f"No rate available for {from_currency}->{to_currency}")
            return None

        rate = to_pivot * from_pivot
        logger.debug(
            f"Cross rate {from_currency}->{to_currency} via {self.pivot_currency} = {rate}"
        )
        self.cache.set(from_currency, to_currency, rate)
        return rate

    async def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        """Convert an amount, returning it unchanged when no rate is known.

        No rounding is applied.
        """
        if normalize_currency(from_currency) == normalize_currency(to_currency):
            return amount

        rate = await self.get_rate(from_currency, to_currency)
        if rate is None:
            return amount
        return amount * rate

    async def force_update_rate(self, from_currency: str, to_currency: str) -> float | None:
        """Refetch a pair from the external provider, bypassing every cache."""
        from_currency = normalize_currency(from_currency)
        to_currency = normalize_currency(to_currency)
        if from_currency == to_currency:
            return 1.0

        self.cache.invalidate(from_currency, to_currency)
        result = await self._lookup(self.external_source, from_currency, to_currency)
        if not result.is_hit:
            if result.status == LookupStatus.ERROR:
                self._log_lookup_error(
                    self.external_source, from_currency, to_currency, result
                )
            return None

        self.cache.set_pair(from_currency, to_currency, result.rate)
        logger.info(f"Refreshed rate {from_currency}->{to_currency} = {result.rate}")
        return result.rate

    def clear_cache(self) -> None:
        """Clear the in-memory rate cache."""
        self.cache.clear()

    async def get_rates_for_currency(self, base_currency: str) -> dict[str, float]:
        """Fetch every rate the backend knows for a base currency."""
        try:
            return await self.backend.get_rates_for_currency(
                normalize_currency(base_currency), token=self._safe_token()
            )
        except RateProviderError as e:
            logger.warning(f"Failed to get rates for {base_currency}: {e}")
            return {}

    async def get_cached_rates_for_currency(self, base_currency: str) -> dict[str, float]:
        """Like ``get_rates_for_currency`` but served from the cache when fresh.

        A stale table is still returned when refreshing it fails.
        """
        base_currency = normalize_currency(base_currency)
        cached = self.cache.get_table(base_currency)
        if cached is not None:
            return cached

        rates = await self.get_rates_for_currency(base_currency)
        if rates:
            self.cache.set_table(base_currency, rates)
            return rates

        return self.cache.get_table(base_currency, allow_stale=True) or {}

    async def get_last_update(self) -> LastUpdateInfo:
        """Ask the backend when it last refreshed its rates."""
        try:
            return await self.backend.get_last_update(token=self._safe_token())
        except RateProviderError as e:
            logger.warning(f"Failed to get last update info: {e}")
            return LastUpdateInfo(updated_at=None, needs_update=True)

    async def save_user_rate(self, from_currency: str, to_currency: str, rate: float) -> bool:
        """Store a manual rate on the backend and locally.

        Returns False when signed out or when the backend rejects the rate.
        On network failure the rate is only stored locally.
        """
        if rate <= 0:
            raise ValueError("Rate must be positive")
        from_currency = normalize_currency(from_currency)
        to_currency = normalize_currency(to_currency)

        token = self._safe_token()
        if not token:
            return False

        try:
            await self.backend.save_user_rate(from_currency, to_currency, rate, token)
        except ProviderUnavailableError as e:
            logger.warning(f"Backend unreachable, saving user rate locally only: {e}")
        except RateProviderError as e:
            logger.warning(f"Backend rejected user rate {from_currency}->{to_currency}: {e}")
            return False

        self._persist(from_currency, to_currency, rate)
        self.cache.invalidate(from_currency, to_currency)
        return True

    async def get_user_rates(self) -> list[UserRate]:
        """Fetch the user's manual rates from the backend."""
        token = self._safe_token()
        if not token:
            return []
        try:
            return await self.backend.get_user_rates(token)
        except RateProviderError as e:
            logger.warning(f"Failed to get user rates: {e}")
            return []

    async def set_rates_mode(self, mode: RatesMode) -> bool:
        """Switch between automatic and manual rates.

        Without a token, or when the backend is unreachable, the mode is
        only stored locally.
        """
        token = self._safe_token()
        if token:
            try:
                await self.backend.set_rates_mode(mode, token)
            except ProviderUnavailableError as e:
                logger.warning(f"Backend unreachable, saving rates mode locally only: {e}")
            except RateProviderError as e:
                logger.warning(f"Backend rejected rates mode {mode.value}: {e}")
                return False

        self.store.set_rates_mode(mode)
        return True

    def get_rates_mode(self) -> RatesMode:
        return self.store.get_rates_mode()

    async def sync_rates_with_backend(self) -> int:
        """Pull the user's manual rates into the local store.

        Returns:
            Number of rates written locally.
        """
        if not self._safe_token():
            return 0

        user_rates = await self.get_user_rates()
        if not user_rates:
            return 0

        try:
            saved = self.store.save_rates_from_sync(user_rates)
        except SQLAlchemyError as e:
            logger.warning(f"Failed to store synced rates: {e}")
            return 0

        for user_rate in user_rates:
            self.cache.invalidate(
                normalize_currency(user_rate.from_currency),
                normalize_currency(user_rate.to_currency),
            )
        logger.info(f"Synced {saved} user rates from backend")
        return saved


def build_exchange_rate_service(
    settings: Settings, session_factory: Callable[[], Session]
) -> ExchangeRateService:
    """Wire up an ExchangeRateService from settings."""
    store = LocalRateStore(session_factory)
    return ExchangeRateService(
        cache=RateCache(max_age=timedelta(hours=settings.cache_duration_hours)),
        store=store,
        backend=BackendRateClient(settings.backend_api_url, timeout=settings.http_timeout),
        external=ExternalRateProvider(
            settings.external_rates_url, timeout=settings.http_timeout
        ),
        pivot_currency=settings.pivot_currency,
    )
