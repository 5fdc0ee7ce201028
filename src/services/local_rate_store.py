# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Device-local persisted store for exchange rates and settings."""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from sqlalchemy.orm import Session

from src.models.base import Base
from src.models.enums import RatesMode, SettingKey
from src.models.exchange_rate import ExchangeRate
from src.models.setting import Setting
from src.schemas.exchange_rate import UserRate

logger = logging.getLogger(__name__)


class LocalRateStore:
    """Second-tier rate cache backed by the local database.

    The store reports itself as not ready until ``initialize`` has run.
    Reads against a store that is not ready return empty results instead
    of raising; database errors are left to the caller.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory
        self._ready = False

    def initialize(self) -> None:
        """Create the tables if needed and mark the store ready."""
        with self._session_factory() as db:
            Base.metadata.create_all(bind=db.get_bind())
        self._ready = True
        logger.info("Local rate store initialized")

    def is_ready(self) -> bool:
        return self._ready

    def get_rate(self, from_currency: str, to_currency: str) -> float | None:
        """Return the stored rate for an ordered pair, if any."""
        if not self._ready:
            return None
        with self._session_factory() as db:
            row = (
                db.query(ExchangeRate)
                .filter(
                    ExchangeRate.from_currency == from_currency,
                    ExchangeRate.to_currency == to_currency,
                )
                .first()
            )
            return row.rate if row is not None else None

    def save_rate(self, from_currency: str, to_currency: str, rate: float) -> None:
        """Insert or update the rate for an ordered pair."""
        if not self._ready:
            logger.warning(
                f"Local store not ready, dropping rate {from_currency}->{to_currency}"
            )
            return
        with self._session_factory() as db:
            self._upsert(db, from_currency, to_currency, rate)
            db.commit()

    def save_rates_from_sync(self, rates: Iterable[UserRate]) -> int:
        """Store rates pulled from the backend, returning how many were saved."""
        if not self._ready:
            return 0
        count = 0
        with self._session_factory() as db:
            for user_rate in rates:
                self._upsert(db, user_rate.from_currency, user_rate.to_currency, user_rate.rate)
                count += 1
            db.commit()
        return count

    @staticmethod
    def _upsert(db: Session, from_currency: str, to_currency: str, rate: float) -> None:
        from_currency = from_currency.strip().upper()
        to_currency = to_currency.strip().upper()
        existing = (
            db.query(ExchangeRate)
            .filter(
                ExchangeRate.from_currency == from_currency,
                ExchangeRate.to_currency == to_currency,
            )
            .first()
        )
        if existing:
            existing.rate = rate
            existing.updated_at = datetime.utcnow()
        else:
            db.add(
                ExchangeRate(
                    from_currency=from_currency,
                    to_currency=to_currency,
                    rate=rate,
                )
            )

    def get_all_rates(self) -> dict[str, dict[str, float]]:
        """Return every stored rate as ``{from: {to: rate}}``."""
        if not self._ready:
            return {}
        result: dict[str, dict[str, float]] = {}
        with self._session_factory() as db:
            for row in db.query(ExchangeRate).all():
                result.setdefault(row.from_currency, {})[row.to_currency] = row.rate
        return result

    def get_stored_rates(self, base_currency: str) -> dict[str, float]:
        """Return stored rates from one base currency as ``{to: rate}``."""
        return self.get_all_rates().get(base_currency, {})

    def get_last_rates_update(self) -> datetime | None:
        """Return when any stored rate was last written."""
        if not self._ready:
            return None
        with self._session_factory() as db:
            row = db.query(ExchangeRate).order_by(ExchangeRate.updated_at.desc()).first()
            return row.updated_at if row is not None else None

    def clear_all_rates(self) -> None:
        if not self._ready:
            return
        with self._session_factory() as db:
            db.query(ExchangeRate).delete()
            db.commit()

    def _get_setting(self, key: SettingKey) -> str | None:
        if not self._ready:
            return None
        with self._session_factory() as db:
            setting = db.get(Setting, key.value)
            return setting.value if setting is not None else None

    def _set_setting(self, key: SettingKey, value: str | None) -> None:
        if not self._ready:
            logger.warning(f"Local store not ready, dropping setting {key.value}")
            return
        with self._session_factory() as db:
            setting = db.get(Setting, key.value)
            if setting is None:
                db.add(Setting(key=key.value, value=value))
            else:
                setting.value = value
            db.commit()

    def get_rates_mode(self) -> RatesMode:
        value = self._get_setting(SettingKey.EXCHANGE_RATES_MODE)
        try:
            return RatesMode(value) if value else RatesMode.AUTO
        except ValueError:
            logger.warning(f"Unknown rates mode {value!r}, using auto")
            return RatesMode.AUTO

    def set_rates_mode(self, mode: RatesMode) -> None:
        self._set_setting(SettingKey.EXCHANGE_RATES_MODE, mode.value)

    def get_token(self) -> str | None:
        """Return the stored bearer token, if the user is signed in."""
        return self._get_setting(SettingKey.TOKEN) or None

    def set_token(self, token: str | None) -> None:
        self._set_setting(SettingKey.TOKEN, token)
