# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Client for the authenticated finance backend."""

from pydantic import ValidationError

from src.integrations.base import MalformedResponseError, RateApiClient
from src.models.enums import RatesMode
from src.schemas.exchange_rate import (
    CurrencyRatesData,
    Envelope,
    LastUpdateInfo,
    RateData,
    UserRate,
)


class BackendRateClient(RateApiClient):
    """Exchange rate endpoints of the backend.

    Every call takes the bearer token explicitly; the client itself keeps
    no credentials.
    """

    async def get_rate(self, from_currency: str, to_currency: str, token: str) -> float:
        """Fetch the rate the backend tracks for a currency pair."""
        payload = await self._request(
            "GET",
            "/exchange-rates/rate",
            token=token,
            params={"from": from_currency, "to": to_currency},
        )
        return self._unwrap(payload, RateData).rate

    async def get_rates_for_currency(
        self, base_currency: str, token: str | None = None
    ) -> dict[str, float]:
        """Fetch all known rates for one base currency."""
        payload = await self._request(
            "GET", f"/exchange-rates/rates/{base_currency}", token=token
        )
        return self._unwrap(payload, CurrencyRatesData).rates

    async def get_last_update(self, token: str | None = None) -> LastUpdateInfo:
        """Fetch when the backend last refreshed its rates."""
        payload = await self._request("GET", "/exchange-rates/last-update", token=token)
        return self._unwrap(payload, LastUpdateInfo)

    async def save_user_rate(
        self,
        from_currency: str,
        to_currency: str,
        rate: float,
        token: str,
    ) -> None:
        """Store a manual rate for the user."""
        await self._request(
            "POST",
            "/exchange-rates/user",
            token=token,
            parse_json=False,
            json={
                "from_currency": from_currency,
                "to_currency": to_currency,
                "rate": rate,
                "mode": RatesMode.MANUAL.value,
            },
        )

    async def get_user_rates(self, token: str) -> list[UserRate]:
        """Fetch the manual rates stored for the user."""
        payload = await self._request("GET", "/exchange-rates/user", token=token)
        try:
            envelope = Envelope[list[UserRate]].model_validate(payload)
        except ValidationError as e:
            raise MalformedResponseError(f"Invalid user rates payload: {e}") from e
        return envelope.data or []

    async def set_rates_mode(self, mode: RatesMode, token: str) -> None:
        """Switch between automatic and manual rates on the backend."""
        await self._request(
            "PUT",
            "/exchange-rates/user/mode",
            token=token,
            parse_json=False,
            json={"mode": mode.value},
        )
