# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Unauthenticated market-rate provider."""

from src.integrations.base import RateApiClient
from src.schemas.exchange_rate import RateData


class ExternalRateProvider(RateApiClient):
    """Public market-rate API that needs no token."""

    async def get_rate(self, from_currency: str, to_currency: str) -> float:
        """Fetch the current market rate for a currency pair."""
        payload = await self._request(
            "GET",
            "/exchange-rates/rate",
            params={"from": from_currency, "to": to_currency},
        )
        return self._unwrap(payload, RateData).rate
