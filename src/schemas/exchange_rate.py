# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Exchange rate schemas.

Covers both the payloads exchanged with the rate providers and the
responses of the local API.
"""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from src.models.enums import RatesMode

T = TypeVar("T")


# Provider payloads


class RateData(BaseModel):
    """Single directed rate as returned by a provider."""

    model_config = ConfigDict(populate_by_name=True)

    rate: float = Field(gt=0)
    from_currency: str | None = Field(None, alias="from")
    to_currency: str | None = Field(None, alias="to")
    updated_at: datetime | None = Field(None, alias="updatedAt")


class CurrencyRatesData(BaseModel):
    """All rates for one base currency."""

    model_config = ConfigDict(populate_by_name=True)

    base: str
    rates: dict[str, float]
    updated_at: datetime | None = Field(None, alias="updatedAt")


class LastUpdateInfo(BaseModel):
    """When the backend last refreshed its market rates."""

    model_config = ConfigDict(populate_by_name=True)

    updated_at: datetime | None = Field(None, alias="updatedAt")
    needs_update: bool = Field(True, alias="needsUpdate")


class UserRate(BaseModel):
    """Manual rate stored for the user on the backend."""

    model_config = ConfigDict(populate_by_name=True)

    from_currency: str = Field(
        validation_alias=AliasChoices("from_currency", "fromCurrency")
    )
    to_currency: str = Field(validation_alias=AliasChoices("to_currency", "toCurrency"))
    rate: float = Field(gt=0)
    mode: RatesMode = RatesMode.MANUAL


class Envelope(BaseModel, Generic[T]):
    """``{success, data}`` wrapper used by every provider endpoint."""

    success: bool = True
    data: T | None = None


# Local API


class ExchangeRateResponse(BaseModel):
    """Resolved exchange rate."""

    from_currency: str
    to_currency: str
    rate: float


class ConversionResponse(BaseModel):
    """Result of converting an amount."""

    amount: float
    from_currency: str
    to_currency: str
    converted_amount: float


class UserRateCreate(BaseModel):
    """Request body for storing a manual rate."""

    from_currency: str = Field(..., min_length=1, max_length=10)
    to_currency: str = Field(..., min_length=1, max_length=10)
    rate: float = Field(..., gt=0)


class RatesModeUpdate(BaseModel):
    """Request body for switching the rates mode."""

    mode: RatesMode


class RatesModeResponse(BaseModel):
    """Current rates mode."""

    mode: RatesMode


class SyncResponse(BaseModel):
    """Outcome of pulling user rates from the backend."""

    synced: int
