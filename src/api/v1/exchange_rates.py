# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Exchange rate API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.deps import get_exchange_rate_service
from src.schemas.common import MessageResponse
from src.schemas.exchange_rate import (
    ConversionResponse,
    ExchangeRateResponse,
    LastUpdateInfo,
    RatesModeResponse,
    RatesModeUpdate,
    SyncResponse,
    UserRate,
    UserRateCreate,
)
from src.services.exchange_rate_service import ExchangeRateService, normalize_currency

router = APIRouter()


@router.get("/rate", response_model=ExchangeRateResponse)
async def get_exchange_rate(
    from_currency: str = Query(..., min_length=1, max_length=10, alias="from"),
    to_currency: str = Query(..., min_length=1, max_length=10, alias="to"),
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> ExchangeRateResponse:
    """Get exchange rate between two currencies."""
    rate = await service.get_rate(from_currency, to_currency)
    if rate is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No rate found for {from_currency.upper()} to {to_currency.upper()}",
        )
    return ExchangeRateResponse(
        from_currency=normalize_currency(from_currency),
        to_currency=normalize_currency(to_currency),
        rate=rate,
    )


@router.get("/convert", response_model=ConversionResponse)
async def convert_amount(
    amount: float = Query(...),
    from_currency: str = Query(..., min_length=1, max_length=10, alias="from"),
    to_currency: str = Query(..., min_length=1, max_length=10, alias="to"),
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> ConversionResponse:
    """Convert an amount.

    When no rate is available the amount comes back unchanged.
    """
    converted_amount = await service.convert(amount, from_currency, to_currency)
    return ConversionResponse(
        amount=amount,
        from_currency=normalize_currency(from_currency),
        to_currency=normalize_currency(to_currency),
        converted_amount=converted_amount,
    )


@router.post("/refresh", response_model=ExchangeRateResponse)
async def refresh_exchange_rate(
    from_currency: str = Query(..., min_length=1, max_length=10, alias="from"),
    to_currency: str = Query(..., min_length=1, max_length=10, alias="to"),
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> ExchangeRateResponse:
    """Refetch a rate from the market provider, bypassing all caches."""
    rate = await service.force_update_rate(from_currency, to_currency)
    if rate is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Rate provider unavailable",
        )
    return ExchangeRateResponse(
        from_currency=normalize_currency(from_currency),
        to_currency=normalize_currency(to_currency),
        rate=rate,
    )


@router.delete("/cache", response_model=MessageResponse)
def clear_rate_cache(
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> MessageResponse:
    """Drop every rate held in memory."""
    service.clear_cache()
    return MessageResponse(message="Rate cache cleared")


@router.get("/rates/{base_currency}", response_model=dict[str, float])
async def get_rates_for_currency(
    base_currency: str,
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> dict[str, float]:
    """Get all known rates for a base currency."""
    return await service.get_cached_rates_for_currency(base_currency)


@router.get("/last-update", response_model=LastUpdateInfo)
async def get_last_update(
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> LastUpdateInfo:
    """Get when the backend last refreshed its rates."""
    return await service.get_last_update()


@router.get("/user", response_model=list[UserRate])
async def list_user_rates(
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> list[UserRate]:
    """List the manual rates stored on the backend."""
    return await service.get_user_rates()


@router.post("/user", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_user_rate(
    data: UserRateCreate,
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> MessageResponse:
    """Store a manual rate."""
    saved = await service.save_user_rate(data.from_currency, data.to_currency, data.rate)
    if not saved:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Rate could not be saved",
        )
    return MessageResponse(message="Rate saved")


@router.get("/user/mode", response_model=RatesModeResponse)
def get_rates_mode(
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> RatesModeResponse:
    """Get the current rates mode."""
    return RatesModeResponse(mode=service.get_rates_mode())


@router.put("/user/mode", response_model=RatesModeResponse)
async def update_rates_mode(
    data: RatesModeUpdate,
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> RatesModeResponse:
    """Switch between automatic and manual rates."""
    if not await service.set_rates_mode(data.mode):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Rates mode could not be changed",
        )
    return RatesModeResponse(mode=data.mode)


@router.post("/sync", response_model=SyncResponse)
async def sync_user_rates(
    service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> SyncResponse:
    """Pull the user's manual rates from the backend into the local store."""
    return SyncResponse(synced=await service.sync_rates_with_backend())
