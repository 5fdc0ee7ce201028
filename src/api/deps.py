# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""API dependencies for dependency injection."""

from fastapi import HTTPException, Request, status

from src.services.exchange_rate_service import ExchangeRateService
from src.services.local_rate_store import LocalRateStore


def get_exchange_rate_service(request: Request) -> ExchangeRateService:
    """Get the exchange rate service created at startup."""
    service = getattr(request.app.state, "exchange_rate_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Exchange rate service not initialized",
        )
    return service


def get_local_store(request: Request) -> LocalRateStore:
    """Get the local rate store used by the exchange rate service."""
    return get_exchange_rate_service(request).store
