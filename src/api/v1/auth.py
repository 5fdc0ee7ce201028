# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Endpoints for the stored backend token."""

from fastapi import APIRouter, Depends

from src.api.deps import get_local_store
from src.schemas.auth import AuthStatusResponse, TokenUpdate
from src.schemas.common import MessageResponse
from src.services.local_rate_store import LocalRateStore

router = APIRouter()


@router.get("/status", response_model=AuthStatusResponse)
def get_auth_status(store: LocalRateStore = Depends(get_local_store)) -> AuthStatusResponse:
    """Report whether backend requests will be authenticated."""
    return AuthStatusResponse(authenticated=store.get_token() is not None)


@router.put("/token", response_model=MessageResponse)
def set_token(
    data: TokenUpdate,
    store: LocalRateStore = Depends(get_local_store),
) -> MessageResponse:
    """Store the bearer token issued by the backend."""
    store.set_token(data.token)
    return MessageResponse(message="Token stored")


@router.delete("/token", response_model=MessageResponse)
def clear_token(store: LocalRateStore = Depends(get_local_store)) -> MessageResponse:
    """Forget the stored token; rates then come from the external provider."""
    store.set_token(None)
    return MessageResponse(message="Token cleared")
