# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Schemas for the stored backend credentials."""

from pydantic import BaseModel, Field


class TokenUpdate(BaseModel):
    """Bearer token issued by the backend."""

    token: str = Field(..., min_length=1)


class AuthStatusResponse(BaseModel):
    """Whether a backend token is stored."""

    authenticated: bool
