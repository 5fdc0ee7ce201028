# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Services package."""
from src.services import (
    exchange_rate_service,
    local_rate_store,
    rate_cache,
    rate_sources,
)

__all__ = [
    "exchange_rate_service",
    "local_rate_store",
    "rate_cache",
    "rate_sources",
]
