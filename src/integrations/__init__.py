# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""HTTP rate provider integrations."""
from src.integrations.backend import BackendRateClient
from src.integrations.base import (
    AuthenticationError,
    MalformedResponseError,
    ProviderResponseError,
    ProviderUnavailableError,
    RateApiClient,
    RateProviderError,
)
from src.integrations.external import ExternalRateProvider

__all__ = [
    "AuthenticationError",
    "BackendRateClient",
    "ExternalRateProvider",
    "MalformedResponseError",
    "ProviderResponseError",
    "ProviderUnavailableError",
    "RateApiClient",
    "RateProviderError",
]
