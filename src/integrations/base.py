# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Base class and error types for HTTP rate providers."""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from src.schemas.exchange_rate import Envelope

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class RateProviderError(Exception):
    """Base exception for rate provider errors."""


class ProviderUnavailableError(RateProviderError):
    """Provider could not be reached (network error or timeout)."""


class ProviderResponseError(RateProviderError):
    """Provider answered with an HTTP error status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ProviderResponseError):
    """Bearer token was rejected (expired or invalid)."""


class MalformedResponseError(RateProviderError):
    """Provider answered with a payload we cannot use."""


class RateApiClient:
    """Thin async wrapper around one rates HTTP API.

    All provider endpoints answer with a ``{success, data}`` envelope.
    Transport problems, HTTP error statuses and unusable payloads are
    raised as the matching ``RateProviderError`` subclass.
    """

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _request(
        self,
        method: str,
        url: str,
        token: str | None = None,
        parse_json: bool = True,
        **kwargs: Any,
    ) -> Any:
        """Send a request and return the decoded JSON body, if wanted."""
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        client = await self._get_client()
        try:
            response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise ProviderUnavailableError(f"Timeout calling {url}") from e
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(f"Failed to call {url}: {e}") from e

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Token rejected by {url}", status_code=response.status_code
            )
        if response.is_error:
            raise ProviderResponseError(
                f"HTTP {response.status_code} from {url}",
                status_code=response.status_code,
            )
        if not parse_json:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Invalid JSON from {url}") from e

    @staticmethod
    def _unwrap(payload: Any, model: type[ModelT]) -> ModelT:
        """Validate an envelope and return its data as ``model``."""
        try:
            envelope = Envelope[model].model_validate(payload)
        except ValidationError as e:
            raise MalformedResponseError(f"Invalid response payload: {e}") from e

        if not envelope.success or envelope.data is None:
            raise MalformedResponseError("Response not marked as successful")
        return envelope.data
