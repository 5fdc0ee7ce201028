# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for the individual rate sources."""

import httpx
import pytest
import respx
from httpx import Response
from sqlalchemy.exc import OperationalError

from src.integrations.backend import BackendRateClient
from src.integrations.external import ExternalRateProvider
from src.services.rate_sources import (
    BackendSource,
    ExternalProviderSource,
    LocalStoreSource,
    LookupErrorKind,
    LookupStatus,
)

BACKEND_URL = "https://backend.test/api/v1"
EXTERNAL_URL = "https://rates.test/api/v1"


def rate_payload(rate, from_currency="USD", to_currency="EUR"):
    return {"success": True, "data": {"rate": rate, "from": from_currency, "to": to_currency}}


class TestLocalStoreSource:
    """Tests for LocalStoreSource."""

    @pytest.mark.asyncio
    async def test_not_ready_is_reported(self, uninitialized_store):
        result = await LocalStoreSource(uninitialized_store).lookup("USD", "EUR")

        assert result.status == LookupStatus.ERROR
        assert result.error_kind == LookupErrorKind.NOT_READY

    @pytest.mark.asyncio
    async def test_hit(self, local_store):
        local_store.save_rate("USD", "EUR", 0.92)

        result = await LocalStoreSource(local_store).lookup("USD", "EUR")

        assert result.is_hit
        assert result.rate == 0.92

    @pytest.mark.asyncio
    async def test_miss(self, local_store):
        result = await LocalStoreSource(local_store).lookup("USD", "EUR")

        assert result.status == LookupStatus.MISS

    @pytest.mark.asyncio
    async def test_storage_error(self, local_store, monkeypatch):
        def broken(*args):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(local_store, "get_rate", broken)

        result = await LocalStoreSource(local_store).lookup("USD", "EUR")

        assert result.status == LookupStatus.ERROR
        assert result.error_kind == LookupErrorKind.STORAGE


class TestBackendSource:
    """Tests for BackendSource."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_without_token_skips_request(self):
        route = respx.get(f"{BACKEND_URL}/exchange-rates/rate")
        source = BackendSource(BackendRateClient(BACKEND_URL), lambda: None)

        result = await source.lookup("USD", "EUR")

        assert result.status == LookupStatus.MISS
        assert route.call_count == 0

    @respx.mock
    @pytest.mark.asyncio
    async def test_hit_sends_bearer_token(self):
        route = respx.get(
            f"{BACKEND_URL}/exchange-rates/rate", params={"from": "USD", "to": "EUR"}
        ).mock(return_value=Response(200, json=rate_payload(0.92)))
        source = BackendSource(BackendRateClient(BACKEND_URL), lambda: "tkn")

        result = await source.lookup("USD", "EUR")

        assert result.is_hit
        assert result.rate == 0.92
        assert route.calls.last.request.headers["Authorization"] == "Bearer tkn"

    @respx.mock
    @pytest.mark.asyncio
    async def test_expired_token(self):
        respx.get(f"{BACKEND_URL}/exchange-rates/rate").mock(return_value=Response(401))
        source = BackendSource(BackendRateClient(BACKEND_URL), lambda: "expired")

        result = await source.lookup("USD", "EUR")

        assert result.error_kind == LookupErrorKind.AUTH

    @respx.mock
    @pytest.mark.asyncio
    async def test_timeout(self):
        respx.get(f"{BACKEND_URL}/exchange-rates/rate").mock(
            side_effect=httpx.ConnectTimeout("timed out")
        )
        source = BackendSource(BackendRateClient(BACKEND_URL), lambda: "tkn")

        result = await source.lookup("USD", "EUR")

        assert result.error_kind == LookupErrorKind.TRANSIENT

    @respx.mock
    @pytest.mark.asyncio
    async def test_server_error(self):
        respx.get(f"{BACKEND_URL}/exchange-rates/rate").mock(return_value=Response(502))
        source = BackendSource(BackendRateClient(BACKEND_URL), lambda: "tkn")

        result = await source.lookup("USD", "EUR")

        assert result.error_kind == LookupErrorKind.TRANSIENT

    @pytest.mark.asyncio
    async def test_token_storage_error(self):
        def broken_token():
            raise OperationalError("SELECT", {}, Exception("locked"))

        source = BackendSource(BackendRateClient(BACKEND_URL), broken_token)

        result = await source.lookup("USD", "EUR")

        assert result.error_kind == LookupErrorKind.STORAGE


class TestExternalProviderSource:
    """Tests for ExternalProviderSource."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_hit_without_auth_header(self):
        route = respx.get(f"{EXTERNAL_URL}/exchange-rates/rate").mock(
            return_value=Response(200, json=rate_payload(0.92))
        )
        source = ExternalProviderSource(ExternalRateProvider(EXTERNAL_URL))

        result = await source.lookup("USD", "EUR")

        assert result.rate == 0.92
        assert "Authorization" not in route.calls.last.request.headers

    @respx.mock
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"success": False, "data": {"rate": 0.92}},
            {"success": True, "data": {"rate": 0}},
            {"success": True, "data": {"rate": -1.5}},
            {"success": True, "data": {}},
            {"success": True},
            {"unexpected": "shape"},
        ],
    )
    async def test_malformed_payloads(self, payload):
        respx.get(f"{EXTERNAL_URL}/exchange-rates/rate").mock(
            return_value=Response(200, json=payload)
        )
        source = ExternalProviderSource(ExternalRateProvider(EXTERNAL_URL))

        result = await source.lookup("USD", "EUR")

        assert result.status == LookupStatus.ERROR
        assert result.error_kind == LookupErrorKind.MALFORMED

    @respx.mock
    @pytest.mark.asyncio
    async def test_invalid_json(self):
        respx.get(f"{EXTERNAL_URL}/exchange-rates/rate").mock(
            return_value=Response(200, content=b"<html>")
        )
        source = ExternalProviderSource(ExternalRateProvider(EXTERNAL_URL))

        result = await source.lookup("USD", "EUR")

        assert result.error_kind == LookupErrorKind.MALFORMED
