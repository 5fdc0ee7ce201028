# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BACKEND_API_URL"] = "https://backend.test/api/v1"
os.environ["EXTERNAL_RATES_URL"] = "https://rates.test/api/v1"

from src.integrations.backend import BackendRateClient
from src.integrations.external import ExternalRateProvider
from src.main import app
from src.models.base import Base
from src.services.exchange_rate_service import ExchangeRateService
from src.services.local_rate_store import LocalRateStore
from src.services.rate_cache import RateCache

BACKEND_URL = "https://backend.test/api/v1"
EXTERNAL_URL = "https://rates.test/api/v1"

# Test database setup
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeClock:
    """Controllable replacement for ``datetime.utcnow``."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 1, 15, 12, 0, 0))


@pytest.fixture
def rate_cache(clock) -> RateCache:
    return RateCache(clock=clock)


@pytest.fixture(scope="function")
def local_store():
    """Initialized local store on a fresh in-memory database."""
    store = LocalRateStore(TestingSessionLocal)
    store.initialize()
    try:
        yield store
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def uninitialized_store() -> LocalRateStore:
    return LocalRateStore(TestingSessionLocal)


@pytest.fixture
def exchange_rate_service(rate_cache, local_store) -> ExchangeRateService:
    """Service wired to the test database and the mocked provider URLs."""
    return ExchangeRateService(
        cache=rate_cache,
        store=local_store,
        backend=BackendRateClient(BACKEND_URL),
        external=ExternalRateProvider(EXTERNAL_URL),
    )


@pytest.fixture
def signed_in(local_store) -> str:
    """Store a backend token so authenticated lookups are attempted."""
    token = "valid-token"
    local_store.set_token(token)
    return token


@pytest.fixture(scope="function")
def client(exchange_rate_service):
    """Create a test client using the test service."""
    with TestClient(app) as test_client:
        lifespan_service = app.state.exchange_rate_service
        app.state.exchange_rate_service = exchange_rate_service
        try:
            yield test_client
        finally:
            app.state.exchange_rate_service = lifespan_service
            test_client.portal.call(exchange_rate_service.close)
