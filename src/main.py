# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.config import settings
from src.database import SessionLocal
from src.schemas.common import HealthResponse
from src.services.exchange_rate_service import build_exchange_rate_service


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    # Startup: one service (and one in-memory cache) for the whole process
    service = build_exchange_rate_service(settings, SessionLocal)
    try:
        service.store.initialize()
    except Exception as e:
        logger.error(f"Error initializing local rate store: {e}")
    app.state.exchange_rate_service = service

    yield

    # Shutdown: close HTTP clients
    logger.info("Shutting down exchange rate service...")
    await service.close()


app = FastAPI(
    title="Exchange Rates",
    description="Exchange rate resolution and conversion for personal finance",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy")


# Import and include API router after it's created
from src.api.v1.router import api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")
