# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings.

    Every field can be overridden with an environment variable of the same
    name (case-insensitive) or through a ``.env`` file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./rates.db"

    # Authenticated backend that tracks user and market rates
    backend_api_url: str = "http://localhost:3000/api/v1"

    # Unauthenticated market-rate provider (same payload shape)
    external_rates_url: str = "http://localhost:3000/api/v1"

    http_timeout: float = 10.0
    cache_duration_hours: int = 24
    pivot_currency: str = "USD"
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


settings = get_settings()
