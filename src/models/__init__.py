# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from src.models.base import Base, TimestampMixin
from src.models.enums import RatesMode, SettingKey
from src.models.exchange_rate import ExchangeRate
from src.models.setting import Setting

__all__ = [
    "Base",
    "ExchangeRate",
    "RatesMode",
    "Setting",
    "SettingKey",
    "TimestampMixin",
]
