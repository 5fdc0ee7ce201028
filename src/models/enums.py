# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for database models."""

from enum import Enum


class RatesMode(str, Enum):
    """How the user wants exchange rates to be maintained.

    AUTO uses backend and market rates, MANUAL prefers rates the user
    entered themselves.
    """

    AUTO = "auto"
    MANUAL = "manual"


class SettingKey(str, Enum):
    """Keys of the local settings table."""

    TOKEN = "token"
    EXCHANGE_RATES_MODE = "exchange_rates_mode"
