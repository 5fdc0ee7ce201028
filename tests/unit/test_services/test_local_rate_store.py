# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for the local rate store."""

from src.models.enums import RatesMode
from src.models.exchange_rate import ExchangeRate
from src.schemas.exchange_rate import UserRate


class TestReadiness:
    """The store must be safe to query before initialization."""

    def test_not_ready_until_initialized(self, uninitialized_store):
        assert uninitialized_store.is_ready() is False

    def test_queries_before_init_return_empty(self, uninitialized_store):
        assert uninitialized_store.get_rate("USD", "EUR") is None
        assert uninitialized_store.get_all_rates() == {}
        assert uninitialized_store.get_token() is None
        assert uninitialized_store.get_rates_mode() == RatesMode.AUTO
        assert uninitialized_store.get_last_rates_update() is None

    def test_writes_before_init_are_dropped(self, uninitialized_store):
        uninitialized_store.save_rate("USD", "EUR", 0.92)
        uninitialized_store.set_token("abc")

        assert uninitialized_store.get_rate("USD", "EUR") is None

    def test_ready_after_init(self, local_store):
        assert local_store.is_ready() is True


class TestRates:
    """Tests for stored exchange rates."""

    def test_save_and_get(self, local_store):
        local_store.save_rate("USD", "EUR", 0.92)

        assert local_store.get_rate("USD", "EUR") == 0.92
        assert local_store.get_rate("EUR", "USD") is None

    def test_save_updates_existing_row(self, local_store):
        local_store.save_rate("USD", "EUR", 0.92)
        local_store.save_rate("USD", "EUR", 0.95)

        assert local_store.get_rate("USD", "EUR") == 0.95
        with local_store._session_factory() as db:
            assert db.query(ExchangeRate).count() == 1

    def test_get_all_rates_groups_by_source(self, local_store):
        local_store.save_rate("USD", "EUR", 0.92)
        local_store.save_rate("USD", "GBP", 0.79)
        local_store.save_rate("EUR", "PLN", 4.3)

        assert local_store.get_all_rates() == {
            "USD": {"EUR": 0.92, "GBP": 0.79},
            "EUR": {"PLN": 4.3},
        }
        assert local_store.get_stored_rates("USD") == {"EUR": 0.92, "GBP": 0.79}
        assert local_store.get_stored_rates("JPY") == {}

    def test_save_rates_from_sync(self, local_store):
        rates = [
            UserRate(from_currency="USD", to_currency="RUB", rate=90.0),
            UserRate(from_currency="EUR", to_currency="RUB", rate=98.5),
        ]

        saved = local_store.save_rates_from_sync(rates)

        assert saved == 2
        assert local_store.get_rate("EUR", "RUB") == 98.5

    def test_codes_are_stored_upper_case(self, local_store):
        saved = local_store.save_rates_from_sync(
            [UserRate(from_currency=" usd", to_currency="eur ", rate=0.5)]
        )
        local_store.save_rate("gbp", "usd", 1.25)

        assert saved == 1
        assert local_store.get_all_rates() == {"USD": {"EUR": 0.5}, "GBP": {"USD": 1.25}}

    def test_last_update_tracks_latest_write(self, local_store):
        assert local_store.get_last_rates_update() is None

        local_store.save_rate("USD", "EUR", 0.92)

        assert local_store.get_last_rates_update() is not None

    def test_clear_all_rates(self, local_store):
        local_store.save_rate("USD", "EUR", 0.92)

        local_store.clear_all_rates()

        assert local_store.get_all_rates() == {}


class TestSettings:
    """Tests for the token and rates mode settings."""

    def test_rates_mode_defaults_to_auto(self, local_store):
        assert local_store.get_rates_mode() == RatesMode.AUTO

    def test_set_rates_mode(self, local_store):
        local_store.set_rates_mode(RatesMode.MANUAL)

        assert local_store.get_rates_mode() == RatesMode.MANUAL

    def test_token_roundtrip_and_clear(self, local_store):
        local_store.set_token("abc")
        assert local_store.get_token() == "abc"

        local_store.set_token(None)
        assert local_store.get_token() is None
