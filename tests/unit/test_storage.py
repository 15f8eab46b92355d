"""Unit tests for the JSON state store and the persisted record formats."""
from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from wealthcast.analytics import cash
from wealthcast.analytics.positions import add_transaction, new_transaction
from wealthcast.models import (
    AssetPosition,
    CashLedger,
    ManualPosition,
    Settings,
    TransactionBackedPosition,
    WatchlistItem,
)
from wealthcast.storage import (
    JsonFileStore,
    load_cash_ledger,
    load_positions,
    load_settings,
    load_watchlist,
    save_cash_ledger,
    save_positions,
    save_settings,
    save_watchlist,
)


@pytest.fixture()
def store(tmp_path: Path) -> JsonFileStore:
    return JsonFileStore(tmp_path / "state")


class TestJsonFileStore:
    def test_missing_key_returns_default(self, store: JsonFileStore) -> None:
        assert store.load("nothing") is None
        assert store.load("nothing", default=[]) == []

    def test_round_trip(self, store: JsonFileStore) -> None:
        assert store.save("blob", {"a": [1, 2]}) is True
        assert store.load("blob") == {"a": [1, 2]}
        assert (store.directory / "blob.json").exists()

    def test_corrupt_file_returns_default(self, store: JsonFileStore) -> None:
        store.directory.mkdir(parents=True)
        (store.directory / "broken.json").write_text("{not json")
        assert store.load("broken", default={}) == {}

    def test_unserializable_value_reports_failure(self, store: JsonFileStore) -> None:
        assert store.save("bad", {"when": object()}) is False
        assert store.load("bad") is None

    def test_delete(self, store: JsonFileStore) -> None:
        store.save("blob", 1)
        assert store.delete("blob") is True
        assert store.load("blob") is None
        assert store.delete("blob") is True


class TestPositions:
    def test_manual_round_trip(self, store: JsonFileStore) -> None:
        position = AssetPosition(
            symbol="SAP",
            name="SAP SE",
            currency="EUR",
            exchange_rate=1.08,
            basis=ManualPosition(shares=3.0, avg_price=120.0),
            monthly_contribution=50.0,
            purchase_date=date(2023, 6, 1),
        )
        assert save_positions(store, [position]) is True

        [loaded] = load_positions(store)
        assert loaded == position

    def test_history_is_not_persisted(
        self, store: JsonFileStore, sample_position: AssetPosition
    ) -> None:
        save_positions(store, [sample_position])
        [loaded] = load_positions(store)

        assert loaded.history == ()
        assert loaded.basis == sample_position.basis
        raw = json.loads((store.directory / "portfolio.json").read_text())
        assert "lastUpdated" in raw

    def test_transaction_basis_round_trip(self, store: JsonFileStore) -> None:
        basis = add_transaction(
            ManualPosition(10.0, 100.0),
            new_transaction("sell", 4, 130.0, date(2024, 2, 1)),
        )
        position = AssetPosition(symbol="AAPL", basis=basis)
        save_positions(store, [position])

        [loaded] = load_positions(store)
        assert isinstance(loaded.basis, TransactionBackedPosition)
        assert loaded.basis == basis
        assert loaded.shares == pytest.approx(6.0)

    def test_empty_store(self, store: JsonFileStore) -> None:
        assert load_positions(store) == []

    def test_malformed_record(self, store: JsonFileStore) -> None:
        store.save("portfolio", {"stocks": [{"name": "no symbol"}]})
        assert load_positions(store) == []


class TestSettings:
    def test_default_when_missing(self, store: JsonFileStore) -> None:
        assert load_settings(store) == Settings()
        fallback = Settings(monthly_contribution=10.0)
        assert load_settings(store, fallback) == fallback

    def test_round_trip(self, store: JsonFileStore) -> None:
        settings = Settings(
            monthly_contribution=300.0, currency="EUR", forecast_years=10
        )
        save_settings(store, settings)
        assert load_settings(store) == settings
        raw = json.loads((store.directory / "settings.json").read_text())
        assert raw["monthlyContribution"] == 300.0

    def test_partial_record_uses_defaults(self, store: JsonFileStore) -> None:
        store.save("settings", {"forecastYears": 3})
        assert load_settings(store) == Settings(forecast_years=3)


class TestWatchlist:
    def test_round_trip(self, store: JsonFileStore) -> None:
        items = [WatchlistItem("NVDA", "NVIDIA", 450.0, date(2024, 1, 15))]
        save_watchlist(store, items)
        assert load_watchlist(store) == items

    def test_empty_store(self, store: JsonFileStore) -> None:
        assert load_watchlist(store) == []


class TestCashLedger:
    def test_round_trip(self, store: JsonFileStore) -> None:
        ledger = cash.deposit(CashLedger(), 1000, when=date(2024, 1, 1))
        ledger = cash.record_buy(ledger, "AAPL", 400, when=date(2024, 1, 2))
        save_cash_ledger(store, ledger)

        assert load_cash_ledger(store) == ledger

    def test_empty_store(self, store: JsonFileStore) -> None:
        assert load_cash_ledger(store) == CashLedger()
