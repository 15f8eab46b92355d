"""Unit tests for watchlist edits."""
from __future__ import annotations

from datetime import date

from wealthcast.models import WatchlistItem
from wealthcast.services.watchlist import add_to_watchlist, remove_from_watchlist

DAY = date(2024, 1, 1)


class TestWatchlist:
    def test_add_upper_cases_symbol(self) -> None:
        items = add_to_watchlist([], "nvda", "NVIDIA", 450.0, DAY)
        assert items == [WatchlistItem("NVDA", "NVIDIA", 450.0, DAY)]

    def test_add_is_idempotent(self) -> None:
        items = add_to_watchlist([], "NVDA", "NVIDIA", 450.0, DAY)
        assert add_to_watchlist(items, "nvda", "Other", 1.0, DAY) == items

    def test_name_defaults_to_symbol(self) -> None:
        [item] = add_to_watchlist([], "TSM", "", 100.0, DAY)
        assert item.name == "TSM"

    def test_remove(self) -> None:
        items = add_to_watchlist([], "A", "A", 1.0, DAY)
        items = add_to_watchlist(items, "B", "B", 2.0, DAY)
        assert [i.symbol for i in remove_from_watchlist(items, "a")] == ["B"]
