"""Persistence for portfolio, settings, watchlist and cash state."""
from .json_store import JsonFileStore
from .state import (
    load_cash_ledger,
    load_positions,
    load_settings,
    load_watchlist,
    save_cash_ledger,
    save_positions,
    save_settings,
    save_watchlist,
)

__all__ = [
    "JsonFileStore",
    "load_cash_ledger",
    "load_positions",
    "load_settings",
    "load_watchlist",
    "save_cash_ledger",
    "save_positions",
    "save_settings",
    "save_watchlist",
]
