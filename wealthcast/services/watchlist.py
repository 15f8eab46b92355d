"""Watchlist edits."""
from __future__ import annotations

from datetime import date
from typing import Sequence

from ..models import WatchlistItem


def add_to_watchlist(
    items: Sequence[WatchlistItem],
    symbol: str,
    name: str,
    price: float,
    when: date,
) -> list[WatchlistItem]:
    """Append ``symbol`` unless it is already watched."""
    symbol = symbol.upper()
    if any(i.symbol == symbol for i in items):
        return list(items)
    return [*items, WatchlistItem(symbol, name or symbol, price, when)]


def remove_from_watchlist(
    items: Sequence[WatchlistItem], symbol: str
) -> list[WatchlistItem]:
    symbol = symbol.upper()
    return [i for i in items if i.symbol != symbol]
