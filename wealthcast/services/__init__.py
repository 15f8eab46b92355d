"""Service modules"""
from .tracker import PortfolioSnapshot, PortfolioTracker
from .watchlist import add_to_watchlist, remove_from_watchlist

__all__ = [
    "PortfolioSnapshot",
    "PortfolioTracker",
    "add_to_watchlist",
    "remove_from_watchlist",
]
