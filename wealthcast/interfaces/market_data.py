"""Market data protocol: history, quote and symbol search."""
from typing import Protocol

from ..models import Quote, SearchResult, StockData


class MarketDataProvider(Protocol):
    """Abstract interface for fetching monthly price histories and quotes."""

    async def fetch_history(self, symbol: str, years: int = 10) -> StockData: ...

    async def fetch_quote(self, symbol: str) -> Quote: ...

    async def search(self, query: str) -> list[SearchResult]: ...
