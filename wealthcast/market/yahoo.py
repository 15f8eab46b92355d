"""Yahoo Finance chart and search client."""
from __future__ import annotations

import logging
import ssl
import time
from datetime import datetime, timezone
from typing import Any

import aiohttp
import certifi

from ..config import MarketDataConfig
from ..models import PricePoint, Quote, SearchResult, StockData

logger = logging.getLogger(__name__)

SECONDS_PER_YEAR = 365 * 24 * 60 * 60


class MarketDataError(RuntimeError):
    """A history or quote request failed for one symbol."""


def _value_at(values: list[Any] | None, index: int) -> float:
    if not values or index >= len(values) or values[index] is None:
        return 0.0
    return float(values[index])


def parse_chart_history(symbol: str, data: dict[str, Any]) -> StockData:
    """Turn a ``/v8/finance/chart`` payload into a monthly price history.

    Adjusted close is preferred over close; months without a positive price
    are dropped.
    """
    chart = data.get("chart") or {}
    if chart.get("error"):
        error = chart["error"]
        description = error.get("description") or f"Invalid symbol: {symbol}"
        raise MarketDataError(description)

    results = chart.get("result") or []
    if not results:
        raise MarketDataError(f"No data found for {symbol}")
    result = results[0]

    timestamps = result.get("timestamp") or []
    indicators = result.get("indicators") or {}
    quote = (indicators.get("quote") or [{}])[0]
    adj = (indicators.get("adjclose") or [{}])[0].get("adjclose")
    closes = adj or quote.get("close") or []
    meta = result.get("meta") or {}

    history: list[PricePoint] = []
    for i, ts in enumerate(timestamps):
        price = _value_at(closes, i) or _value_at(quote.get("close"), i)
        if price <= 0:
            continue
        day = datetime.fromtimestamp(ts, tz=timezone.utc).date()
        history.append(PricePoint(day, price))

    current_price = float(meta.get("regularMarketPrice") or 0.0)
    if not current_price and closes:
        current_price = _value_at(closes, len(closes) - 1)

    upper = symbol.upper()
    return StockData(
        symbol=upper,
        name=meta.get("longName") or meta.get("shortName") or upper,
        currency=meta.get("currency") or "USD",
        current_price=current_price,
        history=tuple(history),
    )


def parse_quote(symbol: str, data: dict[str, Any]) -> Quote:
    results = (data.get("chart") or {}).get("result") or [{}]
    meta = results[0].get("meta") or {}

    price = float(meta.get("regularMarketPrice") or 0.0)
    previous = float(meta.get("previousClose") or 0.0)
    change = price - previous
    return Quote(
        symbol=symbol.upper(),
        name=meta.get("longName") or meta.get("shortName") or symbol,
        price=price,
        previous_close=previous,
        change=change,
        change_percent=change / previous * 100 if previous else 0.0,
        currency=meta.get("currency") or "USD",
    )


class YahooFinanceClient:
    """Fetch monthly histories, quotes and symbol search results."""

    def __init__(self, config: MarketDataConfig) -> None:
        self.chart_url = config.chart_url.rstrip("/")
        self.search_url = config.search_url
        self.timeout = config.timeout

    async def _get_json(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.get(
                url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    raise MarketDataError(f"HTTP {response.status} from {url}")
                return await response.json()

    async def fetch_history(self, symbol: str, years: int = 10) -> StockData:
        """Monthly history for ``symbol`` covering the last ``years`` years.

        Raises:
            MarketDataError: the request failed or returned no usable data.
        """
        end = int(time.time())
        start = end - years * SECONDS_PER_YEAR
        params = {
            "period1": start,
            "period2": end,
            "interval": "1mo",
            "includePrePost": "false",
        }

        try:
            data = await self._get_json(f"{self.chart_url}/{symbol}", params)
        except MarketDataError:
            logger.error("Error fetching %s history", symbol)
            raise
        except Exception as e:
            logger.error("Error fetching %s history: %s", symbol, e)
            raise MarketDataError(f"Failed to fetch data for {symbol}: {e}") from e

        stock = parse_chart_history(symbol, data)
        logger.info(
            "Fetched %d months of history for %s", len(stock.history), stock.symbol
        )
        return stock

    async def fetch_quote(self, symbol: str) -> Quote:
        """Latest quote for ``symbol``.

        Raises:
            MarketDataError: the request failed.
        """
        try:
            data = await self._get_json(
                f"{self.chart_url}/{symbol}", {"interval": "1d", "range": "5d"}
            )
        except MarketDataError:
            logger.error("Error fetching quote for %s", symbol)
            raise
        except Exception as e:
            logger.error("Error fetching quote for %s: %s", symbol, e)
            raise MarketDataError(f"Failed to fetch quote for {symbol}: {e}") from e
        return parse_quote(symbol, data)

    async def search(self, query: str) -> list[SearchResult]:
        """Equity symbols matching ``query``; empty on error."""
        try:
            data = await self._get_json(
                self.search_url, {"q": query, "quotesCount": 10, "newsCount": 0}
            )
        except Exception as e:
            logger.error("Search error: %s", e)
            return []

        return [
            SearchResult(
                symbol=q["symbol"],
                name=q.get("longname") or q.get("shortname") or q["symbol"],
                exchange=q.get("exchange", ""),
            )
            for q in data.get("quotes", [])
            if q.get("quoteType") == "EQUITY" and q.get("symbol")
        ]
