"""Market data clients."""
from .yahoo import MarketDataError, YahooFinanceClient

__all__ = ["MarketDataError", "YahooFinanceClient"]
