"""Protocol interfaces for external collaborators."""
from .market_data import MarketDataProvider
from .rate_supplier import RateSupplier
from .state_store import StateStore

__all__ = ["MarketDataProvider", "RateSupplier", "StateStore"]
