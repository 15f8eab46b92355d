"""Data models: all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class PricePoint:
    """Month-granularity USD price sample."""

    date: date
    price: float
    is_forecast: bool = False


@dataclass(frozen=True)
class ConfidenceBand:
    low: tuple[PricePoint, ...] = ()
    high: tuple[PricePoint, ...] = ()


@dataclass(frozen=True)
class ForecastResult:
    forecast: tuple[PricePoint, ...] = ()
    confidence: ConfidenceBand = field(default_factory=ConfidenceBand)


@dataclass(frozen=True)
class MonthlyStats:
    avg_return: float = 0.0
    volatility: float = 0.0
    returns: tuple[float, ...] = ()


@dataclass(frozen=True)
class GrowthRateSet:
    """Annual growth rates for the four fixed projection horizons."""

    six_month: float
    one_year: float
    five_year: float
    ten_year: float


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------


class TransactionType(str, Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Transaction:
    id: str
    type: TransactionType
    shares: float
    price: float
    date: date


@dataclass(frozen=True)
class ManualPosition:
    """Holding entered directly as a share count and average price."""

    shares: float
    avg_price: float

    @classmethod
    def from_amount(cls, invested_amount: float, price: float) -> "ManualPosition":
        """Amount-first entry: derive the share count from the money invested."""
        shares = invested_amount / price if price > 0 else 0.0
        return cls(shares=shares, avg_price=price)


@dataclass(frozen=True)
class TransactionBackedPosition:
    """Holding whose display fields are replayed from its transactions."""

    transactions: tuple[Transaction, ...] = ()
    fallback_price: float = 0.0


PositionBasis = Union[ManualPosition, TransactionBackedPosition]


@dataclass(frozen=True)
class Holdings:
    shares: float
    invested_amount: float
    purchase_price: float


@dataclass(frozen=True)
class AssetPosition:
    """A tracked holding plus its (USD) history and forecast."""

    symbol: str
    basis: PositionBasis
    name: str = ""
    currency: str = "USD"
    exchange_rate: float = 1.0
    history: tuple[PricePoint, ...] = ()
    forecast: tuple[PricePoint, ...] = ()
    confidence: ConfidenceBand = field(default_factory=ConfidenceBand)
    monthly_contribution: float = 0.0
    current_price: float = 0.0
    purchase_date: date | None = None
    error: bool = False

    @property
    def holdings(self) -> Holdings:
        from .analytics.positions import derive_holdings

        return derive_holdings(self.basis)

    @property
    def shares(self) -> float:
        return self.holdings.shares

    @property
    def invested_amount(self) -> float:
        return self.holdings.invested_amount

    @property
    def purchase_price(self) -> float:
        return self.holdings.purchase_price

    @property
    def implied_shares(self) -> float:
        """Share count implied by ``invested_amount / effective purchase price``."""
        price = self.purchase_price
        if price <= 0 and self.history:
            price = self.history[0].price
        if price <= 0:
            price = 1.0
        return self.invested_amount / price


# ---------------------------------------------------------------------------
# Aggregation output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WealthPoint:
    """One month of the portfolio-level value curve."""

    date: date
    value: float | None
    contributions: float
    is_forecast: bool
    forecast_value: float | None = None
    six_month_projection: float | None = None
    one_year_projection: float | None = None
    five_year_projection: float | None = None
    ten_year_projection: float | None = None


@dataclass(frozen=True)
class ContributionPoint:
    month: int
    date: date
    one_year: float
    five_year: float
    ten_year: float
    contributions: float


@dataclass(frozen=True)
class PortfolioMetrics:
    total_invested: float = 0.0
    current_value: float = 0.0
    total_return: float = 0.0
    total_return_percent: float = 0.0
    projected_value: float = 0.0
    projected_return: float = 0.0
    projected_return_percent: float = 0.0


# ---------------------------------------------------------------------------
# Cash, watchlist, settings
# ---------------------------------------------------------------------------


class CashTransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class CashTransaction:
    id: str
    type: CashTransactionType
    amount: float
    note: str
    date: date
    symbol: str | None = None


@dataclass(frozen=True)
class CashLedger:
    """Cash balance plus its transactions, newest first."""

    balance: float = 0.0
    transactions: tuple[CashTransaction, ...] = ()


@dataclass(frozen=True)
class WatchlistItem:
    symbol: str
    name: str
    added_price: float
    added_date: date


@dataclass(frozen=True)
class WatchlistQuote:
    item: WatchlistItem
    price: float = 0.0
    change_since_added_percent: float = 0.0
    error: bool = False


@dataclass(frozen=True)
class Settings:
    monthly_contribution: float = 0.0
    currency: str = "USD"
    forecast_years: int = 5


# ---------------------------------------------------------------------------
# Market data (inbound)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StockData:
    symbol: str
    name: str
    currency: str
    current_price: float
    history: tuple[PricePoint, ...] = ()


@dataclass(frozen=True)
class Quote:
    symbol: str
    name: str
    price: float
    previous_close: float
    change: float
    change_percent: float
    currency: str = "USD"


@dataclass(frozen=True)
class SearchResult:
    symbol: str
    name: str
    exchange: str = ""
