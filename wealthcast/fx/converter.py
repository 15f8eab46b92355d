"""USD normalization with a cached, time-boxed rate table."""
from __future__ import annotations

import logging
import time
from typing import Callable, Sequence

from ..interfaces.rate_supplier import RateSupplier
from ..models import PricePoint

logger = logging.getLogger(__name__)

SETTLEMENT_CURRENCY = "USD"

# USD per unit of each currency; used until a live table is fetched.
FALLBACK_RATES: dict[str, float] = {
    "EUR": 1.08,
    "GBP": 1.27,
    "JPY": 0.0067,
    "CHF": 1.13,
    "CAD": 0.74,
    "AUD": 0.65,
    "INR": 0.012,
    "CNY": 0.14,
    "HKD": 0.13,
    "SGD": 0.74,
    "SEK": 0.095,
    "NOK": 0.091,
    "DKK": 0.145,
    "KRW": 0.00075,
    "USD": 1.0,
}

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CHF": "CHF ",
    "CAD": "C$",
    "AUD": "A$",
    "INR": "₹",
    "CNY": "¥",
    "HKD": "HK$",
    "SGD": "S$",
    "SEK": "kr",
    "NOK": "kr",
    "DKK": "kr",
    "KRW": "₩",
}


def _is_settlement(code: str | None) -> bool:
    return not code or code.upper() == SETTLEMENT_CURRENCY


class CurrencyConverter:
    """Converts foreign amounts to USD.

    Each instance owns its own rate table, so tests and callers can run
    several independent converters side by side.
    """

    def __init__(
        self,
        supplier: RateSupplier | None = None,
        ttl_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._supplier = supplier
        self._ttl = ttl_seconds
        self._clock = clock
        self._rates: dict[str, float] = dict(FALLBACK_RATES)
        self._fetched_at: float | None = None

    @property
    def rates(self) -> dict[str, float]:
        return dict(self._rates)

    def is_fresh(self) -> bool:
        if self._fetched_at is None or len(self._rates) <= 1:
            return False
        return self._clock() - self._fetched_at < self._ttl

    async def refresh(self) -> bool:
        """Replace the rate table from the supplier unless it is still fresh.

        Returns True when a new table was installed. Supplier failures keep
        the current table.
        """
        if self.is_fresh() or self._supplier is None:
            return False

        try:
            raw = await self._supplier.fetch_rates()
        except Exception as e:
            logger.warning(
                "Failed to fetch exchange rates, keeping current table: %s", e
            )
            return False

        rates = {SETTLEMENT_CURRENCY: 1.0}
        for code, units_per_usd in (raw or {}).items():
            if units_per_usd and units_per_usd > 0:
                rates[code.upper()] = 1 / units_per_usd
        rates[SETTLEMENT_CURRENCY] = 1.0

        if len(rates) <= 1:
            logger.warning(
                "Exchange rate supplier returned no rates, keeping current table"
            )
            return False

        self._rates = rates
        self._fetched_at = self._clock()
        logger.info("Exchange rates refreshed (%d currencies)", len(rates))
        return True

    def _lookup(self, code: str) -> float | None:
        code = code.upper()
        return self._rates.get(code) or FALLBACK_RATES.get(code)

    def rate(self, code: str | None) -> float:
        """USD per unit of ``code``; 1 for USD and for unknown codes."""
        if _is_settlement(code):
            return 1.0
        return self._lookup(code) or 1.0

    def convert_to_usd(self, amount: float, code: str | None) -> float:
        if _is_settlement(code):
            return amount

        rate = self._lookup(code)
        if not rate:
            logger.warning("Unknown currency: %s, using 1:1 rate", code)
            return amount
        return amount * rate

    def convert_history(
        self, history: Sequence[PricePoint], code: str | None
    ) -> tuple[PricePoint, ...]:
        """Convert every price of a history to USD."""
        if _is_settlement(code):
            return tuple(history)
        if not self._lookup(code):
            logger.warning("Unknown currency: %s, using 1:1 rate", code)
            return tuple(history)
        rate = self.rate(code)
        return tuple(
            PricePoint(p.date, p.price * rate, p.is_forecast) for p in history
        )


def format_currency(amount: float, code: str = "USD") -> str:
    """``$1,234.5``-style rendering with at most two decimals."""
    symbol = CURRENCY_SYMBOLS.get(code.upper(), f"{code} ")
    text = f"{amount:,.2f}".rstrip("0").rstrip(".")
    return f"{symbol}{text}"
