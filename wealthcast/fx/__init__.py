"""Currency normalization."""
from .converter import FALLBACK_RATES, CurrencyConverter, format_currency
from .exchangerate_api import ExchangeRateApiSupplier

__all__ = [
    "FALLBACK_RATES",
    "CurrencyConverter",
    "ExchangeRateApiSupplier",
    "format_currency",
]
