"""Offline demo portfolio with synthetic monthly histories."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import numpy as np
from dateutil.relativedelta import relativedelta

from .models import AssetPosition, ManualPosition, PricePoint


@dataclass(frozen=True)
class _DemoProfile:
    name: str
    invested: float
    base_price: float
    annual_growth: float
    volatility: float


DEMO_PROFILES: dict[str, _DemoProfile] = {
    "AAPL": _DemoProfile("Apple Inc.", 10000, 45, 0.25, 0.04),
    "MSFT": _DemoProfile("Microsoft Corporation", 8000, 85, 0.22, 0.035),
    "GOOGL": _DemoProfile("Alphabet Inc.", 5000, 60, 0.18, 0.045),
}

DIP_PROBABILITY = 0.05
DIP_FACTOR = 0.92
PRICE_FLOOR = 0.3


def synthetic_history(
    rng: np.random.Generator,
    as_of: date,
    years: int,
    base_price: float,
    annual_growth: float,
    volatility: float,
) -> tuple[PricePoint, ...]:
    """Trend plus uniform noise plus occasional dips, floored at 30% of base."""
    months = years * 12
    start = date(as_of.year, as_of.month, 1) - relativedelta(months=months)
    monthly_growth = annual_growth / 12

    noise = 1 + (rng.random(months) - 0.5) * volatility * 2
    dips = np.where(rng.random(months) < DIP_PROBABILITY, DIP_FACTOR, 1.0)

    history: list[PricePoint] = []
    price = base_price
    for i in range(months):
        price = price * (1 + monthly_growth) * noise[i] * dips[i]
        price = max(price, base_price * PRICE_FLOOR)
        history.append(PricePoint(start + relativedelta(months=i), round(price, 2)))
    return tuple(history)


def generate_demo_portfolio(
    as_of: date, years: int = 10, seed: int | None = None
) -> list[AssetPosition]:
    """Demo holdings bought at 70% of their latest synthetic price."""
    rng = np.random.default_rng(seed)
    positions: list[AssetPosition] = []

    for symbol, profile in DEMO_PROFILES.items():
        history = synthetic_history(
            rng,
            as_of,
            years,
            profile.base_price,
            profile.annual_growth,
            profile.volatility,
        )
        current = history[-1].price
        positions.append(
            AssetPosition(
                symbol=symbol,
                name=profile.name,
                basis=ManualPosition.from_amount(profile.invested, current * 0.7),
                history=history,
                current_price=current,
            )
        )
    return positions
