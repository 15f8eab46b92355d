"""Month-over-month return statistics."""
from __future__ import annotations

from typing import Sequence

import numpy as np

from ..models import MonthlyStats, PricePoint


def monthly_returns(history: Sequence[PricePoint]) -> list[float]:
    """Simple returns between consecutive points, skipping zero-priced months."""
    return [
        (cur.price - prev.price) / prev.price
        for prev, cur in zip(history, history[1:])
        if prev.price > 0
    ]


def monthly_stats(history: Sequence[PricePoint]) -> MonthlyStats:
    """Mean monthly return and its population standard deviation.

    Unlike the median growth estimator no outliers are dropped; these numbers
    size the forecast confidence band.
    """
    if len(history) < 2:
        return MonthlyStats()

    returns = monthly_returns(history)
    if not returns:
        return MonthlyStats()

    arr = np.asarray(returns, dtype=float)
    return MonthlyStats(
        avg_return=float(arr.mean()),
        volatility=float(arr.std()),
        returns=tuple(returns),
    )


def linear_trend(history: Sequence[PricePoint]) -> tuple[float, float]:
    """Least-squares ``(slope, intercept)`` of price against index ``0..n-1``."""
    n = len(history)
    if n == 0:
        return 0.0, 0.0
    if n < 2:
        return 0.0, history[0].price

    x = np.arange(n, dtype=float)
    y = np.fromiter((p.price for p in history), dtype=float, count=n)
    slope, intercept = np.polyfit(x, y, 1)
    return float(slope), float(intercept)
