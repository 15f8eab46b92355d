"""Robust annual growth-rate estimation from monthly price histories.

Two estimators are blended:

* ``bounded_cagr``: compound growth between the first and last price of a
  window. Unstable on short windows, so only used for the 5y/10y horizons.
* ``median_growth``: median month-over-month return, annualized. Returns
  outside ``(-20%, +20%)`` are treated as data artifacts (splits, bad ticks)
  and dropped before the median is taken.

Every rate is clamped to ``[MIN_RATE, MAX_RATE]``.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

from ..models import GrowthRateSet, PricePoint

MIN_RATE = -0.15
MAX_RATE = 0.35
DEFAULT_RATE = 0.08
OUTLIER_BOUND = 0.20

CAGR_WEIGHT = 0.4
MEDIAN_WEIGHT = 0.6

# Returned when a history is too short to say anything (< MIN_POINTS).
DEFAULT_RATES = GrowthRateSet(
    six_month=0.08, one_year=0.08, five_year=0.10, ten_year=0.10
)
MIN_POINTS = 6
MIN_COMPOUND_POINTS = 12


def clamp_rate(rate: float) -> float:
    return max(MIN_RATE, min(MAX_RATE, rate))


def bounded_cagr(start: float, end: float, months: int) -> float:
    """Annualized compound growth between two prices ``months`` apart."""
    if start <= 0 or end <= 0 or months <= 0:
        return DEFAULT_RATE
    rate = (end / start) ** (12 / months) - 1
    return clamp_rate(rate)


def median_growth(history: Sequence[PricePoint]) -> float:
    """Annualized median monthly return, ignoring outlier months."""
    if len(history) < 2:
        return DEFAULT_RATE

    returns: list[float] = []
    for prev, cur in zip(history, history[1:]):
        if prev.price <= 0:
            continue
        ret = (cur.price - prev.price) / prev.price
        if -OUTLIER_BOUND < ret < OUTLIER_BOUND:
            returns.append(ret)

    if not returns:
        return DEFAULT_RATE
    return clamp_rate(float(np.median(returns)) * 12)


def _blended_rate(window: Sequence[PricePoint], fallback: float) -> float:
    if len(window) >= MIN_COMPOUND_POINTS:
        compound = bounded_cagr(window[0].price, window[-1].price, len(window))
    else:
        compound = fallback
    return clamp_rate(CAGR_WEIGHT * compound + MEDIAN_WEIGHT * median_growth(window))


def estimate_growth_rates(history: Sequence[PricePoint]) -> GrowthRateSet:
    """Estimate the 6m / 1y / 5y / 10y annual growth rates of a history.

    Short horizons use the median estimator alone. The 5y and 10y rates blend
    compound and median growth over the trailing 60 months and the full
    history; a window under 12 points substitutes the next-shorter horizon's
    rate for its compound term.
    """
    if len(history) < MIN_POINTS:
        return DEFAULT_RATES

    history = list(history)
    six_month = median_growth(history[-6:])
    one_year = median_growth(history[-12:])
    five_year = _blended_rate(history[-60:], one_year)
    ten_year = _blended_rate(history, five_year)

    return GrowthRateSet(
        six_month=six_month,
        one_year=one_year,
        five_year=five_year,
        ten_year=ten_year,
    )


def estimate(history: Sequence[PricePoint]) -> float:
    """Single long-run annual rate for a history (the full-history blend)."""
    return estimate_growth_rates(history).ten_year
