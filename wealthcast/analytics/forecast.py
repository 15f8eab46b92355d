"""Multi-method monthly price forecaster.

Each future month blends three projections:

    compound  last * (1 + avg_return) ** i          weight 0.4
    trend     OLS line evaluated at n + i - 1       weight 0.2
    momentum  compound using the trailing 24 months weight 0.4

The band around the blend widens with ``sqrt(i)``.
"""
from __future__ import annotations

import logging
import math
from typing import Sequence

from dateutil.relativedelta import relativedelta

from ..models import ConfidenceBand, ForecastResult, PricePoint
from .statistics import linear_trend, monthly_stats

logger = logging.getLogger(__name__)

MIN_HISTORY = 12
MOMENTUM_WINDOW = 24
Z_SCORE = 1.96

COMPOUND_WEIGHT = 0.4
TREND_WEIGHT = 0.2
MOMENTUM_WEIGHT = 0.4


def generate_forecast(
    history: Sequence[PricePoint], horizon_months: int = 60
) -> ForecastResult:
    """Project a USD price history ``horizon_months`` months forward."""
    if not history or len(history) < MIN_HISTORY:
        logger.debug(
            "Skipping forecast: %d history points (need %d)",
            len(history) if history else 0,
            MIN_HISTORY,
        )
        return ForecastResult()

    n = len(history)
    stats = monthly_stats(history)
    slope, intercept = linear_trend(history)
    recent = monthly_stats(history[-min(MOMENTUM_WINDOW, n):])

    last = history[-1]
    forecast: list[PricePoint] = []
    low: list[PricePoint] = []
    high: list[PricePoint] = []

    for i in range(1, horizon_months + 1):
        when = last.date + relativedelta(months=i)

        compound = last.price * (1 + stats.avg_return) ** i
        trend = max(0.0, intercept + slope * (n + i - 1))
        momentum = last.price * (1 + recent.avg_return) ** i
        blended = (
            COMPOUND_WEIGHT * compound
            + TREND_WEIGHT * trend
            + MOMENTUM_WEIGHT * momentum
        )

        multiplier = 1 + stats.volatility * math.sqrt(i) * Z_SCORE

        forecast.append(PricePoint(when, max(0.0, blended), is_forecast=True))
        low.append(PricePoint(when, max(0.0, blended / multiplier), is_forecast=True))
        high.append(PricePoint(when, max(0.0, blended * multiplier), is_forecast=True))

    return ForecastResult(
        forecast=tuple(forecast),
        confidence=ConfidenceBand(low=tuple(low), high=tuple(high)),
    )


def bridge_point(history: Sequence[PricePoint]) -> PricePoint | None:
    """Last historical point re-flagged so a forecast line can start from it."""
    if not history:
        return None
    last = history[-1]
    return PricePoint(last.date, last.price, is_forecast=True)
