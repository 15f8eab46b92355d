"""Portfolio-level wealth aggregation and projection."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from dateutil.relativedelta import relativedelta

from ..models import (
    AssetPosition,
    ContributionPoint,
    GrowthRateSet,
    PortfolioMetrics,
    PricePoint,
    WealthPoint,
)
from .growth import estimate_growth_rates

logger = logging.getLogger(__name__)

CONTRIBUTION_MIN_HISTORY = 12


@dataclass
class _Month:
    date: date
    historical: float = 0.0
    forecast: float = 0.0
    has_history: bool = False
    is_forecast: bool = False
    projections: tuple[float, ...] | None = None


def _month_key(d: date) -> str:
    return d.strftime("%Y-%m")


def _merge_months(positions: Sequence[AssetPosition]) -> dict[str, _Month]:
    months: dict[str, _Month] = {}
    for position in positions:
        shares = position.implied_shares

        for point in position.history:
            month = months.setdefault(_month_key(point.date), _Month(point.date))
            month.historical += shares * point.price
            month.has_history = True

        for point in position.forecast:
            month = months.setdefault(_month_key(point.date), _Month(point.date))
            month.forecast += shares * point.price
            month.is_forecast = True
    return months


def _historical_series(months: dict[str, _Month]) -> list[PricePoint]:
    ordered = sorted(months.values(), key=lambda m: m.date)
    return [PricePoint(m.date, m.historical) for m in ordered if m.has_history]


def project_trajectory(
    start: float, annual_rate: float, months: int, monthly_contribution: float = 0.0
) -> list[float]:
    """Month-end values of ``v = v * (1 + rate/12) + contribution``."""
    monthly_rate = annual_rate / 12
    values: list[float] = []
    value = start
    for _ in range(months):
        value = value * (1 + monthly_rate) + monthly_contribution
        values.append(value)
    return values


def portfolio_growth_rates(positions: Sequence[AssetPosition]) -> GrowthRateSet:
    """Growth rates of the merged portfolio value curve.

    Estimated on the summed history rather than averaged per asset, so the
    rates reflect how the holdings moved together.
    """
    return estimate_growth_rates(_historical_series(_merge_months(positions)))


def aggregate(
    positions: Sequence[AssetPosition],
    monthly_contribution: float,
    horizon_years: int,
    as_of: date,
) -> list[WealthPoint]:
    """Merge per-asset histories and forecasts into one monthly wealth curve.

    Args:
        positions: Holdings with USD histories (and optional forecasts).
        monthly_contribution: USD added every future month.
        horizon_years: Length of the four growth-rate projections.
        as_of: The date separating past from future months.

    Returns:
        Chronological ``WealthPoint`` list; empty when there is no data.
    """
    if not positions:
        return []

    months = _merge_months(positions)
    if not months:
        return []

    history = _historical_series(months)
    if history:
        rates = estimate_growth_rates(history)
        _attach_projections(
            months, history[-1], rates, monthly_contribution, horizon_years * 12
        )
        logger.debug(
            "Portfolio rates 6m=%.4f 1y=%.4f 5y=%.4f 10y=%.4f",
            rates.six_month,
            rates.one_year,
            rates.five_year,
            rates.ten_year,
        )

    contributions = sum(p.invested_amount for p in positions)
    points: list[WealthPoint] = []
    for month in sorted(months.values(), key=lambda m: m.date):
        is_future = month.date > as_of
        if is_future:
            contributions += monthly_contribution

        six, one, five, ten = month.projections or (None, None, None, None)
        points.append(
            WealthPoint(
                date=month.date,
                value=month.historical if month.has_history else None,
                contributions=contributions,
                is_forecast=is_future,
                forecast_value=month.forecast if month.is_forecast else None,
                six_month_projection=six,
                one_year_projection=one,
                five_year_projection=five,
                ten_year_projection=ten,
            )
        )
    return points


def _attach_projections(
    months: dict[str, _Month],
    last: PricePoint,
    rates: GrowthRateSet,
    monthly_contribution: float,
    horizon_months: int,
) -> None:
    # The last historical month bridges into all four projections.
    months[_month_key(last.date)].projections = (last.price,) * 4

    trajectories = [
        project_trajectory(last.price, rate, horizon_months, monthly_contribution)
        for rate in (rates.six_month, rates.one_year, rates.five_year, rates.ten_year)
    ]
    for i in range(horizon_months):
        when = last.date + relativedelta(months=i + 1)
        month = months.setdefault(_month_key(when), _Month(when, is_forecast=True))
        month.projections = tuple(t[i] for t in trajectories)


def portfolio_metrics(positions: Sequence[AssetPosition]) -> PortfolioMetrics:
    """Invested, current and projected totals with percentage returns."""
    if not positions:
        return PortfolioMetrics()

    total_invested = 0.0
    current_value = 0.0
    projected_value = 0.0

    for position in positions:
        shares = position.shares or position.implied_shares
        current_price = position.current_price or position.purchase_price
        total_invested += position.invested_amount
        current_value += shares * current_price

        projected_price = position.current_price
        if position.forecast and position.forecast[-1].price:
            projected_price = position.forecast[-1].price
        projected_value += shares * projected_price

    total_return = current_value - total_invested
    projected_return = projected_value - total_invested

    return PortfolioMetrics(
        total_invested=total_invested,
        current_value=current_value,
        total_return=total_return,
        total_return_percent=(
            total_return / total_invested * 100 if total_invested > 0 else 0.0
        ),
        projected_value=projected_value,
        projected_return=projected_return,
        projected_return_percent=(
            projected_return / total_invested * 100 if total_invested > 0 else 0.0
        ),
    )


def contribution_growth(
    history: Sequence[PricePoint],
    monthly_contribution: float,
    start: date,
    months: int = 60,
) -> list[ContributionPoint] | None:
    """Dollar-cost-averaging projection of a single asset.

    Starts with one contribution in month 0 and compounds it at the asset's
    one-, five- and ten-year rates. ``None`` when there is nothing to project.
    """
    if monthly_contribution <= 0 or len(history) < CONTRIBUTION_MIN_HISTORY:
        return None

    rates = estimate_growth_rates(history)
    series = [
        [monthly_contribution]
        + project_trajectory(monthly_contribution, rate, months, monthly_contribution)
        for rate in (rates.one_year, rates.five_year, rates.ten_year)
    ]

    return [
        ContributionPoint(
            month=i,
            date=start + relativedelta(months=i),
            one_year=series[0][i],
            five_year=series[1][i],
            ten_year=series[2][i],
            contributions=monthly_contribution * (i + 1),
        )
        for i in range(months + 1)
    ]
