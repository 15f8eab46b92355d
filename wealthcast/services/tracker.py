"""Portfolio orchestration: refresh fan-out, recompute and text reports."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Sequence

from ..analytics.forecast import generate_forecast
from ..analytics.wealth import aggregate, portfolio_growth_rates, portfolio_metrics
from ..config import AppConfig
from ..fx import CurrencyConverter, ExchangeRateApiSupplier, format_currency
from ..interfaces.market_data import MarketDataProvider
from ..market import YahooFinanceClient
from ..models import (
    AssetPosition,
    GrowthRateSet,
    ManualPosition,
    PortfolioMetrics,
    Settings,
    WatchlistItem,
    WatchlistQuote,
    WealthPoint,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Result of one recompute pass."""

    as_of: date
    horizon_years: int
    monthly_contribution: float
    wealth: tuple[WealthPoint, ...]
    metrics: PortfolioMetrics
    growth_rates: GrowthRateSet


class PortfolioTracker:
    """Refreshes holdings from market data and recomputes the wealth curve."""

    def __init__(
        self,
        config: AppConfig,
        market_data: MarketDataProvider | None = None,
        converter: CurrencyConverter | None = None,
    ) -> None:
        self._config = config
        self._market: MarketDataProvider = market_data or YahooFinanceClient(
            config.market_data
        )
        self._converter = converter or CurrencyConverter(
            ExchangeRateApiSupplier(config.fx),
            ttl_seconds=config.fx.cache_ttl_seconds,
        )

    @property
    def converter(self) -> CurrencyConverter:
        return self._converter

    @property
    def market(self) -> MarketDataProvider:
        return self._market

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def with_forecast(self, position: AssetPosition) -> AssetPosition:
        """Recompute a position's forecast from the history it already has."""
        result = generate_forecast(
            position.history, self._config.forecast.horizon_months
        )
        return replace(
            position, forecast=result.forecast, confidence=result.confidence
        )

    async def _refresh_one(self, position: AssetPosition) -> AssetPosition:
        data = await self._market.fetch_history(
            position.symbol, self._config.forecast.history_years
        )
        currency = data.currency or position.currency
        history = self._converter.convert_history(data.history, currency)

        refreshed = replace(
            position,
            name=data.name or position.name,
            currency=currency,
            exchange_rate=self._converter.rate(currency),
            current_price=self._converter.convert_to_usd(
                data.current_price, currency
            ),
            history=history,
            error=False,
        )
        return self.with_forecast(refreshed)

    async def refresh_positions(
        self, positions: Sequence[AssetPosition]
    ) -> list[AssetPosition]:
        """Refetch every symbol concurrently.

        A failing symbol keeps its previous data and is flagged ``error``;
        the rest of the batch is unaffected.
        """
        if not positions:
            return []

        await self._converter.refresh()

        async def _safe_refresh(position: AssetPosition) -> AssetPosition:
            try:
                return await self._refresh_one(position)
            except Exception as e:
                logger.error("Failed to refresh %s: %s", position.symbol, e)
                return replace(position, error=True)

        return list(await asyncio.gather(*(_safe_refresh(p) for p in positions)))

    async def add_position(
        self,
        symbol: str,
        *,
        shares: float | None = None,
        invested_amount: float | None = None,
        price: float | None = None,
        monthly_contribution: float = 0.0,
        purchase_date: date | None = None,
    ) -> AssetPosition:
        """Fetch a new symbol and build a manual position for it.

        Either ``shares`` or ``invested_amount`` must be given. ``price``
        defaults to the current USD price.

        Raises:
            ValueError: neither quantity was given, or no price is known.
            MarketDataError: the symbol could not be fetched.
        """
        if shares is None and invested_amount is None:
            raise ValueError("Either shares or invested_amount is required")

        placeholder = AssetPosition(
            symbol=symbol.upper(),
            basis=ManualPosition(0.0, 0.0),
            monthly_contribution=monthly_contribution,
            purchase_date=purchase_date,
        )
        await self._converter.refresh()
        fetched = await self._refresh_one(placeholder)

        unit_price = price if price is not None else fetched.current_price
        if unit_price <= 0:
            raise ValueError(f"No purchase price available for {symbol}")

        if shares is not None:
            basis = ManualPosition(shares=shares, avg_price=unit_price)
        else:
            basis = ManualPosition.from_amount(invested_amount or 0.0, unit_price)

        logger.info(
            "Added %s: %.4f shares @ $%.2f", fetched.symbol, basis.shares, unit_price
        )
        return replace(fetched, basis=basis)

    async def refresh_watchlist(
        self, items: Sequence[WatchlistItem]
    ) -> list[WatchlistQuote]:
        """Latest quote per watched symbol; failures are flagged per item."""

        async def _quote(item: WatchlistItem) -> WatchlistQuote:
            try:
                quote = await self._market.fetch_quote(item.symbol)
            except Exception as e:
                logger.error("Failed to quote %s: %s", item.symbol, e)
                return WatchlistQuote(item=item, error=True)

            price = self._converter.convert_to_usd(quote.price, quote.currency)
            change = (
                (price - item.added_price) / item.added_price * 100
                if item.added_price > 0
                else 0.0
            )
            return WatchlistQuote(
                item=item, price=price, change_since_added_percent=change
            )

        return list(await asyncio.gather(*(_quote(i) for i in items)))

    # ------------------------------------------------------------------
    # Recompute
    # ------------------------------------------------------------------

    @staticmethod
    def total_monthly_contribution(
        positions: Sequence[AssetPosition], settings: Settings
    ) -> float:
        """Sum of per-holding contributions, else the portfolio-wide setting."""
        per_holding = sum(p.monthly_contribution for p in positions)
        return per_holding if per_holding > 0 else settings.monthly_contribution

    def compute(
        self,
        positions: Sequence[AssetPosition],
        settings: Settings,
        as_of: date,
    ) -> PortfolioSnapshot:
        """Run growth rates, aggregation and metrics over refreshed holdings."""
        usable = [p for p in positions if not p.error or p.history]
        contribution = self.total_monthly_contribution(usable, settings)

        wealth = aggregate(usable, contribution, settings.forecast_years, as_of)
        return PortfolioSnapshot(
            as_of=as_of,
            horizon_years=settings.forecast_years,
            monthly_contribution=contribution,
            wealth=tuple(wealth),
            metrics=portfolio_metrics(usable),
            growth_rates=portfolio_growth_rates(usable),
        )

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    @staticmethod
    def _now_str() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

    @staticmethod
    def _pct(rate: float) -> str:
        return f"{rate * 100:+.1f}%"

    def build_report(
        self, positions: Sequence[AssetPosition], snapshot: PortfolioSnapshot
    ) -> str:
        """Plain-text portfolio summary."""
        m = snapshot.metrics
        r = snapshot.growth_rates

        lines = [
            "📋 Portfolio Report",
            "",
            f"Invested:      {format_currency(m.total_invested)}",
            f"Current value: {format_currency(m.current_value)}"
            f" ({m.total_return_percent:+.1f}%)",
            f"Forecast:      {format_currency(m.projected_value)}"
            f" ({m.projected_return_percent:+.1f}%)",
            "",
            "Growth rates: "
            f"6m {self._pct(r.six_month)} · 1y {self._pct(r.one_year)} · "
            f"5y {self._pct(r.five_year)} · 10y {self._pct(r.ten_year)}",
        ]

        if snapshot.monthly_contribution > 0:
            contribution = format_currency(snapshot.monthly_contribution)
            lines.append(f"Monthly contribution: {contribution}")

        final = self._final_projection(snapshot.wealth)
        if final is not None:
            lines += [
                "",
                f"Projected value in {snapshot.horizon_years} years:",
                f"  6m rate:  {format_currency(final.six_month_projection or 0)}",
                f"  1y rate:  {format_currency(final.one_year_projection or 0)}",
                f"  5y rate:  {format_currency(final.five_year_projection or 0)}",
                f"  10y rate: {format_currency(final.ten_year_projection or 0)}",
                f"  Contributions: {format_currency(final.contributions)}",
            ]

        lines += ["", "Holdings:"]
        for p in positions:
            if p.error:
                lines.append(f"  {p.symbol}: ⚠️ data unavailable")
                continue
            lines.append(
                f"  {p.symbol}: {p.shares or p.implied_shares:,.4f} sh"
                f" @ {format_currency(p.purchase_price)}"
                f" · now {format_currency(p.current_price)}"
            )

        lines += ["", f"{self._now_str()} UTC"]
        return "\n".join(lines)

    @staticmethod
    def _final_projection(wealth: Sequence[WealthPoint]) -> WealthPoint | None:
        for point in reversed(wealth):
            if point.ten_year_projection is not None:
                return point
        return None

