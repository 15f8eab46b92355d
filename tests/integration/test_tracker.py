"""Integration tests for PortfolioTracker: full flow with mocked market data."""
from __future__ import annotations

from dataclasses import replace
from datetime import date
from unittest.mock import AsyncMock

import pytest

from wealthcast.config import AppConfig
from wealthcast.fx import FALLBACK_RATES, CurrencyConverter
from wealthcast.market import MarketDataError
from wealthcast.models import (
    AssetPosition,
    ManualPosition,
    Quote,
    Settings,
    StockData,
    WatchlistItem,
)
from wealthcast.services.tracker import PortfolioTracker


@pytest.fixture()
def market(sample_stock_data: StockData) -> AsyncMock:
    mock = AsyncMock()
    mock.fetch_history.return_value = sample_stock_data
    return mock


@pytest.fixture()
def tracker(sample_app_config: AppConfig, market: AsyncMock) -> PortfolioTracker:
    return PortfolioTracker(
        sample_app_config, market_data=market, converter=CurrencyConverter()
    )


def _bare(symbol: str) -> AssetPosition:
    return AssetPosition(
        symbol=symbol, basis=ManualPosition(shares=10.0, avg_price=100.0)
    )


class TestRefreshPositions:
    @pytest.mark.asyncio
    async def test_fetches_history_and_forecast(
        self, tracker: PortfolioTracker, market: AsyncMock, sample_stock_data: StockData
    ) -> None:
        [position] = await tracker.refresh_positions([_bare("AAPL")])

        market.fetch_history.assert_awaited_once_with("AAPL", 10)
        assert position.error is False
        assert position.name == "Apple Inc."
        assert position.history == sample_stock_data.history
        assert position.current_price == sample_stock_data.current_price
        assert len(position.forecast) == 24
        assert len(position.confidence.high) == 24
        assert position.basis == ManualPosition(shares=10.0, avg_price=100.0)

    @pytest.mark.asyncio
    async def test_converts_foreign_currency(
        self, tracker: PortfolioTracker, market: AsyncMock, sample_stock_data: StockData
    ) -> None:
        market.fetch_history.return_value = replace(sample_stock_data, currency="EUR")
        [position] = await tracker.refresh_positions([_bare("SAP")])

        rate = FALLBACK_RATES["EUR"]
        assert position.currency == "EUR"
        assert position.exchange_rate == rate
        assert position.history[0].price == pytest.approx(
            sample_stock_data.history[0].price * rate
        )
        assert position.current_price == pytest.approx(
            sample_stock_data.current_price * rate
        )

    @pytest.mark.asyncio
    async def test_one_failure_does_not_block_others(
        self, tracker: PortfolioTracker, market: AsyncMock, sample_stock_data: StockData
    ) -> None:
        async def fetch(symbol: str, years: int) -> StockData:
            if symbol == "BAD":
                raise MarketDataError("Invalid symbol: BAD")
            return replace(sample_stock_data, symbol=symbol)

        market.fetch_history.side_effect = fetch
        stale = replace(_bare("BAD"), history=sample_stock_data.history[:3])

        good, bad = await tracker.refresh_positions([_bare("AAPL"), stale])

        assert good.error is False
        assert len(good.history) == 36
        assert bad.error is True
        assert bad.history == stale.history

    @pytest.mark.asyncio
    async def test_empty_batch(
        self, tracker: PortfolioTracker, market: AsyncMock
    ) -> None:
        assert await tracker.refresh_positions([]) == []
        market.fetch_history.assert_not_awaited()


class TestAddPosition:
    @pytest.mark.asyncio
    async def test_by_amount_at_current_price(
        self, tracker: PortfolioTracker, sample_stock_data: StockData
    ) -> None:
        position = await tracker.add_position(
            "aapl", invested_amount=1000.0, monthly_contribution=50.0
        )
        price = sample_stock_data.current_price

        assert position.symbol == "AAPL"
        assert position.purchase_price == pytest.approx(price)
        assert position.shares == pytest.approx(1000.0 / price)
        assert position.monthly_contribution == 50.0
        assert position.forecast

    @pytest.mark.asyncio
    async def test_by_shares_at_given_price(self, tracker: PortfolioTracker) -> None:
        position = await tracker.add_position("AAPL", shares=5.0, price=80.0)
        assert position.invested_amount == pytest.approx(400.0)

    @pytest.mark.asyncio
    async def test_requires_quantity(self, tracker: PortfolioTracker) -> None:
        with pytest.raises(ValueError):
            await tracker.add_position("AAPL")

    @pytest.mark.asyncio
    async def test_unknown_symbol_propagates(
        self, tracker: PortfolioTracker, market: AsyncMock
    ) -> None:
        market.fetch_history.side_effect = MarketDataError("Invalid symbol: NOPE")
        with pytest.raises(MarketDataError):
            await tracker.add_position("NOPE", shares=1.0)


class TestRefreshWatchlist:
    @pytest.mark.asyncio
    async def test_change_since_added(
        self, tracker: PortfolioTracker, market: AsyncMock
    ) -> None:
        async def quote(symbol: str) -> Quote:
            if symbol == "DEAD":
                raise MarketDataError("gone")
            return Quote(symbol, symbol, 110.0, 100.0, 10.0, 10.0)

        market.fetch_quote.side_effect = quote
        items = [
            WatchlistItem("NVDA", "NVIDIA", 100.0, date(2024, 1, 1)),
            WatchlistItem("DEAD", "Dead Co", 5.0, date(2024, 1, 1)),
        ]
        live, dead = await tracker.refresh_watchlist(items)

        assert live.price == 110.0
        assert live.change_since_added_percent == pytest.approx(10.0)
        assert dead.error is True
        assert dead.item == items[1]


class TestCompute:
    @pytest.mark.asyncio
    async def test_snapshot(self, tracker: PortfolioTracker) -> None:
        positions = await tracker.refresh_positions([_bare("AAPL")])
        as_of = positions[0].history[-1].date
        settings = Settings(monthly_contribution=100.0)
        snapshot = tracker.compute(positions, settings, as_of)

        assert snapshot.monthly_contribution == 100.0
        assert snapshot.horizon_years == 5
        assert len(snapshot.wealth) == 36 + 60
        assert snapshot.metrics.total_invested == pytest.approx(1000.0)
        assert snapshot.wealth[-1].contributions == pytest.approx(1000.0 + 60 * 100.0)

    def test_per_holding_contributions_win(
        self, sample_position: AssetPosition
    ) -> None:
        positions = [
            replace(sample_position, monthly_contribution=30.0),
            replace(sample_position, symbol="MSFT", monthly_contribution=20.0),
        ]
        total = PortfolioTracker.total_monthly_contribution(
            positions, Settings(monthly_contribution=500.0)
        )
        assert total == 50.0

    def test_setting_used_without_per_holding(
        self, sample_position: AssetPosition
    ) -> None:
        total = PortfolioTracker.total_monthly_contribution(
            [sample_position], Settings(monthly_contribution=500.0)
        )
        assert total == 500.0

    def test_failed_positions_without_history_are_skipped(
        self, tracker: PortfolioTracker, sample_position: AssetPosition
    ) -> None:
        failed = replace(_bare("BAD"), error=True)
        snapshot = tracker.compute(
            [sample_position, failed], Settings(), sample_position.history[-1].date
        )
        assert snapshot.metrics.total_invested == pytest.approx(1000.0)


class TestBuildReport:
    @pytest.mark.asyncio
    async def test_report_text(self, tracker: PortfolioTracker) -> None:
        positions = await tracker.refresh_positions([_bare("AAPL")])
        positions.append(replace(_bare("BAD"), error=True))
        snapshot = tracker.compute(
            positions, Settings(monthly_contribution=100.0), date.today()
        )
        report = tracker.build_report(positions, snapshot)

        assert "Portfolio Report" in report
        assert "Invested:      $1,000" in report
        assert "Monthly contribution: $100" in report
        assert "Projected value in 5 years:" in report
        assert "AAPL: 10.0000 sh @ $100" in report
        assert "BAD: ⚠️ data unavailable" in report
        assert report.endswith("UTC")
