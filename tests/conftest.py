"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from datetime import date
from pathlib import Path

import pytest
from dateutil.relativedelta import relativedelta

from wealthcast.config import (
    AppConfig,
    ForecastConfig,
    FxConfig,
    MarketDataConfig,
    SettingsConfig,
    StorageConfig,
)
from wealthcast.models import AssetPosition, ManualPosition, PricePoint, StockData


def _make_history(
    prices: list[float], start: date = date(2020, 1, 1)
) -> tuple[PricePoint, ...]:
    """Monthly history starting at ``start``, one point per price."""
    return tuple(
        PricePoint(start + relativedelta(months=i), p) for i, p in enumerate(prices)
    )


def _growing_prices(
    n: int, start: float = 100.0, monthly: float = 0.01
) -> list[float]:
    return [start * (1 + monthly) ** i for i in range(n)]


@pytest.fixture()
def make_history():
    """Factory for monthly histories built from a list of prices."""
    return _make_history


@pytest.fixture()
def growing_prices():
    """Factory for geometrically growing price lists."""
    return _growing_prices


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        settings=SettingsConfig(monthly_contribution=100.0, forecast_years=5),
        forecast=ForecastConfig(horizon_months=24, history_years=10),
        market_data=MarketDataConfig(
            chart_url="https://chart.example.com/v8/finance/chart",
            search_url="https://search.example.com/v1/finance/search",
            timeout=5,
        ),
        fx=FxConfig(rates_url="https://fx.example.com/latest/USD", timeout=5),
        storage=StorageConfig(data_dir=str(tmp_path / "state")),
    )


SAMPLE_YAML = textwrap.dedent("""\
    settings:
      monthly_contribution: 250
      currency: eur
      forecast_years: 10
    forecast:
      horizon_months: 36
      history_years: 5
    market_data:
      provider: yahoo
      chart_url: "https://chart.example.com"
      search_url: "https://search.example.com"
      timeout: 10
    fx:
      rates_url: "https://fx.example.com"
      cache_ttl_seconds: 600
      timeout: 3
    storage:
      data_dir: "/tmp/wealthcast-test"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# History and position fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def rising_history() -> tuple[PricePoint, ...]:
    """36 months growing 1% a month."""
    return _make_history(_growing_prices(36))


@pytest.fixture()
def sample_position(rising_history: tuple[PricePoint, ...]) -> AssetPosition:
    return AssetPosition(
        symbol="AAPL",
        name="Apple Inc.",
        basis=ManualPosition(shares=10.0, avg_price=100.0),
        history=rising_history,
        current_price=rising_history[-1].price,
    )


@pytest.fixture()
def sample_stock_data(rising_history: tuple[PricePoint, ...]) -> StockData:
    return StockData(
        symbol="AAPL",
        name="Apple Inc.",
        currency="USD",
        current_price=rising_history[-1].price,
        history=rising_history,
    )
