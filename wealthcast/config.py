"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SettingsConfig:
    monthly_contribution: float = 0.0
    currency: str = "USD"
    forecast_years: int = 5


@dataclass(frozen=True)
class ForecastConfig:
    horizon_months: int = 60
    history_years: int = 10


@dataclass(frozen=True)
class MarketDataConfig:
    provider: str = "yahoo"
    chart_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    search_url: str = "https://query1.finance.yahoo.com/v1/finance/search"
    timeout: int = 30


@dataclass(frozen=True)
class FxConfig:
    rates_url: str = "https://api.exchangerate-api.com/v4/latest/USD"
    cache_ttl_seconds: int = 3600
    timeout: int = 15


@dataclass(frozen=True)
class StorageConfig:
    data_dir: str = ".wealthcast"


@dataclass(frozen=True)
class AppConfig:
    settings: SettingsConfig = field(default_factory=SettingsConfig)
    forecast: ForecastConfig = field(default_factory=ForecastConfig)
    market_data: MarketDataConfig = field(default_factory=MarketDataConfig)
    fx: FxConfig = field(default_factory=FxConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_settings(raw: dict[str, Any]) -> SettingsConfig:
    return SettingsConfig(
        monthly_contribution=float(raw.get("monthly_contribution", 0.0)),
        currency=str(raw.get("currency", "USD")).upper(),
        forecast_years=int(raw.get("forecast_years", 5)),
    )


def _build_forecast(raw: dict[str, Any]) -> ForecastConfig:
    return ForecastConfig(
        horizon_months=int(raw.get("horizon_months", 60)),
        history_years=int(raw.get("history_years", 10)),
    )


def _build_market_data(raw: dict[str, Any]) -> MarketDataConfig:
    return MarketDataConfig(
        provider=raw.get("provider", "yahoo"),
        chart_url=raw.get("chart_url") or MarketDataConfig.chart_url,
        search_url=raw.get("search_url") or MarketDataConfig.search_url,
        timeout=int(raw.get("timeout", 30)),
    )


def _build_fx(raw: dict[str, Any]) -> FxConfig:
    return FxConfig(
        rates_url=raw.get("rates_url") or FxConfig.rates_url,
        cache_ttl_seconds=int(raw.get("cache_ttl_seconds", 3600)),
        timeout=int(raw.get("timeout", 15)),
    )


def _build_storage(raw: dict[str, Any]) -> StorageConfig:
    # An unset ${VAR} interpolates to "", which means "use the default".
    return StorageConfig(data_dir=raw.get("data_dir") or StorageConfig.data_dir)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        settings=_build_settings(raw.get("settings") or {}),
        forecast=_build_forecast(raw.get("forecast") or {}),
        market_data=_build_market_data(raw.get("market_data") or {}),
        fx=_build_fx(raw.get("fx") or {}),
        storage=_build_storage(raw.get("storage") or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if cfg.settings.monthly_contribution < 0:
        raise ValueError("settings.monthly_contribution must not be negative")
    if cfg.settings.forecast_years <= 0:
        raise ValueError("settings.forecast_years must be positive")
    if cfg.forecast.horizon_months <= 0:
        raise ValueError("forecast.horizon_months must be positive")
    if cfg.forecast.history_years <= 0:
        raise ValueError("forecast.history_years must be positive")
    if cfg.market_data.provider != "yahoo":
        raise ValueError(
            f"Unknown market data provider '{cfg.market_data.provider}'"
        )
    if cfg.fx.cache_ttl_seconds <= 0:
        raise ValueError("fx.cache_ttl_seconds must be positive")
