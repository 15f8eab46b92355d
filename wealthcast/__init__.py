"""Portfolio tracker with multi-horizon wealth forecasts."""

__version__ = "0.1.0"
