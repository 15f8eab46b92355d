"""Pure forecasting and aggregation functions: no I/O."""
from .forecast import bridge_point, generate_forecast
from .growth import estimate, estimate_growth_rates
from .positions import derive_holdings, replay_transactions
from .statistics import monthly_stats
from .wealth import aggregate, portfolio_growth_rates, portfolio_metrics

__all__ = [
    "aggregate",
    "bridge_point",
    "derive_holdings",
    "estimate",
    "estimate_growth_rates",
    "generate_forecast",
    "monthly_stats",
    "portfolio_growth_rates",
    "portfolio_metrics",
    "replay_transactions",
]
