"""Rate supplier protocol: latest FX rates relative to USD."""
from typing import Protocol


class RateSupplier(Protocol):
    """Returns ``{CODE: units of CODE per 1 USD}``."""

    async def fetch_rates(self) -> dict[str, float]: ...
