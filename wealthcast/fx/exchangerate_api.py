"""exchangerate-api.com rate supplier."""
import logging
import ssl

import aiohttp
import certifi

from ..config import FxConfig

logger = logging.getLogger(__name__)


class ExchangeRateApiSupplier:
    """Fetch the latest rates relative to USD."""

    def __init__(self, config: FxConfig) -> None:
        self.rates_url = config.rates_url
        self.timeout = config.timeout

    async def fetch_rates(self) -> dict[str, float]:
        """Return ``{CODE: units per USD}``; empty on any failure."""
        rates: dict[str, float] = {}

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    self.rates_url,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching exchange rates: HTTP %s", response.status
                        )
                        return rates

                    data = await response.json()
                    for code, value in (data.get("rates") or {}).items():
                        try:
                            rates[code] = float(value)
                        except (TypeError, ValueError):
                            logger.debug("Skipping malformed rate %s=%r", code, value)

                    logger.info("Fetched %d exchange rates", len(rates))

        except Exception as e:
            logger.error("Error fetching exchange rates: %s", e)

        return rates
