"""
Infrastructure adapter: Gemini public price feed → IPriceFeedSource.
One request returns every trading pair, e.g.
    [{"pair": "BTCUSD", "price": "40000.00", "percentChange24h": "0.0200"}, ...]
"""

from typing import Optional

import httpx

from brokerbot.domain.entities.quote import PriceFeedEntry
from brokerbot.domain.ports.price_feed_port import IPriceFeedSource

GEMINI_PRICE_FEED_URL = "https://api.gemini.com/v1/pricefeed"


class GeminiPriceFeedSource(IPriceFeedSource):
    """Fetches the full Gemini price table."""

    name = "Gemini"

    def __init__(
        self,
        timeout: float = 30.0,
        url: str = GEMINI_PRICE_FEED_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def fetch_price_feeds(self) -> dict[str, PriceFeedEntry]:
        response = await self._client.get(self._url)
        response.raise_for_status()
        return {
            row["pair"].upper(): PriceFeedEntry(
                pair=row["pair"].upper(),
                price=row["price"],
                change_percent=row.get("percentChange24h", "0"),
            )
            for row in response.json()
        }

    async def aclose(self) -> None:
        await self._client.aclose()


PRICE_FEED_SOURCES = {
    "GEMINI": GeminiPriceFeedSource,
}
