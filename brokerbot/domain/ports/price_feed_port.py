"""
Port (interface) for bulk crypto price-feed sources.
Infrastructure adapters (e.g. GeminiPriceFeedSource) must implement this interface.
"""

from abc import ABC, abstractmethod

from brokerbot.domain.entities.quote import PriceFeedEntry


class IPriceFeedSource(ABC):
    name: str = "price feed"

    @abstractmethod
    async def fetch_price_feeds(self) -> dict[str, PriceFeedEntry]:
        """Fetch the full price table keyed by pair symbol (e.g. 'BTCUSD')."""
        ...

    async def aclose(self) -> None:
        """Release any network resources held by the source."""
