"""
Port (interface) for equities quote providers.
Infrastructure adapters (e.g. FinnhubStockQuoteProvider) must implement this interface.
"""

from abc import ABC, abstractmethod

from brokerbot.domain.entities.quote import QuoteResult


class IStockQuoteProvider(ABC):
    name: str = "stock provider"

    @abstractmethod
    async def get_quote(self, symbol: str) -> QuoteResult:
        """Return the current quote for *symbol*.

        A zero quote from the upstream is returned as QuoteResult(has_data=False).

        Raises:
            ProviderUnavailableError: on network or HTTP failure.
        """
        ...

    async def aclose(self) -> None:
        """Release any network resources held by the provider."""
