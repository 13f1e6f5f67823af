"""
Infrastructure adapter: Finnhub REST API → IStockQuoteProvider.
All Finnhub-specific details (endpoint paths, the 'c'/'pc' quote fields, the
token query parameter) are confined here.

Finnhub answers unknown symbols with an all-zero quote rather than an error.
"""

import logging
from typing import Optional

import httpx

from brokerbot.domain.entities.quote import QuoteResult
from brokerbot.domain.errors import ProviderUnavailableError
from brokerbot.domain.ports.stock_data_port import IStockQuoteProvider

logger = logging.getLogger(__name__)

FINNHUB_BASE_URL = "https://finnhub.io/api/v1"


class FinnhubStockQuoteProvider(IStockQuoteProvider):
    """Fetches equity quotes and company names from Finnhub."""

    name = "Finnhub"

    def __init__(
        self,
        token: str,
        timeout: float = 30.0,
        base_url: str = FINNHUB_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            params={"token": token},
            timeout=timeout,
            transport=transport,
        )

    async def get_quote(self, symbol: str) -> QuoteResult:
        try:
            response = await self._client.get("/quote", params={"symbol": symbol})
            response.raise_for_status()
            quote = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ProviderUnavailableError(self.name, symbol, str(exc)) from exc

        current = float(quote.get("c") or 0.0)
        if current == 0.0:
            return QuoteResult.no_data(symbol)

        previous_close = float(quote.get("pc") or 0.0)
        change = (current - previous_close) / previous_close * 100 if previous_close else float("nan")
        company = await self._company_name(symbol)
        return QuoteResult(
            symbol=symbol,
            display_name=f"{symbol} ({company})",
            price=current,
            change_percent=change,
        )

    async def _company_name(self, symbol: str) -> str:
        """Best-effort company name lookup; failures never fail the quote."""
        try:
            response = await self._client.get("/stock/profile2", params={"symbol": symbol})
            response.raise_for_status()
            name = response.json().get("name")
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Company lookup failed for %s, ignoring: %s", symbol, exc)
            return "Error"
        return name or "Unknown"

    async def aclose(self) -> None:
        await self._client.aclose()
