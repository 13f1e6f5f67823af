"""
Infrastructure adapter: yfinance → IStockQuoteProvider.
Token-less alternative to Finnhub. All yfinance-specific details (fast_info,
info) are confined here; yfinance is blocking, so each lookup runs in a
worker thread.
"""

import asyncio

import yfinance as yf

from brokerbot.domain.entities.quote import QuoteResult
from brokerbot.domain.errors import ProviderUnavailableError
from brokerbot.domain.ports.stock_data_port import IStockQuoteProvider


class YFinanceStockQuoteProvider(IStockQuoteProvider):
    """Fetches equity quotes from Yahoo Finance via the yfinance library."""

    name = "Yahoo Finance"

    async def get_quote(self, symbol: str) -> QuoteResult:
        try:
            return await asyncio.to_thread(self._get_quote_sync, symbol)
        except ProviderUnavailableError:
            raise
        except Exception as exc:
            raise ProviderUnavailableError(self.name, symbol, str(exc)) from exc

    def _get_quote_sync(self, symbol: str) -> QuoteResult:
        ticker = yf.Ticker(symbol)
        fast_info = ticker.fast_info

        current_price = getattr(fast_info, "last_price", None)
        if not current_price:
            return QuoteResult.no_data(symbol)

        previous_close = getattr(fast_info, "previous_close", None)
        change = (
            (current_price - previous_close) / previous_close * 100
            if previous_close
            else float("nan")
        )
        info = ticker.info or {}
        company = info.get("shortName") or info.get("longName") or "Unknown"
        return QuoteResult(
            symbol=symbol,
            display_name=f"{symbol} ({company})",
            price=float(current_price),
            change_percent=float(change),
        )
