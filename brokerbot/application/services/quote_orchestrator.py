"""
Application service: concurrent fan-out/fan-in quote fetching.

One task per ticker, each bounded by its own timeout, all joined before
returning. A failing ticker is logged, reported through the optional
on_failure callback and left out of the result; it never fails the batch.
Results are returned sorted by symbol regardless of completion order.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from brokerbot.application.services.price_feed_cache import PriceFeedCache, pair_for
from brokerbot.domain.entities.quote import AssetClass, ClassifiedTicker, QuoteResult
from brokerbot.domain.errors import ProviderUnavailableError
from brokerbot.domain.ports.stock_data_port import IStockQuoteProvider

logger = logging.getLogger(__name__)

FailureCallback = Callable[[ClassifiedTicker, Exception], Awaitable[None]]


def _sort_key(result: QuoteResult) -> tuple[str, bool]:
    # 'X' and '$X' may both be requested; stock sorts first.
    return result.symbol, result.asset_class is AssetClass.CRYPTO


class QuoteOrchestrator:
    def __init__(
        self,
        stock_provider: IStockQuoteProvider,
        price_feeds: PriceFeedCache,
        quote_timeout: float = 30.0,
        max_concurrency: Optional[int] = None,
    ) -> None:
        self._stock_provider = stock_provider
        self._price_feeds = price_feeds
        self._quote_timeout = quote_timeout
        self._max_concurrency = max_concurrency

    async def fetch_quotes(
        self,
        tickers: list[ClassifiedTicker],
        on_failure: Optional[FailureCallback] = None,
    ) -> list[QuoteResult]:
        """Fetch every ticker concurrently and return the successes sorted by symbol.

        Args:
            tickers:    Deduplicated, classified tickers.
            on_failure: Awaited once per failed ticker with the ticker and the error.
        """
        semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None
        tasks = [
            asyncio.create_task(self._fetch_one(ticker, semaphore, on_failure))
            for ticker in tickers
        ]
        results: list[QuoteResult] = []
        try:
            for finished in asyncio.as_completed(tasks):
                result = await finished
                if result is not None:
                    results.append(result)
        finally:
            # No fetch outlives the batch, including when the caller is cancelled.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        return sorted(results, key=_sort_key)

    async def _fetch_one(
        self,
        ticker: ClassifiedTicker,
        semaphore: Optional[asyncio.Semaphore],
        on_failure: Optional[FailureCallback],
    ) -> Optional[QuoteResult]:
        try:
            if semaphore is None:
                return await self._fetch_with_timeout(ticker)
            async with semaphore:
                return await self._fetch_with_timeout(ticker)
        except Exception as exc:
            logger.exception(
                "Failed to get quote for %s ticker %r", ticker.asset_class.value, ticker.symbol
            )
            if on_failure is not None:
                try:
                    await on_failure(ticker, exc)
                except Exception:
                    logger.exception("Failure callback raised for %r", ticker.symbol)
            return None

    async def _fetch_with_timeout(self, ticker: ClassifiedTicker) -> QuoteResult:
        try:
            return await asyncio.wait_for(self._fetch(ticker), timeout=self._quote_timeout)
        except asyncio.TimeoutError as exc:
            raise ProviderUnavailableError(
                self._provider_name(ticker),
                ticker.symbol,
                f"timed out after {self._quote_timeout:g}s",
            ) from exc

    async def _fetch(self, ticker: ClassifiedTicker) -> QuoteResult:
        if ticker.asset_class is AssetClass.CRYPTO:
            return await self._crypto_quote(ticker.symbol)
        return await self._stock_provider.get_quote(ticker.symbol)

    async def _crypto_quote(self, symbol: str) -> QuoteResult:
        table = await self._price_feeds.get_price_feeds()
        if not self._price_feeds.populated:
            raise ProviderUnavailableError(
                self._price_feeds.source_name, symbol, "price feed has never been fetched"
            )
        entry = table.get(pair_for(symbol))
        if entry is None:
            return QuoteResult.no_data(symbol, AssetClass.CRYPTO)
        price = float(entry.price)
        if price == 0.0:
            return QuoteResult.no_data(symbol, AssetClass.CRYPTO)
        return QuoteResult(
            symbol=symbol,
            display_name=symbol,
            price=price,
            # Feed reports the 24h change as a fraction.
            change_percent=float(entry.change_percent) * 100,
            asset_class=AssetClass.CRYPTO,
        )

    def _provider_name(self, ticker: ClassifiedTicker) -> str:
        if ticker.asset_class is AssetClass.CRYPTO:
            return self._price_feeds.source_name
        return self._stock_provider.name
