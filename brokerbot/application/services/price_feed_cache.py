"""
Application service: in-memory cache of the bulk crypto price table.

One asyncio.Lock guards both the staleness check/refresh and the read, so at
most one refresh is in flight and readers never see a half-replaced table.
A failed refresh keeps the last good table (fail-soft) and is only logged;
further attempts wait out retry_after, so callers queued behind a failed
refresh serve the cached table instead of fetching again. Each fetch is
bounded by refresh_timeout so a hung feed cannot eat the caller's deadline.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from brokerbot.domain.entities.quote import PriceFeedEntry
from brokerbot.domain.ports.price_feed_port import IPriceFeedSource

logger = logging.getLogger(__name__)

QUOTE_CURRENCY = "USD"


def pair_for(symbol: str, quote_currency: str = QUOTE_CURRENCY) -> str:
    return f"{symbol.upper()}{quote_currency}"


class PriceFeedCache:
    def __init__(
        self,
        source: IPriceFeedSource,
        max_age: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        retry_after: float = 5.0,
        refresh_timeout: Optional[float] = None,
    ) -> None:
        self._source = source
        self._max_age = max_age
        self._clock = clock
        self._retry_after = retry_after
        self._refresh_timeout = refresh_timeout
        self._lock = asyncio.Lock()
        self._table: dict[str, PriceFeedEntry] = {}
        self._refreshed_at: Optional[float] = None
        self._failed_at: Optional[float] = None
        self._last_updated: Optional[datetime] = None

    @property
    def last_updated(self) -> Optional[datetime]:
        """Wall-clock time of the last successful refresh, None before the first."""
        return self._last_updated

    @property
    def source_name(self) -> str:
        return self._source.name

    @property
    def populated(self) -> bool:
        return self._refreshed_at is not None

    def snapshot(self) -> dict[str, PriceFeedEntry]:
        return dict(self._table)

    async def get_price_feeds(self) -> dict[str, PriceFeedEntry]:
        async with self._lock:
            await self._refresh_locked(self._max_age)
            return dict(self._table)

    async def refresh_if_stale(self, max_age: Optional[float] = None) -> None:
        async with self._lock:
            await self._refresh_locked(self._max_age if max_age is None else max_age)

    async def _refresh_locked(self, max_age: float) -> None:
        now = self._clock()
        if self._refreshed_at is not None and now - self._refreshed_at <= max_age:
            return
        if self._failed_at is not None and now - self._failed_at <= self._retry_after:
            return
        try:
            table = await asyncio.wait_for(
                self._source.fetch_price_feeds(), timeout=self._refresh_timeout
            )
        except Exception:
            self._failed_at = self._clock()
            logger.exception(
                "Price feed refresh from %s failed; serving %d cached pairs",
                self._source.name,
                len(self._table),
            )
            return
        self._table = table
        self._refreshed_at = now
        self._failed_at = None
        self._last_updated = datetime.now(timezone.utc)
        logger.debug("Refreshed %d price feeds from %s", len(table), self._source.name)
