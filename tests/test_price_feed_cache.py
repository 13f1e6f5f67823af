import asyncio

from brokerbot.application.services.price_feed_cache import PriceFeedCache, pair_for
from fakes import FakePriceFeedSource

EPSILON = 0.001


def test_pair_for_appends_quote_currency():
    assert pair_for("btc") == "BTCUSD"
    assert pair_for("ETH", "EUR") == "ETHEUR"


async def test_first_read_fetches(price_feeds, feed_source):
    assert price_feeds.last_updated is None
    table = await price_feeds.get_price_feeds()
    assert feed_source.fetches == 1
    assert table["BTCUSD"].price == "40000.00"
    assert price_feeds.last_updated is not None


async def test_no_refresh_inside_staleness_window(price_feeds, feed_source, clock):
    await price_feeds.get_price_feeds()
    clock.advance(60.0 - EPSILON)
    await price_feeds.get_price_feeds()
    assert feed_source.fetches == 1


async def test_stale_table_refreshes_exactly_once_for_concurrent_callers(clock):
    source = FakePriceFeedSource(prices={"BTC": ("1.00", "0")}, delay=0.01)
    cache = PriceFeedCache(source, max_age=60.0, clock=clock)
    await cache.get_price_feeds()

    clock.advance(60.0 + EPSILON)
    tables = await asyncio.gather(*(cache.get_price_feeds() for _ in range(10)))

    assert source.fetches == 2
    assert all(t == tables[0] for t in tables)


async def test_failed_refresh_keeps_stale_table(price_feeds, feed_source, clock, caplog):
    await price_feeds.get_price_feeds()
    updated = price_feeds.last_updated
    feed_source.fail = True
    clock.advance(120.0)

    table = await price_feeds.get_price_feeds()

    assert table["BTCUSD"].price == "40000.00"
    assert price_feeds.last_updated == updated
    assert "Price feed refresh from fake feed failed" in caplog.text


async def test_failed_first_fetch_leaves_cache_unpopulated(clock):
    cache = PriceFeedCache(FakePriceFeedSource(fail=True), clock=clock)
    assert await cache.get_price_feeds() == {}
    assert not cache.populated


async def test_refresh_if_stale_accepts_override(price_feeds, feed_source, clock):
    await price_feeds.refresh_if_stale()
    clock.advance(5.0)
    await price_feeds.refresh_if_stale(max_age=1.0)
    assert feed_source.fetches == 2


async def test_returned_table_is_a_copy(price_feeds):
    table = await price_feeds.get_price_feeds()
    table.clear()
    assert "BTCUSD" in price_feeds.snapshot()


async def test_failed_refresh_is_not_repeated_by_queued_callers(clock):
    source = FakePriceFeedSource(prices={"BTC": ("1.00", "0"), "LTC": ("70.00", "0")}, delay=0.01)
    cache = PriceFeedCache(source, max_age=60.0, clock=clock)
    await cache.get_price_feeds()
    source.fail = True
    clock.advance(60.0 + EPSILON)

    tables = await asyncio.gather(*(cache.get_price_feeds() for _ in range(5)))

    assert source.fetches == 2
    assert all(t["LTCUSD"].price == "70.00" for t in tables)


async def test_failed_refresh_is_retried_after_back_off(clock):
    source = FakePriceFeedSource(prices={"BTC": ("1.00", "0")}, fail=True)
    cache = PriceFeedCache(source, clock=clock, retry_after=5.0)

    await cache.get_price_feeds()
    clock.advance(5.0 - EPSILON)
    await cache.get_price_feeds()
    assert source.fetches == 1

    source.fail = False
    clock.advance(2 * EPSILON)
    table = await cache.get_price_feeds()
    assert source.fetches == 2
    assert cache.populated
    assert table["BTCUSD"].price == "1.00"


async def test_hung_refresh_is_cut_short_and_serves_stale_table(clock):
    source = FakePriceFeedSource(prices={"BTC": ("1.00", "0")})
    cache = PriceFeedCache(source, max_age=60.0, clock=clock, refresh_timeout=0.05)
    await cache.get_price_feeds()
    source.delay = 10.0
    clock.advance(120.0)

    table = await asyncio.wait_for(cache.get_price_feeds(), timeout=1.0)

    assert table["BTCUSD"].price == "1.00"
    assert source.fetches == 2
