import pytest

from brokerbot.application.services.alias_expander import AliasExpander
from brokerbot.application.services.price_feed_cache import PriceFeedCache
from brokerbot.application.services.quote_orchestrator import QuoteOrchestrator
from brokerbot.application.services.response_formatter import ResponseFormatter
from brokerbot.application.services.status_tracker import StatusTracker
from brokerbot.application.use_cases.handle_command import CommandDispatcher
from brokerbot.application.use_cases.manage_aliases import ManageAliasesUseCase
from brokerbot.infrastructure.aliases.in_memory_alias_store import InMemoryAliasStore
from fakes import FakeClock, FakePriceFeedSource, FakeStockProvider, RecordingChannel


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stock_provider():
    return FakeStockProvider(quotes={"AAPL": (150.0, 1.5), "MSFT": (300.0, -0.25), "TSLA": (200.0, 0.0)})


@pytest.fixture
def feed_source():
    return FakePriceFeedSource(prices={"BTC": ("40000.00", "0.02"), "ETH": ("2500.50", "-0.0125")})


@pytest.fixture
def price_feeds(feed_source, clock):
    return PriceFeedCache(feed_source, max_age=60.0, clock=clock)


@pytest.fixture
def alias_store():
    return InMemoryAliasStore({"?FAANG": ["META", "AAPL", "AMZN"], "?COINS": ["$BTC", "$ETH"]})


@pytest.fixture
def status():
    return StatusTracker()


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def make_dispatcher(stock_provider, price_feeds, alias_store, status):
    def _make(store=None, formatter=None, provider=None, quote_timeout=5.0):
        store = store or alias_store
        return CommandDispatcher(
            orchestrator=QuoteOrchestrator(
                provider or stock_provider, price_feeds, quote_timeout=quote_timeout
            ),
            expander=AliasExpander(store),
            alias_commands=ManageAliasesUseCase(store),
            formatter=formatter or ResponseFormatter(),
            status=status,
        )

    return _make
