import pytest

from brokerbot.application.help_text import HELP_TEXT
from brokerbot.application.services.response_formatter import ResponseFormatter
from brokerbot.domain.entities.message import EmbedField
from fakes import FakeStockProvider, UnreachableAliasStore


async def test_stocks_and_crypto_end_to_end(make_dispatcher, channel, stock_provider, status):
    await make_dispatcher().handle("!stonks AAPL $BTC", False, channel)

    assert channel.texts == []
    (embed,) = channel.embeds
    assert embed.fields == (
        EmbedField(name="AAPL", value="$150.00 (1.50%)"),
        EmbedField(name="BTC", value="$40000.00 (2.00%)"),
    )
    snap = status.snapshot()
    assert (snap.requests, snap.successes, snap.errors) == (1, 1, 0)


@pytest.mark.parametrize("text", ["!stonks help", "!stonks", "!STONKS HELP", "@BrokerBot help"])
async def test_help(make_dispatcher, channel, stock_provider, feed_source, text):
    await make_dispatcher().handle(text, False, channel)

    assert channel.texts == [HELP_TEXT]
    assert channel.embeds == []
    assert stock_provider.calls == []
    assert feed_source.fetches == 0


async def test_own_messages_are_dropped(make_dispatcher, channel, stock_provider, status):
    await make_dispatcher().handle("!stonks AAPL", True, channel)

    assert channel.texts == [] and channel.embeds == []
    assert stock_provider.calls == []
    assert status.snapshot().requests == 0


@pytest.mark.parametrize("text", ["", "   ", "hello AAPL", "stonks AAPL", "AAPL !stonks"])
async def test_messages_not_for_the_bot_are_ignored(make_dispatcher, channel, stock_provider, status, text):
    await make_dispatcher().handle(text, False, channel)

    assert channel.texts == [] and channel.embeds == []
    assert stock_provider.calls == []
    assert status.snapshot().requests == 0


@pytest.mark.parametrize("prefix", ["!stnosk", "!stonsk", "@BrokerBot", "<@42>"])
async def test_alternate_invocations(make_dispatcher, channel, prefix):
    await make_dispatcher().handle(f"{prefix} aapl", False, channel, mentions=("<@42>",))

    (embed,) = channel.embeds
    assert embed.title == "AAPL"
    assert embed.description == "Latest Quote: $150.00 (1.50%)"


async def test_mentions_lowercase_and_duplicates_are_cleaned(make_dispatcher, channel, stock_provider):
    await make_dispatcher().handle("!stonks msft @someone aapl MSFT Aapl", False, channel)

    assert sorted(stock_provider.calls) == ["AAPL", "MSFT"]
    assert [f.name for f in channel.embeds[0].fields] == ["AAPL", "MSFT"]


async def test_aliases_are_expanded(make_dispatcher, channel):
    await make_dispatcher().handle("!stonks ?coins tsla", False, channel)

    assert [f.name for f in channel.embeds[0].fields] == ["BTC", "ETH", "TSLA"]
    assert channel.embeds[0].fields[2].value == "$200.00"


async def test_unknown_alias_is_quoted_literally(make_dispatcher, channel, stock_provider):
    await make_dispatcher().handle("!stonks ?typo", False, channel)

    assert stock_provider.calls == ["?TYPO"]
    assert channel.embeds[0].description == "No Data"


async def test_unreachable_alias_store_aborts_with_one_reply(make_dispatcher, channel, stock_provider, status):
    await make_dispatcher(store=UnreachableAliasStore()).handle("!stonks ?FAANG AAPL", False, channel)

    assert channel.texts == ["failed to expand aliases: alias store unavailable: timed out"]
    assert channel.embeds == []
    assert stock_provider.calls == []
    assert status.snapshot().errors == 1


async def test_failed_ticker_gets_a_notice_and_the_rest_are_sent(make_dispatcher, channel, status):
    provider = FakeStockProvider(quotes={"AAPL": (150.0, 1.5)}, failures={"GME"})

    await make_dispatcher(provider=provider).handle("!stonks GME AAPL", False, channel)

    assert channel.texts == ['Failed to get quote for stock ticker: "GME" (See logs)']
    assert channel.embeds[0].title == "AAPL"
    snap = status.snapshot()
    assert (snap.successes, snap.errors) == (1, 1)


async def test_all_tickers_failing_sends_only_notices(make_dispatcher, channel):
    provider = FakeStockProvider(failures={"GME", "AMC"})

    await make_dispatcher(provider=provider).handle("!stonks GME AMC", False, channel)

    assert sorted(channel.texts) == [
        'Failed to get quote for stock ticker: "AMC" (See logs)',
        'Failed to get quote for stock ticker: "GME" (See logs)',
    ]
    assert channel.embeds == []


async def test_bare_crypto_marker_is_ignored(make_dispatcher, channel, stock_provider):
    await make_dispatcher().handle("!stonks $", False, channel)

    assert channel.texts == [HELP_TEXT]
    assert stock_provider.calls == []


async def test_only_mentions_shows_help(make_dispatcher, channel):
    await make_dispatcher().handle("@BrokerBot @someone", False, channel)
    assert channel.texts == [HELP_TEXT]


async def test_test_mode_tags_every_reply(make_dispatcher, channel):
    dispatcher = make_dispatcher(formatter=ResponseFormatter(test_tag="qWeRtY"))

    await dispatcher.handle("!stonks help", False, channel)
    await dispatcher.handle("!stonks AAPL MSFT", False, channel)

    assert channel.texts[0].startswith("qWeRtY: Invoke bot")
    assert channel.embeds[0].footer == "qWeRtY"


async def test_alias_set_then_use(make_dispatcher, channel, status):
    dispatcher = make_dispatcher()

    await dispatcher.handle("!stonks alias set ?mine msft tsla", False, channel)
    await dispatcher.handle("!stonks ?MINE", False, channel)

    assert channel.texts == ['Created alias "?MINE"']
    assert [f.name for f in channel.embeds[0].fields] == ["MSFT", "TSLA"]
    assert status.snapshot().successes == 2


async def test_alias_failure_is_reported(make_dispatcher, channel, status):
    await make_dispatcher(store=UnreachableAliasStore()).handle("!stonks alias list", False, channel)

    assert channel.texts == ["failed to list alias: alias store unavailable: timed out"]
    assert status.snapshot().errors == 1
