"""
Bot entry point: the Composition Root.

Wires every infrastructure adapter into the application layer, then runs the
Discord client on the event loop and the health/status server in a
background thread until a shutdown signal arrives.

API tokens come from DISCORD_TOKEN / FINNHUB_TOKEN (or .env). When they are
missing and BROKERBOT_SECRET_ARN is set, they are loaded from AWS Secrets
Manager into the environment first.

Run locally:
    brokerbot            # or: python -m brokerbot.infrastructure.entrypoints.bot_main
"""

import asyncio
import logging
import os
import sys
import threading
from dataclasses import dataclass

import uvicorn
from dotenv import load_dotenv

from brokerbot.application.services.alias_expander import AliasExpander
from brokerbot.application.services.price_feed_cache import PriceFeedCache
from brokerbot.application.services.quote_orchestrator import QuoteOrchestrator
from brokerbot.application.services.response_formatter import ResponseFormatter, random_tag
from brokerbot.application.services.status_tracker import StatusTracker
from brokerbot.application.use_cases.handle_command import CommandDispatcher
from brokerbot.application.use_cases.manage_aliases import ManageAliasesUseCase
from brokerbot.domain.errors import ConfigurationError
from brokerbot.domain.ports.alias_store_port import IAliasStore
from brokerbot.domain.ports.price_feed_port import IPriceFeedSource
from brokerbot.domain.ports.stock_data_port import IStockQuoteProvider
from brokerbot.infrastructure.aliases.dynamodb_alias_store import DynamoDBAliasStore
from brokerbot.infrastructure.aliases.in_memory_alias_store import InMemoryAliasStore
from brokerbot.infrastructure.chat.discord_adapter import BrokerBotClient
from brokerbot.infrastructure.config import Settings, tokens_missing
from brokerbot.infrastructure.entrypoints.fastapi_app import create_app
from brokerbot.infrastructure.logging_config import configure_logging
from brokerbot.infrastructure.price_feed.gemini_adapter import PRICE_FEED_SOURCES
from brokerbot.infrastructure.shutdown import ShutdownManager
from brokerbot.infrastructure.stock_data.finnhub_adapter import FinnhubStockQuoteProvider
from brokerbot.infrastructure.stock_data.yfinance_adapter import YFinanceStockQuoteProvider

logger = logging.getLogger(__name__)


@dataclass
class Components:
    stock_provider: IStockQuoteProvider
    price_feed_source: IPriceFeedSource
    price_feeds: PriceFeedCache
    alias_store: IAliasStore
    status: StatusTracker
    formatter: ResponseFormatter
    dispatcher: CommandDispatcher


def load_settings() -> Settings:
    load_dotenv()
    secret_arn = os.environ.get("BROKERBOT_SECRET_ARN")
    if secret_arn and tokens_missing():
        from brokerbot.infrastructure.secrets.secrets_manager_adapter import SecretsManagerAdapter

        logger.info("API tokens not in environment, loading from Secrets Manager")
        SecretsManagerAdapter().load_into_env(secret_arn)
    return Settings.from_env(os.environ)


def build_components(settings: Settings) -> Components:
    if settings.stock_provider == "yfinance":
        stock_provider: IStockQuoteProvider = YFinanceStockQuoteProvider()
    else:
        stock_provider = FinnhubStockQuoteProvider(settings.finnhub_token, timeout=settings.upstream_timeout)

    source_cls = PRICE_FEED_SOURCES.get(settings.crypto_exchange)
    if source_cls is None:
        raise ConfigurationError(
            f"unsupported CRYPTO_EXCHANGE {settings.crypto_exchange!r}; "
            f"supported: {', '.join(sorted(PRICE_FEED_SOURCES))}"
        )
    price_feed_source = source_cls(timeout=settings.upstream_timeout)
    price_feeds = PriceFeedCache(
        price_feed_source,
        max_age=settings.price_feed_max_age,
        refresh_timeout=settings.upstream_timeout,
    )

    alias_store: IAliasStore = (
        DynamoDBAliasStore(settings.alias_table, region=settings.aws_region)
        if settings.alias_table
        else InMemoryAliasStore()
    )

    test_tag = random_tag() if settings.test_mode else None
    if test_tag:
        logger.info("BrokerBot running in test mode with prefix: %r", test_tag)

    status = StatusTracker(settings.build_version, settings.build_time)
    formatter = ResponseFormatter(test_tag)
    dispatcher = CommandDispatcher(
        orchestrator=QuoteOrchestrator(
            stock_provider,
            price_feeds,
            quote_timeout=settings.quote_timeout,
            max_concurrency=settings.max_concurrency,
        ),
        expander=AliasExpander(alias_store),
        alias_commands=ManageAliasesUseCase(alias_store),
        formatter=formatter,
        status=status,
    )
    return Components(
        stock_provider=stock_provider,
        price_feed_source=price_feed_source,
        price_feeds=price_feeds,
        alias_store=alias_store,
        status=status,
        formatter=formatter,
        dispatcher=dispatcher,
    )


async def serve(settings: Settings) -> None:
    logger.info("BrokerBot starting up, version %s built %s", settings.build_version, settings.build_time)
    components = build_components(settings)
    await components.price_feeds.refresh_if_stale()

    shutdown = ShutdownManager()
    shutdown.install()

    server = uvicorn.Server(
        uvicorn.Config(
            create_app(components.status, components.price_feeds),
            host="0.0.0.0",
            port=settings.port,
            log_config=None,
        )
    )
    # Off the main thread uvicorn leaves signal handling to ShutdownManager.
    http_thread = threading.Thread(target=server.run, name="http", daemon=True)
    http_thread.start()

    def stop_http_server() -> None:
        logger.info("BrokerBot shutting down HTTP server.")
        server.should_exit = True
        http_thread.join(timeout=10)

    client = BrokerBotClient(components.dispatcher)

    async def close_discord() -> None:
        logger.info("BrokerBot shutting down connection to Discord.")
        await client.close()

    shutdown.add_handler(close_discord)
    shutdown.add_handler(stop_http_server)
    shutdown.add_handler(components.stock_provider.aclose)
    shutdown.add_handler(components.price_feed_source.aclose)

    logger.info("BrokerBot ready to serve on port %s", settings.port)
    discord_task = asyncio.create_task(client.start(settings.discord_token))
    discord_task.add_done_callback(lambda task: _on_discord_exit(task, shutdown))
    await shutdown.wait()


def _on_discord_exit(task: asyncio.Task, shutdown: ShutdownManager) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error("Discord client stopped: %s", task.exception())
    shutdown.trigger("Discord client exit")


def main() -> None:
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        configure_logging()
        logger.critical("Configuration error, aborting: %s", exc)
        sys.exit(1)

    configure_logging(settings.log_level)
    try:
        asyncio.run(serve(settings))
    except ConfigurationError as exc:
        logger.critical("Invalid configuration, aborting: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
