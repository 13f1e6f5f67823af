"""
Use-case: dispatch one inbound chat message.

    drop self-messages → require a command prefix or bot mention → help /
    alias sub-commands → tickers: strip mentions, uppercase, expand aliases,
    dedupe, classify → fan-out quotes → one formatted reply.

Messages not addressed to the bot are ignored silently; everything else gets
a reply, including failures.
"""

import logging
import time
from typing import Iterable

from brokerbot.application.help_text import HELP_TEXT
from brokerbot.application.services.alias_expander import AliasExpander
from brokerbot.application.services.quote_orchestrator import QuoteOrchestrator
from brokerbot.application.services.response_formatter import ResponseFormatter
from brokerbot.application.services.status_tracker import StatusTracker
from brokerbot.application.tickers import (
    CRYPTO_MARKER,
    canonicalize,
    classify,
    dedupe,
    remove_mentions,
)
from brokerbot.application.use_cases.manage_aliases import ManageAliasesUseCase
from brokerbot.domain.entities.quote import ClassifiedTicker
from brokerbot.domain.errors import AliasLookupError
from brokerbot.domain.ports.chat_port import IChatChannel

logger = logging.getLogger(__name__)

BOT_HANDLE = "@BrokerBot"
# Common misspellings are accepted on purpose.
COMMAND_PREFIXES = ("!stonks", "!stnosk", "!stonsk")
HELP_TOKEN = "help"
ALIAS_TOKEN = "alias"


class CommandDispatcher:
    def __init__(
        self,
        orchestrator: QuoteOrchestrator,
        expander: AliasExpander,
        alias_commands: ManageAliasesUseCase,
        formatter: ResponseFormatter,
        status: StatusTracker,
        prefixes: Iterable[str] = COMMAND_PREFIXES,
        bot_handle: str = BOT_HANDLE,
    ) -> None:
        self._orchestrator = orchestrator
        self._expander = expander
        self._alias_commands = alias_commands
        self._formatter = formatter
        self._status = status
        self._prefixes = frozenset(p.lower() for p in prefixes)
        self._bot_handle = bot_handle

    def is_directed_at_bot(self, first_token: str, mentions: Iterable[str] = ()) -> bool:
        return (
            first_token.lower() in self._prefixes
            or first_token == self._bot_handle
            or first_token in set(mentions)
        )

    async def handle(
        self,
        text: str,
        sender_is_self: bool,
        channel: IChatChannel,
        mentions: Iterable[str] = (),
    ) -> None:
        """Handle one inbound message.

        Args:
            text:           Raw message content.
            sender_is_self: True when the bot itself wrote the message.
            channel:        Where replies go.
            mentions:       Extra tokens that address the bot (platform mention markup).
        """
        if sender_is_self:
            return

        tokens = text.split()
        if not tokens or not self.is_directed_at_bot(tokens[0], mentions):
            return

        self._status.record_request()
        args = tokens[1:]

        if not args or args[0].lower() == HELP_TOKEN:
            await channel.send_text(self._formatter.format_text(HELP_TEXT))
            return

        if args[0].lower() == ALIAS_TOKEN:
            await self._handle_alias(args[1:], channel)
            return

        await self._handle_tickers(args, channel)

    async def _handle_alias(self, args: list[str], channel: IChatChannel) -> None:
        reply = await self._alias_commands.execute(args)
        await channel.send_text(self._formatter.format_text(reply.text))
        if reply.succeeded is True:
            self._status.record_success()
        elif reply.succeeded is False:
            self._status.record_error()

    async def _handle_tickers(self, args: list[str], channel: IChatChannel) -> None:
        tokens = canonicalize(remove_mentions(args))
        try:
            tokens = await self._expander.expand(tokens)
        except AliasLookupError as exc:
            msg = f"failed to expand aliases: {exc}"
            logger.error(msg)
            await channel.send_text(self._formatter.format_text(msg))
            self._status.record_error()
            return

        tokens = [t for t in dedupe(tokens) if t != CRYPTO_MARKER]
        if not tokens:
            await channel.send_text(self._formatter.format_text(HELP_TEXT))
            return

        tickers = [classify(t) for t in tokens]
        started = time.perf_counter()
        logger.info("Received request for tickers: %s", tokens)

        async def notify_failure(ticker: ClassifiedTicker, exc: Exception) -> None:
            self._status.record_error()
            await channel.send_text(
                self._formatter.format_text(
                    f'Failed to get quote for {ticker.asset_class.value} ticker: '
                    f'"{ticker.symbol}" (See logs)'
                )
            )

        results = await self._orchestrator.fetch_quotes(tickers, on_failure=notify_failure)
        if results:
            await channel.send_embed(self._formatter.format_results(results))
        logger.info(
            "Sent response for tickers in %.3fs: %s", time.perf_counter() - started, sorted(tokens)
        )
        self._status.record_success()
