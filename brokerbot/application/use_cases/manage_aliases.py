"""
Use-case: the '!stonks alias <list|get|set|delete>' sub-commands.
Depends only on the IAliasStore port.
"""

import logging
from dataclasses import dataclass

from brokerbot.application.help_text import HELP_TEXT
from brokerbot.application.tickers import ALIAS_MARKER, canonicalize
from brokerbot.domain.errors import AliasLookupError
from brokerbot.domain.ports.alias_store_port import IAliasStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AliasReply:
    text: str
    # None when the command was malformed and only help was shown.
    succeeded: bool | None


class ManageAliasesUseCase:
    def __init__(self, store: IAliasStore) -> None:
        self._store = store

    async def execute(self, args: list[str]) -> AliasReply:
        """Run one alias sub-command.

        Args:
            args: Tokens following the 'alias' keyword, e.g. ['set', '?faang', 'fb', 'aapl'].
        """
        if not args:
            return AliasReply(HELP_TEXT, None)
        action, rest = args[0].lower(), args[1:]
        try:
            if action == "list":
                return AliasReply(await self._list(), True)
            if action == "get" and rest:
                members = await self._store.get_alias(rest[0].upper())
                return AliasReply(", ".join(members), True)
            if action == "set" and len(rest) >= 2 and rest[0].startswith(ALIAS_MARKER):
                name = rest[0].upper()
                await self._store.create_alias(name, canonicalize(rest[1:]))
                return AliasReply(f'Created alias "{name}"', True)
            if action == "delete" and rest:
                name = rest[0].upper()
                await self._store.delete_alias(name)
                return AliasReply(f'Deleted alias "{name}"', True)
        except AliasLookupError as exc:
            verb = {"set": "create"}.get(action, action)
            msg = f"failed to {verb} alias: {exc}"
            logger.error(msg)
            return AliasReply(msg, False)
        return AliasReply(HELP_TEXT, None)

    async def _list(self) -> str:
        aliases = await self._store.get_aliases()
        if not aliases:
            return "No aliases defined."
        return "\n".join(
            f"{name}: {', '.join(members)}" for name, members in sorted(aliases.items())
        )
