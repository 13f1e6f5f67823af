"""
Infrastructure adapter: process-local alias table → IAliasStore.
Used when no persistent alias table is configured; never fails, and
alias edits last until the process exits.
"""

import asyncio
from typing import Mapping, Optional

from brokerbot.domain.errors import AliasLookupError
from brokerbot.domain.ports.alias_store_port import IAliasStore

DEFAULT_ALIASES: dict[str, list[str]] = {
    "?FAANG": ["META", "AAPL", "AMZN", "NFLX", "GOOGL"],
    "?CRYPTO": ["$BTC", "$ETH", "$LTC"],
}


class InMemoryAliasStore(IAliasStore):
    def __init__(self, aliases: Optional[Mapping[str, list[str]]] = None) -> None:
        source = DEFAULT_ALIASES if aliases is None else aliases
        self._aliases = {
            name.upper(): [m.upper() for m in members] for name, members in source.items()
        }
        self._lock = asyncio.Lock()

    async def get_aliases(self) -> dict[str, list[str]]:
        async with self._lock:
            return {name: list(members) for name, members in self._aliases.items()}

    async def get_alias(self, name: str) -> list[str]:
        async with self._lock:
            members = self._aliases.get(name.upper())
        if members is None:
            raise AliasLookupError(f'alias "{name}" not found')
        return list(members)

    async def create_alias(self, name: str, members: list[str]) -> None:
        async with self._lock:
            self._aliases[name.upper()] = [m.upper() for m in members]

    async def delete_alias(self, name: str) -> None:
        async with self._lock:
            self._aliases.pop(name.upper(), None)
