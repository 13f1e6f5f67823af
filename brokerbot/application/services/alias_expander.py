"""
Application service: expands '?ALIAS' tokens into their member tickers.
Depends only on the IAliasStore port.
"""

from brokerbot.application.tickers import ALIAS_MARKER
from brokerbot.domain.ports.alias_store_port import IAliasStore


class AliasExpander:
    def __init__(self, store: IAliasStore) -> None:
        self._store = store

    async def expand(self, tokens: list[str]) -> list[str]:
        """Splice alias members in place of '?'-prefixed tokens.

        Single pass: members that are themselves aliases are not expanded again.
        Unknown aliases pass through unchanged and end up quoted as literal symbols.

        Raises:
            AliasLookupError: propagated from the store when it is unreachable.
        """
        if not any(t.startswith(ALIAS_MARKER) for t in tokens):
            return list(tokens)

        aliases = await self._store.get_aliases()
        expanded: list[str] = []
        for token in tokens:
            if token.startswith(ALIAS_MARKER):
                members = aliases.get(token.upper())
                if members is not None:
                    expanded.extend(members)
                    continue
            expanded.append(token)
        return expanded
