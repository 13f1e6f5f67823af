"""
Port (interface) for alias stores.
Infrastructure adapters (e.g. InMemoryAliasStore, DynamoDBAliasStore) must implement this interface.
Alias names include their leading '?' and are stored uppercase.
"""

from abc import ABC, abstractmethod


class IAliasStore(ABC):
    @abstractmethod
    async def get_aliases(self) -> dict[str, list[str]]:
        """Return every alias keyed by uppercase name.

        Raises:
            AliasLookupError: if the backing store is unreachable.
        """
        ...

    @abstractmethod
    async def get_alias(self, name: str) -> list[str]:
        """Return the members of one alias.

        Raises:
            AliasLookupError: if the alias does not exist or the store is unreachable.
        """
        ...

    @abstractmethod
    async def create_alias(self, name: str, members: list[str]) -> None: ...

    @abstractmethod
    async def delete_alias(self, name: str) -> None: ...
