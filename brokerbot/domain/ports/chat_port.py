"""
Port (interface) for the reply side of a chat channel.
The Discord adapter implements this for one inbound message's channel.
"""

from abc import ABC, abstractmethod

from brokerbot.domain.entities.message import Embed


class IChatChannel(ABC):
    @abstractmethod
    async def send_text(self, text: str) -> None: ...

    @abstractmethod
    async def send_embed(self, embed: Embed) -> None: ...
