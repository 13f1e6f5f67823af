"""
Platform-neutral chat message entities.
The Discord adapter converts these into discord.Embed objects; nothing above
the infrastructure layer knows about the chat SDK.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class EmbedField:
    name: str
    value: str
    inline: bool = False


@dataclass(frozen=True)
class Embed:
    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    fields: tuple[EmbedField, ...] = field(default_factory=tuple)
    footer: Optional[str] = None
