"""
Infrastructure adapter: discord.py → IChatChannel + inbound message hook.
All discord.py details (intents, Embed objects, mention markup) are confined
here; the dispatcher only sees plain text and domain Embeds.
"""

import logging

import discord

from brokerbot.application.use_cases.handle_command import CommandDispatcher
from brokerbot.domain.entities.message import Embed
from brokerbot.domain.ports.chat_port import IChatChannel

logger = logging.getLogger(__name__)


def to_discord_embed(embed: Embed) -> discord.Embed:
    result = discord.Embed(title=embed.title, url=embed.url, description=embed.description)
    for field in embed.fields:
        result.add_field(name=field.name, value=field.value, inline=field.inline)
    if embed.footer:
        result.set_footer(text=embed.footer)
    return result


class DiscordChannel(IChatChannel):
    """Replies into the channel an inbound message came from."""

    def __init__(self, channel: discord.abc.Messageable) -> None:
        self._channel = channel

    async def send_text(self, text: str) -> None:
        try:
            await self._channel.send(text)
        except discord.DiscordException as exc:
            logger.error("failed to send message %r to discord: %s", text, exc)

    async def send_embed(self, embed: Embed) -> None:
        try:
            await self._channel.send(embed=to_discord_embed(embed))
        except discord.DiscordException as exc:
            logger.error("failed to send embed %r to discord: %s", embed, exc)


class BrokerBotClient(discord.Client):
    def __init__(self, dispatcher: CommandDispatcher, **options) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents, **options)
        self._dispatcher = dispatcher

    async def on_ready(self) -> None:
        logger.info("Logged in to Discord as %s", self.user)

    async def on_message(self, message: discord.Message) -> None:
        me = self.user
        sender_is_self = me is not None and message.author.id == me.id
        mentions = (me.mention, f"<@!{me.id}>", f"@{me.name}") if me is not None else ()
        await self._dispatcher.handle(
            message.content,
            sender_is_self,
            DiscordChannel(message.channel),
            mentions=mentions,
        )
