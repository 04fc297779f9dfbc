"""Routes inner Slack events to bot replies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from .config import DEFAULT_REPLY_TEXT
from .errors import SlackError
from .models import InnerEvent, ListenerStopped

if TYPE_CHECKING:
    from ..chat_adapters.slack_adapter import SlackBot

LOGGER = logging.getLogger(__name__)


class Router:
    """Consumes ``bot.events`` and answers every message not sent by the bot."""

    def __init__(self, bot: "SlackBot", reply_text: str = DEFAULT_REPLY_TEXT) -> None:
        self._bot = bot
        self._reply_text = reply_text

    async def run(self) -> Optional[ListenerStopped]:
        """Handle events until the event channel closes; return why it closed."""
        async for event in self._bot.events:
            await self.handle_event(event)
        return self._bot.events.termination

    async def handle_event(self, event: InnerEvent) -> None:
        if not event.is_message:
            LOGGER.debug("Ignoring Slack event type %s", event.type)
            return
        if not event.channel:
            LOGGER.debug("Ignoring message event without a channel (subtype %s)", event.subtype)
            return

        if event.user != self._bot.user_id:
            try:
                await self._bot.send_message(event.channel, self._reply_text)
            except SlackError as exc:
                LOGGER.warning("Failed to reply in %s: %s", event.channel, exc)

        channel_name = await self._bot.get_channel_name(event.channel)
        if event.user:
            author = await self._bot.get_user_name(event.user)
        else:
            author = event.bot_id or "unknown"
        LOGGER.info("[%s] <%s> %s", channel_name, author, event.text)
