"""Chat platform adapters."""

from .i_chat_adapter import IChatAdapter
from .slack_adapter import SlackBot
from .webhook_listener import WebhookListener

__all__ = ["IChatAdapter", "SlackBot", "WebhookListener"]
