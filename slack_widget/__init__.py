"""Slack Widget: a minimal Slack bot fed by Events API webhooks."""

from .chat_adapters import SlackBot
from .core import InnerEvent, ListenerStopped, LookupStatus, ResolutionKind

__all__ = ["SlackBot", "InnerEvent", "ListenerStopped", "LookupStatus", "ResolutionKind"]
