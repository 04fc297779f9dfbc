"""Slack Web API access."""

from .base import PlatformClient
from .client import SlackPlatformClient

__all__ = ["PlatformClient", "SlackPlatformClient"]
