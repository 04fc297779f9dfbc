"""Narrow interface onto the Slack Web API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..core.models import Channel, User


class PlatformClient(ABC):
    """The calls the bot makes against Slack.

    Implementations must be safe to call concurrently from the event loop.
    """

    @abstractmethod
    async def auth_test(self) -> str:
        """Verify the token and return the bot's own user ID.

        Raises:
            AuthenticationError: if the token is rejected.
        """

    @abstractmethod
    async def get_user(self, user_id: str) -> User:
        """Fetch a user by ID.

        Raises:
            RecordNotFound: if Slack has no such user.
            SlackError: on any other API failure.
        """

    @abstractmethod
    async def get_channel(self, channel_id: str) -> Channel:
        """Fetch a channel by ID.

        Raises:
            RecordNotFound: if Slack has no such channel.
            SlackError: on any other API failure.
        """

    @abstractmethod
    async def post_message(
        self, channel: str, text: str, thread_ts: Optional[str] = None
    ) -> Optional[str]:
        """Post a message and return its timestamp when Slack reports one."""
