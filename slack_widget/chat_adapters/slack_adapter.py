"""Slack bot session: webhook events in, Web API calls out."""

from __future__ import annotations

import logging
from typing import Optional, Union

from ..core.config import Config, DEFAULT_SHUTDOWN_TIMEOUT, ListenAddress, parse_listen_url
from ..core.errors import AuthenticationError, ConfigError, SlackError
from ..core.event_channel import EventChannel
from ..core.events import build_verifier
from ..core.models import Channel, LookupResult, ResolutionKind, User
from ..core.resolution_cache import ResolutionCache
from ..slack_api import PlatformClient, SlackPlatformClient
from .i_chat_adapter import IChatAdapter
from .webhook_listener import WebhookListener

LOGGER = logging.getLogger(__name__)


class SlackBot(IChatAdapter):
    """An authenticated Slack bot with a running Events API endpoint.

    Build one with ``await SlackBot.create(...)``. Read ``bot.events`` for
    incoming inner events; iteration ends when the listener stops, and
    ``bot.events.termination`` says whether that was a clean stop or a
    failure. Use ``bot.client`` for direct Web API calls.
    """

    def __init__(
        self,
        client: PlatformClient,
        user_id: str,
        address: ListenAddress,
        *,
        signing_secret: Optional[str] = None,
        handoff_timeout: Optional[float] = None,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
    ) -> None:
        self.client = client
        self.user_id = user_id
        self.address = address
        self.events = EventChannel()
        self.cache = ResolutionCache(client)
        self._listener = WebhookListener(
            address,
            self.events,
            verifier=build_verifier(signing_secret),
            handoff_timeout=handoff_timeout,
            shutdown_timeout=shutdown_timeout,
        )

    @classmethod
    async def create(
        cls,
        token: str,
        listen_url: str,
        *,
        platform_client: Optional[PlatformClient] = None,
        signing_secret: Optional[str] = None,
        verify_signatures: bool = True,
        handoff_timeout: Optional[float] = None,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
    ) -> "SlackBot":
        """Verify the token, start listening on ``listen_url`` and return.

        Raises:
            ConfigError: if ``listen_url`` is malformed or verification is
                requested without a signing secret.
            AuthenticationError: if Slack rejects the token.
        """
        address = parse_listen_url(listen_url)
        if verify_signatures and not signing_secret:
            raise ConfigError("A signing secret is required unless verify_signatures=False")
        if not verify_signatures:
            signing_secret = None

        client = platform_client or SlackPlatformClient(token)
        try:
            user_id = await client.auth_test()
        except SlackError as exc:
            raise AuthenticationError(str(exc)) from exc

        bot = cls(
            client,
            user_id,
            address,
            signing_secret=signing_secret,
            handoff_timeout=handoff_timeout,
            shutdown_timeout=shutdown_timeout,
        )
        await bot.start()
        return bot

    @classmethod
    async def from_config(
        cls, config: Config, platform_client: Optional[PlatformClient] = None
    ) -> "SlackBot":
        return await cls.create(
            config.slack_token,
            config.listen_url,
            platform_client=platform_client,
            signing_secret=config.signing_secret,
            verify_signatures=config.verify_signatures,
            handoff_timeout=config.handoff_timeout,
            shutdown_timeout=config.shutdown_timeout,
        )

    @property
    def listener(self) -> WebhookListener:
        return self._listener

    async def start(self) -> None:
        self._listener.start()

    async def wait_ready(self) -> bool:
        """True once the endpoint is bound, False if binding failed."""
        return await self._listener.wait_ready()

    async def stop(self) -> None:
        LOGGER.info("Stopping Slack bot %s", self.user_id)
        await self._listener.stop()

    async def send_message(
        self, channel: str, text: str, thread_ts: Optional[str] = None
    ) -> Optional[str]:
        return await self.client.post_message(channel, text, thread_ts=thread_ts)

    async def get_user(self, user_id: str) -> Optional[User]:
        """Cached user lookup; None when Slack cannot provide the user."""
        return await self.cache.resolve(ResolutionKind.USER, user_id)

    async def get_user_name(self, user_id: str) -> str:
        return await self.cache.resolve_name(ResolutionKind.USER, user_id)

    async def lookup_user(self, user_id: str) -> LookupResult[Union[User, Channel]]:
        return await self.cache.lookup(ResolutionKind.USER, user_id)

    async def get_channel(self, channel_id: str) -> Optional[Channel]:
        """Cached channel lookup; None when Slack cannot provide the channel."""
        return await self.cache.resolve(ResolutionKind.CHANNEL, channel_id)

    async def get_channel_name(self, channel_id: str) -> str:
        return await self.cache.resolve_name(ResolutionKind.CHANNEL, channel_id)

    async def lookup_channel(self, channel_id: str) -> LookupResult[Union[User, Channel]]:
        return await self.cache.lookup(ResolutionKind.CHANNEL, channel_id)
