"""Slack Web API client built on the official Slack SDK."""

from __future__ import annotations

import logging
from typing import Optional

import aiohttp
from slack_sdk.errors import SlackApiError, SlackClientError
from slack_sdk.web.async_client import AsyncWebClient

from ..core.errors import AuthenticationError, RecordNotFound, SlackError
from ..core.models import Channel, User
from .base import PlatformClient

LOGGER = logging.getLogger(__name__)

_NOT_FOUND_ERRORS = frozenset({"user_not_found", "channel_not_found", "users_not_found"})


def _api_error_code(exc: SlackApiError) -> str:
    response = getattr(exc, "response", None)
    if response is None:
        return "unknown_error"
    try:
        return response.get("error") or "unknown_error"
    except AttributeError:
        return "unknown_error"


class SlackPlatformClient(PlatformClient):
    """Wrapper around AsyncWebClient that maps SDK failures onto our errors."""

    def __init__(self, token: str, web_client: AsyncWebClient | None = None) -> None:
        self._web_client = web_client or AsyncWebClient(token=token)

    @property
    def web_client(self) -> AsyncWebClient:
        return self._web_client

    async def auth_test(self) -> str:
        try:
            response = await self._web_client.auth_test()
        except SlackApiError as exc:
            raise AuthenticationError(f"Slack auth.test failed: {_api_error_code(exc)}") from exc
        except (SlackClientError, aiohttp.ClientError) as exc:
            raise AuthenticationError(f"Slack auth.test failed: {exc}") from exc

        user_id = response.get("user_id")
        if not user_id:
            raise AuthenticationError("Slack auth.test returned no user_id")
        LOGGER.info("Authenticated as %s (%s) in team %s", response.get("user"), user_id, response.get("team"))
        return user_id

    async def get_user(self, user_id: str) -> User:
        try:
            response = await self._web_client.users_info(user=user_id)
        except SlackApiError as exc:
            raise self._translate(exc, "user", user_id) from exc
        except (SlackClientError, aiohttp.ClientError) as exc:
            raise SlackError(f"Failed to fetch user {user_id}: {exc}") from exc
        return User.from_api(response.get("user") or {"id": user_id})

    async def get_channel(self, channel_id: str) -> Channel:
        try:
            response = await self._web_client.conversations_info(channel=channel_id)
        except SlackApiError as exc:
            raise self._translate(exc, "channel", channel_id) from exc
        except (SlackClientError, aiohttp.ClientError) as exc:
            raise SlackError(f"Failed to fetch channel {channel_id}: {exc}") from exc
        return Channel.from_api(response.get("channel") or {"id": channel_id})

    async def post_message(
        self, channel: str, text: str, thread_ts: Optional[str] = None
    ) -> Optional[str]:
        try:
            response = await self._web_client.chat_postMessage(
                channel=channel, text=text, thread_ts=thread_ts
            )
        except SlackApiError as exc:
            raise SlackError(f"Failed to send Slack message: {_api_error_code(exc)}") from exc
        except (SlackClientError, aiohttp.ClientError) as exc:
            raise SlackError(f"Failed to send Slack message: {exc}") from exc
        return response.get("ts")

    @staticmethod
    def _translate(exc: SlackApiError, kind: str, record_id: str) -> SlackError:
        code = _api_error_code(exc)
        if code in _NOT_FOUND_ERRORS:
            return RecordNotFound(f"{kind} {record_id} not found")
        return SlackError(f"Failed to fetch {kind} {record_id}: {code}")
