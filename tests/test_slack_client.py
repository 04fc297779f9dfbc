"""Tests for the Slack SDK wrapper."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from slack_sdk.errors import SlackApiError

from slack_widget.core.errors import AuthenticationError, RecordNotFound, SlackError
from slack_widget.slack_api import SlackPlatformClient


def _api_error(code: str) -> SlackApiError:
    return SlackApiError(f"The request to the Slack API failed: {code}", {"ok": False, "error": code})


@pytest.fixture
def web_client():
    return MagicMock()


@pytest.fixture
def client(web_client):
    return SlackPlatformClient("xoxb-test", web_client=web_client)


class TestAuthTest:
    @pytest.mark.asyncio
    async def test_returns_bot_user_id(self, client, web_client):
        web_client.auth_test = AsyncMock(return_value={"ok": True, "user_id": "UBOT", "user": "widget", "team": "T"})

        assert await client.auth_test() == "UBOT"

    @pytest.mark.asyncio
    async def test_invalid_token(self, client, web_client):
        web_client.auth_test = AsyncMock(side_effect=_api_error("invalid_auth"))

        with pytest.raises(AuthenticationError, match="invalid_auth"):
            await client.auth_test()

    @pytest.mark.asyncio
    async def test_network_failure(self, client, web_client):
        web_client.auth_test = AsyncMock(side_effect=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(AuthenticationError, match="refused"):
            await client.auth_test()

    @pytest.mark.asyncio
    async def test_missing_user_id(self, client, web_client):
        web_client.auth_test = AsyncMock(return_value={"ok": True})

        with pytest.raises(AuthenticationError):
            await client.auth_test()


class TestLookups:
    @pytest.mark.asyncio
    async def test_get_user(self, client, web_client):
        web_client.users_info = AsyncMock(
            return_value={"ok": True, "user": {"id": "U1", "name": "alice", "real_name": "Alice A", "is_bot": False}}
        )

        user = await client.get_user("U1")

        web_client.users_info.assert_awaited_once_with(user="U1")
        assert user.id == "U1"
        assert user.name == "alice"
        assert user.real_name == "Alice A"
        assert user.raw["real_name"] == "Alice A"

    @pytest.mark.asyncio
    async def test_get_channel(self, client, web_client):
        web_client.conversations_info = AsyncMock(
            return_value={"ok": True, "channel": {"id": "C1", "name": "general", "is_private": True}}
        )

        channel = await client.get_channel("C1")

        web_client.conversations_info.assert_awaited_once_with(channel="C1")
        assert channel.name == "general"
        assert channel.is_private is True

    @pytest.mark.asyncio
    async def test_not_found_codes(self, client, web_client):
        web_client.users_info = AsyncMock(side_effect=_api_error("user_not_found"))
        web_client.conversations_info = AsyncMock(side_effect=_api_error("channel_not_found"))

        with pytest.raises(RecordNotFound):
            await client.get_user("U404")
        with pytest.raises(RecordNotFound):
            await client.get_channel("C404")

    @pytest.mark.asyncio
    async def test_other_api_errors_are_slack_errors(self, client, web_client):
        web_client.users_info = AsyncMock(side_effect=_api_error("ratelimited"))

        with pytest.raises(SlackError, match="ratelimited") as excinfo:
            await client.get_user("U1")
        assert not isinstance(excinfo.value, RecordNotFound)

    @pytest.mark.asyncio
    async def test_transport_errors_are_slack_errors(self, client, web_client):
        web_client.conversations_info = AsyncMock(side_effect=aiohttp.ClientConnectionError("reset"))

        with pytest.raises(SlackError, match="reset"):
            await client.get_channel("C1")


class TestPostMessage:
    @pytest.mark.asyncio
    async def test_returns_timestamp(self, client, web_client):
        web_client.chat_postMessage = AsyncMock(return_value={"ok": True, "ts": "1700000000.000100"})

        ts = await client.post_message("C1", "Yes, hello.")

        web_client.chat_postMessage.assert_awaited_once_with(channel="C1", text="Yes, hello.", thread_ts=None)
        assert ts == "1700000000.000100"

    @pytest.mark.asyncio
    async def test_failure(self, client, web_client):
        web_client.chat_postMessage = AsyncMock(side_effect=_api_error("not_in_channel"))

        with pytest.raises(SlackError, match="not_in_channel"):
            await client.post_message("C1", "Yes, hello.")
