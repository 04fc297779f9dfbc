"""Shared fixtures for Slack Widget tests."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import pytest

from slack_widget.core import config as config_module
from slack_widget.core.errors import AuthenticationError, RecordNotFound, SlackError
from slack_widget.core.models import Channel, User
from slack_widget.slack_api import PlatformClient

CONFIG_ENV_VARS = (
    "SLACK_XOXB",
    "SLACK_BOT_TOKEN",
    "LISTEN_URL",
    "SLACK_SIGNING_SECRET",
    "SLACK_SKIP_SIGNATURE_VERIFICATION",
    "HANDOFF_TIMEOUT_SECONDS",
    "SHUTDOWN_TIMEOUT_SECONDS",
    "REPLY_TEXT",
    "LOG_LEVEL",
)


class StubPlatformClient(PlatformClient):
    """In-memory Slack stand-in that records every call."""

    def __init__(
        self,
        users: Optional[Dict[str, str]] = None,
        channels: Optional[Dict[str, str]] = None,
        bot_user_id: str = "UBOT",
    ) -> None:
        self.users = users or {}
        self.channels = channels or {}
        self.bot_user_id = bot_user_id
        self.auth_error: Optional[Exception] = None
        self.failing_ids: set[str] = set()
        self.lookup_delay = 0.0
        self.post_error: Optional[Exception] = None
        self.user_calls: List[str] = []
        self.channel_calls: List[str] = []
        self.posted: List[Dict[str, Optional[str]]] = []

    async def auth_test(self) -> str:
        if self.auth_error is not None:
            raise self.auth_error
        return self.bot_user_id

    async def get_user(self, user_id: str) -> User:
        self.user_calls.append(user_id)
        await asyncio.sleep(self.lookup_delay)
        if user_id in self.failing_ids:
            raise SlackError(f"Failed to fetch user {user_id}: ratelimited")
        if user_id not in self.users:
            raise RecordNotFound(f"user {user_id} not found")
        # A fresh object per call, so tests can tell loads apart.
        return User(id=user_id, name=self.users[user_id], real_name=f"call-{len(self.user_calls)}")

    async def get_channel(self, channel_id: str) -> Channel:
        self.channel_calls.append(channel_id)
        await asyncio.sleep(self.lookup_delay)
        if channel_id in self.failing_ids:
            raise SlackError(f"Failed to fetch channel {channel_id}: ratelimited")
        if channel_id not in self.channels:
            raise RecordNotFound(f"channel {channel_id} not found")
        return Channel(id=channel_id, name=self.channels[channel_id])

    async def post_message(
        self, channel: str, text: str, thread_ts: Optional[str] = None
    ) -> Optional[str]:
        if self.post_error is not None:
            raise self.post_error
        self.posted.append({"channel": channel, "text": text, "thread_ts": thread_ts})
        return f"1700000000.{len(self.posted):06d}"


@pytest.fixture
def stub_client() -> StubPlatformClient:
    return StubPlatformClient(
        users={"U123": "alice", "U456": "bob"},
        channels={"C123": "general", "C456": "random"},
    )


@pytest.fixture
def rejecting_client() -> StubPlatformClient:
    client = StubPlatformClient()
    client.auth_error = AuthenticationError("Slack auth.test failed: invalid_auth")
    return client


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Remove config variables for the test and restore them afterwards.

    Setting before deleting makes monkeypatch undo anything load_dotenv adds.
    """
    for name in CONFIG_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_DIR", tmp_path / "no-default-config")
    return monkeypatch


@pytest.fixture
def make_client():
    """Factory for stub clients with custom users and channels."""
    return StubPlatformClient
