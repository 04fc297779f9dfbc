"""Input validation utilities for slack-widget init command."""

from __future__ import annotations

import re

from ..core.config import parse_listen_url
from ..core.errors import ConfigError

_SIGNING_SECRET_RE = re.compile(r"^[0-9a-f]{32}$")


def validate_slack_bot_token(token: str) -> tuple[bool, str]:
    """Validate bot token format (xoxb-*)."""
    if not token:
        return False, "Token is required"
    if not token.startswith("xoxb-"):
        return False, "Token must start with 'xoxb-'"
    if len(token) < 20:
        return False, "Token appears too short"
    return True, ""


def validate_signing_secret(secret: str) -> tuple[bool, str]:
    """Validate a Slack app signing secret (32 lowercase hex characters)."""
    if not secret:
        return True, ""  # Optional when verification is disabled
    if not _SIGNING_SECRET_RE.match(secret.strip()):
        return False, "Signing secret should be 32 hexadecimal characters"
    return True, ""


def validate_listen_url(url: str) -> tuple[bool, str]:
    """Validate the scheme://host:port/path the webhook endpoint binds to."""
    if not url:
        return True, ""  # Falls back to the default
    try:
        parse_listen_url(url)
    except ConfigError as exc:
        return False, str(exc)
    return True, ""


def validate_timeout(value: str) -> tuple[bool, str]:
    """Validate an optional positive number of seconds."""
    if not value:
        return True, ""
    try:
        seconds = float(value)
    except ValueError:
        return False, "Timeout must be a number of seconds"
    if seconds <= 0:
        return False, "Timeout must be greater than zero"
    return True, ""
