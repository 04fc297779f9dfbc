"""Interactive initialization command for slack-widget."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Tuple

import yaml

from ..core.config import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_LISTEN_URL,
    DEFAULT_REPLY_TEXT,
    ENV_FILE_NAME,
    SETTINGS_FILE,
)
from .validators import (
    validate_listen_url,
    validate_signing_secret,
    validate_slack_bot_token,
    validate_timeout,
)

LOGGER = logging.getLogger(__name__)

Validator = Callable[[str], Tuple[bool, str]]


@dataclass
class ConfigData:
    """Answers collected during interactive setup."""

    slack_token: str
    signing_secret: str
    listen_url: str
    handoff_timeout: Optional[float] = None
    reply_text: str = DEFAULT_REPLY_TEXT


def prompt_with_validation(
    prompt_text: str,
    validator: Validator,
    required: bool = True,
) -> str:
    """Prompt user for input until the validator accepts it."""
    prompt_text = f"{prompt_text}: "

    while True:
        user_input = input(prompt_text).strip()

        if required and not user_input:
            print("Error: This field is required.\n")
            continue

        if not required and not user_input:
            return user_input

        is_valid, error_msg = validator(user_input)
        if is_valid:
            return user_input
        print(f"Error: {error_msg}\n")


def interactive_setup() -> ConfigData:
    print("\n" + "=" * 60)
    print("Slack Widget Setup")
    print("=" * 60)
    print("\nYou need a Slack app with Event Subscriptions enabled and the bot")
    print("scopes channels:read, channels:history, chat:write and users:read.")

    slack_token = prompt_with_validation(
        "\nBot User OAuth Token (xoxb-...)",
        validate_slack_bot_token,
    )
    signing_secret = prompt_with_validation(
        "Signing Secret (Basic Information > App Credentials, blank to disable verification)",
        validate_signing_secret,
        required=False,
    )
    listen_url = prompt_with_validation(
        f"Listen URL [{DEFAULT_LISTEN_URL}]",
        validate_listen_url,
        required=False,
    ) or DEFAULT_LISTEN_URL
    handoff_raw = prompt_with_validation(
        "Seconds to wait for the bot to take an event before answering 503 [no limit]",
        validate_timeout,
        required=False,
    )
    reply_text = input(f"Reply text [{DEFAULT_REPLY_TEXT}]: ").strip() or DEFAULT_REPLY_TEXT

    return ConfigData(
        slack_token=slack_token,
        signing_secret=signing_secret,
        listen_url=listen_url,
        handoff_timeout=float(handoff_raw) if handoff_raw else None,
        reply_text=reply_text,
    )


def generate_env_file(path: Path, config: ConfigData) -> None:
    """Write secrets to the .env file with owner-only permissions."""
    lines = [
        "# Slack Widget Configuration",
        "# Generated by slack-widget init",
        f"# {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        f"SLACK_XOXB={config.slack_token}",
    ]
    if config.signing_secret:
        lines.append(f"SLACK_SIGNING_SECRET={config.signing_secret}")
    else:
        lines.append("SLACK_SKIP_SIGNATURE_VERIFICATION=1")
    lines.extend(
        [
            "",
            "# Logging (optional)",
            "# Standard logging levels: DEBUG, INFO, WARNING, ERROR",
            "LOG_LEVEL=INFO",
            "",
        ]
    )

    path.write_text("\n".join(lines), encoding="utf-8")
    path.chmod(0o600)


def generate_settings_yaml(path: Path, config: ConfigData) -> None:
    data = {
        "listen_url": config.listen_url,
        "reply_text": config.reply_text,
    }
    if config.handoff_timeout is not None:
        data["handoff_timeout_seconds"] = config.handoff_timeout

    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


def check_existing_config(target_dir: Path) -> bool:
    """
    Check for existing files and ask before overwriting them.

    Returns:
        True if we should proceed (nothing to overwrite or user confirmed)
        False if user declined to overwrite
    """
    existing = [name for name in (ENV_FILE_NAME, SETTINGS_FILE) if (target_dir / name).exists()]
    if not existing:
        return True

    print(f"\nConfiguration already exists in {target_dir}: {', '.join(existing)}")
    response = input("Overwrite existing configuration? (y/N): ").strip().lower()
    if response != "y":
        print("Initialization cancelled.")
        return False

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_dir = target_dir / f"backup_{timestamp}"
    backup_dir.mkdir(exist_ok=True)
    for name in existing:
        shutil.copy2(target_dir / name, backup_dir / name)
    print(f"Backed up existing files to: {backup_dir}\n")
    return True


def run_init_command(args) -> int:
    """
    Main entry point for the init command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit status code (0 for success, 1 for error)
    """
    raw_dir = getattr(args, "init_config_dir", None) or getattr(args, "config_dir", None)
    target_dir = Path(raw_dir).expanduser() if raw_dir else DEFAULT_CONFIG_DIR

    try:
        if not check_existing_config(target_dir):
            return 0
        config = interactive_setup()
    except (KeyboardInterrupt, EOFError):
        print("\nInitialization cancelled.")
        return 0

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        print(f"\nCreating configuration in: {target_dir}")
        generate_env_file(target_dir / ENV_FILE_NAME, config)
        generate_settings_yaml(target_dir / SETTINGS_FILE, config)
    except OSError as exc:
        LOGGER.error("Failed to write configuration: %s", exc)
        print(f"Error: Failed to write configuration: {exc}")
        return 1

    print("\n" + "=" * 60)
    print("Success! Configuration created at:")
    print(f"  {target_dir}")
    print("=" * 60)
    print("\nNext steps:")
    print(f"  1. Point your Slack app's Request URL at the public address for {config.listen_url}")
    print("  2. Start the bot:")
    print("     slack-widget")
    print()
    return 0
