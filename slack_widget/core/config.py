"""Configuration loader."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlsplit

import yaml
from dotenv import load_dotenv

from .errors import ConfigError

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path("~/.slack-widget").expanduser()
ENV_FILE_NAME = ".env"
SETTINGS_FILE = "settings.yaml"

DEFAULT_LISTEN_URL = "http://localhost:3000/events-endpoint"
DEFAULT_REPLY_TEXT = "Yes, hello."
DEFAULT_SHUTDOWN_TIMEOUT = 60.0
DEFAULT_PORTS = {"http": 80, "https": 443}

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ListenAddress:
    scheme: str
    host: str
    port: int
    path: str

    @property
    def bind_host(self) -> Optional[str]:
        """Host to bind; ``localhost`` and an empty host mean every interface."""
        if self.host in ("", "localhost"):
            return None
        return self.host

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host or 'localhost'}:{self.port}{self.path}"


def parse_listen_url(raw_url: str) -> ListenAddress:
    """Split ``scheme://host:port/path`` into a ListenAddress.

    Raises:
        ConfigError: if the URL cannot be parsed or has no path.
    """
    try:
        parts = urlsplit(raw_url)
        port = parts.port
    except ValueError as exc:
        raise ConfigError(f"Malformed listen URL {raw_url!r}: {exc}") from exc

    if parts.scheme not in DEFAULT_PORTS:
        raise ConfigError(f"Malformed listen URL {raw_url!r}: scheme must be http or https")
    if not parts.path:
        raise ConfigError(f"Malformed listen URL {raw_url!r}: missing path")

    return ListenAddress(
        scheme=parts.scheme,
        host=parts.hostname or "",
        port=port if port is not None else DEFAULT_PORTS[parts.scheme],
        path=parts.path,
    )


@dataclass(frozen=True)
class Config:
    slack_token: str
    listen_url: str
    signing_secret: Optional[str]
    verify_signatures: bool = True
    handoff_timeout: Optional[float] = None
    shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT
    reply_text: str = DEFAULT_REPLY_TEXT
    log_level: str = "INFO"
    config_dir: Optional[Path] = None

    @property
    def listen_address(self) -> ListenAddress:
        return parse_listen_url(self.listen_url)


def resolve_config_dir(config_dir: Path | str | None) -> Optional[Path]:
    """Resolve the directory holding .env and settings.yaml.

    An explicitly requested directory must exist; the default one is optional
    and the environment alone is enough to run.
    """
    if config_dir:
        target = Path(config_dir).expanduser().resolve()
        if not target.exists():
            raise ConfigError(f"Config directory {target} does not exist.")
        if not target.is_dir():
            raise ConfigError(f"Config directory {target} is not a directory")
        return target
    if DEFAULT_CONFIG_DIR.is_dir():
        return DEFAULT_CONFIG_DIR.resolve()
    return None


def load_config(
    config_dir: Path | str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Config:
    """Load configuration from the config directory and the environment.

    Precedence: ``overrides`` (CLI flags), then environment variables
    (including ``.env``), then ``settings.yaml``, then defaults.
    """
    root = resolve_config_dir(config_dir)
    settings: Dict[str, Any] = {}
    if root is not None:
        _load_env_file(root / ENV_FILE_NAME)
        settings = _load_settings(root / SETTINGS_FILE)

    overrides = dict(overrides or {})

    slack_token = _require_env("SLACK_XOXB", "SLACK_BOT_TOKEN")
    listen_url = (
        overrides.get("listen_url")
        or os.getenv("LISTEN_URL")
        or settings.get("listen_url")
        or DEFAULT_LISTEN_URL
    )
    # Fail at load time rather than when the listener starts.
    parse_listen_url(listen_url)

    skip_env = os.getenv("SLACK_SKIP_SIGNATURE_VERIFICATION")
    if skip_env is not None:
        verify_signatures = skip_env.strip().lower() not in _TRUTHY
    else:
        verify_signatures = bool(settings.get("verify_signatures", True))

    signing_secret = os.getenv("SLACK_SIGNING_SECRET") or None
    if verify_signatures and not signing_secret:
        raise ConfigError(
            "SLACK_SIGNING_SECRET is not set; set it, or set "
            "SLACK_SKIP_SIGNATURE_VERIFICATION=1 to accept unsigned requests"
        )
    if not verify_signatures:
        LOGGER.warning("Slack request signature verification is disabled")

    return Config(
        slack_token=slack_token,
        listen_url=listen_url,
        signing_secret=signing_secret,
        verify_signatures=verify_signatures,
        handoff_timeout=_optional_float("HANDOFF_TIMEOUT_SECONDS", settings.get("handoff_timeout_seconds")),
        shutdown_timeout=_optional_float(
            "SHUTDOWN_TIMEOUT_SECONDS", settings.get("shutdown_timeout_seconds")
        )
        or DEFAULT_SHUTDOWN_TIMEOUT,
        reply_text=os.getenv("REPLY_TEXT") or settings.get("reply_text") or DEFAULT_REPLY_TEXT,
        log_level=(os.getenv("LOG_LEVEL") or settings.get("log_level") or "INFO").upper(),
        config_dir=root,
    )


def _load_env_file(path: Path) -> None:
    if not path.exists():
        LOGGER.debug("No .env file found at %s; relying on shell environment.", path)
        return
    load_dotenv(dotenv_path=path, override=False)


def _load_settings(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid settings.yaml structure at {path}")
    return data


def _require_env(*names: str) -> str:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    raise ConfigError(f"{' or '.join(names)} is not set")


def _optional_float(env_name: str, fallback: Any) -> Optional[float]:
    raw = os.getenv(env_name)
    if raw is None or raw.strip() == "":
        raw = fallback
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{env_name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{env_name} must be > 0")
    return value
