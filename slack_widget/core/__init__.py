"""Core domain logic for Slack Widget."""

from .config import Config, ListenAddress, load_config, parse_listen_url
from .errors import (
    AuthenticationError,
    ConfigError,
    EventChannelClosed,
    HandoffTimeout,
    InvalidPayloadError,
    InvalidSignatureError,
    RecordNotFound,
    SlackError,
    SlackWidgetError,
    WebhookError,
)
from .event_channel import EventChannel
from .events import parse_event
from .models import (
    Channel,
    EnvelopeType,
    EventEnvelope,
    InnerEvent,
    ListenerStopped,
    LookupResult,
    LookupStatus,
    ResolutionKind,
    User,
)
from .resolution_cache import RecordStore, ResolutionCache
from .router import Router

__all__ = [
    "Config",
    "ListenAddress",
    "load_config",
    "parse_listen_url",
    "SlackWidgetError",
    "ConfigError",
    "AuthenticationError",
    "SlackError",
    "RecordNotFound",
    "WebhookError",
    "InvalidSignatureError",
    "InvalidPayloadError",
    "EventChannelClosed",
    "HandoffTimeout",
    "EventChannel",
    "parse_event",
    "Channel",
    "EnvelopeType",
    "EventEnvelope",
    "InnerEvent",
    "ListenerStopped",
    "LookupResult",
    "LookupStatus",
    "ResolutionKind",
    "User",
    "RecordStore",
    "ResolutionCache",
    "Router",
]
