"""Domain models for Slack Widget."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar


class ResolutionKind(str, Enum):
    USER = "user"
    CHANNEL = "channel"


@dataclass(frozen=True)
class User:
    id: str
    name: str
    real_name: Optional[str] = None
    is_bot: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "User":
        return cls(
            id=payload.get("id", ""),
            name=payload.get("name", ""),
            real_name=payload.get("real_name"),
            is_bot=bool(payload.get("is_bot", False)),
            raw=dict(payload),
        )


@dataclass(frozen=True)
class Channel:
    id: str
    name: str
    is_private: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Channel":
        return cls(
            id=payload.get("id", ""),
            name=payload.get("name", ""),
            is_private=bool(payload.get("is_private", False)),
            raw=dict(payload),
        )


class EnvelopeType(str, Enum):
    URL_VERIFICATION = "url_verification"
    CALLBACK_EVENT = "event_callback"
    APP_RATE_LIMITED = "app_rate_limited"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class InnerEvent:
    """The event payload nested inside an ``event_callback`` envelope.

    ``data`` is carried verbatim; the accessors below only read message fields.
    """

    type: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_message(self) -> bool:
        return self.type == "message"

    @property
    def user(self) -> Optional[str]:
        return self.data.get("user")

    @property
    def channel(self) -> Optional[str]:
        return self.data.get("channel")

    @property
    def text(self) -> str:
        return self.data.get("text") or ""

    @property
    def subtype(self) -> Optional[str]:
        return self.data.get("subtype")

    @property
    def bot_id(self) -> Optional[str]:
        return self.data.get("bot_id")

    @property
    def ts(self) -> Optional[str]:
        return self.data.get("ts")


@dataclass(frozen=True)
class EventEnvelope:
    type: EnvelopeType
    raw_type: str
    challenge: Optional[str] = None
    inner_event: Optional[InnerEvent] = None
    team_id: Optional[str] = None
    event_id: Optional[str] = None


@dataclass(frozen=True)
class ListenerStopped:
    """Why the event stream ended.

    ``graceful`` is True only for an explicit stop; bind or serve failures
    carry the underlying exception in ``error``.
    """

    reason: str
    graceful: bool
    error: Optional[BaseException] = None
    stopped_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class LookupStatus(str, Enum):
    HIT = "hit"
    LOADED = "loaded"
    NOT_FOUND = "not_found"
    FAILED = "failed"


RecordT = TypeVar("RecordT")


@dataclass(frozen=True)
class LookupResult(Generic[RecordT]):
    status: LookupStatus
    record: Optional[RecordT] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.record is not None
