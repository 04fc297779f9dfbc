"""Memoized user/channel lookups keyed by Slack ID."""

from __future__ import annotations

import logging
from threading import Lock
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, Generic, Optional, TypeVar, Union

from .errors import RecordNotFound, SlackError
from .models import Channel, LookupResult, LookupStatus, ResolutionKind, User

if TYPE_CHECKING:
    from ..slack_api.base import PlatformClient

LOGGER = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")
Loader = Callable[[str], Awaitable[RecordT]]


class RecordStore(Generic[RecordT]):
    """ID -> record map with its own lock.

    The lock only guards dictionary access; loaders run outside it, so
    concurrent misses on the same ID may each call the loader. The first
    stored record wins and is what every caller gets back.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._records: Dict[str, RecordT] = {}
        self._lock = Lock()

    def get(self, record_id: str) -> Optional[RecordT]:
        with self._lock:
            return self._records.get(record_id)

    def put(self, record_id: str, record: RecordT) -> RecordT:
        with self._lock:
            return self._records.setdefault(record_id, record)

    async def get_or_load(self, record_id: str, loader: Loader) -> RecordT:
        cached = self.get(record_id)
        if cached is not None:
            return cached
        record = await loader(record_id)
        return self.put(record_id, record)

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return record_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class ResolutionCache:
    """User and channel lookups that never raise.

    Entries are never evicted or refreshed, so renamed users or channels keep
    their old names until the process restarts.
    """

    def __init__(self, client: PlatformClient) -> None:
        self._client = client
        self.users: RecordStore[User] = RecordStore("users")
        self.channels: RecordStore[Channel] = RecordStore("channels")

    async def lookup(
        self, kind: ResolutionKind, record_id: str
    ) -> LookupResult[Union[User, Channel]]:
        store, loader = self._store_for(kind)
        cached = store.get(record_id)
        if cached is not None:
            return LookupResult(status=LookupStatus.HIT, record=cached)
        try:
            record = await store.get_or_load(record_id, loader)
        except RecordNotFound as exc:
            LOGGER.warning("Slack %s %s not found", kind.value, record_id)
            return LookupResult(status=LookupStatus.NOT_FOUND, error=exc)
        except SlackError as exc:
            LOGGER.warning("Failed to resolve %s %s: %s", kind.value, record_id, exc)
            return LookupResult(status=LookupStatus.FAILED, error=exc)
        return LookupResult(status=LookupStatus.LOADED, record=record)

    async def resolve(
        self, kind: ResolutionKind, record_id: str
    ) -> Optional[Union[User, Channel]]:
        return (await self.lookup(kind, record_id)).record

    async def resolve_name(self, kind: ResolutionKind, record_id: str) -> str:
        """Display name for the ID, or the ID itself when it cannot be resolved."""
        record = await self.resolve(kind, record_id)
        if record is None or not record.name:
            return record_id
        return record.name

    def _store_for(self, kind: ResolutionKind) -> tuple[RecordStore, Loader]:
        if kind is ResolutionKind.USER:
            return self.users, self._client.get_user
        if kind is ResolutionKind.CHANNEL:
            return self.channels, self._client.get_channel
        raise ValueError(f"Unsupported resolution kind: {kind}")
