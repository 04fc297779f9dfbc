"""Unbuffered hand-off of inner events from the webhook listener to the bot."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

from .errors import EventChannelClosed, HandoffTimeout
from .models import InnerEvent, ListenerStopped

LOGGER = logging.getLogger(__name__)


@dataclass
class _Slot:
    event: InnerEvent
    taken: asyncio.Future


class EventChannel:
    """Rendezvous channel: ``send`` returns only once a consumer has the event.

    Senders take turns, so at most one event is offered at a time and events
    are received in the order their senders arrived. Closing the channel
    records a ``ListenerStopped`` and ends iteration for consumers.
    """

    def __init__(self) -> None:
        self._offered: Deque[_Slot] = deque()
        self._send_lock = asyncio.Lock()
        self._ready = asyncio.Event()
        self._termination: Optional[ListenerStopped] = None

    @property
    def closed(self) -> bool:
        return self._termination is not None

    @property
    def termination(self) -> Optional[ListenerStopped]:
        return self._termination

    async def send(self, event: InnerEvent, timeout: float | None = None) -> None:
        """Offer an event and wait until a consumer takes it.

        Raises:
            EventChannelClosed: if the channel is (or becomes) closed.
            HandoffTimeout: if nobody took the event within ``timeout``.
        """
        self._raise_if_closed()
        slot = _Slot(event=event, taken=asyncio.get_running_loop().create_future())
        try:
            await asyncio.wait_for(self._handoff(slot), timeout)
        except asyncio.TimeoutError as exc:
            # The deadline and receive() can land in the same loop pass.
            if self._was_taken(slot):
                return
            raise HandoffTimeout(f"no consumer took {event.type} event within {timeout}s") from exc

    async def _handoff(self, slot: _Slot) -> None:
        async with self._send_lock:
            self._raise_if_closed()
            self._offered.append(slot)
            self._ready.set()
            try:
                await slot.taken
            except asyncio.CancelledError:
                # Withdrawn: receive() skips slots whose future is already done.
                if not slot.taken.done():
                    slot.taken.cancel()
                raise

    async def receive(self) -> InnerEvent:
        """Take the next event, waiting for a sender if none is offered.

        Raises:
            EventChannelClosed: once the channel is closed.
        """
        while True:
            while self._offered:
                slot = self._offered.popleft()
                if slot.taken.done():
                    continue
                slot.taken.set_result(None)
                return slot.event
            if self._termination is not None:
                raise EventChannelClosed(self._termination.reason)
            self._ready.clear()
            await self._ready.wait()

    def close(self, termination: ListenerStopped) -> None:
        """Close the channel; only the first termination is kept."""
        if self._termination is not None:
            return
        self._termination = termination
        while self._offered:
            slot = self._offered.popleft()
            if not slot.taken.done():
                slot.taken.set_exception(EventChannelClosed(termination.reason))
        self._ready.set()
        LOGGER.info(
            "Event channel closed (%s, graceful=%s)",
            termination.reason,
            termination.graceful,
        )

    async def wait_closed(self) -> ListenerStopped:
        while self._termination is None:
            self._ready.clear()
            await self._ready.wait()
        return self._termination

    def __aiter__(self) -> "EventChannel":
        return self

    async def __anext__(self) -> InnerEvent:
        try:
            return await self.receive()
        except EventChannelClosed:
            raise StopAsyncIteration from None

    @staticmethod
    def _was_taken(slot: _Slot) -> bool:
        taken = slot.taken
        return taken.done() and not taken.cancelled() and taken.exception() is None

    def _raise_if_closed(self) -> None:
        if self._termination is not None:
            raise EventChannelClosed(self._termination.reason)
