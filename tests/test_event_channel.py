"""Tests for the unbuffered event channel."""

from __future__ import annotations

import asyncio
import time

import pytest

from slack_widget.core.errors import EventChannelClosed, HandoffTimeout
from slack_widget.core.event_channel import EventChannel
from slack_widget.core.models import InnerEvent, ListenerStopped


def _message(text: str) -> InnerEvent:
    return InnerEvent(type="message", data={"type": "message", "text": text, "channel": "C1"})


@pytest.mark.asyncio
async def test_send_blocks_until_received():
    channel = EventChannel()
    event = _message("hi")

    sender = asyncio.create_task(channel.send(event))
    await asyncio.sleep(0.05)
    assert not sender.done()

    received = await asyncio.wait_for(channel.receive(), timeout=1)
    await asyncio.wait_for(sender, timeout=1)

    assert received == event


@pytest.mark.asyncio
async def test_receive_waits_for_sender():
    channel = EventChannel()

    receiver = asyncio.create_task(channel.receive())
    await asyncio.sleep(0.05)
    assert not receiver.done()

    await asyncio.wait_for(channel.send(_message("late")), timeout=1)
    received = await asyncio.wait_for(receiver, timeout=1)

    assert received.text == "late"


@pytest.mark.asyncio
async def test_events_arrive_in_send_order_without_loss():
    channel = EventChannel()
    senders = []
    for index in range(5):
        senders.append(asyncio.create_task(channel.send(_message(str(index)))))
        await asyncio.sleep(0)

    received = [await asyncio.wait_for(channel.receive(), timeout=1) for _ in range(5)]
    await asyncio.wait_for(asyncio.gather(*senders), timeout=1)

    assert [event.text for event in received] == ["0", "1", "2", "3", "4"]
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(channel.receive(), timeout=0.05)


@pytest.mark.asyncio
async def test_send_timeout_withdraws_event():
    channel = EventChannel()

    with pytest.raises(HandoffTimeout):
        await channel.send(_message("dropped"), timeout=0.05)

    follow_up = asyncio.create_task(channel.send(_message("kept")))
    received = await asyncio.wait_for(channel.receive(), timeout=1)
    await asyncio.wait_for(follow_up, timeout=1)

    assert received.text == "kept"


@pytest.mark.asyncio
async def test_close_releases_blocked_sender():
    channel = EventChannel()
    sender = asyncio.create_task(channel.send(_message("stuck")))
    await asyncio.sleep(0.05)

    channel.close(ListenerStopped(reason="listener stopped", graceful=True))

    with pytest.raises(EventChannelClosed):
        await asyncio.wait_for(sender, timeout=1)


@pytest.mark.asyncio
async def test_send_after_close_raises():
    channel = EventChannel()
    channel.close(ListenerStopped(reason="listener stopped", graceful=True))

    with pytest.raises(EventChannelClosed):
        await channel.send(_message("too late"))


@pytest.mark.asyncio
async def test_close_ends_iteration_and_keeps_first_termination():
    channel = EventChannel()
    failure = OSError("address in use")
    first = ListenerStopped(reason="listener failed", graceful=False, error=failure)

    async def _consume():
        return [event async for event in channel]

    consumer = asyncio.create_task(_consume())
    await channel.send(_message("one"))
    channel.close(first)
    channel.close(ListenerStopped(reason="listener stopped", graceful=True))

    assert [event.text for event in await asyncio.wait_for(consumer, timeout=1)] == ["one"]
    assert channel.closed
    assert channel.termination is first
    assert channel.termination.error is failure
    assert await channel.wait_closed() is first


@pytest.mark.asyncio
async def test_receive_after_close_raises():
    channel = EventChannel()
    channel.close(ListenerStopped(reason="listener stopped", graceful=True))

    with pytest.raises(EventChannelClosed):
        await channel.receive()


@pytest.mark.asyncio
@pytest.mark.parametrize("take_delay", [0.03, 0.07])
async def test_send_succeeds_exactly_when_event_taken_at_deadline(take_delay):
    channel = EventChannel()
    loop = asyncio.get_running_loop()
    delivered: list[InnerEvent] = []

    def _take_synchronously():
        step = channel.receive()
        try:
            step.send(None)
        except StopIteration as done:
            delivered.append(done.value)
        else:
            step.close()

    sender = asyncio.create_task(channel.send(_message("raced"), timeout=0.05))
    while not channel._offered:
        await asyncio.sleep(0)
    loop.call_later(take_delay, _take_synchronously)
    # Block the loop so the send deadline and the take both run in one pass.
    time.sleep(0.1)

    outcome = (await asyncio.wait_for(asyncio.gather(sender, return_exceptions=True), timeout=1))[0]

    if delivered:
        assert [event.text for event in delivered] == ["raced"]
        assert outcome is None
    else:
        assert isinstance(outcome, HandoffTimeout)
