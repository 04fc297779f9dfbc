"""HTTP endpoint that receives Slack Events API webhooks."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

import aiohttp
from aiohttp import web
from slack_sdk.signature import SignatureVerifier

from ..core.config import DEFAULT_SHUTDOWN_TIMEOUT, ListenAddress
from ..core.errors import EventChannelClosed, HandoffTimeout, InvalidPayloadError, InvalidSignatureError
from ..core.event_channel import EventChannel
from ..core.events import parse_event
from ..core.models import EnvelopeType, ListenerStopped

LOGGER = logging.getLogger(__name__)


class WebhookListener:
    """Serves one POST route and forwards callback events to an EventChannel.

    The server runs in a background task. If it cannot bind, the channel is
    closed with a non-graceful ``ListenerStopped`` carrying the error; an
    explicit ``stop()`` closes it gracefully.
    """

    def __init__(
        self,
        address: ListenAddress,
        events: EventChannel,
        *,
        verifier: Optional[SignatureVerifier] = None,
        handoff_timeout: Optional[float] = None,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
    ) -> None:
        self._address = address
        self._events = events
        self._verifier = verifier
        self._handoff_timeout = handoff_timeout
        self._shutdown_timeout = shutdown_timeout
        self._stop_event = asyncio.Event()
        self._ready = asyncio.Event()
        self._serving = False
        self._task: Optional[asyncio.Task] = None
        self.bound_addresses: List[object] = []
        self.app = web.Application()
        self.app.router.add_post(address.path, self.handle_request)

    @property
    def is_serving(self) -> bool:
        return self._serving

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self.serve(), name="slack-webhook-listener")
        return self._task

    async def wait_ready(self) -> bool:
        """Wait until the socket is bound (True) or binding failed (False)."""
        await self._ready.wait()
        return self._serving

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task is not None:
            await self._task

    async def serve(self) -> None:
        runner = web.AppRunner(self.app, shutdown_timeout=self._shutdown_timeout)
        try:
            await runner.setup()
            site = web.TCPSite(runner, self._address.bind_host, self._address.port)
            await site.start()
        except Exception as exc:
            LOGGER.error("Webhook listener failed to start on %s: %s", self._address.url, exc)
            await runner.cleanup()
            self._ready.set()
            self._events.close(ListenerStopped(reason=f"listener failed: {exc}", graceful=False, error=exc))
            return

        self._serving = True
        self.bound_addresses = list(runner.addresses)
        self._ready.set()
        LOGGER.info("Listening for Slack events on %s", self._address.url)

        termination = ListenerStopped(reason="listener stopped", graceful=True)
        try:
            await self._stop_event.wait()
        except asyncio.CancelledError:
            termination = ListenerStopped(reason="listener cancelled", graceful=False)
            raise
        finally:
            self._serving = False
            await runner.cleanup()
            self._events.close(termination)
            LOGGER.info("Webhook listener on %s shut down", self._address.url)

    async def handle_request(self, request: web.Request) -> web.StreamResponse:
        try:
            raw_body = await request.read()
        except (aiohttp.ClientPayloadError, ConnectionError) as exc:
            LOGGER.warning("Failed to read Slack webhook body: %s", exc)
            return web.Response(status=400, text="Bad Request")

        try:
            envelope = parse_event(raw_body, request.headers, self._verifier)
        except InvalidSignatureError as exc:
            LOGGER.warning("Rejected Slack webhook with invalid signature: %s", exc)
            return web.Response(status=401, text="Unauthorized")
        except InvalidPayloadError as exc:
            LOGGER.warning("Rejected malformed Slack webhook: %s", exc)
            return web.Response(status=400, text="Bad Request")

        if envelope.type is EnvelopeType.URL_VERIFICATION:
            if envelope.challenge is None:
                LOGGER.warning("url_verification request without a challenge")
                return web.Response(status=400, text="Bad Request")
            LOGGER.info("Answered Slack url_verification challenge")
            return web.json_response({"challenge": envelope.challenge})

        if envelope.type is not EnvelopeType.CALLBACK_EVENT:
            LOGGER.warning("Unexpected Slack envelope type %s", envelope.raw_type)
            return web.Response(status=200)

        retry_num = request.headers.get("X-Slack-Retry-Num")
        if retry_num:
            LOGGER.debug(
                "Slack redelivery %s of event %s (%s)",
                retry_num,
                envelope.event_id,
                request.headers.get("X-Slack-Retry-Reason"),
            )

        try:
            await self._events.send(envelope.inner_event, timeout=self._handoff_timeout)
        except HandoffTimeout as exc:
            LOGGER.warning("Dropped Slack event %s: %s", envelope.event_id, exc)
            return web.Response(status=503, text="Service Unavailable")
        except EventChannelClosed:
            LOGGER.warning("Dropped Slack event %s: event channel closed", envelope.event_id)
            return web.Response(status=503, text="Service Unavailable")
        return web.Response(status=200)
