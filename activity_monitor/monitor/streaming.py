"""Streaming layer: per-connection backfill, live forwarding and keep-alive."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager, suppress

from activity_monitor.infra.observability.logger import get_logger
from activity_monitor.monitor.event_bus import EventBus
from activity_monitor.monitor.transport import TransportClosed

logger = get_logger(__name__)

KEEPALIVE_FRAME = ": keepalive\n\n"

_KEEPALIVE = object()
_CLOSED = object()

# Live slots left over once a full backfill and the connected marker are queued.
LIVE_HEADROOM = 64


def format_data_frame(payload: str) -> str:
    return f"data: {payload}\n\n"


class QueueTransport:
    """Bounded per-connection queue fed from any thread, drained on its event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, max_pending: int = 1000) -> None:
        self._loop = loop
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=max(1, max_pending))
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def deliver(self, payload: str) -> None:
        self._schedule(payload)

    def ping(self) -> None:
        self._schedule(_KEEPALIVE)

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        # Wake a reader parked on an empty queue; a closed loop has no reader left.
        with suppress(RuntimeError):
            self._loop.call_soon_threadsafe(self._put_closed)

    async def receive(self) -> object:
        if self._closed.is_set():
            return _CLOSED
        item = await self._queue.get()
        if self._closed.is_set():
            return _CLOSED
        return item

    def _schedule(self, item: object) -> None:
        if self._closed.is_set():
            raise TransportClosed("transport already closed")
        try:
            self._loop.call_soon_threadsafe(self._put, item)
        except RuntimeError as exc:
            self._closed.set()
            raise TransportClosed("event loop is closed") from exc

    def _put(self, item: object) -> None:
        if self._closed.is_set():
            return
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            logger.warning("Stream queue overflow (%s pending); closing connection", self._queue.qsize())
            self._closed.set()

    def _put_closed(self) -> None:
        with suppress(asyncio.QueueFull):
            self._queue.put_nowait(_CLOSED)


class StreamConnection:
    """An attached observer connection, readable as SSE text frames."""

    def __init__(
        self,
        subscriber_id: int,
        transport: QueueTransport,
        keepalive: asyncio.Task[None],
    ) -> None:
        self.subscriber_id = subscriber_id
        self.transport = transport
        self.keepalive = keepalive

    async def frames(
        self,
        is_disconnected: Callable[[], Awaitable[bool]] | None = None,
    ) -> AsyncIterator[str]:
        """Yield frames until the transport closes or the client goes away."""
        while True:
            item = await self.transport.receive()
            if item is _CLOSED:
                return
            if item is _KEEPALIVE:
                if is_disconnected is not None and await is_disconnected():
                    return
                yield KEEPALIVE_FRAME
                continue
            yield format_data_frame(item)  # type: ignore[arg-type]


async def _keepalive(transport: QueueTransport, interval: float) -> None:
    while not transport.closed:
        await asyncio.sleep(interval)
        try:
            transport.ping()
        except TransportClosed:
            return


class StreamingEndpoint:
    """Accept observer connections onto the event bus.

    Each connection is a scoped resource: leaving ``connect`` for any reason
    (client gone, write failure, shutdown, cancellation) stops its keep-alive
    task and deregisters it.
    """

    def __init__(
        self,
        bus: EventBus,
        *,
        keepalive_seconds: float = 15.0,
        queue_size: int = 1000,
    ) -> None:
        self._bus = bus
        self._keepalive_seconds = keepalive_seconds
        minimum = bus.replay_buffer.capacity + 1 + LIVE_HEADROOM
        if queue_size < minimum:
            logger.warning(
                "Stream queue size %s cannot hold a %s-event backfill; using %s",
                queue_size,
                bus.replay_buffer.capacity,
                minimum,
            )
        self._queue_size = max(queue_size, minimum)

    @property
    def queue_size(self) -> int:
        return self._queue_size

    @property
    def active_connections(self) -> int:
        return len(self._bus.registry)

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[StreamConnection]:
        loop = asyncio.get_running_loop()
        transport = QueueTransport(loop, max_pending=self._queue_size)
        subscriber_id = self._bus.attach(transport)
        keepalive = loop.create_task(_keepalive(transport, self._keepalive_seconds))
        try:
            yield StreamConnection(subscriber_id, transport, keepalive)
        finally:
            keepalive.cancel()
            self._bus.detach(subscriber_id)
            transport.close()
