"""Unit tests for per-connection backfill, live forwarding, keep-alive and detach."""

from __future__ import annotations

import asyncio
import json

from activity_monitor.core.config import Settings
from activity_monitor.core.container import build_container
from activity_monitor.monitor.streaming import KEEPALIVE_FRAME, StreamingEndpoint


async def _next_data(frames) -> dict:
    while True:
        frame = await asyncio.wait_for(anext(frames), timeout=2.0)
        if frame == KEEPALIVE_FRAME:
            continue
        assert frame.startswith("data: ") and frame.endswith("\n\n")
        return json.loads(frame[len("data: "):])


def test_stream_sends_backfill_connected_then_live(container) -> None:
    for summary in ("A", "B", "C", "D"):
        container.bus.publish("main", "agent", "text", summary)

    async def scenario() -> list[dict]:
        received = []
        async with container.endpoint.connect() as connection:
            assert len(container.registry) == 1
            frames = connection.frames()
            for _ in range(4):
                received.append(await _next_data(frames))
            await asyncio.to_thread(container.bus.publish, "main", "agent", "text", "E")
            received.append(await _next_data(frames))
            await frames.aclose()
        return received

    received = asyncio.run(scenario())

    assert [item.get("summary") for item in received[:3]] == ["B", "C", "D"]
    assert received[3] == {"type": "connected"}
    assert received[4]["summary"] == "E"
    assert len(container.registry) == 0


def test_stream_emits_keepalive_frames(container) -> None:
    endpoint = StreamingEndpoint(container.bus, keepalive_seconds=0.01)

    async def scenario() -> list[str]:
        async with endpoint.connect() as connection:
            frames = connection.frames()
            return [await asyncio.wait_for(anext(frames), timeout=2.0) for _ in range(3)]

    frames = asyncio.run(scenario())

    assert json.loads(frames[0][len("data: "):]) == {"type": "connected"}
    assert frames[1:] == [KEEPALIVE_FRAME, KEEPALIVE_FRAME]


def test_stream_ends_when_bus_closes_all(container) -> None:
    async def scenario():
        async with container.endpoint.connect() as connection:
            frames = connection.frames()
            await _next_data(frames)
            await asyncio.to_thread(container.bus.close_all)
            rest = []

            async def drain() -> None:
                async for frame in frames:
                    rest.append(frame)

            await asyncio.wait_for(drain(), timeout=2.0)
        await asyncio.wait([connection.keepalive], timeout=1.0)
        return rest, connection.keepalive.done()

    rest, keepalive_done = asyncio.run(scenario())

    assert all(frame == KEEPALIVE_FRAME for frame in rest)
    assert keepalive_done
    assert len(container.registry) == 0


def test_leaving_connect_cancels_keepalive(container) -> None:
    async def scenario() -> bool:
        async with container.endpoint.connect() as connection:
            assert not connection.keepalive.done()
        await asyncio.wait([connection.keepalive], timeout=1.0)
        return connection.keepalive.done()

    assert asyncio.run(scenario())
    assert len(container.registry) == 0


def test_stream_stops_on_client_disconnect(container) -> None:
    async def gone() -> bool:
        return True

    async def scenario() -> list[str]:
        async with container.endpoint.connect() as connection:
            collected = []

            async def drain() -> None:
                async for frame in connection.frames(gone):
                    collected.append(frame)

            await asyncio.wait_for(drain(), timeout=2.0)
            return collected

    collected = asyncio.run(scenario())

    assert collected == ['data: {"type":"connected"}\n\n']
    assert len(container.registry) == 0


def test_full_backfill_fits_a_small_configured_queue() -> None:
    container = build_container(Settings(replay_buffer_size=10, subscriber_queue_size=5))
    for index in range(10):
        container.bus.publish("main", "agent", "text", str(index))

    async def scenario() -> list[dict]:
        async with container.endpoint.connect() as connection:
            frames = connection.frames()
            return [await _next_data(frames) for _ in range(11)]

    received = asyncio.run(scenario())

    assert container.endpoint.queue_size > 10
    assert [item["summary"] for item in received[:10]] == [str(index) for index in range(10)]
    assert received[10] == {"type": "connected"}


def test_slow_consumer_overflow_detaches_without_blocking_publish(container) -> None:
    endpoint = StreamingEndpoint(container.bus, keepalive_seconds=60, queue_size=1)

    async def scenario() -> list[str]:
        async with endpoint.connect() as connection:
            # Nothing is read until the queue has overflowed.
            for index in range(endpoint.queue_size + 5):
                container.bus.publish("main", "agent", "text", str(index))
            collected = []

            async def drain() -> None:
                async for frame in connection.frames():
                    collected.append(frame)

            await asyncio.wait_for(drain(), timeout=2.0)
            container.bus.publish("main", "agent", "text", "late")
            return collected

    collected = asyncio.run(scenario())

    assert collected == []
    assert len(container.registry) == 0
    assert len(container.replay_buffer) == 3
