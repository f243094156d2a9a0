"""Composition layer: build and hold the monitor's long-lived objects for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass

from activity_monitor.core.config import Settings
from activity_monitor.monitor.event_bus import EventBus
from activity_monitor.monitor.events.replay_buffer import ReplayBuffer
from activity_monitor.monitor.streaming import StreamingEndpoint
from activity_monitor.monitor.subscribers import SubscriberRegistry


@dataclass
class MonitorContainer:
    """Container object attached to FastAPI app state."""

    settings: Settings
    replay_buffer: ReplayBuffer
    registry: SubscriberRegistry
    bus: EventBus
    endpoint: StreamingEndpoint


def build_container(settings: Settings) -> MonitorContainer:
    """Construct runtime dependencies in one place."""
    replay_buffer = ReplayBuffer(capacity=settings.replay_buffer_size)
    registry = SubscriberRegistry()
    bus = EventBus(replay_buffer, registry)
    endpoint = StreamingEndpoint(
        bus,
        keepalive_seconds=settings.sse_keepalive_seconds,
        queue_size=settings.subscriber_queue_size,
    )
    return MonitorContainer(
        settings=settings,
        replay_buffer=replay_buffer,
        registry=registry,
        bus=bus,
        endpoint=endpoint,
    )
