"""Event bus: buffer published activity and fan it out to attached observers."""

from __future__ import annotations

from threading import Lock

from activity_monitor.infra.observability.logger import get_logger
from activity_monitor.monitor.events.event_types import CONNECTED_PAYLOAD, MonitorEvent
from activity_monitor.monitor.events.replay_buffer import ReplayBuffer
from activity_monitor.monitor.subscribers import SubscriberRegistry
from activity_monitor.monitor.transport import Transport

logger = get_logger(__name__)


class EventBus:
    """Process-wide broadcaster owned by the monitor container.

    ``publish`` and ``attach`` share one lock, so a new subscriber gets
    either an event in its backfill or as a live delivery, never both and
    never neither.
    """

    def __init__(self, replay_buffer: ReplayBuffer, registry: SubscriberRegistry) -> None:
        self._buffer = replay_buffer
        self._registry = registry
        self._lock = Lock()

    @property
    def replay_buffer(self) -> ReplayBuffer:
        return self._buffer

    @property
    def registry(self) -> SubscriberRegistry:
        return self._registry

    def publish(self, group: str, event_type: str, subtype: str, summary: str) -> None:
        """Record one activity event; never raises and never blocks on observers."""
        try:
            payload = MonitorEvent(
                group=group,
                type=event_type,
                subtype=subtype,
                summary=summary,
            ).to_wire()
        except Exception:
            logger.exception("Dropping unserializable event group=%r subtype=%r", group, subtype)
            return
        self.publish_payload(payload)

    def publish_payload(self, payload: str) -> None:
        """Buffer and fan out an already serialized event."""
        with self._lock:
            self._buffer.append(payload)
            if len(self._registry) == 0:
                return
            failed = self._registry.for_each(lambda transport: transport.deliver(payload))
        for subscriber_id in failed:
            self.detach(subscriber_id)

    def attach(self, transport: Transport) -> int:
        """Register a transport and queue its backfill followed by the connected marker.

        Raises ``TransportClosed`` if the transport refuses the backfill; the
        subscriber is deregistered before the error propagates.
        """
        with self._lock:
            subscriber_id = self._registry.add(transport)
            backlog = self._buffer.snapshot()
            try:
                for payload in backlog:
                    transport.deliver(payload)
                transport.deliver(CONNECTED_PAYLOAD)
            except Exception:
                self._registry.remove(subscriber_id)
                raise
        logger.debug("Subscriber %s attached with %s buffered events", subscriber_id, len(backlog))
        return subscriber_id

    def detach(self, subscriber_id: int) -> bool:
        """Deregister and close one subscriber; returns False if it was already gone."""
        subscriber = self._registry.remove(subscriber_id)
        if subscriber is None:
            return False
        subscriber.transport.close()
        logger.debug("Subscriber %s detached", subscriber_id)
        return True

    def close_all(self) -> int:
        """Close every attached transport and empty the registry."""
        subscribers = self._registry.clear()
        for subscriber in subscribers:
            subscriber.transport.close()
        return len(subscribers)
