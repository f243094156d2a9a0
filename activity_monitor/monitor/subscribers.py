"""Subscriber layer: registry of attached observer connections."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from activity_monitor.infra.observability.logger import get_logger
from activity_monitor.monitor.transport import Transport, TransportClosed

logger = get_logger(__name__)


@dataclass(frozen=True)
class Subscriber:
    """One attached observer connection."""

    id: int
    transport: Transport


class SubscriberRegistry:
    """Thread-safe set of subscribers keyed by a strictly increasing id."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._next_id = 0
        self._subscribers: dict[int, Subscriber] = {}

    def add(self, transport: Transport) -> int:
        with self._lock:
            subscriber_id = self._next_id
            self._next_id += 1
            self._subscribers[subscriber_id] = Subscriber(id=subscriber_id, transport=transport)
            return subscriber_id

    def remove(self, subscriber_id: int) -> Subscriber | None:
        """Deregister one subscriber; unknown or already removed ids are ignored."""
        with self._lock:
            return self._subscribers.pop(subscriber_id, None)

    def clear(self) -> list[Subscriber]:
        """Drop every subscriber and return what was registered."""
        with self._lock:
            removed = list(self._subscribers.values())
            self._subscribers.clear()
            return removed

    def for_each(self, fn: Callable[[Transport], None]) -> list[int]:
        """Apply fn to every registered transport in registration order.

        Iterates a snapshot taken under the lock, so a subscriber removed
        mid-iteration may still see this call. Returns the ids whose
        transport failed; the caller decides what to do with them.
        """
        with self._lock:
            members = list(self._subscribers.values())
        failed: list[int] = []
        for subscriber in members:
            try:
                fn(subscriber.transport)
            except TransportClosed as exc:
                logger.warning("Subscriber %s transport closed: %s", subscriber.id, exc)
                failed.append(subscriber.id)
            except Exception:
                logger.exception("Delivery to subscriber %s failed", subscriber.id)
                failed.append(subscriber.id)
        return failed

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)
