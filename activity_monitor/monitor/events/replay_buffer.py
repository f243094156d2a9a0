"""Event layer: bounded in-memory replay buffer backfilled to new stream connections."""

from __future__ import annotations

from collections import deque
from threading import Lock


class ReplayBuffer:
    """Keep the most recent serialized events, evicting the oldest first."""

    def __init__(self, capacity: int = 500) -> None:
        if capacity < 1:
            raise ValueError(f"replay buffer capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._events: deque[str] = deque(maxlen=capacity)
        self._lock = Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, payload: str) -> None:
        """Append one serialized event; a full buffer drops its head."""
        with self._lock:
            self._events.append(payload)

    def snapshot(self) -> list[str]:
        """Return a copy of the buffered events in publish order."""
        with self._lock:
            return list(self._events)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
