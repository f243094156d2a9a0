"""Transport contract between the event bus and one observer connection."""

from __future__ import annotations

from typing import Protocol


class TransportClosed(Exception):
    """Raised when a transport can no longer accept data."""


class Transport(Protocol):
    """Write side of one observer connection.

    ``deliver`` must not block on the observer; it either queues the payload
    or raises ``TransportClosed``.
    """

    @property
    def closed(self) -> bool: ...

    def deliver(self, payload: str) -> None: ...

    def close(self) -> None: ...
