"""Test fixtures shared by unit/integration tests."""

from __future__ import annotations

import json

import pytest

from activity_monitor.core.config import Settings
from activity_monitor.core.container import MonitorContainer, build_container
from activity_monitor.monitor.transport import TransportClosed


class RecordingTransport:
    """In-memory transport that records payloads and can be told to fail."""

    def __init__(self, fail_after: int | None = None) -> None:
        self.payloads: list[str] = []
        self.fail_after = fail_after
        self.close_calls = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, payload: str) -> None:
        if self._closed:
            raise TransportClosed("closed")
        if self.fail_after is not None and len(self.payloads) >= self.fail_after:
            raise TransportClosed("broken pipe")
        self.payloads.append(payload)

    def close(self) -> None:
        self._closed = True
        self.close_calls += 1

    def events(self) -> list[dict]:
        return [json.loads(payload) for payload in self.payloads]

    def summaries(self) -> list[str]:
        return [event["summary"] for event in self.events() if event.get("type") != "connected"]


@pytest.fixture
def make_transport():
    return RecordingTransport


@pytest.fixture
def settings() -> Settings:
    return Settings(
        host="127.0.0.1",
        port=0,
        replay_buffer_size=3,
        sse_keepalive_seconds=0.05,
        shutdown_timeout_seconds=2.0,
    )


@pytest.fixture
def container(settings: Settings) -> MonitorContainer:
    return build_container(settings)
