"""Lifecycle hooks for startup diagnostics and stream teardown."""

from __future__ import annotations

from activity_monitor.core.container import MonitorContainer
from activity_monitor.infra.observability.logger import get_logger

logger = get_logger(__name__)


def on_startup(container: MonitorContainer) -> None:
    logger.info(
        "Monitor event bus ready: buffer capacity=%s, buffered=%s",
        container.replay_buffer.capacity,
        len(container.replay_buffer),
    )


def on_shutdown(container: MonitorContainer) -> None:
    closed = container.bus.close_all()
    logger.info("Monitor shutdown complete; closed %s stream(s).", closed)
