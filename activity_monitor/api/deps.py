"""API layer: dependency helpers to access shared container from request state."""

from __future__ import annotations

from fastapi import Request

from activity_monitor.core.container import MonitorContainer


def get_container(request: Request) -> MonitorContainer:
    return request.app.state.container  # type: ignore[return-value]
