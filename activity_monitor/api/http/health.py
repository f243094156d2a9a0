"""HTTP API layer: health endpoint with stream and buffer occupancy."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from activity_monitor.api.deps import get_container
from activity_monitor.core.container import MonitorContainer

router = APIRouter(tags=["health"])


@router.get("/health")
def health(container: MonitorContainer = Depends(get_container)) -> dict:
    return {
        "status": "ok",
        "env": container.settings.env,
        "subscribers": container.endpoint.active_connections,
        "buffered": len(container.replay_buffer),
        "capacity": container.replay_buffer.capacity,
    }
