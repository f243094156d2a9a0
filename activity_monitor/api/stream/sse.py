"""Stream API layer: live activity SSE endpoint with backfill and heartbeat."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from activity_monitor.api.deps import get_container
from activity_monitor.core.container import MonitorContainer
from activity_monitor.infra.observability.logger import get_logger
from activity_monitor.monitor.transport import TransportClosed

logger = get_logger(__name__)

router = APIRouter(tags=["stream"])


@router.get("/events")
async def events(
    request: Request,
    container: MonitorContainer = Depends(get_container),
) -> StreamingResponse:
    async def iterator() -> AsyncIterator[str]:
        try:
            async with container.endpoint.connect() as connection:
                async for frame in connection.frames(request.is_disconnected):
                    yield frame
        except TransportClosed:
            logger.warning("Stream closed before backfill completed")

    return StreamingResponse(
        iterator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
