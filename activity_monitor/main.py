"""FastAPI entrypoint: wires config, container, routes, and lifecycle hooks."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from activity_monitor.api.http.dashboard import router as dashboard_router
from activity_monitor.api.http.health import router as health_router
from activity_monitor.api.stream.sse import router as sse_router
from activity_monitor.core.config import Settings
from activity_monitor.core.container import MonitorContainer, build_container
from activity_monitor.core.lifecycle import on_shutdown, on_startup
from activity_monitor.infra.observability.logger import setup_logging


def create_app(container: MonitorContainer | None = None) -> FastAPI:
    if container is None:
        settings = Settings.from_env()
        setup_logging(settings.log_level)
        container = build_container(settings)
    settings = container.settings

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        on_startup(container)
        try:
            yield
        finally:
            on_shutdown(container)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(sse_router)
    # Catch-all; must stay last.
    app.include_router(dashboard_router)

    return app
