"""Process lifecycle: own the monitor container and its listening server."""

from __future__ import annotations

import socket
import threading
import time

import uvicorn

from activity_monitor.core.config import Settings
from activity_monitor.core.container import MonitorContainer, build_container
from activity_monitor.infra.observability.logger import get_logger
from activity_monitor.main import create_app

logger = get_logger(__name__)


class MonitorStartError(RuntimeError):
    """Raised when the server thread exits before it starts serving."""


def _bind_socket(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    return sock


class MonitorLifecycle:
    """Start and stop the monitor server; producers call ``emit`` at any time.

    The container is built here so ``emit`` can be handed to producers
    before ``start``; anything emitted early sits in the replay buffer.
    """

    def __init__(self, settings: Settings | None = None, *, startup_timeout: float = 10.0) -> None:
        self.settings = settings or Settings.from_env()
        self.container: MonitorContainer = build_container(self.settings)
        self._startup_timeout = startup_timeout
        self._lock = threading.Lock()
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._socket: socket.socket | None = None
        self.port: int | None = None

    @property
    def running(self) -> bool:
        return self._server is not None

    def emit(self, group: str, event_type: str, subtype: str, summary: str) -> None:
        """Producer interface: fire-and-forget, never raises."""
        self.container.bus.publish(group, event_type, subtype, summary)

    def start(self, port: int | None = None) -> None:
        """Bind the listener and serve in a background thread.

        Bind failures propagate as ``OSError``.
        """
        if not self.settings.monitor_enabled:
            logger.info("Monitor disabled; events are buffered but not served.")
            return
        with self._lock:
            if self._server is not None:
                return
            sock = _bind_socket(self.settings.host, self.settings.port if port is None else port)
            config = uvicorn.Config(
                create_app(self.container),
                log_config=None,
                log_level=self.settings.log_level.lower(),
                lifespan="on",
                timeout_graceful_shutdown=max(1, int(self.settings.shutdown_timeout_seconds)),
            )
            server = uvicorn.Server(config)
            thread = threading.Thread(
                target=server.run,
                kwargs={"sockets": [sock]},
                name="monitor-server",
                daemon=True,
            )
            thread.start()
            deadline = time.monotonic() + self._startup_timeout
            while not server.started:
                if not thread.is_alive() or time.monotonic() > deadline:
                    server.should_exit = True
                    thread.join(timeout=self.settings.shutdown_timeout_seconds)
                    sock.close()
                    raise MonitorStartError("monitor server did not start")
                time.sleep(0.01)
            self._server = server
            self._thread = thread
            self._socket = sock
            self.port = sock.getsockname()[1]
        logger.info("Monitor UI available at http://localhost:%s", self.port)

    def stop(self) -> None:
        """Close every stream, release the listener; no-op when not running."""
        with self._lock:
            server, thread, sock = self._server, self._thread, self._socket
            if server is None:
                return
            self._server = None
            self._thread = None
            self._socket = None
        closed = self.container.bus.close_all()
        server.should_exit = True
        if thread is not None:
            thread.join(timeout=self.settings.shutdown_timeout_seconds + 1)
            if thread.is_alive():
                logger.warning("Monitor server thread did not exit within timeout")
        if sock is not None:
            sock.close()
        logger.info("Monitor stopped; closed %s stream(s).", closed)
