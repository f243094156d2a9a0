"""Process entry: run the activity monitor until SIGINT/SIGTERM."""

from __future__ import annotations

import signal
import threading

from activity_monitor.core.config import Settings
from activity_monitor.core.server import MonitorLifecycle
from activity_monitor.infra.observability.logger import setup_logging


def main() -> None:
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    lifecycle = MonitorLifecycle(settings)
    stop_requested = threading.Event()

    def _request_stop(signum, frame) -> None:
        stop_requested.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    lifecycle.start()
    try:
        stop_requested.wait()
    finally:
        lifecycle.stop()


if __name__ == "__main__":
    main()
