"""Observability layer: logging setup for the monitor server and its producers."""

from __future__ import annotations

import logging

_QUIET_PATHS = ("/health", "/events")


class QuietAccessFilter(logging.Filter):
    """Drop uvicorn access lines for health checks and dashboard stream reconnects."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        return not any(f'"GET {path} ' in message for path in _QUIET_PATHS)


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once; uvicorn output goes through the same handler."""
    normalized = level.upper()
    logging.basicConfig(
        level=normalized,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        force=True,
    )
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(normalized)
        logger.propagate = True
    access = logging.getLogger("uvicorn.access")
    if not any(isinstance(item, QuietAccessFilter) for item in access.filters):
        access.addFilter(QuietAccessFilter())
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
