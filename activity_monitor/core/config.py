"""Configuration layer: load monitor settings from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Immutable settings shared by the event bus, stream endpoint and server."""

    app_name: str = "Activity Monitor"
    app_version: str = "0.1.0"
    env: str = "dev"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3002
    cors_allow_origins: str = "*"
    replay_buffer_size: int = 500
    sse_keepalive_seconds: float = 15.0
    subscriber_queue_size: int = 1000
    shutdown_timeout_seconds: float = 5.0
    monitor_enabled: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from process env with deterministic defaults."""
        return cls(
            app_name=os.getenv("APP_NAME", cls.app_name),
            app_version=os.getenv("APP_VERSION", cls.app_version),
            env=os.getenv("APP_ENV", cls.env),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            host=os.getenv("MONITOR_HOST", cls.host),
            port=int(os.getenv("MONITOR_PORT", str(cls.port))),
            cors_allow_origins=os.getenv("CORS_ALLOW_ORIGINS", cls.cors_allow_origins),
            replay_buffer_size=int(
                os.getenv("MONITOR_BUFFER_SIZE", str(cls.replay_buffer_size))
            ),
            sse_keepalive_seconds=float(
                os.getenv("MONITOR_KEEPALIVE_SECONDS", str(cls.sse_keepalive_seconds))
            ),
            subscriber_queue_size=int(
                os.getenv("MONITOR_SUBSCRIBER_QUEUE_SIZE", str(cls.subscriber_queue_size))
            ),
            shutdown_timeout_seconds=float(
                os.getenv(
                    "MONITOR_SHUTDOWN_TIMEOUT_SECONDS",
                    str(cls.shutdown_timeout_seconds),
                )
            ),
            monitor_enabled=_env_bool("MONITOR_ENABLED", cls.monitor_enabled),
        )
