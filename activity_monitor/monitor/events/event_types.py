"""Event layer: activity events reported by agent workers and their wire form."""

from __future__ import annotations

import json
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


CONNECTED_PAYLOAD = json.dumps({"type": "connected"}, separators=(",", ":"))


def wall_clock_time() -> str:
    """Local 24h clock time shown in the dashboard's time column."""
    return datetime.now().strftime("%H:%M:%S")


class MonitorEvent(BaseModel):
    """One unit of reported activity; serialized once, then buffered and fanned out as text."""

    model_config = ConfigDict(frozen=True)

    time: str = Field(default_factory=wall_clock_time)
    group: str = ""
    type: str
    subtype: str
    summary: str = ""

    def to_wire(self) -> str:
        # Field order is the dashboard contract: time, group, type, subtype, summary.
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False, separators=(",", ":"))
