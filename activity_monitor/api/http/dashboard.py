"""HTTP API layer: static dashboard page served for every non-stream path."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["dashboard"])

_DASHBOARD_PATH = Path(__file__).resolve().parent / "static" / "dashboard.html"


@lru_cache(maxsize=1)
def load_dashboard() -> str:
    return _DASHBOARD_PATH.read_text(encoding="utf-8")


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
@router.get("/{path:path}", response_class=HTMLResponse, include_in_schema=False)
def dashboard(path: str = "") -> HTMLResponse:
    return HTMLResponse(load_dashboard())
