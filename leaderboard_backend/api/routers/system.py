"""System-level API endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ...core import HISTORY_DEFAULT_LIMIT, HISTORY_MAX_LIMIT
from .realtime import WS_PATH

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> Dict[str, bool]:
    """Simple readiness probe."""

    return {"ok": True}


@router.get("/healthz")
def healthz() -> JSONResponse:
    """Kubernetes-style readiness endpoint."""

    return JSONResponse({"ok": True})


@router.get("/config")
def get_config(request: Request) -> Dict[str, Any]:
    """Expose frontend configuration values."""

    return {
        "history_default_limit": HISTORY_DEFAULT_LIMIT,
        "history_max_limit": HISTORY_MAX_LIMIT,
        "ws_path": WS_PATH,
        "subscribers": len(request.app.state.broadcaster),
    }


__all__ = ["router"]
