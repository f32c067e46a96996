"""HTTP and WebSocket surface of the leaderboard."""

from __future__ import annotations

from fastapi import FastAPI

from .routers import ALL_ROUTERS


def register_routes(app: FastAPI) -> FastAPI:
    """Mount every leaderboard router on ``app``."""

    for router in ALL_ROUTERS:
        app.include_router(router)
    return app


__all__ = ["register_routes"]
