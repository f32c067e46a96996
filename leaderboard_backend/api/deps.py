"""Shared FastAPI dependencies for the leaderboard routers."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from ..core import LeaderboardError, get_session
from ..services import (
    ClaimProcessor,
    LedgerStore,
    PointsSource,
    RankingEngine,
    UpdateBroadcaster,
    draw_points,
)


def get_store(session: Session = Depends(get_session)) -> LedgerStore:
    return LedgerStore(session)


def get_broadcaster(request: Request) -> UpdateBroadcaster:
    return request.app.state.broadcaster


def get_points_source() -> PointsSource:
    """Award generator; tests override this to pin the amount."""

    return draw_points


def get_claim_processor(
    request: Request,
    store: LedgerStore = Depends(get_store),
    draw: PointsSource = Depends(get_points_source),
) -> ClaimProcessor:
    return ClaimProcessor(
        store,
        RankingEngine(store),
        draw=draw,
        locks=request.app.state.locks,
        sequencer=request.app.state.broadcaster.next_sequence,
    )


def http_error(exc: LeaderboardError) -> HTTPException:
    """Translate a domain error into the matching HTTP response."""

    return HTTPException(exc.status_code, exc.message)


__all__ = [
    "get_broadcaster",
    "get_claim_processor",
    "get_points_source",
    "get_store",
    "http_error",
]
