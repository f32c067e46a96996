"""Point claims and award history endpoints."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from ...core import HISTORY_DEFAULT_LIMIT, HISTORY_MAX_LIMIT, LeaderboardError
from ...services import (
    ClaimProcessor,
    LedgerStore,
    UpdateBroadcaster,
    award_to_dict,
)
from ..deps import get_broadcaster, get_claim_processor, get_store, http_error

router = APIRouter(prefix="/api", tags=["points"])


def _parse_user_id(raw: Any) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise HTTPException(400, "User ID is required")
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdigit():
        return int(raw.strip())
    raise HTTPException(400, "User ID must be an integer")


@router.post("/claim-points")
def claim_points(
    body: Dict[str, Any],
    background_tasks: BackgroundTasks,
    processor: ClaimProcessor = Depends(get_claim_processor),
    broadcaster: UpdateBroadcaster = Depends(get_broadcaster),
) -> Dict[str, Any]:
    """Award 1-10 random points to a user."""

    user_id = _parse_user_id(body.get("userId"))
    try:
        result = processor.claim_points(user_id)
    except LeaderboardError as exc:
        raise http_error(exc) from exc

    background_tasks.add_task(broadcaster.publish, result.snapshot)
    return {
        "user": result.user_payload,
        "pointsAwarded": result.points_awarded,
        "newTotalPoints": result.new_total_points,
    }


@router.get("/points-history")
def recent_history(
    limit: int = Query(HISTORY_DEFAULT_LIMIT, ge=1, le=HISTORY_MAX_LIMIT),
    store: LedgerStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    """Most recent awards across all users, newest first."""

    try:
        awards = store.list_recent_awards(limit)
    except LeaderboardError as exc:
        raise http_error(exc) from exc
    return [award_to_dict(award) for award in awards]


@router.get("/points-history/{user_id}")
def user_history(
    user_id: int, store: LedgerStore = Depends(get_store)
) -> List[Dict[str, Any]]:
    """Every award of one user, newest first."""

    try:
        awards = store.list_awards_for_user(user_id)
    except LeaderboardError as exc:
        raise http_error(exc) from exc
    return [award_to_dict(award) for award in awards]


__all__ = ["router"]
