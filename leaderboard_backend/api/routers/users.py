"""User listing and registration endpoints."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from ...core import LeaderboardError
from ...services import (
    ClaimProcessor,
    LedgerStore,
    UpdateBroadcaster,
    user_to_dict,
)
from ..deps import get_broadcaster, get_claim_processor, get_store, http_error

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/users")
def list_users(store: LedgerStore = Depends(get_store)) -> List[Dict[str, Any]]:
    """All users in leaderboard order."""

    try:
        users = store.list_users()
    except LeaderboardError as exc:
        raise http_error(exc) from exc
    return [user_to_dict(user) for user in users]


@router.get("/users/{user_id}")
def get_user(user_id: int, store: LedgerStore = Depends(get_store)) -> Dict[str, Any]:
    try:
        user = store.find_user(user_id)
    except LeaderboardError as exc:
        raise http_error(exc) from exc
    if not user:
        raise HTTPException(404, "User not found")
    return user_to_dict(user)


@router.post("/users", status_code=201)
def add_user(
    body: Dict[str, Any],
    background_tasks: BackgroundTasks,
    processor: ClaimProcessor = Depends(get_claim_processor),
    broadcaster: UpdateBroadcaster = Depends(get_broadcaster),
) -> Dict[str, Any]:
    """Register a new user and push the refreshed standings."""

    try:
        user, snapshot = processor.add_user(body.get("name"))
    except LeaderboardError as exc:
        raise http_error(exc) from exc

    background_tasks.add_task(broadcaster.publish, snapshot)
    return snapshot.find(user.id)


__all__ = ["router"]
