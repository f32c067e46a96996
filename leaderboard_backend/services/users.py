"""Helpers for user and award domain objects."""

from __future__ import annotations

from typing import Any, Dict

from ..core.errors import ValidationError
from ..core.time import isoformat_utc
from ..models import MAX_NAME_LENGTH, PointsAward, User


def normalize_user_name(name: Any) -> str:
    """Trim ``name`` and enforce the storage rules for display names."""

    normalized = name.strip() if isinstance(name, str) else ""
    if not normalized:
        raise ValidationError("User name is required")
    if len(normalized) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"User name must be {MAX_NAME_LENGTH} characters or less"
        )
    return normalized


def user_to_dict(user: User) -> Dict[str, Any]:
    """Serialise a user to the API shape."""

    return {
        "id": user.id,
        "name": user.name,
        "totalPoints": user.total_points,
        "rank": user.rank,
        "createdAt": isoformat_utc(user.created_at),
    }


def award_to_dict(award: PointsAward) -> Dict[str, Any]:
    """Serialise a history record to the API shape."""

    return {
        "id": award.id,
        "userId": award.user_id,
        "userName": award.user_name,
        "pointsAwarded": award.points_awarded,
        "timestamp": isoformat_utc(award.timestamp),
    }


__all__ = ["award_to_dict", "normalize_user_name", "user_to_dict"]
