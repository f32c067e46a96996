"""Database model exports."""

from .award import MAX_AWARD, MIN_AWARD, PointsAward
from .user import MAX_NAME_LENGTH, User

__all__ = [
    "MAX_AWARD",
    "MAX_NAME_LENGTH",
    "MIN_AWARD",
    "PointsAward",
    "User",
]
