"""Domain errors raised by the leaderboard services."""

from __future__ import annotations


class LeaderboardError(Exception):
    """Base class for leaderboard failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LeaderboardError):
    """Input rejected before touching the store."""

    status_code = 400


class DuplicateNameError(LeaderboardError):
    """A user with the same trimmed name already exists."""

    status_code = 400

    def __init__(self, name: str) -> None:
        super().__init__("User already exists")
        self.name = name


class UserNotFoundError(LeaderboardError):
    status_code = 404

    def __init__(self, user_id: int) -> None:
        super().__init__("User not found")
        self.user_id = user_id


class StorageFailure(LeaderboardError):
    """A persistence operation failed; nothing was committed."""

    status_code = 500


class BroadcastFailure(LeaderboardError):
    """Delivery to one subscriber failed. Logged, never surfaced."""


__all__ = [
    "BroadcastFailure",
    "DuplicateNameError",
    "LeaderboardError",
    "StorageFailure",
    "UserNotFoundError",
    "ValidationError",
]
