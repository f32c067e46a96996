"""In-process serialization points for leaderboard mutations."""

from __future__ import annotations

from threading import Lock
from typing import Dict


class MutationLocks:
    """Per-user mutation locks plus one global ranking lock.

    Callers always take a user lock before the ranking lock.
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._users: Dict[int, Lock] = {}
        self.ranking = Lock()

    def for_user(self, user_id: int) -> Lock:
        with self._guard:
            lock = self._users.get(user_id)
            if lock is None:
                lock = self._users[user_id] = Lock()
            return lock


__all__ = ["MutationLocks"]
