"""Deterministic rank assignment."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Tuple

from ..models import User
from .ledger import LedgerStore


def _as_naive_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes while fresh objects are tz-aware.
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def ranking_key(user: User) -> Tuple[int, datetime]:
    """Sort key: most points first, then the earliest-created user."""

    return (-user.total_points, _as_naive_utc(user.created_at))


def order_users(users: Iterable[User]) -> List[User]:
    """Return ``users`` in canonical order.

    ``sorted`` is stable, so users with identical keys keep the order in
    which they were supplied.
    """

    return sorted(users, key=ranking_key)


class RankingEngine:
    """Recomputes and persists every user's rank."""

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def recompute_ranks(self) -> List[User]:
        """Assign rank = position + 1 to every user and persist changes.

        Runs inside the caller's transaction; a failure on any write raises
        and leaves the rollback to the caller, so ranks never end up half
        updated.
        """

        ranked = order_users(self.store.list_users(ranked=False))
        for position, user in enumerate(ranked, start=1):
            if user.rank != position:
                user.rank = position
                self.store.save_user(user)
        return ranked


__all__ = ["RankingEngine", "order_users", "ranking_key"]
