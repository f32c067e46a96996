"""Claim processing: atomic award, history append and re-rank."""

from __future__ import annotations

import itertools
import logging
import random
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from ..core.errors import StorageFailure, UserNotFoundError
from ..core.time import utcnow
from ..models import MAX_AWARD, MIN_AWARD, PointsAward, User
from .broadcaster import LeaderboardSnapshot
from .ledger import LedgerStore
from .locks import MutationLocks
from .ranking import RankingEngine
from .users import normalize_user_name, user_to_dict

logger = logging.getLogger(__name__)

PointsSource = Callable[[], int]


def draw_points() -> int:
    """Uniform award in [MIN_AWARD, MAX_AWARD]."""
    return random.randint(MIN_AWARD, MAX_AWARD)


@dataclass
class ClaimResult:
    user: User
    points_awarded: int
    new_total_points: int
    snapshot: LeaderboardSnapshot
    # Serialized before commit so it matches new_total_points exactly.
    user_payload: Dict[str, Any]


class ClaimProcessor:
    """Runs leaderboard mutations as single committed units.

    Every mutation holds the global ranking lock across its writes, the
    rank recomputation and the commit. Claims additionally hold the lock of
    the user they touch, taken first.
    """

    def __init__(
        self,
        store: LedgerStore,
        ranking: Optional[RankingEngine] = None,
        *,
        draw: PointsSource = draw_points,
        locks: Optional[MutationLocks] = None,
        sequencer: Optional[Callable[[], int]] = None,
    ) -> None:
        self.store = store
        self.ranking = ranking or RankingEngine(store)
        self.draw = draw
        self.locks = locks or MutationLocks()
        self._sequencer = sequencer or itertools.count(1).__next__

    @contextmanager
    def _unit_of_work(self) -> Iterator[None]:
        session = self.store.session
        try:
            yield
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Rolled back leaderboard mutation: %s", exc)
            raise StorageFailure("Failed to persist leaderboard changes") from exc
        except Exception:
            session.rollback()
            raise

    def _snapshot(self, ranked: List[User]) -> LeaderboardSnapshot:
        return LeaderboardSnapshot(
            sequence=self._sequencer(),
            users=[user_to_dict(user) for user in ranked],
        )

    def _draw_award(self) -> int:
        amount = self.draw()
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValueError(f"Award must be an integer, got {amount!r}")
        if not MIN_AWARD <= amount <= MAX_AWARD:
            raise ValueError(
                f"Award must be between {MIN_AWARD} and {MAX_AWARD}, got {amount}"
            )
        return amount

    def claim_points(self, user_id: int) -> ClaimResult:
        """Award a random amount to ``user_id`` and re-rank everyone."""

        if self.store.find_user(user_id) is None:
            raise UserNotFoundError(user_id)

        amount = self._draw_award()

        with self.locks.for_user(user_id), self.locks.ranking:
            with self._unit_of_work():
                user = self.store.find_user(user_id)
                if user is None:
                    raise UserNotFoundError(user_id)
                self.store.refresh_user(user)

                user.total_points += amount
                self.store.save_user(user)
                self.store.append_award(
                    PointsAward(
                        user_id=user.id,
                        user_name=user.name,
                        points_awarded=amount,
                        timestamp=utcnow(),
                    )
                )

                ranked = self.ranking.recompute_ranks()
                snapshot = self._snapshot(ranked)
                new_total = user.total_points
                payload = user_to_dict(user)

        logger.info("User %s claimed %d points (total %d)", user_id, amount, new_total)
        return ClaimResult(
            user=user,
            points_awarded=amount,
            new_total_points=new_total,
            snapshot=snapshot,
            user_payload=payload,
        )

    def add_user(self, name: str) -> Tuple[User, LeaderboardSnapshot]:
        """Create a user and rank it immediately.

        The snapshot holds the committed state of the new user, see
        ``LeaderboardSnapshot.find``.
        """

        normalized = normalize_user_name(name)
        with self.locks.ranking:
            with self._unit_of_work():
                user = self.store.create_user(normalized)
                ranked = self.ranking.recompute_ranks()
                snapshot = self._snapshot(ranked)

        logger.info("Added user %r with id %s", normalized, user.id)
        return user, snapshot

    def seed_defaults(self, names: Iterable[str]) -> List[User]:
        """Create ``names`` on an empty store, then recompute all ranks."""

        with self.locks.ranking:
            with self._unit_of_work():
                if self.store.count_users() == 0:
                    seeded = 0
                    for name in dict.fromkeys(n.strip() for n in names if n.strip()):
                        self.store.create_user(name)
                        seeded += 1
                    if seeded:
                        logger.info("Seeded %d default users", seeded)
                ranked = self.ranking.recompute_ranks()
        return ranked


__all__ = ["ClaimProcessor", "ClaimResult", "PointsSource", "draw_points"]
