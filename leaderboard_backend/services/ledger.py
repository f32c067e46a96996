"""Durable store for users and their point-award history."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, func, select

from ..core.errors import DuplicateNameError, StorageFailure
from ..models import PointsAward, User
from .users import normalize_user_name

logger = logging.getLogger(__name__)

# SQLite stores integer keys as signed 64-bit values.
MAX_ROW_ID = 2**63 - 1


def _is_row_id(value: int) -> bool:
    return isinstance(value, int) and 1 <= value <= MAX_ROW_ID


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Storage failure while trying to %s: %s", action, exc)
        raise StorageFailure(f"Failed to {action}") from exc


class LedgerStore:
    """Thin repository over a SQLModel session.

    Writes are flushed but never committed here: the caller owns the
    transaction so that a mutation and its side effects land together.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # Users ---------------------------------------------------------------
    def list_users(self, ranked: bool = True) -> List[User]:
        """Return every user, in ranking order or in insertion order."""

        query = select(User)
        if ranked:
            query = query.order_by(
                User.total_points.desc(), User.created_at.asc(), User.id.asc()
            )
        else:
            query = query.order_by(User.id.asc())
        with _storage_errors("list users"):
            return list(self.session.exec(query).all())

    def count_users(self) -> int:
        with _storage_errors("count users"):
            return self.session.exec(select(func.count()).select_from(User)).one()

    def find_user(self, user_id: int) -> Optional[User]:
        if not _is_row_id(user_id):
            return None
        with _storage_errors("load user"):
            return self.session.get(User, user_id)

    def refresh_user(self, user: User) -> User:
        """Reload ``user`` from the database, discarding in-memory state."""

        with _storage_errors("reload user"):
            self.session.refresh(user)
        return user

    def user_exists(self, name: str) -> bool:
        normalized = (name or "").strip()
        if not normalized:
            return False
        with _storage_errors("look up user name"):
            found = self.session.exec(
                select(User.id).where(User.name == normalized)
            ).first()
        return found is not None

    def create_user(self, name: str) -> User:
        """Insert a new, unranked user with zero points."""

        normalized = normalize_user_name(name)
        if self.user_exists(normalized):
            raise DuplicateNameError(normalized)

        user = User(name=normalized, total_points=0, rank=0)
        self.session.add(user)
        try:
            self.session.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent insert of the same name.
            raise DuplicateNameError(normalized) from exc
        except SQLAlchemyError as exc:
            logger.error("Storage failure while trying to create user: %s", exc)
            raise StorageFailure("Failed to create user") from exc
        return user

    def save_user(self, user: User) -> User:
        with _storage_errors("save user"):
            self.session.add(user)
            self.session.flush()
        return user

    # Awards --------------------------------------------------------------
    def append_award(self, award: PointsAward) -> PointsAward:
        with _storage_errors("record points award"):
            self.session.add(award)
            self.session.flush()
        return award

    def list_recent_awards(self, limit: int) -> List[PointsAward]:
        """Return the ``limit`` most recent awards, newest first."""

        if limit <= 0:
            return []
        query = (
            select(PointsAward)
            .order_by(PointsAward.timestamp.desc(), PointsAward.id.desc())
            .limit(limit)
        )
        with _storage_errors("list points history"):
            return list(self.session.exec(query).all())

    def list_awards_for_user(self, user_id: int) -> List[PointsAward]:
        if not _is_row_id(user_id):
            return []
        query = (
            select(PointsAward)
            .where(PointsAward.user_id == user_id)
            .order_by(PointsAward.timestamp.desc(), PointsAward.id.desc())
        )
        with _storage_errors("list user points history"):
            return list(self.session.exec(query).all())


__all__ = ["LedgerStore", "MAX_ROW_ID"]
