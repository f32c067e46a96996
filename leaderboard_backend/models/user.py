"""Database model for leaderboard users."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow

MAX_NAME_LENGTH = 40


class User(SQLModel, table=True):
    """Participant identified by a unique display name."""

    id: Optional[int] = ORMField(default=None, primary_key=True)
    name: str = ORMField(index=True, unique=True, max_length=MAX_NAME_LENGTH)
    total_points: int = ORMField(default=0, ge=0)
    # 0 means "not ranked yet"; 1..N once a recomputation has run.
    rank: int = ORMField(default=0, ge=0)
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["MAX_NAME_LENGTH", "User"]
