"""Database model for point-award history."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow

MIN_AWARD = 1
MAX_AWARD = 10


class PointsAward(SQLModel, table=True):
    """Immutable record of one successful claim."""

    __tablename__ = "points_award"

    id: Optional[int] = ORMField(default=None, primary_key=True)
    user_id: int = ORMField(foreign_key="user.id", index=True)
    user_name: str
    points_awarded: int = ORMField(ge=MIN_AWARD, le=MAX_AWARD)
    timestamp: datetime = ORMField(default_factory=utcnow, index=True)


__all__ = ["MAX_AWARD", "MIN_AWARD", "PointsAward"]
