"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    DATABASE_URL,
    DB_RESET,
    DEFAULT_SEED_USERS,
    HISTORY_DEFAULT_LIMIT,
    HISTORY_MAX_LIMIT,
    HOST,
    LOG_LEVEL,
    PORT,
    SEED_USERS,
)
from .database import build_engine, engine, get_session
from .errors import (
    BroadcastFailure,
    DuplicateNameError,
    LeaderboardError,
    StorageFailure,
    UserNotFoundError,
    ValidationError,
)
from .logger import setup_logging
from .time import isoformat_utc, utcnow

__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "DATABASE_URL",
    "DB_RESET",
    "DEFAULT_SEED_USERS",
    "HISTORY_DEFAULT_LIMIT",
    "HISTORY_MAX_LIMIT",
    "HOST",
    "LOG_LEVEL",
    "PORT",
    "SEED_USERS",
    "BroadcastFailure",
    "DuplicateNameError",
    "LeaderboardError",
    "StorageFailure",
    "UserNotFoundError",
    "ValidationError",
    "build_engine",
    "engine",
    "get_session",
    "isoformat_utc",
    "setup_logging",
    "utcnow",
]
