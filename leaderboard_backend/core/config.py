"""Application settings and environment helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List

from dotenv import load_dotenv

load_dotenv(override=False)

_PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


# Server ---------------------------------------------------------------------
HOST = os.getenv("HOST", "127.0.0.1")
PORT = _env_int("PORT", 5000)


# Storage --------------------------------------------------------------------
DATABASE_URL = os.getenv(
    "DATABASE_URL", f"sqlite:///{_PROJECT_ROOT / 'data' / 'leaderboard.db'}"
)
DB_RESET = _env_bool("DB_RESET", False)


# CORS -----------------------------------------------------------------------
_frontend_origins = _split_csv(os.getenv("FRONTEND_ORIGIN"))
_additional_origins = _split_csv(os.getenv("ADDITIONAL_ALLOWED_ORIGINS"))

_local_dev_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

ALLOWED_CORS_ORIGINS = _unique(
    [
        *_frontend_origins,
        *_additional_origins,
        *_local_dev_origins,
    ]
)


# Leaderboard behaviour ------------------------------------------------------
DEFAULT_SEED_USERS = [
    "Rahul",
    "Kamal",
    "Sanak",
    "Priya",
    "Amit",
    "Sneha",
    "Ravi",
    "Pooja",
    "Vikash",
    "Anita",
]
SEED_USERS = _split_csv(os.getenv("SEED_USERS")) or list(DEFAULT_SEED_USERS)

HISTORY_DEFAULT_LIMIT = _env_int("HISTORY_DEFAULT_LIMIT", 50)
HISTORY_MAX_LIMIT = max(_env_int("HISTORY_MAX_LIMIT", 200), HISTORY_DEFAULT_LIMIT)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


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
]
