"""Database configuration and session helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine

from .config import DATABASE_URL


def build_engine(url: str = DATABASE_URL) -> Engine:
    """Create an engine for ``url``, preparing the SQLite data directory."""

    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        db_file = url.split(":///", 1)[-1]
        if db_file and db_file != ":memory:" and url != "sqlite://":
            Path(db_file).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, connect_args=connect_args)


engine = build_engine()


def get_session(request: Request) -> Iterator[Session]:
    """FastAPI dependency that yields a session bound to the app's engine."""

    with Session(request.app.state.engine) as session:
        yield session


__all__ = ["build_engine", "engine", "get_session"]
