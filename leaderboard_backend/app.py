"""FastAPI application factory and configuration."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Iterable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel

from . import models  # noqa: F401 - ensure models are registered with SQLModel
from .api import register_routes
from .core import (
    ALLOWED_CORS_ORIGINS,
    DB_RESET,
    HOST,
    PORT,
    SEED_USERS,
    engine as default_engine,
    setup_logging,
)
from .services import (
    ClaimProcessor,
    LedgerStore,
    MutationLocks,
    RankingEngine,
    UpdateBroadcaster,
)

logger = logging.getLogger(__name__)


def initialize_leaderboard(app: FastAPI) -> None:
    """Create tables, seed default users on first start and re-rank."""

    db = app.state.engine
    if app.state.db_reset:
        SQLModel.metadata.drop_all(db)
    SQLModel.metadata.create_all(db)

    with Session(db) as session:
        store = LedgerStore(session)
        processor = ClaimProcessor(
            store,
            RankingEngine(store),
            locks=app.state.locks,
            sequencer=app.state.broadcaster.next_sequence,
        )
        ranked = processor.seed_defaults(app.state.seed_names)
    logger.info("Leaderboard ready with %d users", len(ranked))


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    initialize_leaderboard(app)
    app.state.broadcaster.bind(asyncio.get_running_loop())
    yield
    app.state.broadcaster.unbind()


def create_app(
    engine: Optional[Engine] = None,
    *,
    seed_names: Optional[Iterable[str]] = None,
    db_reset: bool = DB_RESET,
) -> FastAPI:
    app = FastAPI(title="Points Leaderboard API", version="1.0.0", lifespan=lifespan)

    app.state.engine = engine if engine is not None else default_engine
    app.state.seed_names = list(SEED_USERS if seed_names is None else seed_names)
    app.state.db_reset = db_reset
    app.state.locks = MutationLocks()
    app.state.broadcaster = UpdateBroadcaster()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("leaderboard_backend.app:app", host=HOST, port=PORT)
