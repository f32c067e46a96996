import itertools

import pytest

pytest.importorskip("httpx", reason="httpx is required by FastAPI's TestClient")

from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from leaderboard_backend.api.deps import get_points_source
from leaderboard_backend.app import create_app
from leaderboard_backend.core import build_engine
from leaderboard_backend.services import (
    ClaimProcessor,
    LedgerStore,
    MutationLocks,
    RankingEngine,
)


class FixedPoints:
    """Deterministic award source cycling through ``values``."""

    def __init__(self, *values: int) -> None:
        self.set(*values)

    def set(self, *values: int) -> None:
        self._cycle = itertools.cycle(values or (5,))

    def __call__(self) -> int:
        return next(self._cycle)


@pytest.fixture
def engine(tmp_path):
    db = build_engine(f"sqlite:///{tmp_path / 'leaderboard.db'}")
    SQLModel.metadata.create_all(db)
    yield db
    db.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def store(session):
    return LedgerStore(session)


@pytest.fixture
def points():
    return FixedPoints(5)


@pytest.fixture
def locks():
    return MutationLocks()


@pytest.fixture
def processor(store, points, locks):
    return ClaimProcessor(store, RankingEngine(store), draw=points, locks=locks)


@pytest.fixture
def app(engine, points):
    application = create_app(engine, seed_names=["A", "B", "C"], db_reset=False)
    application.dependency_overrides[get_points_source] = lambda: points
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def assert_ranks_consistent(users):
    """Ranks are 1..N in list order, and the order follows points then age."""

    assert [u["rank"] for u in users] == list(range(1, len(users) + 1))
    keys = [(-u["totalPoints"], u["createdAt"]) for u in users]
    assert keys == sorted(keys)
