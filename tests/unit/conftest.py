from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from support import Store, make_store, make_trace_ctx, seed

from billo.application.use_cases.context import TraceContext
from billo.infrastructure.db.models import menu, order, tab, waiter  # noqa: F401
from billo.infrastructure.db.models.menu import Base
from billo.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from billo.infrastructure.db.repositories.staff_repo import (
    SqlAlchemyRestaurantRepository,
    SqlAlchemyWaiterRepository,
)


@pytest.fixture
def store() -> Store:
    return make_store()


@pytest.fixture
def trace_ctx() -> TraceContext:
    return make_trace_ctx()


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    """In-memory database with the seed rows; one connection shared by all threads."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    seed(
        SimpleNamespace(
            restaurants=SqlAlchemyRestaurantRepository(engine),
            waiters=SqlAlchemyWaiterRepository(engine),
            menu=SqlAlchemyMenuRepository(engine),
        )
    )
    yield engine
    engine.dispose()
