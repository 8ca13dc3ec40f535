"""Pytest bootstrap: in-memory SQLite for best times, seeded puzzle helpers."""

from __future__ import annotations

import os
import random
from collections.abc import Generator

import pytest
from sqlalchemy import delete

from tests.factories import build_puzzle, build_solution

os.environ["TESTING"] = "true"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_AUTO_CREATE"] = "0"

SEED = 1234


@pytest.fixture(scope="session", autouse=True)
def _db_bootstrap() -> Generator[None, None, None]:
    """Create tables once for the test session, drop them on exit."""
    from src.solitaire.core.database import Base, engine
    from src.solitaire.records import best_times  # noqa: F401

    Base.metadata.create_all(bind=engine)
    try:
        yield
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _db_clean_between_tests() -> Generator[None, None, None]:
    """Empty every table between tests."""
    from src.solitaire.core.database import Base, engine

    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(delete(table))


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(SEED)


@pytest.fixture()
def solution():
    return build_solution()


@pytest.fixture()
def blank_puzzle():
    return build_puzzle()
