"""Database engine/session bootstrap for best-time records (SQLite by default)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from decouple import config
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterator

DEFAULT_DATABASE_URL = "sqlite:///./solitaire.db"

# ---- Exceptions -------------------------------------------------------------


class InvalidDatabaseURLError(RuntimeError):
    """Raised when DATABASE_URL cannot be parsed/normalized."""

    def __init__(self, details: str | None = None) -> None:
        msg = "Invalid DATABASE_URL"
        if details:
            msg = f"{msg}: {details}"
        super().__init__(msg)


# ---- Base ------------------------------------------------------------------


class Base(DeclarativeBase):
    """Exported declarative base for ORM models."""


# ---- Helpers ----------------------------------------------------------------


def normalize_database_url(url: str) -> str:
    """Normalize postgres:// URLs to postgresql+psycopg://, leave others alone."""
    url = url.strip()
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)

    if url.startswith("postgresql+psycopg2://"):
        url = url.replace("postgresql+psycopg2://", "postgresql+psycopg://", 1)
    elif url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)

    return url


def _is_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (
        None,
        "",
        ":memory:",
    )


def engine_options(url: str) -> dict[str, Any]:
    """Pick engine keyword arguments suited to the backend behind ``url``."""
    if make_url(url).get_backend_name() == "sqlite":
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if _is_memory_sqlite(url):
            # one shared connection, otherwise every checkout sees an empty db
            options["poolclass"] = StaticPool
        return options
    return {
        "pool_size": config("DATABASE_POOL_SIZE", default=5, cast=int),
        "max_overflow": config("DATABASE_MAX_OVERFLOW", default=0, cast=int),
        "pool_timeout": config("DATABASE_POOL_TIMEOUT", default=30, cast=int),
        "pool_recycle": config("DATABASE_POOL_RECYCLE", default=1800, cast=int),
        "pool_pre_ping": True,
    }


# ---- Mode flags -------------------------------------------------------------

TESTING: Final[bool] = config(
    "PYTEST_CURRENT_TEST",
    default=None,
) is not None or config("TESTING", default=False, cast=bool)

# ---- Database URL resolution ------------------------------------------------

try:
    DATABASE_URL = normalize_database_url(
        config("DATABASE_URL", default="") or DEFAULT_DATABASE_URL
    )
    make_url(DATABASE_URL)
except ArgumentError as e:
    raise InvalidDatabaseURLError(str(e)) from e

# ---- Engine and Session Setup -----------------------------------------------

engine = create_engine(
    DATABASE_URL,
    echo=config("SQLALCHEMY_ECHO", default=False, cast=bool),
    **engine_options(DATABASE_URL),
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Iterator[Session]:
    """Yield a SQLAlchemy Session and ensure it is closed."""
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


__all__ = [
    "DATABASE_URL",
    "TESTING",
    "Base",
    "InvalidDatabaseURLError",
    "SessionLocal",
    "engine",
    "get_db",
    "normalize_database_url",
]
