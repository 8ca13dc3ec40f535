"""Best completion times per grid size and difficulty."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends
from sqlalchemy import DateTime, Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from src.solitaire.core.database import Base, get_db
from src.solitaire.core.result import ServiceResult
from src.solitaire.puzzle.generator import config_key

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class BestTime(Base):
    """Fastest completion for one ``battleship-{size}-{difficulty}`` key."""

    __tablename__ = "best_times"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    config_key: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, nullable=False
    )
    grid_size: Mapped[int] = mapped_column(Integer, nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)
    best_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )


@dataclass(frozen=True)
class BestTimeRecord:
    config_key: str
    elapsed_ms: int
    best_ms: int
    is_new_best: bool


def format_time(milliseconds: int | None) -> str:
    """Format a duration as MM:SS; ``None`` renders as --:--."""
    if milliseconds is None:
        return "--:--"
    seconds = max(0, milliseconds) // 1000
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class BestTimeService:
    """Reads and updates best times."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _get(self, key: str) -> BestTime | None:
        stmt = select(BestTime).filter(BestTime.config_key == key).limit(1)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_best(self, key: str) -> int | None:
        record = self._get(key)
        return record.best_ms if record else None

    def record(
        self, grid_size: int, difficulty: str, elapsed_ms: int
    ) -> ServiceResult[BestTimeRecord]:
        """Store ``elapsed_ms`` if it beats the current best for this configuration."""
        if elapsed_ms <= 0:
            return ServiceResult.fail("Completion time must be positive.")

        key = config_key(grid_size, difficulty)
        current = self._get(key)
        if current is not None and current.best_ms <= elapsed_ms:
            return ServiceResult.ok(
                BestTimeRecord(
                    config_key=key,
                    elapsed_ms=elapsed_ms,
                    best_ms=current.best_ms,
                    is_new_best=False,
                )
            )

        if current is None:
            current = BestTime(
                config_key=key,
                grid_size=grid_size,
                difficulty=difficulty,
                best_ms=elapsed_ms,
            )
            self.db.add(current)
        else:
            current.best_ms = elapsed_ms
        self.db.commit()
        logger.info("New best time for %s: %s", key, format_time(elapsed_ms))
        return ServiceResult.ok(
            BestTimeRecord(
                config_key=key,
                elapsed_ms=elapsed_ms,
                best_ms=elapsed_ms,
                is_new_best=True,
            )
        )

    def all_best(self) -> Sequence[BestTime]:
        stmt = select(BestTime).order_by(BestTime.grid_size, BestTime.difficulty)
        return self.db.execute(stmt).scalars().all()


def get_best_time_service(
    db: Annotated[Session, Depends(get_db)],
) -> BestTimeService:
    return BestTimeService(db)
