"""Success/failure carrier for player-facing operations that must not raise."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    success: bool
    data: T | None = None
    error: str = ""

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, data: T | None = None) -> ServiceResult[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str, data: T | None = None) -> ServiceResult[T]:
        # data lets a rejection still report the unchanged value
        return cls(success=False, data=data, error=message)
