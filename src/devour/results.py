"""Result-or-error pairs returned by lookups and normalizers that never raise."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ResErr(Generic[T]):
    """Exactly one of ``result`` and ``error`` is set."""

    result: T | None
    error: str | None

    @classmethod
    def ok(cls, result: T) -> ResErr[T]:
        return cls(result=result, error=None)

    @classmethod
    def fail(cls, error: str) -> ResErr[T]:
        return cls(result=None, error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None


__all__ = ["ResErr"]
