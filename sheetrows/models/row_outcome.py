from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

"""Per-row mapping outcome.

A mapper call either produces a value (possibly ``None``, meaning "exclude this
row") or fails with a recoverable error. The template captures both cases in a
RowOutcome so the error handler is an ordinary function of the error instead of
an ``except`` branch spread through the iteration loop.
"""

__all__ = [
    "RowOutcome",
]

T = TypeVar("T")


@dataclass(frozen=True)
class RowOutcome(Generic[T]):
    row: int  # zero-based row index
    value: T | None = None
    error: Exception | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @staticmethod
    def success(row: int, value: T | None) -> RowOutcome[T]:
        return RowOutcome(row=row, value=value)

    @staticmethod
    def failure(row: int, error: Exception) -> RowOutcome[T]:
        return RowOutcome(row=row, error=error)
