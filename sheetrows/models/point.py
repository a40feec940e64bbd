from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "Point",
]


@dataclass(frozen=True)
class Point:
    """Cell coordinate returned by the cell locator (x = column, y = row)."""
    column: int
    row: int

    def __str__(self) -> str:
        return f"({self.column}, {self.row})"
