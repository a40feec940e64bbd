from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

import numpy as np
import pandas as pd

"""Read-only grid view of one sheet, plus grid source helpers.

A Grid answers three questions: how many rows, how many columns, and what
scalar sits at (row, column). Coordinates are zero-based. A coordinate with no
backing cell (short row, blank cell, NaN, past the edge) reads as ``None``.
"""

__all__ = [
    "Grid",
    "GridSource",
    "GridSourceError",
    "SourceNotFoundError",
    "SheetNotFoundError",
    "SourceReadError",
    "SheetSelector",
    "FrameGrid",
    "StaticSource",
    "resolve_sheet_name",
    "to_python",
]

SheetSelector = int | str


class GridSourceError(Exception):
    """Base class for failures opening a source or resolving a sheet."""


class SourceNotFoundError(GridSourceError):
    """Raised when the spreadsheet file does not exist."""


class SheetNotFoundError(GridSourceError):
    """Raised when a sheet index is out of range or a sheet name is unknown."""


class SourceReadError(GridSourceError):
    """Raised when the file exists but cannot be decoded."""


@runtime_checkable
class Grid(Protocol):
    @property
    def row_count(self) -> int: ...

    @property
    def column_count(self) -> int: ...

    def cell_value(self, row: int, column: int) -> Any | None: ...


@runtime_checkable
class GridSource(Protocol):
    def open_grid(self, sheet: SheetSelector) -> Grid: ...


def resolve_sheet_name(names: Sequence[str], sheet: SheetSelector) -> str:
    """Map a zero-based index or a sheet name onto one of ``names``.

    Raises:
        SheetNotFoundError: index out of range or name not present
    """
    # bool is an int subclass; True must not silently select sheet 1
    if isinstance(sheet, bool):
        raise SheetNotFoundError(f"invalid sheet selector: {sheet!r}")
    if isinstance(sheet, int):
        if 0 <= sheet < len(names):
            return names[sheet]
        raise SheetNotFoundError(f"sheet index {sheet} out of range ({len(names)} sheets)")
    if sheet in names:
        return sheet
    raise SheetNotFoundError(f"sheet not found: {sheet!r} (available: {list(names)})")


def to_python(value: Any) -> Any | None:
    """Convert a pandas/numpy cell scalar to a plain Python value, NaN -> None."""
    if value is None:
        return None
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        return value.item()
    return value


class FrameGrid:
    """Grid over a pandas DataFrame read without a header row."""

    def __init__(self, frame: pd.DataFrame, name: str = "") -> None:
        self._frame = frame
        self.name = name

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Any]], name: str = "") -> FrameGrid:
        # ragged rows are padded with None by the DataFrame constructor
        frame = pd.DataFrame([list(r) for r in rows]) if rows else pd.DataFrame()
        return cls(frame, name=name)

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame

    @property
    def row_count(self) -> int:
        return int(self._frame.shape[0])

    @property
    def column_count(self) -> int:
        return int(self._frame.shape[1])

    def cell_value(self, row: int, column: int) -> Any | None:
        if row < 0 or column < 0 or row >= self.row_count or column >= self.column_count:
            return None
        return to_python(self._frame.iat[row, column])

    def row_values(self, row: int) -> list[Any | None]:
        return [self.cell_value(row, c) for c in range(self.column_count)]

    def __repr__(self) -> str:
        return f"FrameGrid(name={self.name!r}, rows={self.row_count}, columns={self.column_count})"


class StaticSource:
    """In-memory grid source keyed by sheet name (insertion order = sheet index)."""

    def __init__(self, sheets: Mapping[str, Grid]) -> None:
        self._sheets: dict[str, Grid] = dict(sheets)

    @classmethod
    def from_rows(cls, sheets: Mapping[str, Sequence[Sequence[Any]]]) -> StaticSource:
        return cls({name: FrameGrid.from_rows(rows, name=name) for name, rows in sheets.items()})

    @property
    def sheet_names(self) -> list[str]:
        return list(self._sheets)

    def open_grid(self, sheet: SheetSelector) -> Grid:
        return self._sheets[resolve_sheet_name(self.sheet_names, sheet)]
