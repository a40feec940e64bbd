from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Any

from .grid import Grid

__all__ = [
    "MissingCellError",
    "cell_text",
    "require_cell",
    "require_text",
    "is_blank_row",
]


class MissingCellError(Exception):
    """Raised by mappers when a required cell is blank or absent."""

    def __init__(self, row: int, column: int) -> None:
        super().__init__(f"missing cell at row {row}, column {column}")
        self.row = row
        self.column = column


def cell_text(value: Any) -> str | None:
    """Render a cell scalar as text; blank cells and empty strings give None.

    Integral floats drop the trailing ``.0`` so a numeric cell holding 42
    compares equal to the text "42".
    """
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    text = str(value)
    return text if text != "" else None


def require_cell(grid: Grid, row: int, column: int) -> Any:
    value = grid.cell_value(row, column)
    if value is None or (isinstance(value, str) and value.strip() == ""):
        raise MissingCellError(row, column)
    return value


def require_text(grid: Grid, row: int, column: int) -> str:
    value = require_cell(grid, row, column)
    return cell_text(value) or str(value)


def is_blank_row(grid: Grid, row: int) -> bool:
    return all(cell_text(grid.cell_value(row, c)) is None for c in range(grid.column_count))
