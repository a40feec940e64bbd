from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from ..excel.grid import Grid, GridSource, SheetSelector
from ..models.point import Point
from ..models.row_outcome import RowOutcome
from .error_handlers import ErrorHandler, drop_row
from .locator import DEFAULT_MAX_STEPS, locate_cell

"""Row processing template.

RowTemplate walks every row of one sheet, hands each row to a mapper and
collects the non-None results in row order. A mapper failure only affects its
own row: the error goes to the error handler, whose return value stands in for
the row. Failures opening the source or selecting the sheet are not row
failures and propagate to the caller untouched.
"""

__all__ = [
    "RowHandlerError",
    "RowMapper",
    "RowTemplate",
]

T = TypeVar("T")

RowMapper = Callable[[Grid, int], Any]

logger = logging.getLogger(__name__)


class RowHandlerError(Exception):
    """Raised when an error handler itself fails; aborts the whole pass."""

    def __init__(self, row: int, error: Exception) -> None:
        super().__init__(f"error handler failed at row {row}: {error}")
        self.row = row
        self.error = error


class RowTemplate(Generic[T]):
    """Map each row of a sheet to a value, isolating per-row failures.

    Args:
        source: grid source, anything with ``open_grid(sheet) -> Grid``
        skip_first_row_default: skip row 0 (usually a header) unless a call
            says otherwise
    """

    def __init__(self, source: GridSource, skip_first_row_default: bool = False) -> None:
        self.source = source
        self.skip_first_row_default = skip_first_row_default

    def for_each_row(
        self,
        sheet: SheetSelector,
        mapper: Callable[[Grid, int], T | None],
        error_handler: ErrorHandler = drop_row,
        skip_first_row: bool | None = None,
    ) -> list[T]:
        """Process each row of the sheet and return the mapped values.

        Steps:
        1. Resolve the grid for ``sheet`` (errors propagate unchanged)
        2. Start at row 1 when skipping the first row, else row 0
        3. Map each row; route mapper failures through ``error_handler``
        4. Keep non-None results in ascending row order

        Raises:
            GridSourceError: source or sheet cannot be resolved
            RowHandlerError: the error handler raised
        """
        skip = self.skip_first_row_default if skip_first_row is None else skip_first_row
        grid = self.source.open_grid(sheet)

        if skip:
            logger.debug("Skipping first row...")
            start = 1
        else:
            start = 0

        results: list[T] = []
        for row in range(start, grid.row_count):
            outcome = self._map_row(grid, row, mapper)
            if outcome.failed:
                value = self._recover(grid, outcome.row, outcome.error, error_handler)
            else:
                value = outcome.value
            if value is not None:
                results.append(value)
        return results

    def _map_row(
        self, grid: Grid, row: int, mapper: Callable[[Grid, int], T | None]
    ) -> RowOutcome[T]:
        try:
            return RowOutcome.success(row, mapper(grid, row))
        except Exception as e:
            logger.debug(f"row {row} failed: {type(e).__name__}: {e}")
            return RowOutcome.failure(row, e)

    def _recover(
        self, grid: Grid, row: int, error: Exception, error_handler: ErrorHandler
    ) -> T | None:
        try:
            return error_handler(grid, row, error)
        except Exception as e:
            raise RowHandlerError(row, e) from e

    def locate(self, sheet: SheetSelector, target: str, max_steps: int = DEFAULT_MAX_STEPS) -> Point:
        """Find the cell holding ``target`` on ``sheet`` (see ``locate_cell``)."""
        return locate_cell(self.source.open_grid(sheet), target, max_steps=max_steps)
