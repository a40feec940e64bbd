from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from ..excel.grid import Grid
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord
from .progress import RowProgressTracker

"""Row error handler strategies.

A handler is any callable ``(grid, row, error) -> value | None``. It runs when a
mapper raises for a row. Returning ``None`` drops the row; returning a value
puts that value in the row's place. A handler that raises aborts the pass.
"""

__all__ = [
    "ErrorHandler",
    "ErrorLogHandler",
    "drop_row",
    "raise_fatal",
    "substitute",
]

T = TypeVar("T")

ErrorHandler = Callable[[Grid, int, Exception], Any]

logger = logging.getLogger(__name__)


def drop_row(grid: Grid, row: int, error: Exception) -> None:
    """Default policy: the failing row contributes nothing."""
    return None


def raise_fatal(grid: Grid, row: int, error: Exception) -> None:
    """Turn a row failure into a fatal one."""
    raise error


def substitute(value: T) -> Callable[[Grid, int, Exception], T]:
    """Build a handler that puts ``value`` in place of every failing row."""

    def _handler(grid: Grid, row: int, error: Exception) -> T:
        return value

    return _handler


class ErrorLogHandler:
    """Record each row failure in an ErrorLogBuffer, then delegate.

    The delegate (``fallback``) decides what the row becomes; this handler only
    adds the JSON Lines record and counts failures. A given progress bar shows
    the running count.
    """

    def __init__(
        self,
        buffer: ErrorLogBuffer,
        source: str,
        sheet: str,
        fallback: ErrorHandler = drop_row,
        progress: RowProgressTracker | None = None,
    ) -> None:
        self.buffer = buffer
        self.source = source
        self.sheet = sheet
        self.fallback = fallback
        self.progress = progress
        self.failures = 0
        self.substitutions = 0

    def __call__(self, grid: Grid, row: int, error: Exception) -> Any:
        self.failures += 1
        self.buffer.append(ErrorRecord.from_exception(self.source, self.sheet, row, error))
        logger.warning(f"row {row}: {type(error).__name__}: {error}")
        if self.progress is not None:
            self.progress.set_postfix(failed=self.failures)
        result = self.fallback(grid, row, error)
        if result is not None:
            self.substitutions += 1
        return result
