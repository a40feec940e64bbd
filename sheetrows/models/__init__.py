"""Domain models for sheet row processing.

Small frozen dataclasses shared by the template, the locator and the runner.
"""

from .error_record import ErrorRecord
from .point import Point
from .row_outcome import RowOutcome
from .run_result import RunResult

__all__ = [
    "ErrorRecord",
    "Point",
    "RowOutcome",
    "RunResult",
]
