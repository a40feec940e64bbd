from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for row failure logging.

One ErrorRecord is written per row whose mapper failed. ``row=-1`` is accepted
as a sentinel for failures that cannot be tied to a specific row.

The record layout is fixed by ``sheetrows/logging/error_log_schema.json``.
"""

__all__ = [
    "ErrorRecord",
    "error_type_for",
]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def error_type_for(error: BaseException) -> str:
    """Classify an exception as UPPER_SNAKE, dropping a trailing ``Error``.

    >>> error_type_for(KeyError("x"))
    'KEY'
    >>> error_type_for(ValueError("x"))
    'VALUE'
    """
    name = type(error).__name__
    if name.endswith("Error") and name != "Error":
        name = name[: -len("Error")]
    return _CAMEL_BOUNDARY.sub("_", name).upper()


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: spreadsheet file name being processed
        sheet: sheet name (or index rendered as text)
        row: zero-based row index. Use -1 when the row is unknown
        error_type: error classification in UPPER_SNAKE_CASE format
        message: error message
    """
    timestamp: str  # ISO8601 UTC
    source: str
    sheet: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_exception(source: str, sheet: str, row: int, error: BaseException) -> ErrorRecord:
        return ErrorRecord.create(source, sheet, row, error_type_for(error), str(error))

    def to_json_line(self) -> str:
        # asdict keeps the key set identical to the dataclass fields
        return json.dumps(asdict(self), ensure_ascii=False, default=str)
