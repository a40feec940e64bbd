from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Row error log buffering.

- JSON Lines, fixed schema (no extra keys)
- one ``errors-YYYYMMDD-HHMMSS.log`` (UTC) per buffer, created on first flush
- records are buffered in memory and appended on ``flush()``
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "LOGS_DIR",
    "SCHEMA_PATH",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"
SCHEMA_PATH = Path(__file__).parent / "error_log_schema.json"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    Not thread safe; one pass owns one buffer.
    """

    def __init__(self, logs_dir: Path | str = LOGS_DIR) -> None:
        self.logs_dir = Path(logs_dir)
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.logs_dir / f"errors-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file; None when nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
