from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

"""Aggregated result of one runner pass over a sheet."""

__all__ = [
    "RunResult",
]


@dataclass(frozen=True)
class RunResult:
    """Counters and records produced by ``run_sheet``.

    ``mapped_rows`` counts rows whose mapper produced a record,
    ``failed_rows`` counts rows whose mapper raised (whatever the error policy
    did with them) and ``substituted_rows`` those of the failed rows that were
    replaced by the placeholder record.
    """
    source: str
    sheet: str
    rows_visited: int
    mapped_rows: int
    failed_rows: int
    substituted_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    records: list[dict[str, Any]] = field(default_factory=list)
    error_log_path: Path | None = None

    @property
    def partial_failure(self) -> bool:
        return self.failed_rows > 0
