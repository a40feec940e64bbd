from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TextIO

from ..config.loader import RunConfig
from ..excel.cells import cell_text, is_blank_row, require_cell
from ..excel.grid import Grid, GridSource, GridSourceError
from ..excel.reader import WorkbookSource
from ..logging.error_log import ErrorLogBuffer
from ..models.run_result import RunResult
from .error_handlers import ErrorHandler, ErrorLogHandler, drop_row, raise_fatal
from .locator import CellNotFoundError, locate_cell
from .progress import RowProgressTracker
from .template import RowHandlerError, RowTemplate

"""Config driven sheet export.

run_sheet() turns each data row of one sheet into a ``dict`` keyed by header
name and returns the records together with pass counters:

1. Open the source and resolve the sheet (fatal on failure)
2. Work out the header row: the ``header_anchor`` cell if configured, row 0 when
   ``skip_first_row`` is set, otherwise no header (columns ``col_0``, ``col_1``...)
3. Run the row template; rows failing ``required_columns`` go through the
   configured error policy and are written to the error log
4. Flush the error log and return a RunResult
"""

__all__ = [
    "RecordMapper",
    "RunError",
    "SheetLayout",
    "resolve_layout",
    "run_sheet",
    "write_records",
]

logger = logging.getLogger(__name__)


class RunError(Exception):
    """Fatal failure of a runner pass."""


class SheetLayout:
    """Where the header sits and what the record keys are."""

    def __init__(self, header_row: int | None, first_column: int, columns: list[str]) -> None:
        self.header_row = header_row
        self.first_column = first_column
        self.columns = columns

    def column_index(self, name: str) -> int:
        return self.first_column + self.columns.index(name)


def _unique_names(names: Iterable[str]) -> list[str]:
    used: set[str] = set()
    result = []
    for name in names:
        candidate, n = name, 0
        while candidate in used:
            n += 1
            candidate = f"{name}_{n}"
        used.add(candidate)
        result.append(candidate)
    return result


def resolve_layout(grid: Grid, config: RunConfig) -> SheetLayout:
    """Determine the header row and record keys for ``grid``.

    Raises:
        CellNotFoundError: ``header_anchor`` not found within ``max_steps``
    """
    if config.header_anchor:
        point = locate_cell(grid, config.header_anchor, max_steps=config.max_steps)
        header_row, first_column = point.row, point.column
        logger.info(f"header anchor '{config.header_anchor}' at {point}")
    elif config.skip_first_row:
        header_row, first_column = 0, 0
    else:
        return SheetLayout(None, 0, [f"col_{c}" for c in range(grid.column_count)])

    names = []
    for c in range(first_column, grid.column_count):
        text = cell_text(grid.cell_value(header_row, c))
        names.append(text.strip() if text is not None else f"col_{c}")
    return SheetLayout(header_row, first_column, _unique_names(names))


class RecordMapper:
    """Row mapper building header-keyed records.

    Rows at or above the header row and completely blank rows map to None, so
    the template leaves them out.
    """

    def __init__(
        self,
        layout: SheetLayout,
        required_columns: list[str],
        progress: RowProgressTracker | None = None,
    ) -> None:
        self.layout = layout
        self.required = [(name, layout.column_index(name)) for name in required_columns]
        self.progress = progress
        self.visited = 0
        self.mapped = 0

    def __call__(self, grid: Grid, row: int) -> dict[str, Any] | None:
        self.visited += 1
        if self.progress is not None:
            self.progress.advance()
        if self.layout.header_row is not None and row <= self.layout.header_row:
            return None
        if is_blank_row(grid, row):
            return None
        for _, column in self.required:
            require_cell(grid, row, column)
        record = {
            name: grid.cell_value(row, self.layout.first_column + i)
            for i, name in enumerate(self.layout.columns)
        }
        self.mapped += 1
        return record


def _fallback_for(config: RunConfig) -> ErrorHandler:
    if config.on_error == "fail":
        return raise_fatal
    if config.on_error == "placeholder":
        placeholder = dict(config.placeholder or {})

        def _placeholder(grid: Grid, row: int, error: Exception) -> dict[str, Any]:
            return dict(placeholder)

        return _placeholder
    return drop_row


def run_sheet(config: RunConfig, *, source: GridSource | None = None) -> RunResult:
    """Export the configured sheet as records.

    Args:
        config: run configuration
        source: grid source override (defaults to a WorkbookSource on
            ``config.source``)

    Raises:
        RunError: source/sheet missing, header anchor not found, a required
            column missing from the header, or a row failure under ``on_error: fail``
    """
    if source is not None:
        return _run_pass(config, source)
    # an injected source belongs to the caller; one opened here is closed here
    with WorkbookSource(config.source, keep_na_strings=config.keep_na_strings) as owned:
        return _run_pass(config, owned)


def _run_pass(config: RunConfig, source: GridSource) -> RunResult:
    start_time = datetime.now(UTC)
    source_name = Path(config.source).name

    try:
        grid = source.open_grid(config.sheet)
        layout = resolve_layout(grid, config)
    except GridSourceError as e:
        raise RunError(f"source: {e}") from e
    except CellNotFoundError as e:
        raise RunError(f"header anchor: {e}") from e

    missing = [c for c in config.required_columns if c not in layout.columns]
    if missing:
        raise RunError(f"required columns not in header: {missing}")

    sheet_name = getattr(grid, "name", "") or str(config.sheet)
    logger.info(f"Processing {source_name} sheet={sheet_name} rows={grid.row_count}")

    error_log = ErrorLogBuffer(config.error_log_dir)
    template: RowTemplate[dict[str, Any]] = RowTemplate(source, skip_first_row_default=config.skip_first_row)

    total = max(grid.row_count - (1 if config.skip_first_row else 0), 0)
    with RowProgressTracker(total, description=f"{source_name}:{sheet_name}") as progress:
        handler = ErrorLogHandler(
            error_log, source_name, sheet_name, fallback=_fallback_for(config), progress=progress
        )
        mapper = RecordMapper(layout, config.required_columns, progress=progress)
        try:
            records = template.for_each_row(config.sheet, mapper, handler)
        except RowHandlerError as e:
            error_log.flush()
            raise RunError(f"row {e.row}: {e.error}") from e
        except GridSourceError as e:
            raise RunError(f"source: {e}") from e

    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"{handler.failures} row error(s) written to {log_path}")

    end_time = datetime.now(UTC)
    return RunResult(
        source=source_name,
        sheet=sheet_name,
        rows_visited=mapper.visited,
        mapped_rows=mapper.mapped,
        failed_rows=handler.failures,
        substituted_rows=handler.substitutions,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        records=records,
        error_log_path=log_path,
    )


def _json_default(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def write_records(
    records: Iterable[dict[str, Any]], output: Path | str | None = None, stream: TextIO | None = None
) -> int:
    """Write records as JSON Lines to ``output`` (or ``stream``/stdout). Returns the count."""
    count = 0
    if output is not None:
        path = Path(output)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            for record in records:
                f.write(json.dumps(record, ensure_ascii=False, default=_json_default) + "\n")
                count += 1
        return count
    out = stream if stream is not None else sys.stdout
    for record in records:
        out.write(json.dumps(record, ensure_ascii=False, default=_json_default) + "\n")
        count += 1
    return count
