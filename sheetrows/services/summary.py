from __future__ import annotations

from ..models.run_result import RunResult

"""SUMMARY line rendering for a runner pass."""

__all__ = [
    "format_seconds",
    "render_summary_line",
]


def format_seconds(seconds: float) -> str:
    """Render seconds without scientific notation; integral values lose the '.0'."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return str(round(seconds, 3))


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a RunResult.

    Format::

        SUMMARY source={name} sheet={sheet} rows={visited} mapped={mapped}
        failed={failed} substituted={substituted} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     source="phonebook.xlsx", sheet="Sheet1", rows_visited=5, mapped_rows=3,
        ...     failed_rows=2, substituted_rows=0, start_time=t, end_time=t,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY source=phonebook.xlsx sheet=Sheet1 rows=5 mapped=3 failed=2 substituted=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY source={result.source} "
        f"sheet={result.sheet} "
        f"rows={result.rows_visited} "
        f"mapped={result.mapped_rows} "
        f"failed={result.failed_rows} "
        f"substituted={result.substituted_rows} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )
