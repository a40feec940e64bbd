from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from sheetrows.config.loader import ConfigError, RunConfig, load_config
from sheetrows.excel.cells import cell_text
from sheetrows.excel.grid import GridSourceError
from sheetrows.excel.reader import WorkbookSource
from sheetrows.logging.init import log_summary, set_debug, set_stream, setup_logging
from sheetrows.services.locator import CellNotFoundError
from sheetrows.services.runner import RunError, run_sheet, write_records
from sheetrows.services.summary import render_summary_line
from sheetrows.services.template import RowTemplate

"""CLI entrypoint.

Flow:
- Load .env (SHEETROWS_CONFIG may point at the run config)
- Load and validate the YAML config
- Run the sheet, write records as JSON Lines, log the SUMMARY line
  (log lines move to stderr when the records go to stdout)

Exit codes: 0 every row mapped, 2 some rows failed, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

DEFAULT_CONFIG_PATH = Path("config/rows.yml")
INSPECT_ROWS = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; a broken file only warns."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except Exception as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sheetrows", description="Export spreadsheet rows as JSON Lines")
    p.add_argument("--config", type=Path, default=None, help="Run config (default: $SHEETROWS_CONFIG or config/rows.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet shape & first rows then exit")
    p.add_argument("--locate", metavar="TEXT", default=None, help="Print the (column, row) of the first cell holding TEXT then exit")
    return p.parse_args(argv)


def _config_path(args: argparse.Namespace) -> Path:
    if args.config is not None:
        return args.config
    env_path = os.getenv("SHEETROWS_CONFIG")
    return Path(env_path) if env_path else DEFAULT_CONFIG_PATH


def _inspect_data(cfg: RunConfig) -> int:
    with WorkbookSource(cfg.source, keep_na_strings=cfg.keep_na_strings) as source:
        print(f"FILE: {source.path.name} sheets={source.sheet_names}")
        grid = source.open_grid(cfg.sheet)
        print(f"  SHEET: {grid.name} rows={grid.row_count} cols={grid.column_count}")
        for row in range(min(INSPECT_ROWS, grid.row_count)):
            print(f"    row {row}: {[cell_text(v) for v in grid.row_values(row)]}")
    return EXIT_SUCCESS_ALL


def _locate(cfg: RunConfig, target: str) -> int:
    with WorkbookSource(cfg.source, keep_na_strings=cfg.keep_na_strings) as source:
        point = RowTemplate(source).locate(cfg.sheet, target, max_steps=cfg.max_steps)
    print(f"FOUND: {target} column={point.column} row={point.row}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not pick up the test runner's argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    config_path = _config_path(args)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        if args.inspect_data:
            return _inspect_data(cfg)
        if args.locate is not None:
            return _locate(cfg, args.locate)
    except GridSourceError as e:
        logger.error(f"source: {e}")
        return EXIT_FATAL
    except CellNotFoundError as e:
        logger.error(f"locate: {e}")
        return EXIT_FATAL

    if not cfg.output:
        # stdout carries the JSON Lines records
        set_stream(logger, sys.stderr)

    try:
        result = run_sheet(cfg)
    except RunError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    written = write_records(result.records, cfg.output)
    if cfg.output:
        logger.info(f"{written} record(s) written to {cfg.output}")

    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.partial_failure:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
