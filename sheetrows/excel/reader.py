from __future__ import annotations

import csv
from pathlib import Path

import pandas as pd

from .grid import (
    FrameGrid,
    SheetSelector,
    SourceNotFoundError,
    SourceReadError,
    resolve_sheet_name,
)

"""Spreadsheet file grid provider.

Reads one workbook through pandas with ``header=None`` so the first sheet row is
grid row 0. Engines per extension:

- .xlsx / .xlsm: openpyxl
- .xls: xlrd
- .ods: odf (odfpy)
- .csv: pandas' own parser (ragged rows padded), exposed as a single sheet
  named after the file stem

Parsed frames are cached per sheet, so repeated passes over the same sheet only
decode it once.
"""

__all__ = [
    "EXCEL_ENGINES",
    "WorkbookSource",
    "na_options",
]

EXCEL_ENGINES = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xls": "xlrd",
    ".ods": "odf",
}


def na_options(keep_na_strings: list[str] | None) -> tuple[bool, list[str] | None]:
    """Return ``(keep_default_na, na_values)`` for pandas readers.

    Strings listed in ``keep_na_strings`` (e.g. ``"NA"``) are removed from the
    pandas default NaN set so they survive as text.
    """
    # pandas._libs.parsers.STR_NA_VALUES holds the default NaN strings
    import pandas._libs.parsers as parsers

    if keep_na_strings:
        custom_na = parsers.STR_NA_VALUES.copy() - set(keep_na_strings)
        return False, list(custom_na)
    return True, None


class WorkbookSource:
    """Grid source backed by a spreadsheet file on disk."""

    def __init__(self, path: Path | str, keep_na_strings: list[str] | None = None) -> None:
        self.path = Path(path)
        self.keep_na_strings = keep_na_strings
        self._book: pd.ExcelFile | None = None
        self._frames: dict[str, pd.DataFrame] = {}

    @property
    def is_csv(self) -> bool:
        return self.path.suffix.lower() == ".csv"

    @property
    def sheet_names(self) -> list[str]:
        if self.is_csv:
            self._check_exists()
            return [self.path.stem]
        return [str(n) for n in self._excel_file().sheet_names]

    def _check_exists(self) -> None:
        if not self.path.exists():
            raise SourceNotFoundError(f"source file not found: {self.path}")
        if not self.path.is_file():
            raise SourceNotFoundError(f"source path is not a file: {self.path}")

    def _excel_file(self) -> pd.ExcelFile:
        if self._book is None:
            self._check_exists()
            engine = EXCEL_ENGINES.get(self.path.suffix.lower())
            if engine is None:
                raise SourceReadError(f"unsupported spreadsheet type: {self.path.suffix or '(none)'}")
            try:
                self._book = pd.ExcelFile(self.path, engine=engine)
            except Exception as e:
                raise SourceReadError(f"cannot read {self.path.name}: {e}") from e
        return self._book

    def read_frame(self, sheet: SheetSelector) -> tuple[str, pd.DataFrame]:
        """Return ``(sheet_name, raw_frame)`` for the selected sheet."""
        names = self.sheet_names
        name = resolve_sheet_name(names, sheet)
        if name in self._frames:
            return name, self._frames[name]

        keep_default_na, na_values = na_options(self.keep_na_strings)
        try:
            if self.is_csv:
                frame = self._read_csv(keep_default_na, na_values)
            else:
                # parse by position; sheet names may not round-trip through str()
                frame = self._excel_file().parse(
                    names.index(name),
                    header=None,
                    keep_default_na=keep_default_na,
                    na_values=na_values,
                )
        except Exception as e:
            raise SourceReadError(f"cannot read sheet '{name}' of {self.path.name}: {e}") from e
        self._frames[name] = frame
        return name, frame

    def _csv_width(self) -> int:
        with self.path.open(newline="", encoding="utf-8") as f:
            return max((len(fields) for fields in csv.reader(f)), default=0)

    def _read_csv(self, keep_default_na: bool, na_values: list[str] | None) -> pd.DataFrame:
        # rows may be ragged: name every column up front, short rows pad with NaN
        width = self._csv_width()
        if width == 0:
            return pd.DataFrame()
        return pd.read_csv(
            self.path,
            header=None,
            names=list(range(width)),
            skip_blank_lines=False,
            keep_default_na=keep_default_na,
            na_values=na_values,
            encoding="utf-8",
        )

    def open_grid(self, sheet: SheetSelector) -> FrameGrid:
        name, frame = self.read_frame(sheet)
        return FrameGrid(frame, name=name)

    def close(self) -> None:
        if self._book is not None:
            self._book.close()
            self._book = None
        self._frames.clear()

    def __enter__(self) -> WorkbookSource:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"WorkbookSource({str(self.path)!r})"
