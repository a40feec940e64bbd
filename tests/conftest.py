# Shared pytest fixtures
from __future__ import annotations
import logging
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from sheetrows.logging.init import LOGGER_NAME, reset_logging

PHONEBOOK_ROWS = [
    ["Name", "Address", "Phone"],
    ["Peter Gibbons", "123 ABC Drive", "555-821-2123"],
]

PHONEBOOK_WITH_HOLES_ROWS = [
    ["Name", "Address", "Phone"],
    ["Peter Gibbons", "123 ABC Drive", "555-821-2123"],
    ["Joanna", None, "555-915-9900"],
    [None, "Corp HQ", "555-321-9502"],
    ["Bill Lumbergh", "his cubicle", None],
]


def make_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write a real .xlsx file, one sheet per entry, no header/index."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def phonebook_xlsx(temp_workdir: Path) -> Path:
    return make_workbook(temp_workdir / "data" / "phonebook.xlsx", {"Sheet1": PHONEBOOK_ROWS})


@pytest.fixture()
def phonebook_with_holes_xlsx(temp_workdir: Path) -> Path:
    return make_workbook(
        temp_workdir / "data" / "phonebook_with_holes.xlsx", {"Sheet1": PHONEBOOK_WITH_HOLES_ROWS}
    )


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source: ./data/phonebook_with_holes.xlsx
sheet: Sheet1
skip_first_row: true
required_columns: [Name, Address, Phone]
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "rows.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture(autouse=True)
def clean_logging():
    # handlers bound to a previous test's captured stdout must not leak
    yield
    reset_logging()
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
