from __future__ import annotations

import json

import jsonschema
import pytest

from sheetrows.config.loader import SCHEMA_PATH

"""Run config JSON schema contract test."""


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_minimal_config_valid():
    jsonschema.validate({"source": "./data/phonebook.xlsx"}, _schema())


def test_full_config_valid():
    cfg = {
        "source": "./data/phonebook.xlsx",
        "sheet": 0,
        "skip_first_row": True,
        "header_anchor": "Name",
        "max_steps": 50,
        "required_columns": ["Name", "Phone"],
        "on_error": "placeholder",
        "placeholder": {"Name": ""},
        "keep_na_strings": ["NA"],
        "output": "./out/rows.jsonl",
        "error_log_dir": "./logs",
    }
    jsonschema.validate(cfg, _schema())


@pytest.mark.parametrize(
    "cfg",
    [
        {},
        {"source": ""},
        {"source": "a.xlsx", "sheet": -1},
        {"source": "a.xlsx", "max_steps": 0},
        {"source": "a.xlsx", "on_error": "ignore"},
        {"source": "a.xlsx", "on_error": "placeholder"},
        {"source": "a.xlsx", "required_columns": ["Name", "Name"]},
        {"source": "a.xlsx", "unknown": 1},
    ],
)
def test_invalid_configs_rejected(cfg):
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(cfg, _schema())
