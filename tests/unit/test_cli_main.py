from __future__ import annotations

import json
import os
from pathlib import Path

from sheetrows.cli import main as cli_main
from sheetrows.logging.init import reset_logging


def test_cli_partial_failure_exit_code(write_config, phonebook_with_holes_xlsx, capsys):
    reset_logging()
    code = cli_main([])
    captured = capsys.readouterr()
    assert code == 2
    assert "SUMMARY source=phonebook_with_holes.xlsx sheet=Sheet1 rows=4 mapped=1 failed=3 substituted=0" in captured.err
    assert "WARN row 2: MissingCellError" in captured.err
    assert '"Name": "Peter Gibbons"' in captured.out


def test_cli_stdout_is_json_lines_only(write_config, phonebook_with_holes_xlsx, capsys):
    reset_logging()
    text = write_config.read_text(encoding="utf-8")
    text += "on_error: placeholder\nplaceholder: {Name: EMPTY}\n"
    write_config.write_text(text, encoding="utf-8")
    code = cli_main([])
    lines = capsys.readouterr().out.splitlines()
    assert code == 2
    assert [json.loads(x)["Name"] for x in lines] == ["Peter Gibbons", "EMPTY", "EMPTY", "EMPTY"]


def test_cli_all_rows_success(write_config, phonebook_xlsx, capsys):
    reset_logging()
    text = write_config.read_text(encoding="utf-8").replace("phonebook_with_holes.xlsx", "phonebook.xlsx")
    write_config.write_text(text, encoding="utf-8")
    code = cli_main([])
    assert code == 0
    assert "rows=1 mapped=1 failed=0" in capsys.readouterr().err


def test_cli_output_file_keeps_logs_on_stdout(write_config, phonebook_with_holes_xlsx, temp_workdir: Path, capsys):
    reset_logging()
    text = write_config.read_text(encoding="utf-8")
    text += "on_error: placeholder\nplaceholder: {Name: EMPTY}\noutput: ./out/rows.jsonl\n"
    write_config.write_text(text, encoding="utf-8")
    code = cli_main([])
    captured = capsys.readouterr()
    assert code == 2
    assert "INFO 4 record(s) written to ./out/rows.jsonl" in captured.out
    assert "SUMMARY source=phonebook_with_holes.xlsx" in captured.out
    assert captured.err == ""
    lines = (temp_workdir / "out" / "rows.jsonl").read_text(encoding="utf-8").splitlines()
    assert [json.loads(x)["Name"] for x in lines] == ["Peter Gibbons", "EMPTY", "EMPTY", "EMPTY"]


def test_cli_missing_config(temp_workdir: Path, capsys):
    reset_logging()
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config: config file not found" in out


def test_cli_config_from_env(temp_workdir: Path, phonebook_xlsx, monkeypatch, capsys):
    reset_logging()
    alt = temp_workdir / "config" / "alt.yml"
    alt.write_text("source: ./data/phonebook.xlsx\nskip_first_row: true\n", encoding="utf-8")
    monkeypatch.setenv("SHEETROWS_CONFIG", str(alt))
    code = cli_main([])
    assert code == 0
    assert "mapped=1" in capsys.readouterr().err


def test_cli_config_from_dotenv(temp_workdir: Path, phonebook_xlsx, monkeypatch, capsys):
    reset_logging()
    monkeypatch.delenv("SHEETROWS_CONFIG", raising=False)
    alt = temp_workdir / "config" / "dotenv.yml"
    alt.write_text("source: ./data/phonebook.xlsx\n", encoding="utf-8")
    (temp_workdir / ".env").write_text(f"SHEETROWS_CONFIG={alt}\n", encoding="utf-8")
    try:
        code = cli_main([])
    finally:
        # set by load_dotenv, outside monkeypatch bookkeeping
        os.environ.pop("SHEETROWS_CONFIG", None)
    assert code == 0
    assert "rows=2 mapped=2" in capsys.readouterr().err


def test_cli_missing_source(write_config, capsys):
    reset_logging()
    code = cli_main([])
    captured = capsys.readouterr()
    assert code == 1
    assert "ERROR processing: source: source file not found" in captured.err
    assert captured.out == ""


def test_cli_missing_sheet(write_config, phonebook_with_holes_xlsx, capsys):
    reset_logging()
    text = write_config.read_text(encoding="utf-8").replace("sheet: Sheet1", "sheet: Sheet9")
    write_config.write_text(text, encoding="utf-8")
    code = cli_main([])
    assert code == 1
    assert "ERROR processing: source: sheet not found" in capsys.readouterr().err
