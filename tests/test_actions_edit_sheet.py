"""
Tests for the edit action (actions/edit_sheet.py).

**Purpose**: Verify ROW:COLUMN=VALUE parsing and the end-to-end round trip from a
local CSV file: load, edit, export, with the documented exit codes.

**Testing philosophy**: Drive main() with an argv list against tmp_path
files. No network.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path so we can import actions module
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from actions.edit_sheet import EditSpec, main, make_source, parse_edit_spec
from actions.render_sheet_html import main as render_main
from sheetround.config.settings import Settings, reset_settings
from sheetround.data.cells import CellValue
from sheetround.data.io import decode_table
from sheetround.venues.file_source import FileSheetSource
from sheetround.venues.http_source import HttpSheetSource


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for name in (
        "SHEETROUND_SOURCE_URL",
        "SHEETROUND_EXPORT_FORMAT",
        "SHEETROUND_SHEET_NAME",
        "SHEETROUND_EXPORT_FILENAME",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def presidents_csv(tmp_path, presidents_csv_bytes):
    path = tmp_path / "pres.csv"
    path.write_bytes(presidents_csv_bytes)
    return path


# ============================================================================
# parse_edit_spec
# ============================================================================

def test_parse_edit_spec():
    assert parse_edit_spec("0:Index=43") == EditSpec(0, "Index", "43")
    # Values may contain separators
    assert parse_edit_spec("1:Note=a=b:c") == EditSpec(1, "Note", "a=b:c")
    assert parse_edit_spec("2:Name=") == EditSpec(2, "Name", "")


@pytest.mark.parametrize("text", ["Index=43", "0:Index", "0:=43", "x:Index=43", "-1:Index=43"])
def test_parse_edit_spec_rejects_bad_syntax(text):
    with pytest.raises(ValueError):
        parse_edit_spec(text)


def test_make_source_picks_by_location():
    settings = Settings()
    assert isinstance(make_source("https://sheets.test/pres.xlsx", settings), HttpSheetSource)
    assert isinstance(make_source("data/pres.xlsx", settings), FileSheetSource)


# ============================================================================
# main()
# ============================================================================

def test_main_applies_edits_and_writes_xlsx(presidents_csv, tmp_path):
    output = tmp_path / "out" / "president.xlsx"

    code = main([
        "--source", str(presidents_csv),
        "--edit", "0:Index=43",
        "--edit", "1:Name=Joe Biden",
        "--output", str(output),
    ])

    assert code == 0
    table = decode_table(output.read_bytes(), "xlsx")
    assert table.get(0, "Index") == CellValue.number(43)
    assert table.get(1, "Name") == CellValue.string("Joe Biden")


def test_main_rejected_edit_returns_partial(presidents_csv, tmp_path, capsys):
    output = tmp_path / "out.csv"

    code = main([
        "--source", str(presidents_csv),
        "--edit", "0:Index=forty",
        "--edit", "0:Party=D",
        "--output", str(output),
    ])

    assert code == 1
    assert output.read_text(encoding="utf-8").splitlines()[1] == "Bill Clinton,42"
    assert "Applied: 0/2 edits" in capsys.readouterr().out


def test_main_missing_source_fails(tmp_path):
    output = tmp_path / "out.xlsx"
    code = main(["--source", str(tmp_path / "missing.xlsx"), "--output", str(output)])

    assert code == 2
    assert not output.exists()


def test_main_bad_edit_syntax_fails(presidents_csv, tmp_path):
    assert main(["--source", str(presidents_csv), "--edit", "Index=43",
                 "--output", str(tmp_path / "out.xlsx")]) == 2


def test_render_action_writes_html(presidents_csv, tmp_path):
    output = tmp_path / "sheet.html"

    assert render_main(["--source", str(presidents_csv), "--output", str(output)]) == 0
    html = output.read_text(encoding="utf-8")
    assert 'value="Bill Clinton"' in html
    assert 'type="number"' in html
