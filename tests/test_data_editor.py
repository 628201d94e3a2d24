"""
Tests for type-preserving cell edits (sheetround/data/editor.py).

**Purpose**: An edit must coerce raw text into the cell's existing kind, or
fail with CoercionError and leave the cell untouched. It must never change
a cell's kind.
"""

import datetime as dt

import pytest

from sheetround.data.cells import CellKind, CellValue
from sheetround.data.editor import coerce, edit, edit_cell
from sheetround.data.schemas import CoercionError


def test_presidents_edit_scenario(presidents_table):
    """Row 0 Index "43" becomes the number 43; "forty" is rejected."""
    row = presidents_table.record(0)

    edit(row, "Index", "43")
    assert row["Index"] == CellValue.number(43)
    assert row["Index"].kind is CellKind.NUMBER
    assert row["Name"].value == "Bill Clinton"

    with pytest.raises(CoercionError) as exc_info:
        edit(row, "Index", "forty")

    assert exc_info.value.column == "Index"
    assert exc_info.value.raw_input == "forty"
    assert row["Index"] == CellValue.number(43)


# ============================================================================
# Numbers
# ============================================================================

@pytest.mark.parametrize("raw, expected", [
    ("43", 43),
    (" 7 ", 7),
    ("-3", -3),
    ("4.5", 4.5),
    ("1e3", 1000.0),
])
def test_number_coercion(raw, expected):
    result = coerce(CellValue.number(0), raw)
    assert result.kind is CellKind.NUMBER
    assert result.value == expected
    assert type(result.value) is type(expected)


@pytest.mark.parametrize("raw", ["abc", "", "   ", "nan", "inf", "-Infinity", "4,5", "0x1A"])
def test_number_coercion_rejects_non_numbers(raw):
    row = {"Index": CellValue.number(42)}
    with pytest.raises(CoercionError):
        edit(row, "Index", raw)
    assert row["Index"] == CellValue.number(42)


# ============================================================================
# Booleans
# ============================================================================

@pytest.mark.parametrize("raw, expected", [
    ("true", True),
    ("TRUE", True),
    ("False", False),
])
def test_boolean_coercion(raw, expected):
    assert coerce(CellValue.boolean(not expected), raw) == CellValue.boolean(expected)


@pytest.mark.parametrize("raw", ["yes", "1", "", " true", "t"])
def test_boolean_coercion_is_exact(raw):
    row = {"Reelected": CellValue.boolean(True)}
    with pytest.raises(CoercionError):
        edit(row, "Reelected", raw)
    assert row["Reelected"] == CellValue.boolean(True)


# ============================================================================
# Dates
# ============================================================================

def test_date_coercion(inauguration_day):
    cell = CellValue.date(inauguration_day)

    assert coerce(cell, "1997-01-20") == CellValue.date(dt.datetime(1997, 1, 20))
    assert coerce(cell, "1997-01-20T12:05:00").value == dt.datetime(1997, 1, 20, 12, 5)


@pytest.mark.parametrize("raw", ["forty", "", "20/01/1997", "1997-13-40"])
def test_date_coercion_rejects_non_iso(raw, inauguration_day):
    row = {"Inaugurated": CellValue.date(inauguration_day)}
    with pytest.raises(CoercionError):
        edit(row, "Inaugurated", raw)
    assert row["Inaugurated"].value == inauguration_day


# ============================================================================
# Strings
# ============================================================================

@pytest.mark.parametrize("raw", ["William Clinton", "", "43", "true", "1997-01-20", "  padded  "])
def test_string_edits_always_succeed_verbatim(raw):
    row = {"Name": CellValue.string("Bill Clinton")}
    edit(row, "Name", raw)
    assert row["Name"] == CellValue.string(raw)


# ============================================================================
# Addressing and notification
# ============================================================================

def test_edit_unknown_column_raises_key_error():
    with pytest.raises(KeyError):
        edit({"Name": CellValue.string("x")}, "Party", "D")


def test_edit_cell_notifies_only_on_success(presidents_table):
    seen = []
    presidents_table.subscribe(seen.append)

    value = edit_cell(presidents_table, 1, "Index", "47")
    assert value == CellValue.number(47)
    assert presidents_table.get(1, "Index") == CellValue.number(47)
    assert len(seen) == 1

    with pytest.raises(CoercionError):
        edit_cell(presidents_table, 1, "Index", "forty-seven")
    assert len(seen) == 1
    assert presidents_table.get(1, "Index") == CellValue.number(47)
