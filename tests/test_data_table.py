"""
Tests for the in-memory Table model (sheetround/data/table.py).

This module tests:
  - Shape invariants at construction (headers, record key sets).
  - get / set addressing and in-place mutation.
  - rows() laziness and restartability.
  - Observer notification.
"""

import datetime as dt

import pytest

from sheetround.data.cells import CellValue
from sheetround.data.schemas import SchemaValidationError
from sheetround.data.table import Table


def test_table_rejects_record_with_missing_column():
    with pytest.raises(SchemaValidationError) as exc_info:
        Table(["Name", "Index"], [{"Name": CellValue.string("Bill Clinton")}])

    assert "Row 0" in str(exc_info.value)
    assert "Index" in str(exc_info.value)


def test_table_rejects_duplicate_and_empty_headers():
    with pytest.raises(SchemaValidationError) as exc_info:
        Table(["Name", "Name"], [])
    assert "Duplicate header" in str(exc_info.value)

    with pytest.raises(SchemaValidationError):
        Table(["Name", ""], [])


def test_header_order_is_display_order_only():
    """Record dict order does not have to follow header order."""
    table = Table(
        ["Name", "Index"],
        [{"Index": CellValue.number(42), "Name": CellValue.string("Bill Clinton")}],
    )
    assert table.headers == ["Name", "Index"]
    assert table.get(0, "Name").value == "Bill Clinton"


def test_get_and_set(presidents_table):
    assert presidents_table.get(1, "Name") == CellValue.string("Joseph Biden")

    presidents_table.set(0, "Index", CellValue.number(43))
    assert presidents_table.get(0, "Index") == CellValue.number(43)


def test_set_mutates_live_records(presidents_table):
    """Readers holding a record see mutations immediately (no copies)."""
    first_row = next(presidents_table.rows())
    presidents_table.set(0, "Name", CellValue.string("William Clinton"))

    assert first_row["Name"].value == "William Clinton"
    assert presidents_table.record(0) is first_row


def test_rows_is_restartable(presidents_table):
    first_pass = [record["Name"].value for record in presidents_table.rows()]
    second_pass = [record["Name"].value for record in presidents_table.rows()]

    assert first_pass == ["Bill Clinton", "Joseph Biden"]
    assert second_pass == first_pass
    assert len(presidents_table) == 2


def test_bad_addresses(presidents_table):
    with pytest.raises(IndexError):
        presidents_table.get(2, "Name")
    with pytest.raises(IndexError):
        presidents_table.get(-1, "Name")
    with pytest.raises(KeyError):
        presidents_table.get(0, "Party")
    with pytest.raises(TypeError):
        presidents_table.set(0, "Index", 43)


def test_headers_property_is_a_copy(presidents_table):
    headers = presidents_table.headers
    headers.append("Party")
    assert presidents_table.headers == ["Name", "Index"]


def test_set_does_not_notify_but_notify_does(presidents_table):
    seen = []
    unsubscribe = presidents_table.subscribe(seen.append)

    presidents_table.set(0, "Index", CellValue.number(43))
    assert seen == []

    presidents_table.notify()
    assert seen == [presidents_table]

    unsubscribe()
    presidents_table.notify()
    assert len(seen) == 1


def test_to_frame_keeps_per_cell_types():
    table = Table(
        ["Name", "Inaugurated", "Reelected"],
        [{
            "Name": CellValue.string("Bill Clinton"),
            "Inaugurated": CellValue.date(dt.datetime(1993, 1, 20)),
            "Reelected": CellValue.boolean(True),
        }],
    )
    frame = table.to_frame()

    assert list(frame.columns) == ["Name", "Inaugurated", "Reelected"]
    assert frame.loc[0, "Inaugurated"] == dt.datetime(1993, 1, 20)
    assert frame.loc[0, "Reelected"] is True
