"""
Single-cell editing with type-preserving coercion.

**Conceptual**: An edit arrives as raw text (whatever the user typed into an
input box). The cell's *current* kind decides how that text is read:

  - NUMBER: numeric literal; int when it is an integer literal, else float.
  - BOOLEAN: exactly "true" or "false", case-insensitive.
  - DATE: ISO-8601 date or date-time.
  - STRING: taken verbatim, never fails.

A successful edit replaces the cell with a value of the same kind. A failed
edit raises CoercionError and leaves the cell exactly as it was; an edit
never changes a column's type for that row.
"""

import datetime as dt
import logging
import math

import pandas as pd

from sheetround.data.cells import CellKind, CellValue
from sheetround.data.schemas import CoercionError
from sheetround.data.table import Record, Table

logger = logging.getLogger(__name__)


def coerce(cell: CellValue, raw_input: str, column: str = "") -> CellValue:
    """
    Read `raw_input` as a value of `cell`'s kind.

    Args:
        cell: The current cell; only its kind is used.
        raw_input: Text entered by the user.
        column: Column name, used in error messages.

    Returns:
        A new CellValue of the same kind.

    Raises:
        CoercionError: If the text is not a valid literal for the kind.
    """
    kind = cell.kind
    if kind is CellKind.NUMBER:
        return CellValue.number(_parse_number(raw_input, column))
    if kind is CellKind.BOOLEAN:
        return CellValue.boolean(_parse_boolean(raw_input, column))
    if kind is CellKind.DATE:
        return CellValue.date(_parse_date(raw_input, column))
    if kind is CellKind.STRING:
        return CellValue.string(raw_input)
    raise CoercionError(column, str(kind), raw_input, "unknown cell kind")


def edit(row: Record, column: str, raw_input: str) -> None:
    """
    Coerce `raw_input` into `row[column]`'s kind and store it in place.

    Raises:
        KeyError: If the record has no such column.
        CoercionError: If the input does not fit the cell's kind. The record
                       is not modified.
    """
    if column not in row:
        raise KeyError(f"Unknown column {column!r}. Available columns: {list(row)}")

    current = row[column]
    new_value = coerce(current, raw_input, column=column)
    row[column] = new_value
    logger.debug("Edited %r: %r -> %r", column, current.value, new_value.value)


def edit_cell(table: Table, row_index: int, column: str, raw_input: str) -> CellValue:
    """
    Edit one addressed cell of a table and notify the table's observers.

    Observers are only notified when the edit succeeds.

    Returns:
        The new cell value.
    """
    row = table.record(row_index)
    if column not in table.headers:
        raise KeyError(f"Unknown column {column!r}. Available columns: {table.headers}")
    edit(row, column, raw_input)
    table.notify()
    return row[column]


def _parse_number(raw_input: str, column: str) -> int | float:
    text = raw_input.strip()
    if not text:
        raise CoercionError(column, CellKind.NUMBER.value, raw_input, "empty input")

    try:
        return int(text)
    except ValueError:
        pass

    try:
        number = float(text)
    except ValueError:
        raise CoercionError(column, CellKind.NUMBER.value, raw_input, "not a number")

    if not math.isfinite(number):
        raise CoercionError(column, CellKind.NUMBER.value, raw_input, "number must be finite")
    return number


def _parse_boolean(raw_input: str, column: str) -> bool:
    lowered = raw_input.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise CoercionError(
        column, CellKind.BOOLEAN.value, raw_input, 'expected "true" or "false"'
    )


def _parse_date(raw_input: str, column: str) -> dt.datetime:
    text = raw_input.strip()
    if not text:
        raise CoercionError(column, CellKind.DATE.value, raw_input, "empty input")

    try:
        parsed = pd.to_datetime(text, format="ISO8601")
    except (ValueError, TypeError, OverflowError) as e:
        raise CoercionError(
            column, CellKind.DATE.value, raw_input, f"not an ISO-8601 date ({e})"
        ) from e

    if parsed is pd.NaT:
        raise CoercionError(column, CellKind.DATE.value, raw_input, "not an ISO-8601 date")

    value = parsed.to_pydatetime()
    if value.tzinfo is not None:
        value = value.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return value
