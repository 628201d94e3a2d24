"""
Typed cell values.

**Conceptual**: A cell holds exactly one of four kinds of value: string,
number, date, or boolean. The kind is carried explicitly (CellKind) instead
of being rediscovered from the Python type at edit time, so coercion can
dispatch on a closed set of tags.

**Payloads**:
  - STRING: str
  - NUMBER: int or finite float
  - DATE: naive datetime.datetime
  - BOOLEAN: bool

`from_python` is the single place that maps library values (pandas,
numpy, openpyxl) onto the union. `to_python` goes the other way for
writers.
"""

import datetime as dt
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

import numpy as np
import pandas as pd


class CellKind(str, Enum):
    """Semantic type of a cell."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


Payload = Union[str, int, float, dt.datetime, bool]


@dataclass(frozen=True)
class CellValue:
    """
    One cell: a kind tag plus its payload.

    Use the `string`, `number`, `date` and `boolean` constructors rather than
    building instances by hand; they normalise the payload for the kind.
    """
    kind: CellKind
    value: Payload

    def __post_init__(self):
        if not _payload_matches(self.kind, self.value):
            raise TypeError(
                f"Payload {self.value!r} ({type(self.value).__name__}) "
                f"is not valid for a {self.kind.value} cell"
            )

    @classmethod
    def string(cls, value: str) -> "CellValue":
        return cls(CellKind.STRING, value)

    @classmethod
    def number(cls, value: Union[int, float]) -> "CellValue":
        return cls(CellKind.NUMBER, value)

    @classmethod
    def date(cls, value: Union[dt.date, dt.datetime]) -> "CellValue":
        if not isinstance(value, dt.datetime):
            value = dt.datetime(value.year, value.month, value.day)
        return cls(CellKind.DATE, value)

    @classmethod
    def boolean(cls, value: bool) -> "CellValue":
        return cls(CellKind.BOOLEAN, value)

    def display(self) -> str:
        """Text shown for the cell in a table view."""
        if self.kind is CellKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind is CellKind.DATE:
            return format_date(self.value)
        return str(self.value)


def _payload_matches(kind: CellKind, value: Any) -> bool:
    if kind is CellKind.STRING:
        return isinstance(value, str)
    if kind is CellKind.BOOLEAN:
        return isinstance(value, bool)
    if kind is CellKind.NUMBER:
        return (
            isinstance(value, (int, float))
            and not isinstance(value, bool)
            and math.isfinite(value)
        )
    if kind is CellKind.DATE:
        return isinstance(value, dt.datetime) and value.tzinfo is None
    return False


def format_date(value: dt.datetime) -> str:
    """
    ISO date when the time is midnight, otherwise ISO date and time.

    Microseconds are written only when present, so sub-second times survive
    a text round trip.
    """
    if value.time() == dt.time(0, 0):
        return value.strftime("%Y-%m-%d")
    if value.microsecond:
        return value.strftime("%Y-%m-%d %H:%M:%S.%f")
    return value.strftime("%Y-%m-%d %H:%M:%S")


def is_missing(value: Any) -> bool:
    """True for None, NaN, NaT and NA (how the readers spell an empty cell)."""
    if value is None or value is pd.NaT or value is pd.NA:
        return True
    if isinstance(value, (float, np.floating)):
        return math.isnan(value)
    return False


def from_python(value: Any) -> CellValue:
    """
    Classify a decoded library value into a CellValue.

    Booleans are checked before numbers (bool is an int subclass). Empty
    cells become empty strings so every record keeps the full header set.
    Anything outside the four kinds is stringified.
    """
    if isinstance(value, CellValue):
        return value
    if is_missing(value):
        return CellValue.string("")
    if isinstance(value, (bool, np.bool_)):
        return CellValue.boolean(bool(value))
    if isinstance(value, (int, np.integer)):
        return CellValue.number(int(value))
    if isinstance(value, (float, np.floating)):
        if not math.isfinite(value):
            return CellValue.string(str(value))
        return CellValue.number(float(value))
    if isinstance(value, pd.Timestamp):
        return CellValue.date(_naive(value.to_pydatetime()))
    if isinstance(value, dt.datetime):
        return CellValue.date(_naive(value))
    if isinstance(value, dt.date):
        return CellValue.date(value)
    if isinstance(value, np.datetime64):
        return CellValue.date(_naive(pd.Timestamp(value).to_pydatetime()))
    if isinstance(value, str):
        return CellValue.string(value)
    return CellValue.string(str(value))


def to_python(cell: CellValue) -> Payload:
    """Payload handed to the spreadsheet writers."""
    return cell.value


def _naive(value: dt.datetime) -> dt.datetime:
    # Spreadsheet cells carry no zone; keep wall-clock time in UTC terms
    if value.tzinfo is not None:
        value = value.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return value
