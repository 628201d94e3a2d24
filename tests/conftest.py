"""
Pytest configuration file.

Ensures the repo root is on sys.path so that 'import sheetround...' works
without installing, and provides the shared presidents sheet fixtures.
"""
import datetime as dt
import io
import sys
from pathlib import Path

import pandas as pd
import pytest

# Add the repo root to sys.path
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from sheetround.data.cells import CellValue  # noqa: E402
from sheetround.data.table import Table  # noqa: E402


def make_presidents_table() -> Table:
    """The two-row sample table used throughout the tests."""
    return Table(
        ["Name", "Index"],
        [
            {"Name": CellValue.string("Bill Clinton"), "Index": CellValue.number(42)},
            {"Name": CellValue.string("Joseph Biden"), "Index": CellValue.number(46)},
        ],
    )


def make_mixed_frame() -> pd.DataFrame:
    """A frame with one column per cell kind."""
    return pd.DataFrame({
        "Name": ["Bill Clinton", "Joseph Biden"],
        "Index": [42, 46],
        "Inaugurated": pd.to_datetime(["1993-01-20", "2021-01-20"]),
        "Reelected": [True, False],
    })


def frame_to_xlsx_bytes(frames: dict) -> bytes:
    """Write {sheet_name: frame} to xlsx bytes with pandas directly."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for sheet_name, frame in frames.items():
            frame.to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()


@pytest.fixture
def presidents_table() -> Table:
    return make_presidents_table()


@pytest.fixture
def mixed_xlsx_bytes() -> bytes:
    return frame_to_xlsx_bytes({"Presidents": make_mixed_frame()})


@pytest.fixture
def presidents_csv_bytes() -> bytes:
    return b"Name,Index\nBill Clinton,42\nJoseph Biden,46\n"


@pytest.fixture
def inauguration_day() -> dt.datetime:
    return dt.datetime(1993, 1, 20)


@pytest.fixture
def make_xlsx():
    """Factory fixture: {sheet_name: frame} -> xlsx bytes."""
    return frame_to_xlsx_bytes
