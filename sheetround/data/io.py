"""
Spreadsheet bytes <-> Table codecs.

**Conceptual**: This module is the *only* boundary between raw spreadsheet
bytes and the in-memory Table. Container parsing and writing is delegated
to pandas (openpyxl engine for .xlsx, the C parser for .csv); this module
owns everything on top of that:
  - choosing the first sheet,
  - deriving headers in first-seen order,
  - classifying every cell into a CellValue,
  - refusing empty input (DecodeError) and empty output (EncodeError).

**Rule**: Never call pd.read_excel / df.to_excel directly elsewhere. Always go
through decode_table / encode_table so the typing rules stay in one place.

**Round trip**: decode(encode(table)) reproduces the same headers and
type-equivalent values. Formatting and formulas are not preserved.
"""

import io
import logging
import re
from typing import Any, List, Optional, Tuple

import pandas as pd
from pandas.api.types import is_object_dtype, is_string_dtype

from sheetround.data.cells import CellKind, format_date, from_python, is_missing
from sheetround.data.schemas import (
    DecodeError,
    EncodeError,
    SchemaValidationError,
)
from sheetround.data.table import Record, Table

logger = logging.getLogger(__name__)


SUPPORTED_FORMATS = ("xlsx", "csv")

ZIP_MAGIC = b"PK\x03\x04"
OLE2_MAGIC = b"\xd0\xcf\x11\xe0"

# YYYY-MM-DD with an optional time part
ISO_DATE_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}(?:[ T]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?)?$"
)


def normalize_format(format_tag: str) -> str:
    """
    Canonical spelling of a format tag ("XLSX", ".xlsx" -> "xlsx").

    Does not check support; callers decide whether the tag is usable.
    """
    return format_tag.strip().lower().lstrip(".")


def sniff_format(raw: bytes) -> str:
    """
    Guess a format tag from the leading bytes.

    Zip containers are treated as xlsx and legacy OLE2 workbooks as xls
    (which decode_table rejects). Anything else is assumed to be CSV text.
    """
    if raw.startswith(ZIP_MAGIC):
        return "xlsx"
    if raw.startswith(OLE2_MAGIC):
        return "xls"
    return "csv"


def decode_table(
    raw: bytes,
    format_tag: Optional[str] = None,
    context: str | None = None,
) -> Table:
    """
    Decode spreadsheet bytes into a Table built from the first sheet.

    **Functionally**:
      - Picks a reader for the format tag (sniffed when not given).
      - Reads only the first sheet; the first row holds the headers.
      - Headers keep the sheet's column order and the first row's spelling;
        a repeated header name is a DecodeError.
      - Each cell is classified (string / number / date / boolean); blank
        cells become empty strings.

    Args:
        raw: The spreadsheet file contents.
        format_tag: "xlsx" or "csv" (case-insensitive, leading dot allowed).
                    When None, the format is sniffed from the bytes.
        context: Optional source description for error messages.

    Returns:
        A new Table.

    Raises:
        DecodeError: If the bytes are empty, the format is unsupported, the
                     container cannot be parsed, the header row is unusable,
                     or the first sheet has zero data rows.

    Example:
        >>> table = decode_table(Path("pres.xlsx").read_bytes(), "xlsx")
        >>> table.headers
        ['Name', 'Index']
    """
    context = context or "sheet"

    if not raw:
        raise DecodeError(f"{context}: Byte stream is empty; nothing to decode.")

    fmt = normalize_format(format_tag) if format_tag else sniff_format(raw)
    if fmt not in SUPPORTED_FORMATS:
        raise DecodeError(
            f"{context}: Unsupported format {fmt!r}. "
            f"Supported formats: {list(SUPPORTED_FORMATS)}."
        )

    try:
        if fmt == "xlsx":
            df, header_row = _read_xlsx(raw)
        else:
            df, header_row = _read_csv(raw)
    except DecodeError:
        raise
    except Exception as e:
        raise DecodeError(
            f"{context}: Failed to read {fmt} data. Error: {e}"
        ) from e

    if df.empty or len(df.columns) == 0:
        raise DecodeError(
            f"{context}: First sheet has no data rows; cannot derive headers."
        )

    headers = _header_names(header_row, df.columns)
    records: List[Record] = []
    for values in df.itertuples(index=False, name=None):
        records.append({
            header: from_python(value) for header, value in zip(headers, values)
        })

    try:
        table = Table(headers, records, context=context)
    except SchemaValidationError as e:
        raise DecodeError(str(e)) from e

    logger.info(
        "Decoded %s: %d rows x %d columns (%s)",
        context, len(table), len(headers), fmt,
    )
    return table


def encode_table(
    table: Table,
    format_tag: str = "xlsx",
    sheet_name: str = "Sheet1",
) -> bytes:
    """
    Encode a Table into spreadsheet bytes.

    **Functionally**:
      - Builds a column-oriented frame in `table.headers` order.
      - xlsx: writes a single sheet named `sheet_name` with openpyxl.
      - csv: writes UTF-8 text; dates as YYYY-MM-DD (or with time when not
        midnight), booleans as True/False.

    The table is read, never modified.

    Raises:
        EncodeError: If the table has zero rows, the format is unsupported,
                     or the writer fails.
    """
    if len(table) == 0:
        raise EncodeError(
            "Table has no rows; no columns can be inferred for export."
        )

    fmt = normalize_format(format_tag)
    if fmt not in SUPPORTED_FORMATS:
        raise EncodeError(
            f"Unsupported export format {fmt!r}. "
            f"Supported formats: {list(SUPPORTED_FORMATS)}."
        )

    frame = table.to_frame()

    try:
        if fmt == "xlsx":
            payload = _write_xlsx(frame, sheet_name)
        else:
            payload = _write_csv(table, frame)
    except Exception as e:
        raise EncodeError(f"Failed to write {fmt} data. Error: {e}") from e

    logger.info(
        "Encoded %d rows x %d columns as %s (%d bytes)",
        len(table), len(table.headers), fmt, len(payload),
    )
    return payload


def _read_xlsx(raw: bytes) -> Tuple[pd.DataFrame, List[Any]]:
    # sheet_name=0: first sheet only
    df = pd.read_excel(io.BytesIO(raw), sheet_name=0, engine="openpyxl")
    header_frame = pd.read_excel(
        io.BytesIO(raw), sheet_name=0, header=None, nrows=1, engine="openpyxl"
    )
    return df, _first_row(header_frame)


def _read_csv(raw: bytes) -> Tuple[pd.DataFrame, List[Any]]:
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DecodeError(f"CSV data is not valid UTF-8 text. Error: {e}") from e

    # Only truly empty fields are missing; "NA", "null" etc. stay strings
    df = pd.read_csv(io.StringIO(text), keep_default_na=False, na_values=[""])
    header_frame = pd.read_csv(
        io.StringIO(text), header=None, nrows=1, dtype=str,
        keep_default_na=False, na_values=[""],
    )

    for column in df.columns:
        series = df[column]
        if not (is_object_dtype(series) or is_string_dtype(series)):
            continue
        dates = _parse_iso_dates(series)
        if dates is not None:
            df[column] = dates
    return df, _first_row(header_frame)


def _first_row(frame: pd.DataFrame) -> List[Any]:
    if frame.empty:
        return []
    return frame.iloc[0].tolist()


def _header_names(header_row: List[Any], columns: pd.Index) -> List[str]:
    """
    Header names as the first row spells them.

    pandas renames repeated headers ("Name", "Name.1"), which would hide a
    duplicate from validation, so names are taken from the raw first row.
    Blank header cells keep pandas' placeholder ("Unnamed: 2").
    """
    names = []
    for position, column in enumerate(columns):
        if position < len(header_row) and not is_missing(header_row[position]):
            names.append(str(header_row[position]))
        else:
            names.append(str(column))
    return names


def _parse_iso_dates(series: pd.Series) -> Optional[pd.Series]:
    """
    Parse a text column as dates, or return None to leave it as text.

    The column converts only when every present value looks like an ISO
    date and parses to a real one; "2024-02-30" keeps the column as text.
    """
    present = [value for value in series if not is_missing(value)]
    if not present:
        return None
    if not all(isinstance(value, str) and ISO_DATE_PATTERN.match(value) for value in present):
        return None

    try:
        parsed = pd.to_datetime(series, format="ISO8601", errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None

    present_mask = series.map(lambda value: not is_missing(value)).astype(bool)
    if parsed[present_mask].isna().any():
        return None
    return parsed


def _write_xlsx(frame: pd.DataFrame, sheet_name: str) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()


def _write_csv(table: Table, frame: pd.DataFrame) -> bytes:
    # Dates are written as text explicitly so the reader's ISO detection
    # sees one consistent shape per column
    for header in table.headers:
        frame[header] = [
            format_date(cell.value) if cell.kind is CellKind.DATE else cell.value
            for cell in (record[header] for record in table.rows())
        ]
    return frame.to_csv(index=False).encode("utf-8")
