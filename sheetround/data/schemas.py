"""
Error taxonomy and table-shape validation for the sheet pipeline.

**Conceptual**: This module defines the "data contract" every in-memory table
must satisfy, and the exceptions each pipeline stage raises when input does
not fit that contract:

  - DecodeError: bytes could not become a table (empty, corrupt, zero rows).
  - CoercionError: an edit could not be coerced into the cell's existing type.
  - EncodeError: the table could not be serialized (nothing to write).

All three are recoverable conditions for the caller. None of them leave the
table in a half-modified state.

**Schema philosophy**:
  - Headers are unique, non-empty strings; their order is display order.
  - Every record's key set equals the header set.
  - Validation raises SchemaValidationError with actionable messages.
"""

from typing import Dict, Iterable, List


class SheetError(Exception):
    """
    Base exception for sheet pipeline errors.

    Callers can catch SheetError to handle every recoverable pipeline failure,
    or catch the specific subclasses for fine-grained handling.
    """
    pass


class DecodeError(SheetError):
    """
    Raised when a byte stream cannot be decoded into a table.

    **Causes**: empty byte stream, unknown format tag, corrupt container,
    duplicate headers, or a first sheet with zero data rows (no header set
    can be derived).

    **Recovery**: retry `load` with another source. The previous table, if
    any, is left untouched.
    """
    pass


class CoercionError(SheetError):
    """
    Raised when an edit's raw input is incompatible with the cell's type.

    Carries the column, the expected kind and the rejected input so that a UI
    can point at the offending cell.
    """

    def __init__(self, column: str, kind: str, raw_input: str, reason: str = ""):
        self.column = column
        self.kind = kind
        self.raw_input = raw_input
        message = f"Cannot set {column!r} ({kind}) from {raw_input!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class EncodeError(SheetError):
    """
    Raised when a table cannot be serialized.

    **Causes**: zero rows (no columns can be inferred), unsupported format
    tag, or a failure inside the spreadsheet writer.
    """
    pass


class SchemaValidationError(SheetError):
    """
    Raised when headers/records break the table shape invariants.

    Should include enough context (which row, which columns) for quick
    remediation.
    """
    pass


def validate_headers(headers: Iterable, context: str | None = None) -> List[str]:
    """
    Validate a header sequence and return it as a list.

    Args:
        headers: Column names in display order.
        context: Optional source description included in error messages.

    Returns:
        The headers as a list of strings.

    Raises:
        SchemaValidationError: If a header is not a non-empty string or is
                               duplicated.
    """
    ctx = f"{context}: " if context else ""
    headers = list(headers)

    for header in headers:
        if not isinstance(header, str) or not header:
            raise SchemaValidationError(
                f"{ctx}Header names must be non-empty strings, got {header!r}. "
                f"Headers: {headers}."
            )

    seen = set()
    duplicates = []
    for header in headers:
        if header in seen:
            duplicates.append(header)
        seen.add(header)
    if duplicates:
        raise SchemaValidationError(
            f"{ctx}Duplicate header names: {duplicates}. Headers: {headers}."
        )

    return headers


def validate_records(
    headers: List[str],
    records: Iterable[Dict],
    context: str | None = None,
) -> None:
    """
    Validate that every record's key set equals the header set.

    Raises:
        SchemaValidationError: On the first record whose keys differ, naming
                               the missing and unexpected columns.
    """
    ctx = f"{context}: " if context else ""
    expected = set(headers)

    for index, record in enumerate(records):
        keys = set(record)
        if keys != expected:
            missing = sorted(expected - keys)
            unexpected = sorted(keys - expected)
            raise SchemaValidationError(
                f"{ctx}Row {index} does not match headers. "
                f"Missing columns: {missing}. Unexpected columns: {unexpected}."
            )
