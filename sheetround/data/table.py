"""
In-memory table model.

**Conceptual**: A Table is an ordered list of headers plus an ordered list of
records (dicts from column name to CellValue). It is the single piece of
mutable state in the pipeline: the loader creates it, the cell editor mutates
its records in place, and the exporter reads it.

**No hidden copies**: `rows()` yields the live record dicts and `set` writes
straight into them, so every reader sees a mutation immediately. The model
is single-writer; there is no locking and no read/write isolation.

**Change notification**: mutations do not notify anyone by themselves.
Whoever drives an edit calls `notify()` when observers (a view, a session)
should refresh. This keeps the model free of any UI framework.
"""

import logging
from typing import Callable, Dict, Iterator, List, Sequence

import pandas as pd

from sheetround.data.cells import CellValue, to_python
from sheetround.data.schemas import validate_headers, validate_records

logger = logging.getLogger(__name__)

Record = Dict[str, CellValue]
Observer = Callable[["Table"], None]


class Table:
    """
    Headers plus mutable, ordered records.

    Example:
        >>> table = Table(
        ...     ["Name", "Index"],
        ...     [{"Name": CellValue.string("Bill Clinton"), "Index": CellValue.number(42)}],
        ... )
        >>> table.get(0, "Index").value
        42
        >>> [record["Name"].value for record in table.rows()]
        ['Bill Clinton']
    """

    def __init__(self, headers: Sequence[str], records: List[Record], context: str | None = None):
        """
        Build a table, validating the shape invariants.

        Args:
            headers: Column names in display order (unique, non-empty).
            records: Row dicts; each key set must equal the header set. The
                     list and its dicts are adopted, not copied.
            context: Optional source description for error messages.

        Raises:
            SchemaValidationError: If headers or records break the invariants.
        """
        self._headers = validate_headers(headers, context=context)
        validate_records(self._headers, records, context=context)
        self._records = records
        self._observers: List[Observer] = []

    @property
    def headers(self) -> List[str]:
        """Column names in display order (a copy; headers are fixed per table)."""
        return list(self._headers)

    def __len__(self) -> int:
        return len(self._records)

    def rows(self) -> Iterator[Record]:
        """
        Lazily iterate the live records.

        Each call returns a fresh generator, so iteration can be restarted.
        """
        return (record for record in self._records)

    def record(self, row_index: int) -> Record:
        """Return the live record at `row_index` (IndexError when out of range)."""
        if row_index < 0 or row_index >= len(self._records):
            raise IndexError(
                f"Row index {row_index} out of range for table with {len(self._records)} rows"
            )
        return self._records[row_index]

    def get(self, row_index: int, column: str) -> CellValue:
        """Return the cell at (row_index, column)."""
        record = self.record(row_index)
        self._check_column(column)
        return record[column]

    def set(self, row_index: int, column: str, value: CellValue) -> None:
        """
        Replace the cell at (row_index, column) in place.

        Does not notify observers; see `notify()`.
        """
        if not isinstance(value, CellValue):
            raise TypeError(f"Table cells must be CellValue, got {type(value).__name__}")
        record = self.record(row_index)
        self._check_column(column)
        record[column] = value

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register an observer called with the table on every `notify()`.

        Returns:
            A function that removes the observer again.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def notify(self) -> None:
        """Tell every observer that the table changed."""
        logger.debug("Notifying %d observer(s) of table change", len(self._observers))
        for observer in list(self._observers):
            observer(self)

    def to_frame(self) -> pd.DataFrame:
        """
        Snapshot the table as a DataFrame in header order.

        The frame holds plain payloads (str, int/float, datetime, bool) in
        object columns so each cell keeps its own type.
        """
        data = {
            header: pd.Series(
                [to_python(record[header]) for record in self._records],
                dtype=object,
            )
            for header in self._headers
        }
        return pd.DataFrame(data, columns=self._headers)

    def _check_column(self, column: str) -> None:
        if column not in self._headers:
            raise KeyError(
                f"Unknown column {column!r}. Available columns: {self._headers}"
            )

    def __repr__(self) -> str:
        return f"Table(headers={self._headers!r}, rows={len(self._records)})"
