"""
Load / edit / export session: the explicit owner of the current Table.

**Conceptual**: A SheetSession holds at most one Table and drives it through
the pipeline states:

    UNLOADED -> LOADING -> LOADED -> (edits) -> EXPORTING -> EXPORTED
                   |                               |
                   v                               v
              LOAD_FAILED                    EXPORT_FAILED

Both failed states are recoverable: call `load` or `export` again.

**Last load wins**: every load takes a generation token from `begin_load()`.
Only the result carrying the newest token may replace the table; a slower,
older load that resolves later is discarded without touching the table.

**Single writer**: edits are refused while a load is in flight. There is no
locking; the caller serializes user actions.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional

from sheetround.config.settings import ExportSettings
from sheetround.data.cells import CellValue
from sheetround.data.editor import edit_cell
from sheetround.data.io import decode_table, encode_table
from sheetround.data.schemas import EncodeError
from sheetround.data.table import Table
from sheetround.venues.base import SheetBytes, SheetSource

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Pipeline states."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"
    EXPORTING = "exporting"
    EXPORTED = "exported"
    EXPORT_FAILED = "export_failed"


SessionObserver = Callable[["SheetSession"], None]


class SheetSession:
    """
    Owns the current table and enforces the pipeline state machine.

    Example:
        >>> session = SheetSession()
        >>> session.load(FileSheetSource("pres.xlsx"))
        >>> session.edit(0, "Index", "43")
        >>> payload = session.export()
    """

    def __init__(self, export_settings: Optional[ExportSettings] = None):
        self.export_settings = export_settings or ExportSettings()
        self.state = SessionState.UNLOADED
        self.last_error: Optional[Exception] = None
        self._table: Optional[Table] = None
        self._generation = 0
        self._pending = 0
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._observers: List[SessionObserver] = []

    @property
    def table(self) -> Optional[Table]:
        """The current table, or None before the first successful load."""
        return self._table

    @property
    def generation(self) -> int:
        """Token of the most recently issued load."""
        return self._generation

    @property
    def pending_loads(self) -> int:
        """Number of loads started but not yet applied, failed or discarded."""
        return self._pending

    def subscribe(self, observer: SessionObserver) -> None:
        """Call `observer(session)` whenever the table is replaced or edited."""
        self._observers.append(observer)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def begin_load(self) -> int:
        """
        Start a load and return its generation token.

        Issuing a new token makes every earlier in-flight load stale.
        """
        self._generation += 1
        self._pending += 1
        self.state = SessionState.LOADING
        logger.debug("Load %d started", self._generation)
        return self._generation

    def is_current(self, token: int) -> bool:
        """True if `token` belongs to the newest load."""
        return token == self._generation

    def complete_load(
        self,
        token: int,
        raw: bytes,
        format_tag: Optional[str] = None,
        context: Optional[str] = None,
    ) -> bool:
        """
        Decode `raw` and install it as the table if `token` is still current.

        Returns:
            True if the table was replaced, False if the load was stale and
            its result discarded.

        Raises:
            DecodeError: If the current load's bytes cannot be decoded. The
                         previous table stays in place.
        """
        if not self.is_current(token):
            self._discard(token)
            return False

        try:
            table = decode_table(raw, format_tag, context=context)
        except Exception as e:
            self.fail_load(token, e)
            raise

        return self._apply(token, table)

    def fail_load(self, token: int, error: Exception) -> bool:
        """
        Record that the load `token` failed.

        Returns:
            True if the failure was recorded, False if the load was stale.
        """
        if not self.is_current(token):
            self._discard(token)
            return False

        self._pending -= 1
        self.state = SessionState.LOAD_FAILED
        self.last_error = error
        logger.warning("Load %d failed: %s", token, error)
        return True

    def load(self, source: SheetSource) -> Table:
        """
        Fetch and decode `source` synchronously, replacing the table.

        Any failure, including one a source raises outside the SourceError
        family, marks the load failed before propagating, so the session
        never stays in LOADING.

        Raises:
            SourceError: If the bytes cannot be fetched.
            DecodeError: If the bytes cannot be decoded.
        """
        token = self.begin_load()
        try:
            sheet = source.fetch()
        except Exception as e:
            self.fail_load(token, e)
            raise

        self.complete_load(token, sheet.payload, sheet.format_tag, context=sheet.name)
        return self._table

    async def load_async(self, source: SheetSource) -> Optional[Table]:
        """
        Fetch and decode `source` in a worker thread.

        Other coroutines keep running while the fetch is in flight. If a newer
        load is issued before this one resolves, this result is discarded
        (errors included) and None is returned.

        Raises:
            SourceError: If the current load cannot fetch its bytes.
            DecodeError: If the current load's bytes cannot be decoded.
        """
        token = self.begin_load()
        try:
            table = await asyncio.to_thread(_fetch_and_decode, source)
        except Exception as e:
            if self.fail_load(token, e):
                raise
            return None

        if not self.is_current(token):
            self._discard(token)
            return None

        self._apply(token, table)
        return table

    def _apply(self, token: int, table: Table) -> bool:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._table = table
        self._unsubscribe = table.subscribe(lambda _table: self._notify())
        self._pending -= 1
        self.state = SessionState.LOADED
        self.last_error = None
        logger.info("Load %d applied: %r", token, table)
        self._notify()
        return True

    def _discard(self, token: int) -> None:
        self._pending -= 1
        logger.info("Discarding stale load %d (latest is %d)", token, self._generation)

    # ------------------------------------------------------------------
    # Editing and export
    # ------------------------------------------------------------------

    def edit(self, row_index: int, column: str, raw_input: str) -> CellValue:
        """
        Edit one cell, coercing `raw_input` to the cell's kind.

        Raises:
            RuntimeError: If no table is loaded or a load is in flight.
            CoercionError: If the input does not fit; the cell is unchanged.
        """
        table = self._require_table("edit")
        if self.state is SessionState.LOADING:
            raise RuntimeError("Cannot edit while a load is in flight")

        value = edit_cell(table, row_index, column, raw_input)
        self.state = SessionState.LOADED
        return value

    def export(
        self,
        format_tag: Optional[str] = None,
        sheet_name: Optional[str] = None,
    ) -> bytes:
        """
        Serialize the current table.

        Args:
            format_tag: Output format; defaults to the export settings.
            sheet_name: Sheet title for xlsx; defaults to the export settings.

        Raises:
            RuntimeError: If no table is loaded or a load is in flight.
            EncodeError: If the table cannot be written. No bytes are returned
                         and the table is unchanged.
        """
        table = self._require_table("export")
        if self.state is SessionState.LOADING:
            raise RuntimeError("Cannot export while a load is in flight")

        self.state = SessionState.EXPORTING
        try:
            payload = encode_table(
                table,
                format_tag or self.export_settings.format_tag,
                sheet_name or self.export_settings.sheet_name,
            )
        except EncodeError as e:
            self.state = SessionState.EXPORT_FAILED
            self.last_error = e
            logger.warning("Export failed: %s", e)
            raise

        self.state = SessionState.EXPORTED
        self.last_error = None
        return payload

    def _require_table(self, action: str) -> Table:
        if self._table is None:
            raise RuntimeError(f"Cannot {action}: no table has been loaded")
        return self._table

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer(self)


def _fetch_and_decode(source: SheetSource) -> Table:
    sheet: SheetBytes = source.fetch()
    return decode_table(sheet.payload, sheet.format_tag, context=sheet.name)
