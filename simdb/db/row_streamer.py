##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Lazy, forward-only iteration over the rows of an open query result.

The `RowStreamer` pulls rows from a DB-API cursor one at a time so a result set is
never materialized in full. It owns the cursor (and optionally the connection the
cursor came from) and releases both as soon as the result is exhausted or the
streamer is closed, whichever comes first.
"""

import logging
import sqlite3
from datetime import date, datetime
from types import TracebackType
from typing import Any, Callable, Iterator, List, Optional, Type

from simdb.db.column_metadata import ColumnMetaData, base_type_name


LOG = logging.getLogger(__name__)

CellReader = Callable[[Any, Optional[ColumnMetaData]], Any]

CELL_ERRORS = (ValueError, TypeError, OverflowError, sqlite3.Error)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str) and value.strip().lower() in ("true", "false", "1", "0"):
        return value.strip().lower() in ("true", "1")
    raise ValueError(f"{value!r} is not a boolean")


def _to_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


CONVERTERS = {
    "BOOLEAN": _to_bool,
    "DATE": _to_date,
    "DATETIME": _to_datetime,
    "TIMESTAMP": _to_datetime,
}


def read_cell(value: Any, column: Optional[ColumnMetaData]) -> Any:
    """
    Convert a raw cell value according to the declared type of its column.

    Values of columns declared `BOOLEAN`, `DATE`, `DATETIME`, or `TIMESTAMP` are turned
    into `bool`, `date`, and `datetime` objects. Everything else is returned as stored.

    Args:
        value: The raw value read from the cursor.
        column: The column the value belongs to, if known.

    Returns:
        The converted value. NULL stays None.

    Raises:
        ValueError: If the value cannot be converted to the declared type.
    """
    if value is None or column is None:
        return value
    converter = CONVERTERS.get(base_type_name(column.type_name))
    if converter is None:
        return value
    return converter(value)


class RowStreamer:
    """
    Single-pass, non-restartable stream of rows from an open cursor.

    The streamer probes the cursor for the next row the first time `has_next` is
    asked and keeps that row until `next_row` takes it, so asking `has_next` several
    times in a row never skips a row and calling `next_row` without asking first
    probes on its own. When the probe finds no row the cursor is closed right away.

    A cell that fails to convert becomes None and a warning is logged; the rest
    of the row and the rest of the stream are unaffected.

    The streamer is not thread-safe.

    Attributes:
        columns (List[ColumnMetaData]): The column descriptors of the result.
        column_count (int): The number of columns, fixed at construction.
        row_count (int): The number of rows produced so far.

    Methods:
        has_next: Check whether another row is available.
        next_row: Take the next row.
        close: Release the cursor and any owned connection. Safe to call twice.
    """

    def __init__(
        self,
        cursor: Any,
        columns: Optional[List[ColumnMetaData]] = None,
        connection: Any = None,
        cell_reader: CellReader = read_cell,
    ):
        """
        Initialize the streamer over an already-executed cursor.

        Args:
            cursor: A DB-API cursor holding the result of an executed query.
            columns: Column descriptors for the result. When omitted the column
                count comes from `cursor.description` and cells are returned unconverted.
            connection: A connection owned by this streamer, closed together with the cursor.
            cell_reader: Function converting a raw cell value given its column.
        """
        self._cursor = cursor
        self._connection = connection
        self._cell_reader = cell_reader
        self.columns: List[ColumnMetaData] = list(columns) if columns else []

        description = getattr(cursor, "description", None)
        if self.columns:
            self.column_count = len(self.columns)
        else:
            self.column_count = len(description) if description else 0
        self._names: List[str] = [entry[0] for entry in description] if description else []

        self.row_count = 0
        self._probed = False
        self._pending = None
        self._closed = False

    @property
    def column_names(self) -> List[str]:
        """The column labels of the result, in result order."""
        if self.columns:
            return [column.label for column in self.columns]
        return list(self._names)

    @property
    def closed(self) -> bool:
        """True once the cursor has been released."""
        return self._closed

    def has_next(self) -> bool:
        """
        Check whether another row is available, probing the cursor at most once per row.

        Returns:
            True if `next_row` will return a row.
        """
        if self._closed:
            return False
        if not self._probed:
            self._pending = self._cursor.fetchone()
            self._probed = True
            if self._pending is None:
                self.close()
        return self._pending is not None

    def next_row(self) -> List[Any]:
        """
        Take the next row.

        Returns:
            The cells of the row, in column order.

        Raises:
            StopIteration: If the stream is exhausted.
        """
        if not self._probed:
            self.has_next()
        if self._pending is None:
            raise StopIteration
        raw = self._pending
        self._pending = None
        self._probed = False
        row = self._convert(raw)
        self.row_count += 1
        return row

    def _convert(self, raw: Any) -> List[Any]:
        row = []
        for index in range(self.column_count):
            column = self.columns[index] if self.columns else None
            try:
                row.append(self._cell_reader(raw[index], column))
            except CELL_ERRORS as exc:
                name = column.label if column is not None else str(index)
                LOG.warning(f"Unable to read column '{name}' of row {self.row_count + 1}: {exc}. Using NULL.")
                row.append(None)
        return row

    def close(self):
        """
        Release the cursor and the owned connection, if any.
        """
        if self._closed:
            return
        self._closed = True
        self._pending = None
        try:
            self._cursor.close()
        finally:
            if self._connection is not None:
                self._connection.close()
        LOG.debug(f"Closed row stream after {self.row_count} rows.")

    def __iter__(self) -> Iterator[List[Any]]:
        return self

    def __next__(self) -> List[Any]:
        return self.next_row()

    def __enter__(self) -> "RowStreamer":
        return self

    def __exit__(self, exc_type: Type[Exception], exc_value: Exception, traceback: TracebackType):
        self.close()
