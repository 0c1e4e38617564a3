##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Reading and writing spreadsheet workbooks with openpyxl.

One sheet holds one table: the first row of the sheet holds the column names and
each following row holds one table row.
"""

import logging
from datetime import date, datetime, time
from typing import Any, Dict, Iterator, List, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from simdb.exceptions import ConfigurationError


LOG = logging.getLogger(__name__)

MAX_SHEET_NAME_LENGTH = 31


def new_workbook() -> Workbook:
    """
    Create an empty workbook without the default sheet.

    Returns:
        A workbook with no sheets.
    """
    workbook = Workbook()
    workbook.remove(workbook.active)
    return workbook


def sheet_name_for(table_name: str) -> str:
    """
    Get the sheet name used for a table. Excel limits sheet names to 31 characters.

    Args:
        table_name: The table name.

    Returns:
        The sheet name.
    """
    if len(table_name) > MAX_SHEET_NAME_LENGTH:
        LOG.warning(f"Table name '{table_name}' is too long for a sheet name and will be truncated.")
    return table_name[:MAX_SHEET_NAME_LENGTH]


def sheet_names_for(table_names: Sequence[str]) -> List[str]:
    """
    Get the sheet names of tables exported into one workbook.

    Sheet names are compared ignoring case, as spreadsheet programs do.

    Args:
        table_names: The table names, in sheet order.

    Returns:
        One sheet name per table.

    Raises:
        ConfigurationError: If two tables would get the same sheet name.
    """
    owners: Dict[str, str] = {}
    sheet_names = []
    for table_name in table_names:
        sheet_name = sheet_name_for(table_name)
        owner = owners.setdefault(sheet_name.lower(), table_name)
        if owner != table_name:
            raise ConfigurationError(
                f"Tables '{owner}' and '{table_name}' would both be written to sheet '{sheet_name}'. "
                f"Sheet names are limited to {MAX_SHEET_NAME_LENGTH} characters."
            )
        sheet_names.append(sheet_name)
    return sheet_names


def _cell_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    return value


def write_sheet(workbook: Workbook, table_name: str, column_names: Sequence[str], rows: Iterator[Sequence[Any]]) -> int:
    """
    Add a sheet holding one table to a workbook.

    Args:
        workbook: The workbook to add the sheet to.
        table_name: The table name, used as the sheet name.
        column_names: The column names, written as the first row.
        rows: The table rows.

    Returns:
        The number of data rows written.
    """
    worksheet = workbook.create_sheet(title=sheet_name_for(table_name))
    worksheet.append(list(column_names))
    count = 0
    for row in rows:
        worksheet.append([_cell_value(value) for value in row])
        count += 1
    LOG.debug(f"Wrote {count} rows to sheet {worksheet.title}")
    return count


def open_workbook_read_only(path: str) -> Workbook:
    """
    Open a workbook for reading only. The caller must close it.

    Args:
        path: The path of the workbook.

    Returns:
        The read-only workbook.
    """
    return load_workbook(path, read_only=True, data_only=True)


def _parameter(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def read_sheet_rows(worksheet: Worksheet, skip_first_row: bool = True) -> Iterator[List[Any]]:
    """
    Iterate over the rows of a sheet as lists of values ready to bind to SQL parameters.

    Rows whose cells are all empty are skipped. Dates and times become ISO strings.

    Args:
        worksheet: The sheet to read.
        skip_first_row: Whether to skip the first row (the header).

    Yields:
        One list of cell values per non-empty row.
    """
    min_row = 2 if skip_first_row else 1
    for row in worksheet.iter_rows(min_row=min_row, values_only=True):
        if all(value is None for value in row):
            continue
        yield [_parameter(value) for value in row]
