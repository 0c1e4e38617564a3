##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Renderers that turn rows and column names into text.

These functions know nothing about databases. They take column names and an
iterable of rows and write delimited text, formatted tables, JSON documents,
or SQL insert statements.
"""

import csv
import json
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Optional, Sequence, TextIO

from tabulate import tabulate


DEFAULT_MAX_COL_WIDTH = 30
DEFAULT_NULL_TEXT = "NULL"


def write_delimited(
    out: TextIO, column_names: Sequence[str], rows: Iterable[Sequence[Any]], header: bool = True, delimiter: str = ","
) -> int:
    """
    Write rows as delimited text. NULL cells are written as empty fields.

    Args:
        out: The text sink.
        column_names: The names written in the header row.
        rows: The rows to write.
        header: Whether to write the header row.
        delimiter: The field delimiter.

    Returns:
        The number of data rows written.
    """
    writer = csv.writer(out, delimiter=delimiter, lineterminator="\n")
    if header:
        writer.writerow(column_names)
    count = 0
    for row in rows:
        writer.writerow(row)
        count += 1
    return count


def _display_cell(value: Any, max_col_width: int, null_text: str) -> str:
    if value is None:
        return null_text
    text = value.hex() if isinstance(value, (bytes, bytearray)) else str(value)
    if max_col_width and len(text) > max_col_width:
        return text[: max(max_col_width - 3, 1)] + "..."
    return text


def format_table(
    column_names: Sequence[str],
    rows: Iterable[Sequence[Any]],
    title: Optional[str] = None,
    tablefmt: str = "grid",
    max_col_width: int = DEFAULT_MAX_COL_WIDTH,
    null_text: str = DEFAULT_NULL_TEXT,
) -> str:
    """
    Render rows as a formatted text table.

    Args:
        column_names: The column headers.
        rows: The rows to render.
        title: Optional line written above the table.
        tablefmt: The `tabulate` table format, e.g. `grid` or `github`.
        max_col_width: Cells longer than this are cut off and end in `...`. 0 disables the limit.
        null_text: Text shown for NULL cells.

    Returns:
        The rendered table.
    """
    cells = [[_display_cell(value, max_col_width, null_text) for value in row] for row in rows]
    headers = [_display_cell(name, max_col_width, null_text) for name in column_names]
    table = tabulate(cells, headers=headers, tablefmt=tablefmt, disable_numparse=True)
    if title:
        return f"{title}\n{table}\n"
    return f"{table}\n"


def _json_value(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    return value


def table_document(
    table_name: str, schema_name: Optional[str], column_names: Sequence[str], rows: Iterable[Sequence[Any]]
) -> Dict[str, Any]:
    """
    Build a JSON-ready document describing one table and its rows.

    Args:
        table_name: The table name.
        schema_name: The schema holding the table.
        column_names: The column names.
        rows: The rows of the table.

    Returns:
        A dictionary with `table`, `schema`, `columns`, and `rows` keys. Each row is a
            mapping of column name to value.
    """
    columns = list(column_names)
    records: List[Dict[str, Any]] = [
        {name: _json_value(value) for name, value in zip(columns, row)} for row in rows
    ]
    return {"table": table_name, "schema": schema_name, "columns": columns, "rows": records}


def write_json(out: TextIO, document: Dict[str, Any]):
    """
    Write a document as indented JSON followed by a newline.

    Args:
        out: The text sink.
        document: The document to write.
    """
    json.dump(document, out, indent=2, default=str)
    out.write("\n")


def sql_literal(value: Any) -> str:
    """
    Render a value as an SQL literal.

    Args:
        value: The value to render.

    Returns:
        The literal, e.g. `NULL`, `42`, `'O''Brien'`, or `X'00ff'`.
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (bytes, bytearray)):
        return f"X'{value.hex()}'"
    if isinstance(value, (datetime, date, time)):
        value = value.isoformat()
    text = str(value).replace("'", "''")
    return f"'{text}'"


def insert_statement(qualified_table: str, quoted_columns: Sequence[str], row: Sequence[Any]) -> str:
    """
    Build one INSERT statement that recreates a row.

    Args:
        qualified_table: The quoted, qualified table name.
        quoted_columns: The quoted column names.
        row: The values of the row.

    Returns:
        The statement, terminated with `;`.
    """
    values = ", ".join(sql_literal(value) for value in row)
    return f"INSERT INTO {qualified_table} ({', '.join(quoted_columns)}) VALUES ({values});"
