##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Connection sources for embedded databases.

A connection source knows how to open live connections to one database and how to
read that database's catalog (schemas, tables, views, and column definitions). The
`ConnectionSource` abstract class defines that contract; each engine supplies its own
implementation. The helpers at module level hold the SQLite plumbing the engines share.
"""

import logging
import sqlite3
import sys
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Optional


LOG = logging.getLogger(__name__)


def quote_identifier(identifier: str) -> str:
    """
    Quote an SQL identifier so it can be embedded in a statement.

    Args:
        identifier: A table, view, column, or schema name.

    Returns:
        The identifier in double quotes with embedded quotes doubled.
    """
    return '"' + identifier.replace('"', '""') + '"'


def open_sqlite_connection(database: str, journal_mode: Optional[str] = None, foreign_keys: bool = True, **kwargs):
    """
    Open a SQLite connection in autocommit mode with simdb's standard settings.

    The connection enforces foreign keys (when asked), uses the requested journal
    mode, and returns `sqlite3.Row` objects so columns can be read by name or position.

    Args:
        database: The database path or URI.
        journal_mode: Optional journal mode, e.g. `DELETE` or `WAL`.
        foreign_keys: Whether to enforce foreign key constraints.
        **kwargs: Extra keyword arguments for `sqlite3.connect` (e.g. `uri=True`).

    Returns:
        The open connection.
    """
    connection_kwargs = {"check_same_thread": False}
    if sys.version_info < (3, 12):  # Autocommit wasn't added until python 3.12
        connection_kwargs["isolation_level"] = None
    else:
        connection_kwargs["autocommit"] = True
    connection_kwargs.update(kwargs)

    conn = sqlite3.connect(database, **connection_kwargs)
    if foreign_keys:
        conn.execute("PRAGMA foreign_keys=ON")
    if journal_mode:
        conn.execute(f"PRAGMA journal_mode={journal_mode}")
    conn.row_factory = sqlite3.Row
    return conn


def catalog_names(conn: sqlite3.Connection, native_schema: str, object_type: str) -> List[str]:
    """
    List the names of one kind of catalog object in a SQLite schema.

    Internal `sqlite_` objects are left out.

    Args:
        conn: An open connection.
        native_schema: The SQLite schema name (`main` or an attached name).
        object_type: `table` or `view`.

    Returns:
        The object names in alphabetical order.
    """
    cursor = conn.execute(
        f"SELECT name FROM {quote_identifier(native_schema)}.sqlite_master "
        "WHERE type = ? AND name NOT LIKE 'sqlite_%' ORDER BY name",
        (object_type,),
    )
    try:
        return [row[0] for row in cursor.fetchall()]
    finally:
        cursor.close()


class ConnectionSource(ABC):
    """
    Produces connections to one embedded database and reads its catalog.

    Attributes:
        path (str): The filesystem path of the database.
        supports_schemas (bool): False for sources without any notion of schemas. The
            facade then keys its table and view maps by None.

    Methods:
        connect: Open a new connection. The caller closes it.
        connection: Context manager around `connect` that always closes.
        list_schemas: List the schema names of the database.
        native_schema: Map a schema name to the name the connection knows it by.
        list_tables: List the tables of a schema.
        list_views: List the views of a schema.
        table_info: Read the column definitions of a table or view.
        qualify: Build the qualified, quoted name of a table.
    """

    supports_schemas: bool = True

    def __init__(self, path: str):
        self.path = path

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path={self.path!r})"

    @abstractmethod
    def connect(self) -> sqlite3.Connection:
        """
        Open a new connection to the database.

        Returns:
            A configured DB-API connection.
        """
        raise NotImplementedError("Subclasses of `ConnectionSource` must implement a `connect` method.")

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """
        Context manager yielding a new connection that is closed on exit.

        Yields:
            A configured DB-API connection.
        """
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()

    @abstractmethod
    def list_schemas(self, conn: sqlite3.Connection) -> List[Optional[str]]:
        """
        List the schema names of the database.

        Args:
            conn: An open connection from this source.

        Returns:
            The schema names, default schema first.
        """
        raise NotImplementedError("Subclasses of `ConnectionSource` must implement a `list_schemas` method.")

    @abstractmethod
    def native_schema(self, schema_name: Optional[str]) -> str:
        """
        Map a schema name to the name the connection knows it by.

        Args:
            schema_name: A schema name as reported by `list_schemas`, or None.

        Returns:
            The schema name to use in SQL.
        """
        raise NotImplementedError("Subclasses of `ConnectionSource` must implement a `native_schema` method.")

    def list_tables(self, conn: sqlite3.Connection, schema_name: Optional[str]) -> List[str]:
        """
        List the tables of a schema.

        Args:
            conn: An open connection from this source.
            schema_name: The schema to list.

        Returns:
            The table names in alphabetical order.
        """
        return catalog_names(conn, self.native_schema(schema_name), "table")

    def list_views(self, conn: sqlite3.Connection, schema_name: Optional[str]) -> List[str]:
        """
        List the views of a schema.

        Args:
            conn: An open connection from this source.
            schema_name: The schema to list.

        Returns:
            The view names in alphabetical order.
        """
        return catalog_names(conn, self.native_schema(schema_name), "view")

    def table_info(self, conn: sqlite3.Connection, table_name: str, schema_name: Optional[str]) -> List[tuple]:
        """
        Read the column definitions of a table or view.

        Args:
            conn: An open connection from this source.
            table_name: The table or view.
            schema_name: The schema holding it.

        Returns:
            Rows of `(cid, name, type, notnull, dflt_value, pk)`; empty if the table is unknown.
        """
        cursor = conn.execute(
            'SELECT cid, name, type, "notnull", dflt_value, pk FROM pragma_table_info(?, ?)',
            (table_name, self.native_schema(schema_name)),
        )
        try:
            return [tuple(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def qualify(self, table_name: str, schema_name: Optional[str]) -> str:
        """
        Build the qualified, quoted name of a table.

        Args:
            table_name: The table name.
            schema_name: The schema holding the table, or None for the connection's default.

        Returns:
            A name ready to be embedded in SQL, e.g. `"main"."ORDERS"`.
        """
        if schema_name is None:
            return quote_identifier(table_name)
        return f"{quote_identifier(self.native_schema(schema_name))}.{quote_identifier(table_name)}"
