##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Connection source for single-file SQLite databases.

This module defines the `SQLiteConnectionSource` class, which opens connections to
one SQLite file (optionally read-only) and reads the file's catalog. The schemas of a
SQLite connection are `main` plus any attached databases.
"""

import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from simdb.engines.connection_source import ConnectionSource, open_sqlite_connection


LOG = logging.getLogger(__name__)

MAIN_SCHEMA = "main"


def read_only_uri(path: str) -> str:
    """
    Build the URI that opens a SQLite file read-only.

    Args:
        path: The path of the database file.

    Returns:
        A `file:` URI with `mode=ro`.
    """
    return f"{Path(path).resolve().as_uri()}?mode=ro"


class SQLiteConnectionSource(ConnectionSource):
    """
    Opens connections to a single SQLite database file.

    Attributes:
        path (str): The path of the database file.
        journal_mode (Optional[str]): Journal mode applied to writable connections.
        foreign_keys (bool): Whether connections enforce foreign keys.
        read_only (bool): Whether connections are opened read-only.

    Methods:
        connect: Open a configured connection to the file.
        list_schemas: List `main` and any attached databases.
        native_schema: Map None to `main`.
    """

    def __init__(
        self, path: str, journal_mode: Optional[str] = None, foreign_keys: bool = True, read_only: bool = False
    ):
        """
        Initialize the source. Nothing is opened until `connect` is called.

        Args:
            path: The path of the database file.
            journal_mode: Journal mode applied to writable connections.
            foreign_keys: Whether connections enforce foreign keys.
            read_only: Whether connections are opened read-only.
        """
        super().__init__(path)
        self.journal_mode = journal_mode
        self.foreign_keys = foreign_keys
        self.read_only = read_only

    def connect(self) -> sqlite3.Connection:
        """
        Open a configured connection to the database file.

        Returns:
            A sqlite connection.
        """
        if self.read_only:
            return open_sqlite_connection(read_only_uri(self.path), foreign_keys=self.foreign_keys, uri=True)
        return open_sqlite_connection(self.path, journal_mode=self.journal_mode, foreign_keys=self.foreign_keys)

    def list_schemas(self, conn: sqlite3.Connection) -> List[Optional[str]]:
        """
        List the schemas of the connection, `main` first. The `temp` schema is left out.

        Args:
            conn: An open connection from this source.

        Returns:
            The schema names.
        """
        cursor = conn.execute("PRAGMA database_list")
        try:
            return [row[1] for row in cursor.fetchall() if row[1] != "temp"]
        finally:
            cursor.close()

    def native_schema(self, schema_name: Optional[str]) -> str:
        """
        Map a schema name to the name the connection knows it by.

        Args:
            schema_name: A schema name, or None for `main`.

        Returns:
            The schema name to use in SQL.
        """
        return MAIN_SCHEMA if schema_name is None else schema_name
