##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Lifecycle of single-file SQLite databases.

A path is a SQLite database when it exists, is a regular file (symlinks are not
followed), and a read-only connection to it can query `sqlite_master`. Deleting a
database also removes the journal and WAL files SQLite keeps next to it.
"""

import logging
import os
import sqlite3
import stat
from contextlib import closing
from typing import Optional, Union

from simdb.config.configfile import get_database_directory, get_setting
from simdb.db.database import Database
from simdb.engines.connection_source import open_sqlite_connection
from simdb.engines.embedded_engine import EmbeddedEngine
from simdb.engines.sqlite.sqlite_connection_source import MAIN_SCHEMA, SQLiteConnectionSource, read_only_uri
from simdb.exceptions import ConfigurationError, DataAccessError
from simdb.utils import ensure_directory_exists, expand_path


LOG = logging.getLogger(__name__)

SIDECAR_SUFFIXES = ("-journal", "-wal", "-shm")
PROBE_STATEMENT = "SELECT count(*) FROM sqlite_master"


def database_label(path: Union[str, os.PathLike]) -> str:
    """
    Derive a display label from a database path.

    Args:
        path: The database path.

    Returns:
        The final path component without its extension.
    """
    return os.path.splitext(os.path.basename(os.path.normpath(os.fspath(path))))[0]


class SQLiteEngine(EmbeddedEngine):
    """
    Embedded engine storing each database in one SQLite file.

    Attributes:
        name (str): `sqlite`.
        default_schema_name (str): `main`.
        journal_mode (str): Journal mode for new connections.
        foreign_keys (bool): Whether new connections enforce foreign keys.

    Methods:
        is_database: Check a path for a readable SQLite file.
        create_data_source: Build a `SQLiteConnectionSource`.
        create_database: Create a fresh database file, replacing any existing one.
        open_database: Open an existing database file.
        copy_database: Copy a database file with SQLite's online backup.
        delete_database: Delete a database file and its sidecar files.
    """

    name = "sqlite"
    default_schema_name = MAIN_SCHEMA

    def __init__(self, journal_mode: Optional[str] = None, foreign_keys: Optional[bool] = None):
        """
        Initialize the engine.

        Args:
            journal_mode: Journal mode for new connections. Defaults to the configured one.
            foreign_keys: Whether to enforce foreign keys. Defaults to the configured value.
        """
        self.journal_mode = journal_mode if journal_mode is not None else get_setting("database", "journal_mode")
        self.foreign_keys = foreign_keys if foreign_keys is not None else get_setting("database", "foreign_keys", True)

    def is_database(self, path: Union[str, os.PathLike]) -> bool:
        """
        Check whether `path` is a SQLite database file.

        Args:
            path: The path to check.

        Returns:
            True if the path is a regular file that SQLite can read.
        """
        try:
            path = os.fspath(path)
            if not os.path.lexists(path) or not stat.S_ISREG(os.lstat(path).st_mode):
                return False
            with closing(open_sqlite_connection(read_only_uri(path), foreign_keys=False, uri=True)) as conn:
                conn.execute(PROBE_STATEMENT).fetchone()
            return True
        except (OSError, ValueError, TypeError, sqlite3.Error) as exc:
            LOG.debug(f"'{path}' is not a SQLite database: {exc}")
            return False

    def create_data_source(self, path: Union[str, os.PathLike]) -> SQLiteConnectionSource:
        """
        Build a connection source bound to `path`.

        Args:
            path: The path of the database file.

        Returns:
            A connection source for the file.
        """
        return SQLiteConnectionSource(os.fspath(path), journal_mode=self.journal_mode, foreign_keys=self.foreign_keys)

    def create_database(self, name: str, directory: Optional[Union[str, os.PathLike]] = None) -> Database:
        """
        Create a fresh SQLite database file, deleting any existing one first.

        Args:
            name: The file name of the database, e.g. `results.db`.
            directory: The directory to create it in. Defaults to the configured database directory.

        Returns:
            A facade over the new, empty database.

        Raises:
            DataAccessError: If an existing database cannot be deleted or the file cannot be created.
        """
        directory = expand_path(directory) if directory is not None else get_database_directory()
        path = os.path.join(directory, name)
        if os.path.lexists(path):
            LOG.info(f"Deleting the existing database at {path} before creating a new one.")
            self.delete_database(path)

        ensure_directory_exists(directory)
        source = self.create_data_source(path)
        try:
            with source.connection() as conn:
                conn.execute(PROBE_STATEMENT).fetchone()
        except sqlite3.Error as exc:
            LOG.error(f"Unable to create SQLite database {path}: {exc}")
            raise DataAccessError(f"Unable to create SQLite database {path}") from exc

        LOG.info(f"Created SQLite database {path}")
        return Database(source, label=database_label(path), default_schema_name=self.default_schema_name)

    def open_database(self, path: Union[str, os.PathLike]) -> Database:
        """
        Open an existing SQLite database file.

        Args:
            path: The path of the database file.

        Returns:
            A facade over the database.

        Raises:
            ConfigurationError: If `path` is not a valid SQLite database.
        """
        if not self.is_database(path):
            raise ConfigurationError(f"The path '{path}' does not represent a valid SQLite database.")
        return Database(
            self.create_data_source(path), label=database_label(path), default_schema_name=self.default_schema_name
        )

    def copy_database(
        self, path: Union[str, os.PathLike], copy_name: str, directory: Union[str, os.PathLike]
    ) -> Database:
        """
        Copy a SQLite database to `directory/copy_name` using SQLite's online backup.

        Args:
            path: The path of the database to copy.
            copy_name: The file name of the copy.
            directory: The directory to place the copy in.

        Returns:
            A facade over the copy.

        Raises:
            ConfigurationError: If `path` is not a valid database or the destination already exists.
            DataAccessError: If the backup fails.
        """
        if not self.is_database(path):
            raise ConfigurationError(f"The path '{path}' does not represent a valid SQLite database.")
        directory = expand_path(directory)
        destination = os.path.join(directory, copy_name)
        if os.path.lexists(destination):
            raise ConfigurationError(f"A database named '{copy_name}' already exists in {directory}.")

        ensure_directory_exists(directory)
        try:
            with self.create_data_source(path).connection() as source_conn, closing(
                sqlite3.connect(destination)
            ) as destination_conn:
                source_conn.backup(destination_conn)
        except (OSError, sqlite3.Error) as exc:
            LOG.error(f"Unable to copy SQLite database {path} to {destination}: {exc}")
            raise DataAccessError(f"Unable to copy SQLite database {path} to {destination}") from exc

        LOG.info(f"Copied SQLite database {path} to {destination}")
        return self.open_database(destination)

    def delete_database(self, path: Union[str, os.PathLike]):
        """
        Delete a SQLite database file and its sidecar files. A missing file is ignored.

        Args:
            path: The path of the database file.

        Raises:
            DataAccessError: If a file exists but cannot be removed.
        """
        path = os.fspath(path)
        for target in (path,) + tuple(path + suffix for suffix in SIDECAR_SUFFIXES):
            if not os.path.lexists(target):
                continue
            try:
                os.remove(target)
            except OSError as exc:
                LOG.error(f"Unable to delete SQLite database {target}: {exc}")
                raise DataAccessError(f"Unable to delete SQLite database {target}") from exc
        LOG.debug(f"Deleted SQLite database {path}")
