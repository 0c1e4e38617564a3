##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Lifecycle of directory databases.

A directory database is a directory (not a symlink to one) that contains:

- `log/`: the operational log directory,
- `seg0/`: the segment directory, one SQLite file per schema,
- `service.properties`: a regular file describing the database.

The default schema is `APP`.
"""

import logging
import os
import shutil
import sqlite3
import stat
from datetime import datetime
from typing import Callable, Optional, Union

from simdb import VERSION
from simdb.config.configfile import get_database_directory, get_setting
from simdb.db.database import Database
from simdb.engines.directory.directory_connection_source import (
    DEFAULT_SCHEMA,
    LOG_DIR,
    PROPERTIES_FILE,
    SEGMENT_DIR,
    DirectoryConnectionSource,
    read_properties,
    write_properties,
)
from simdb.engines.embedded_engine import EmbeddedEngine
from simdb.engines.sqlite.sqlite_engine import database_label
from simdb.exceptions import ConfigurationError, DataAccessError
from simdb.utils import ensure_directory_exists, expand_path


LOG = logging.getLogger(__name__)

FORMAT_VERSION = "1"


def _has_mode(path: str, check: Callable[[int], bool]) -> bool:
    return os.path.lexists(path) and check(os.lstat(path).st_mode)


class DirectoryEngine(EmbeddedEngine):
    """
    Embedded engine storing each database in a directory of schema segments.

    Attributes:
        name (str): `directory`.
        default_schema_name (str): `APP`.
        journal_mode (str): Journal mode for new connections.
        foreign_keys (bool): Whether new connections enforce foreign keys.

    Methods:
        is_database: Check a path for the directory layout.
        create_data_source: Build a `DirectoryConnectionSource`.
        create_database: Create a fresh database directory, replacing any existing one.
        open_database: Open an existing database directory.
        copy_database: Copy a database directory.
        delete_database: Delete a database directory.
    """

    name = "directory"
    default_schema_name = DEFAULT_SCHEMA

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
        Check whether `path` has the directory database layout.

        Args:
            path: The path to check.

        Returns:
            True if `path` is a directory holding `log/`, `seg0/`, and `service.properties`.
        """
        try:
            path = os.fspath(path)
            return (
                _has_mode(path, stat.S_ISDIR)
                and _has_mode(os.path.join(path, LOG_DIR), stat.S_ISDIR)
                and _has_mode(os.path.join(path, SEGMENT_DIR), stat.S_ISDIR)
                and _has_mode(os.path.join(path, PROPERTIES_FILE), stat.S_ISREG)
            )
        except (OSError, ValueError, TypeError) as exc:
            LOG.debug(f"'{path}' is not a directory database: {exc}")
            return False

    def create_data_source(self, path: Union[str, os.PathLike]) -> DirectoryConnectionSource:
        """
        Build a connection source bound to `path`.

        Args:
            path: The database directory.

        Returns:
            A connection source for the directory.
        """
        return DirectoryConnectionSource(
            os.fspath(path),
            default_schema=DEFAULT_SCHEMA,
            journal_mode=self.journal_mode,
            foreign_keys=self.foreign_keys,
        )

    def create_database(self, name: str, directory: Optional[Union[str, os.PathLike]] = None) -> Database:
        """
        Create a fresh directory database, deleting any existing one first.

        Args:
            name: The directory name of the database.
            directory: The directory to create it in. Defaults to the configured database directory.

        Returns:
            A facade over the new, empty database.

        Raises:
            DataAccessError: If an existing database cannot be deleted or the layout cannot be created.
        """
        directory = expand_path(directory) if directory is not None else get_database_directory()
        path = os.path.join(directory, name)
        if os.path.lexists(path):
            LOG.info(f"Deleting the existing database at {path} before creating a new one.")
            self.delete_database(path)

        source = self.create_data_source(path)
        try:
            ensure_directory_exists(source.log_dir)
            ensure_directory_exists(source.segment_dir)
            write_properties(
                os.path.join(path, PROPERTIES_FILE),
                {
                    "engine": self.name,
                    "format.version": FORMAT_VERSION,
                    "default.schema": DEFAULT_SCHEMA,
                    "created": datetime.now().isoformat(timespec="seconds"),
                    "created.by": f"simdb {VERSION}",
                },
            )
            with source.connection() as conn:
                conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
            source.append_log("created database")
        except (OSError, sqlite3.Error) as exc:
            LOG.error(f"Unable to create directory database {path}: {exc}")
            raise DataAccessError(f"Unable to create directory database {path}") from exc

        LOG.info(f"Created directory database {path}")
        return Database(source, label=database_label(path), default_schema_name=self.default_schema_name)

    def open_database(self, path: Union[str, os.PathLike]) -> Database:
        """
        Open an existing directory database.

        Args:
            path: The database directory.

        Returns:
            A facade over the database.

        Raises:
            ConfigurationError: If `path` does not have the directory database layout,
                or its `service.properties` names another engine.
        """
        if not self.is_database(path):
            raise ConfigurationError(f"The path '{path}' does not represent a valid directory database.")
        owner = read_properties(os.path.join(os.fspath(path), PROPERTIES_FILE)).get("engine")
        if owner != self.name:
            raise ConfigurationError(
                f"The directory database at '{path}' belongs to engine '{owner}', not '{self.name}'."
            )
        source = self.create_data_source(path)
        return Database(source, label=database_label(path), default_schema_name=self.default_schema_name)

    def copy_database(
        self, path: Union[str, os.PathLike], copy_name: str, directory: Union[str, os.PathLike]
    ) -> Database:
        """
        Copy a directory database to `directory/copy_name`.

        Args:
            path: The database directory to copy.
            copy_name: The directory name of the copy.
            directory: The directory to place the copy in.

        Returns:
            A facade over the copy.

        Raises:
            ConfigurationError: If `path` is not a valid database or the destination already exists.
            DataAccessError: If the copy fails.
        """
        if not self.is_database(path):
            raise ConfigurationError(f"The path '{path}' does not represent a valid directory database.")
        directory = expand_path(directory)
        destination = os.path.join(directory, copy_name)
        if os.path.lexists(destination):
            raise ConfigurationError(f"A database named '{copy_name}' already exists in {directory}.")

        try:
            shutil.copytree(os.fspath(path), destination)
            self.create_data_source(destination).append_log(f"copied from {path}")
        except OSError as exc:
            LOG.error(f"Unable to copy directory database {path} to {destination}: {exc}")
            raise DataAccessError(f"Unable to copy directory database {path} to {destination}") from exc

        LOG.info(f"Copied directory database {path} to {destination}")
        return self.open_database(destination)

    def delete_database(self, path: Union[str, os.PathLike]):
        """
        Delete a directory database. A missing path is ignored.

        Args:
            path: The database directory.

        Raises:
            DataAccessError: If the path exists but cannot be removed.
        """
        path = os.fspath(path)
        if not os.path.lexists(path):
            return
        try:
            if _has_mode(path, stat.S_ISDIR):
                shutil.rmtree(path)
            else:
                os.remove(path)
        except OSError as exc:
            LOG.error(f"Unable to delete directory database {path}: {exc}")
            raise DataAccessError(f"Unable to delete directory database {path}") from exc
        LOG.debug(f"Deleted directory database {path}")
