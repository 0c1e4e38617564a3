##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
The capability contract every embedded storage engine implements.

Callers validate, create, open, copy, and delete databases through an
`EmbeddedEngine` without knowing whether a database is a single file or a
directory. Each engine is the only authority on whether a path is a valid
database of its kind.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Union

from simdb.engines.connection_source import ConnectionSource


if TYPE_CHECKING:
    from os import PathLike

    from simdb.db.database import Database


class EmbeddedEngine(ABC):
    """
    Abstract interface for an embedded (in-process) database engine.

    Attributes:
        name (str): The name the engine is registered under.
        default_schema_name (Optional[str]): The schema new handles start in.

    Methods:
        is_database: Check whether a path holds a valid database of this engine. Never raises.
        create_data_source: Build a connection source for a path without touching the filesystem.
        create_database: Create a fresh database, deleting any existing one first.
        open_database: Open an existing database.
        copy_database: Copy a database to a new, unused location.
        delete_database: Delete a database. Deleting a missing database does nothing.
    """

    name: str = None
    default_schema_name: Optional[str] = None

    @abstractmethod
    def is_database(self, path: Union[str, "PathLike"]) -> bool:
        """
        Check whether `path` holds a valid database of this engine.

        This is safe to call with any path and never raises.

        Args:
            path: The path to check.

        Returns:
            True if the path passes the engine's structural check and probe.
        """
        raise NotImplementedError("Subclasses of `EmbeddedEngine` must implement an `is_database` method.")

    @abstractmethod
    def create_data_source(self, path: Union[str, "PathLike"]) -> ConnectionSource:
        """
        Build a connection source bound to `path`. The filesystem is not touched.

        Args:
            path: The path of the database.

        Returns:
            A connection source for the database.
        """
        raise NotImplementedError("Subclasses of `EmbeddedEngine` must implement a `create_data_source` method.")

    @abstractmethod
    def create_database(self, name: str, directory: Optional[Union[str, "PathLike"]] = None) -> "Database":
        """
        Create a fresh database named `name` inside `directory`.

        An existing database at that location is deleted first.

        Args:
            name: The file or directory name of the database.
            directory: The directory to create it in. Defaults to the configured database directory.

        Returns:
            A facade over the new database, set to the engine's default schema.
        """
        raise NotImplementedError("Subclasses of `EmbeddedEngine` must implement a `create_database` method.")

    @abstractmethod
    def open_database(self, path: Union[str, "PathLike"]) -> "Database":
        """
        Open an existing database.

        Args:
            path: The path of the database.

        Returns:
            A facade over the database, set to the engine's default schema.

        Raises:
            ConfigurationError: If `path` is not a valid database of this engine.
        """
        raise NotImplementedError("Subclasses of `EmbeddedEngine` must implement an `open_database` method.")

    @abstractmethod
    def copy_database(
        self, path: Union[str, "PathLike"], copy_name: str, directory: Union[str, "PathLike"]
    ) -> "Database":
        """
        Copy the database at `path` to `directory/copy_name`.

        Args:
            path: The path of the database to copy.
            copy_name: The name of the copy.
            directory: The directory to place the copy in.

        Returns:
            A facade over the copy.

        Raises:
            ConfigurationError: If `path` is not a valid database or the destination already exists.
            DataAccessError: If the copy fails.
        """
        raise NotImplementedError("Subclasses of `EmbeddedEngine` must implement a `copy_database` method.")

    @abstractmethod
    def delete_database(self, path: Union[str, "PathLike"]):
        """
        Delete the database at `path`. Deleting a missing database does nothing.

        Args:
            path: The path of the database.

        Raises:
            DataAccessError: If the database exists but cannot be deleted.
        """
        raise NotImplementedError("Subclasses of `EmbeddedEngine` must implement a `delete_database` method.")
