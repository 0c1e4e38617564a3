##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
A one-shot task that creates tables in a database and fills them.

A task is configured in one of two ways:

- `with_creation_script(path)`: one script that does everything, or
- `with_tables(path)`, then optionally `with_inserts(path)` or
  `with_workbook(path, table_names)`, then optionally `with_constraints(path)`.

`execute()` runs the configured steps in that order. A task runs once.
"""

import logging
import os
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

from simdb.exceptions import ConfigurationError


if TYPE_CHECKING:
    from simdb.db.database import Database


LOG = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def _require_file(path: PathLike, purpose: str) -> str:
    path = os.fspath(path)
    if not os.path.isfile(path):
        raise ConfigurationError(f"The {purpose} '{path}' does not exist.")
    return path


class DbCreateTask:
    """
    Builder for creating and filling the tables of a database.

    Attributes:
        database (Database): The database the task works on.
        creation_script (Optional[str]): A script that creates and fills everything.
        tables_script (Optional[str]): A script that creates the tables.
        inserts_script (Optional[str]): A script that inserts the data.
        workbook_path (Optional[str]): A workbook holding the data, one sheet per table.
        workbook_tables (Optional[List[str]]): The sheets to import, in import order.
        constraints_script (Optional[str]): A script that adds constraints once the data is in.
        executed (bool): Whether the task has already run.

    Methods:
        with_creation_script: Use one script for everything.
        with_tables: Use a script that creates the tables.
        with_inserts: Fill the tables from an insert script.
        with_workbook: Fill the tables from a workbook.
        with_constraints: Add constraints once the tables are filled.
        execute: Run the configured steps.
    """

    def __init__(self, database: "Database"):
        """
        Args:
            database: The database the task works on.
        """
        self.database = database
        self.creation_script: Optional[str] = None
        self.tables_script: Optional[str] = None
        self.inserts_script: Optional[str] = None
        self.workbook_path: Optional[str] = None
        self.workbook_tables: Optional[List[str]] = None
        self.constraints_script: Optional[str] = None
        self.executed = False

    def __repr__(self) -> str:
        return (
            f"DbCreateTask(database={self.database.label!r}, creation_script={self.creation_script!r}, "
            f"tables_script={self.tables_script!r}, inserts_script={self.inserts_script!r}, "
            f"workbook_path={self.workbook_path!r}, constraints_script={self.constraints_script!r})"
        )

    def with_creation_script(self, path: PathLike) -> "DbCreateTask":
        """
        Use one script that creates the tables, fills them, and adds constraints.

        Args:
            path: The path of the script.

        Returns:
            This task.

        Raises:
            ConfigurationError: If the script is missing or the task already uses separate steps.
        """
        if self.tables_script is not None:
            raise ConfigurationError("A creation script cannot be combined with a tables script.")
        self.creation_script = _require_file(path, "creation script")
        return self

    def with_tables(self, path: PathLike) -> "DbCreateTask":
        """
        Use a script that creates the tables.

        Args:
            path: The path of the script.

        Returns:
            This task.

        Raises:
            ConfigurationError: If the script is missing or the task already uses a creation script.
        """
        if self.creation_script is not None:
            raise ConfigurationError("A tables script cannot be combined with a creation script.")
        self.tables_script = _require_file(path, "tables script")
        return self

    def _check_fill_step(self):
        if self.tables_script is None:
            raise ConfigurationError("The tables script must be given before the data to fill them.")
        if self.inserts_script is not None or self.workbook_path is not None:
            raise ConfigurationError("The data can come from an insert script or a workbook, not both.")

    def with_inserts(self, path: PathLike) -> "DbCreateTask":
        """
        Fill the tables by running an insert script.

        Args:
            path: The path of the script.

        Returns:
            This task.
        """
        self._check_fill_step()
        self.inserts_script = _require_file(path, "inserts script")
        return self

    def with_workbook(self, path: PathLike, table_names: Optional[Sequence[str]] = None) -> "DbCreateTask":
        """
        Fill the tables from a workbook whose sheets are named after the tables.

        Args:
            path: The path of the workbook.
            table_names: The sheets to import, in an order that respects foreign keys.
                Defaults to every sheet in workbook order.

        Returns:
            This task.
        """
        self._check_fill_step()
        self.workbook_path = _require_file(path, "workbook")
        self.workbook_tables = list(table_names) if table_names is not None else None
        return self

    def with_constraints(self, path: PathLike) -> "DbCreateTask":
        """
        Add constraints by running a script once the tables are filled.

        Args:
            path: The path of the script.

        Returns:
            This task.
        """
        if self.tables_script is None:
            raise ConfigurationError("The tables script must be given before the constraints script.")
        self.constraints_script = _require_file(path, "constraints script")
        return self

    def execute(self) -> bool:
        """
        Run the configured steps. Stops at the first step that fails.

        Returns:
            True if every step succeeded.

        Raises:
            ConfigurationError: If the task already ran or has nothing to do.
        """
        if self.executed:
            raise ConfigurationError("This create task has already been executed.")
        if self.creation_script is None and self.tables_script is None:
            raise ConfigurationError("A create task needs a creation script or a tables script.")
        self.executed = True

        if self.creation_script is not None:
            LOG.info(f"Running creation script {self.creation_script} on database {self.database.label}")
            return self.database.execute_script(self.creation_script)

        LOG.info(f"Creating tables from {self.tables_script} on database {self.database.label}")
        if not self.database.execute_script(self.tables_script):
            return False
        if self.inserts_script is not None:
            LOG.info(f"Inserting data from {self.inserts_script}")
            if not self.database.execute_script(self.inserts_script):
                return False
        elif self.workbook_path is not None:
            LOG.info(f"Importing data from workbook {self.workbook_path}")
            self.database.write_workbook_to_db(self.workbook_path, self.workbook_tables)
        if self.constraints_script is not None:
            LOG.info(f"Adding constraints from {self.constraints_script}")
            return self.database.execute_script(self.constraints_script)
        return True
