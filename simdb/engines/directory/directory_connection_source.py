##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Connection source for directory databases.

A directory database keeps one SQLite segment file per schema in its `seg0/`
directory. The segment of the default schema is opened as the connection's main
database, so unqualified statements land in the default schema, and every other
segment is attached under its schema name.
"""

import logging
import os
import re
import sqlite3
from contextlib import closing
from datetime import datetime
from typing import Dict, List, Optional

from simdb.engines.connection_source import ConnectionSource, open_sqlite_connection, quote_identifier
from simdb.exceptions import ConfigurationError


LOG = logging.getLogger(__name__)

LOG_DIR = "log"
SEGMENT_DIR = "seg0"
PROPERTIES_FILE = "service.properties"
ENGINE_LOG_FILE = "engine.log"
SEGMENT_SUFFIX = ".dat"
DEFAULT_SCHEMA = "APP"

SCHEMA_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def read_properties(path: str) -> Dict[str, str]:
    """
    Read a `key=value` properties file. Blank lines and lines starting with `#` are skipped.

    Args:
        path: The path of the properties file.

    Returns:
        The properties as a dictionary.
    """
    properties = {}
    with open(path, "r") as props:
        for line in props:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            properties[key.strip()] = value.strip()
    return properties


def write_properties(path: str, properties: Dict[str, str]):
    """
    Write a dictionary as a `key=value` properties file.

    Args:
        path: The path of the properties file.
        properties: The properties to write.
    """
    with open(path, "w") as props:
        props.write("# simdb directory database\n")
        for key, value in properties.items():
            props.write(f"{key}={value}\n")


class DirectoryConnectionSource(ConnectionSource):
    """
    Opens connections to a directory database, attaching one segment per schema.

    Attributes:
        path (str): The database directory.
        default_schema (str): The schema whose segment is the connection's main database.
        journal_mode (Optional[str]): Journal mode applied to the main segment.
        foreign_keys (bool): Whether connections enforce foreign keys.

    Methods:
        segment_path: Path of the segment file holding a schema.
        segment_schemas: Schemas with a segment file, default schema excluded.
        connect: Open the default segment and attach the others.
        list_schemas: The default schema followed by the other segment schemas.
        native_schema: Map the default schema to `main`.
        create_schema: Add a segment for a new schema.
        append_log: Record a lifecycle event in the operational log.
    """

    def __init__(
        self,
        path: str,
        default_schema: str = DEFAULT_SCHEMA,
        journal_mode: Optional[str] = None,
        foreign_keys: bool = True,
    ):
        super().__init__(path)
        self.default_schema = default_schema
        self.journal_mode = journal_mode
        self.foreign_keys = foreign_keys

    @property
    def segment_dir(self) -> str:
        """The directory holding the schema segments."""
        return os.path.join(self.path, SEGMENT_DIR)

    @property
    def log_dir(self) -> str:
        """The directory holding the operational log."""
        return os.path.join(self.path, LOG_DIR)

    def segment_path(self, schema_name: str) -> str:
        """
        Get the path of the segment file holding a schema.

        Args:
            schema_name: The schema.

        Returns:
            The path `seg0/<schema>.dat` inside the database directory.
        """
        return os.path.join(self.segment_dir, f"{schema_name}{SEGMENT_SUFFIX}")

    def segment_schemas(self) -> List[str]:
        """
        List the schemas that have a segment file, leaving out the default schema.

        Returns:
            The schema names in alphabetical order.
        """
        if not os.path.isdir(self.segment_dir):
            return []
        schemas = []
        for entry in sorted(os.listdir(self.segment_dir)):
            schema, suffix = os.path.splitext(entry)
            if suffix == SEGMENT_SUFFIX and schema.upper() != self.default_schema.upper():
                schemas.append(schema)
        return schemas

    def connect(self) -> sqlite3.Connection:
        """
        Open the default segment and attach every other segment under its schema name.

        Returns:
            A sqlite connection spanning all schemas of the database.
        """
        conn = open_sqlite_connection(
            self.segment_path(self.default_schema), journal_mode=self.journal_mode, foreign_keys=self.foreign_keys
        )
        try:
            for schema in self.segment_schemas():
                conn.execute(f"ATTACH DATABASE ? AS {quote_identifier(schema)}", (self.segment_path(schema),))
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def list_schemas(self, conn: sqlite3.Connection) -> List[Optional[str]]:
        """
        List the schemas of the database, default schema first.

        Args:
            conn: An open connection from this source.

        Returns:
            The schema names.
        """
        return [self.default_schema] + self.segment_schemas()

    def native_schema(self, schema_name: Optional[str]) -> str:
        """
        Map a schema name to the name the connection knows it by.

        Args:
            schema_name: A schema name, or None for the default schema.

        Returns:
            `main` for the default schema, otherwise the schema name.
        """
        if schema_name is None or schema_name.upper() == self.default_schema.upper():
            return "main"
        return schema_name

    def create_schema(self, schema_name: str) -> bool:
        """
        Add a segment for a new schema.

        Args:
            schema_name: The name of the schema. It must be a plain identifier.

        Returns:
            True if the segment was created, False if the schema already existed.

        Raises:
            ConfigurationError: If the name is not a plain identifier.
        """
        if not SCHEMA_NAME_PATTERN.match(schema_name or ""):
            raise ConfigurationError(f"'{schema_name}' is not a valid schema name.")
        existing = [self.default_schema.upper()] + [schema.upper() for schema in self.segment_schemas()]
        if schema_name.upper() in existing:
            LOG.debug(f"Schema {schema_name} already exists in {self.path}")
            return False
        with closing(open_sqlite_connection(self.segment_path(schema_name), foreign_keys=False)):
            pass
        self.append_log(f"created schema {schema_name}")
        LOG.info(f"Created schema {schema_name} in {self.path}")
        return True

    def append_log(self, event: str):
        """
        Record a lifecycle event in the operational log.

        Args:
            event: A short description of the event.
        """
        with open(os.path.join(self.log_dir, ENGINE_LOG_FILE), "a") as engine_log:
            engine_log.write(f"{datetime.now().isoformat(timespec='seconds')} {event}\n")
