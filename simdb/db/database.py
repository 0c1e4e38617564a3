##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
The database facade.

This module defines the `Database` class, the single entry point for working with
an open embedded database regardless of its engine. It answers catalog questions
(schemas, tables, views, columns), streams query results, runs commands and
scripts, and exports or imports table contents.

Catalog answers are always read from the live database; nothing is cached, so a
schema change is visible to the next call.

Every export and import operation takes a schema name and falls back to the
facade's default schema. Failures while talking to the engine or writing files are
raised as `DataAccessError`; output written before a failure is left in place.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Sequence, TextIO, Union

from simdb.config.configfile import get_export_directory, get_setting
from simdb.db.column_metadata import ColumnMetaData, DbSchemaInfo, build_column_metadata
from simdb.db.row_streamer import RowStreamer
from simdb.db.sql_script import parse_queries_in_sql_script
from simdb.engines.connection_source import ConnectionSource, quote_identifier
from simdb.exceptions import ConfigurationError, DataAccessError
from simdb.export import formatters
from simdb.export.workbook import (
    MAX_SHEET_NAME_LENGTH,
    new_workbook,
    open_workbook_read_only,
    read_sheet_rows,
    sheet_names_for,
    write_sheet,
)
from simdb.utils import ensure_directory_exists, expand_path


if TYPE_CHECKING:
    from simdb.db.create_task import DbCreateTask


LOG = logging.getLogger(__name__)

ACCESS_ERRORS = (sqlite3.Error, OSError)


class Database:  # pylint: disable=too-many-public-methods
    """
    Facade over one open embedded database.

    Attributes:
        connection_source (ConnectionSource): Produces connections to the database.
        label (str): Human-readable name, used to name output files.
        default_schema_name (Optional[str]): Schema used when an operation is not given one.
            None for sources without schemas.

    Methods:
        connection: Context manager yielding a new connection.
        get_schema: Resolve a schema name, exactly or ignoring case.
        get_table_names: List the tables of a schema.
        get_view_names: List the views of a schema.
        schema_table_map: Map every schema to its tables.
        schema_view_map: Map every schema to its views.
        select_all: Stream every row of a table.
        fetch: Stream the rows of an arbitrary query.
        execute_command: Run one statement.
        execute_commands: Run statements in one transaction.
        execute_script: Run the statements of a SQL script in one transaction.
        write_table_as_csv: Export a table as delimited text.
        write_table_as_text: Export a table as a formatted text table.
        write_table_as_json: Export a table as a JSON document.
        write_db_to_workbook: Export the tables of a schema into a workbook.
        write_workbook_to_db: Import workbook sheets into tables.
        create_task: Start a `DbCreateTask` for this database.
    """

    def __init__(self, connection_source: ConnectionSource, label: str, default_schema_name: Optional[str] = None):
        """
        Initialize the facade.

        Args:
            connection_source: Produces connections to the database.
            label: Human-readable name, used to name output files.
            default_schema_name: Schema used when an operation is not given one.
        """
        self.connection_source = connection_source
        self.label = label
        self.default_schema_name = default_schema_name if connection_source.supports_schemas else None

    def __repr__(self) -> str:
        return (
            f"Database(label={self.label!r}, default_schema_name={self.default_schema_name!r}, "
            f"source={self.connection_source!r})"
        )

    def connection(self):
        """
        Context manager yielding a new connection that is closed on exit.

        Returns:
            The connection context manager of the connection source.
        """
        return self.connection_source.connection()

    @contextmanager
    def _data_access(self, action: str) -> Iterator[None]:
        """
        Turn engine and file errors raised inside the block into `DataAccessError`.

        Args:
            action: What was being done, used in the error message.
        """
        try:
            yield
        except ACCESS_ERRORS as exc:
            LOG.error(f"Unable to {action} in database {self.label}: {exc}")
            raise DataAccessError(f"Unable to {action} in database {self.label}: {exc}") from exc

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Context manager yielding a connection inside an open transaction.

        The transaction commits when the block exits normally and rolls back when it
        raises. Engine errors are raised as `DataAccessError`.

        Yields:
            The connection running the transaction.
        """
        with self._data_access("run a transaction"), self.connection() as conn:
            conn.execute("BEGIN")
            try:
                yield conn
            except Exception:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    ##################
    # Catalog access #
    ##################

    @property
    def catalog_name(self) -> str:
        """The catalog name of the database: the final component of its path."""
        return os.path.basename(os.path.normpath(self.connection_source.path))

    @property
    def schema_names(self) -> List[Optional[str]]:
        """The schema names of the database. `[None]` for sources without schemas."""
        if not self.connection_source.supports_schemas:
            return [None]
        with self._data_access("list schemas"), self.connection() as conn:
            return self.connection_source.list_schemas(conn)

    def get_schema(self, schema_name: str) -> Optional[str]:
        """
        Resolve a schema name, first exactly and then ignoring case.

        Args:
            schema_name: The schema name to look for.

        Returns:
            The schema name as the database reports it, or None if there is no such schema.
        """
        schemas = self.schema_names
        if schema_name in schemas:
            return schema_name
        for schema in schemas:
            if schema is not None and schema_name is not None and schema.lower() == schema_name.lower():
                return schema
        return None

    def contains_schema(self, schema_name: str) -> bool:
        """
        Check whether the database has a schema.

        Args:
            schema_name: The schema name, matched ignoring case.

        Returns:
            True if the schema exists.
        """
        return self.get_schema(schema_name) is not None

    def _resolve_schema(self, schema_name: Optional[str]) -> Optional[str]:
        """
        Pick the schema an operation runs against.

        Args:
            schema_name: The schema given by the caller, or None for the default schema.

        Returns:
            The schema name as the database reports it, or None for sources without schemas.

        Raises:
            ConfigurationError: If the schema does not exist.
        """
        if not self.connection_source.supports_schemas:
            return None
        schema = schema_name if schema_name is not None else self.default_schema_name
        if schema is None:
            return None
        resolved = self.get_schema(schema)
        if resolved is None:
            raise ConfigurationError(f"The schema '{schema}' does not exist in database {self.label}.")
        return resolved

    def get_table_names(self, schema_name: Optional[str] = None) -> List[str]:
        """
        List the tables of a schema.

        Args:
            schema_name: The schema. Defaults to the default schema.

        Returns:
            The table names in alphabetical order.
        """
        schema = self._resolve_schema(schema_name)
        with self._data_access("list tables"), self.connection() as conn:
            return self.connection_source.list_tables(conn, schema)

    def get_view_names(self, schema_name: Optional[str] = None) -> List[str]:
        """
        List the views of a schema.

        Args:
            schema_name: The schema. Defaults to the default schema.

        Returns:
            The view names in alphabetical order.
        """
        schema = self._resolve_schema(schema_name)
        with self._data_access("list views"), self.connection() as conn:
            return self.connection_source.list_views(conn, schema)

    def schema_table_map(self) -> Dict[Optional[str], List[str]]:
        """
        Map every schema to its tables. The key is None for sources without schemas.

        Returns:
            The table names of every schema.
        """
        with self._data_access("list tables"), self.connection() as conn:
            schemas = self.connection_source.list_schemas(conn) if self.connection_source.supports_schemas else [None]
            return {schema: self.connection_source.list_tables(conn, schema) for schema in schemas}

    def schema_view_map(self) -> Dict[Optional[str], List[str]]:
        """
        Map every schema to its views. The key is None for sources without schemas.

        Returns:
            The view names of every schema.
        """
        with self._data_access("list views"), self.connection() as conn:
            schemas = self.connection_source.list_schemas(conn) if self.connection_source.supports_schemas else [None]
            return {schema: self.connection_source.list_views(conn, schema) for schema in schemas}

    def _find_table(self, conn: sqlite3.Connection, table_name: str, schema: Optional[str]) -> Optional[str]:
        names = self.connection_source.list_tables(conn, schema) + self.connection_source.list_views(conn, schema)
        if table_name in names:
            return table_name
        for name in names:
            if name.lower() == table_name.lower():
                return name
        return None

    def contains_table(self, table_name: str, schema_name: Optional[str] = None) -> bool:
        """
        Check whether a schema has a table or view, ignoring case.

        Args:
            table_name: The table or view name.
            schema_name: The schema. Defaults to the default schema.

        Returns:
            True if the table or view exists.
        """
        schema = self._resolve_schema(schema_name)
        with self._data_access("look up a table"), self.connection() as conn:
            return self._find_table(conn, table_name, schema) is not None

    def _require_table(self, conn: sqlite3.Connection, table_name: str, schema: Optional[str]) -> str:
        table = self._find_table(conn, table_name, schema)
        if table is None:
            location = f"schema '{schema}'" if schema is not None else f"database {self.label}"
            raise ConfigurationError(f"The table '{table_name}' does not exist in {location}.")
        return table

    def get_table_schema_info(self, table_name: str, schema_name: Optional[str] = None) -> DbSchemaInfo:
        """
        Locate a table.

        Args:
            table_name: The table or view name.
            schema_name: The schema. Defaults to the default schema.

        Returns:
            The catalog, schema, and exact name of the table.

        Raises:
            ConfigurationError: If the table does not exist.
        """
        schema = self._resolve_schema(schema_name)
        with self._data_access("look up a table"), self.connection() as conn:
            table = self._require_table(conn, table_name, schema)
        return DbSchemaInfo(self.catalog_name, schema, table)

    def get_column_metadata(self, table_name: str, schema_name: Optional[str] = None) -> List[ColumnMetaData]:
        """
        Describe the columns of a table or view.

        Args:
            table_name: The table or view name.
            schema_name: The schema. Defaults to the default schema.

        Returns:
            One descriptor per column.
        """
        with self.select_all(table_name, schema_name) as rows:
            return list(rows.columns)

    ###########
    # Queries #
    ###########

    def select_all(self, table_name: str, schema_name: Optional[str] = None) -> RowStreamer:
        """
        Stream every row of a table or view.

        The returned streamer owns its connection. Exhaust it or close it (it is a
        context manager) to release the connection.

        Args:
            table_name: The table or view name.
            schema_name: The schema. Defaults to the default schema.

        Returns:
            A streamer over the rows, with full column metadata.

        Raises:
            ConfigurationError: If the table does not exist.
            DataAccessError: If the query fails.
        """
        schema = self._resolve_schema(schema_name)
        conn = self.connection_source.connect()
        try:
            with self._data_access(f"read table {table_name}"):
                table = self._require_table(conn, table_name, schema)
                cursor = conn.execute(f"SELECT * FROM {self.connection_source.qualify(table, schema)}")
                columns = build_column_metadata(
                    cursor.description,
                    table_info=self.connection_source.table_info(conn, table, schema),
                    table_name=table,
                    schema_name=schema,
                    catalog_name=self.catalog_name,
                )
        except Exception:
            conn.close()
            raise
        return RowStreamer(cursor, columns=columns, connection=conn)

    def fetch(
        self,
        sql: str,
        parameters: Sequence[Any] = (),
        table_name: Optional[str] = None,
        schema_name: Optional[str] = None,
    ) -> RowStreamer:
        """
        Stream the rows of an arbitrary query.

        When the query reads a single table, naming it with `table_name` gives the
        streamer full column metadata, so its cells are converted by declared type
        the way `select_all` converts them.

        Args:
            sql: The query.
            parameters: Values bound to the query's placeholders.
            table_name: The table the query reads, if any.
            schema_name: The schema of that table. Defaults to the default schema.

        Returns:
            A streamer over the rows. It owns its connection.

        Raises:
            ConfigurationError: If `table_name` is given and the table does not exist.
            DataAccessError: If the query fails.
        """
        conn = self.connection_source.connect()
        try:
            with self._data_access("run a query"):
                cursor = conn.execute(sql, parameters)
                if table_name is None:
                    columns = build_column_metadata(cursor.description, catalog_name=self.catalog_name)
                else:
                    schema = self._resolve_schema(schema_name)
                    table = self._require_table(conn, table_name, schema)
                    columns = build_column_metadata(
                        cursor.description,
                        table_info=self.connection_source.table_info(conn, table, schema),
                        table_name=table,
                        schema_name=schema,
                        catalog_name=self.catalog_name,
                    )
        except Exception:
            conn.close()
            raise
        return RowStreamer(cursor, columns=columns, connection=conn)

    def row_count(self, table_name: str, schema_name: Optional[str] = None) -> int:
        """
        Count the rows of a table or view.

        Args:
            table_name: The table or view name.
            schema_name: The schema. Defaults to the default schema.

        Returns:
            The number of rows.
        """
        schema = self._resolve_schema(schema_name)
        with self._data_access(f"count the rows of {table_name}"), self.connection() as conn:
            table = self._require_table(conn, table_name, schema)
            return conn.execute(f"SELECT count(*) FROM {self.connection_source.qualify(table, schema)}").fetchone()[0]

    def is_table_empty(self, table_name: str, schema_name: Optional[str] = None) -> bool:
        """
        Check whether a table has no rows.

        Args:
            table_name: The table name.
            schema_name: The schema. Defaults to the default schema.

        Returns:
            True if the table has no rows.
        """
        schema = self._resolve_schema(schema_name)
        with self._data_access(f"read table {table_name}"), self.connection() as conn:
            table = self._require_table(conn, table_name, schema)
            row = conn.execute(f"SELECT 1 FROM {self.connection_source.qualify(table, schema)} LIMIT 1").fetchone()
            return row is None

    def has_tables(self, schema_name: Optional[str] = None) -> bool:
        """
        Check whether a schema has any tables.

        Args:
            schema_name: The schema. Defaults to the default schema.

        Returns:
            True if the schema has at least one table.
        """
        return len(self.get_table_names(schema_name)) > 0

    def are_all_tables_empty(self, schema_name: Optional[str] = None) -> bool:
        """
        Check whether every table of a schema is empty. A schema without tables counts as empty.

        Args:
            schema_name: The schema. Defaults to the default schema.

        Returns:
            True if no table of the schema has rows.
        """
        return all(self.is_table_empty(table, schema_name) for table in self.get_table_names(schema_name))

    def has_data(self, schema_name: Optional[str] = None) -> bool:
        """
        Check whether any table of a schema has rows.

        Args:
            schema_name: The schema. Defaults to the default schema.

        Returns:
            True if at least one table has a row.
        """
        return not self.are_all_tables_empty(schema_name)

    def delete_all_from(self, table_names: Sequence[str], schema_name: Optional[str] = None) -> bool:
        """
        Delete every row of the given tables, in the given order, in one transaction.

        Args:
            table_names: The tables to empty. Children must come before their parents
                when foreign keys are enforced.
            schema_name: The schema. Defaults to the default schema.

        Returns:
            True if every table was emptied.
        """
        schema = self._resolve_schema(schema_name)
        commands = [f"DELETE FROM {self.connection_source.qualify(table, schema)}" for table in table_names]
        return self.execute_commands(commands)

    ############
    # Commands #
    ############

    def execute_command(self, command: str, parameters: Sequence[Any] = ()) -> bool:
        """
        Run one statement.

        Args:
            command: The statement.
            parameters: Values bound to the statement's placeholders.

        Returns:
            True if the statement ran. Failures are logged and reported as False.
        """
        try:
            with self.connection() as conn:
                conn.execute(command, parameters)
            return True
        except sqlite3.Error as exc:
            LOG.error(f"Unable to execute command on database {self.label}: {command}\n{exc}")
            return False

    def execute_commands(self, commands: Sequence[str]) -> bool:
        """
        Run statements in one transaction. The first failure rolls everything back.

        Args:
            commands: The statements, in order.

        Returns:
            True if every statement ran and the transaction committed.
        """
        with self.connection() as conn:
            current = None
            try:
                conn.execute("BEGIN")
                for command in commands:
                    current = command
                    conn.execute(command)
                conn.execute("COMMIT")
                return True
            except sqlite3.Error as exc:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                LOG.error(f"Rolled back commands on database {self.label}. Failed command: {current}\n{exc}")
                return False

    def execute_script(self, path: Union[str, os.PathLike]) -> bool:
        """
        Run the statements of a SQL script in one transaction.

        Args:
            path: The path of the script.

        Returns:
            True if the script ran completely. An empty or missing script reports False.
        """
        commands = parse_queries_in_sql_script(path)
        if not commands:
            LOG.warning(f"The script {path} has no statements to execute.")
            return False
        LOG.debug(f"Executing {len(commands)} statements from {path} on database {self.label}")
        return self.execute_commands(commands)

    #################
    # Text exports #
    #################

    def _tables_and_views(self, schema_name: Optional[str]) -> List[str]:
        return self.get_table_names(schema_name) + self.get_view_names(schema_name)

    def write_table_as_csv(
        self, table_name: str, out: TextIO, schema_name: Optional[str] = None, header: bool = True
    ) -> int:
        """
        Export a table as delimited text.

        Args:
            table_name: The table or view name.
            out: The text sink.
            schema_name: The schema. Defaults to the default schema.
            header: Whether to write the column names as the first row.

        Returns:
            The number of data rows written.
        """
        with self._data_access(f"export table {table_name} as CSV"), self.select_all(table_name, schema_name) as rows:
            return formatters.write_delimited(out, rows.column_names, rows, header=header)

    def write_table_as_text(self, table_name: str, out: TextIO, schema_name: Optional[str] = None):
        """
        Export a table as a formatted text table titled with the table name.

        Args:
            table_name: The table or view name.
            out: The text sink.
            schema_name: The schema. Defaults to the default schema.
        """
        with self._data_access(f"export table {table_name} as text"), self.select_all(table_name, schema_name) as rows:
            out.write(
                formatters.format_table(
                    rows.column_names,
                    rows,
                    title=table_name,
                    max_col_width=get_setting("export", "max_column_width", formatters.DEFAULT_MAX_COL_WIDTH),
                    null_text=get_setting("export", "null_text", formatters.DEFAULT_NULL_TEXT),
                )
            )

    def write_table_as_markdown(self, table_name: str, out: TextIO, schema_name: Optional[str] = None):
        """
        Export a table as a markdown table under a heading with the table name.

        Args:
            table_name: The table or view name.
            out: The text sink.
            schema_name: The schema. Defaults to the default schema.
        """
        with self._data_access(f"export table {table_name} as markdown"), self.select_all(
            table_name, schema_name
        ) as rows:
            out.write(f"## {table_name}\n\n")
            out.write(
                formatters.format_table(
                    rows.column_names,
                    rows,
                    tablefmt="github",
                    max_col_width=0,
                    null_text=get_setting("export", "null_text", formatters.DEFAULT_NULL_TEXT),
                )
            )

    def _table_document(self, table_name: str, schema_name: Optional[str]) -> Dict[str, Any]:
        with self.select_all(table_name, schema_name) as rows:
            return formatters.table_document(table_name, self._resolve_schema(schema_name), rows.column_names, rows)

    def write_table_as_json(self, table_name: str, out: TextIO, schema_name: Optional[str] = None):
        """
        Export a table as a JSON document.

        Args:
            table_name: The table or view name.
            out: The text sink.
            schema_name: The schema. Defaults to the default schema.
        """
        with self._data_access(f"export table {table_name} as JSON"):
            formatters.write_json(out, self._table_document(table_name, schema_name))

    def write_all_tables_as_csv(
        self,
        directory: Optional[Union[str, os.PathLike]] = None,
        schema_name: Optional[str] = None,
        header: bool = True,
    ) -> List[str]:
        """
        Export every table and view of a schema as delimited text, one `<name>.csv` file each.

        Args:
            directory: The output directory. Defaults to `<export directory>/<label>_csv`.
            schema_name: The schema. Defaults to the default schema.
            header: Whether to write the column names as the first row.

        Returns:
            The paths of the written files.
        """
        if directory is None:
            directory = os.path.join(get_export_directory(), f"{self.label}_csv")
        directory = expand_path(directory)
        written = []
        with self._data_access("export tables as CSV"):
            ensure_directory_exists(directory)
            for table in self._tables_and_views(schema_name):
                path = os.path.join(directory, f"{table}.csv")
                with open(path, "w", newline="") as out:
                    self.write_table_as_csv(table, out, schema_name, header=header)
                written.append(path)
        LOG.info(f"Wrote {len(written)} CSV files to {directory}")
        return written

    def write_all_tables_as_text(self, out: TextIO, schema_name: Optional[str] = None):
        """
        Export every table and view of a schema as formatted text tables into one sink.

        Args:
            out: The text sink.
            schema_name: The schema. Defaults to the default schema.
        """
        for table in self._tables_and_views(schema_name):
            self.write_table_as_text(table, out, schema_name)
            out.write("\n")

    def write_all_tables_as_json(self, out: TextIO, schema_name: Optional[str] = None):
        """
        Export every table and view of a schema as one JSON document.

        Args:
            out: The text sink.
            schema_name: The schema. Defaults to the default schema.
        """
        with self._data_access("export tables as JSON"):
            document = {
                "database": self.label,
                "schema": self._resolve_schema(schema_name),
                "tables": [self._table_document(table, schema_name) for table in self._tables_and_views(schema_name)],
            }
            formatters.write_json(out, document)

    ##################
    # Insert scripts #
    ##################

    def get_insert_queries(self, table_name: str, schema_name: Optional[str] = None) -> List[str]:
        """
        Build the INSERT statements that recreate the current rows of a table.

        Args:
            table_name: The table name.
            schema_name: The schema. Defaults to the default schema.

        Returns:
            One statement per row, each terminated with `;`.
        """
        return list(self._insert_queries(table_name, schema_name))

    def _insert_queries(self, table_name: str, schema_name: Optional[str]) -> Iterator[str]:
        with self._data_access(f"export table {table_name} as inserts"), self.select_all(
            table_name, schema_name
        ) as rows:
            schema = self._resolve_schema(schema_name)
            table = rows.columns[0].table_name if rows.columns else table_name
            qualified = self.connection_source.qualify(table, schema)
            quoted_columns = [quote_identifier(name) for name in rows.column_names]
            for row in rows:
                yield formatters.insert_statement(qualified, quoted_columns, row)

    def write_insert_queries(self, table_name: str, out: TextIO, schema_name: Optional[str] = None) -> int:
        """
        Write the INSERT statements that recreate the current rows of a table.

        Args:
            table_name: The table name.
            out: The text sink.
            schema_name: The schema. Defaults to the default schema.

        Returns:
            The number of statements written.
        """
        count = 0
        for statement in self._insert_queries(table_name, schema_name):
            out.write(statement + "\n")
            count += 1
        return count

    def write_all_tables_as_insert_queries(self, out: TextIO, schema_name: Optional[str] = None) -> int:
        """
        Write the INSERT statements that recreate every table of a schema.

        Args:
            out: The text sink.
            schema_name: The schema. Defaults to the default schema.

        Returns:
            The number of statements written.
        """
        count = 0
        for table in self.get_table_names(schema_name):
            out.write(f"-- {table}\n")
            count += self.write_insert_queries(table, out, schema_name)
        return count

    #############
    # Workbooks #
    #############

    def write_tables_to_workbook(
        self, table_names: Sequence[str], path: Union[str, os.PathLike], schema_name: Optional[str] = None
    ) -> str:
        """
        Export tables into one workbook, one sheet per table with the column names in row 1.

        Args:
            table_names: The tables to export, in sheet order.
            path: The path of the workbook. An existing file is replaced.
            schema_name: The schema. Defaults to the default schema.

        Returns:
            The path of the written workbook.

        Raises:
            ConfigurationError: If two tables would get the same sheet name.
        """
        sheet_names_for(table_names)
        path = expand_path(path)
        workbook = new_workbook()
        with self._data_access("export tables to a workbook"):
            for table in table_names:
                with self.select_all(table, schema_name) as rows:
                    write_sheet(workbook, table, rows.column_names, rows)
            ensure_directory_exists(os.path.dirname(path))
            workbook.save(path)
        LOG.info(f"Wrote {len(table_names)} tables of database {self.label} to workbook {path}")
        return path

    def write_db_to_workbook(
        self,
        schema_name: Optional[str] = None,
        wb_name: Optional[str] = None,
        wb_directory: Optional[Union[str, os.PathLike]] = None,
    ) -> str:
        """
        Export every table of a schema into one workbook.

        Args:
            schema_name: The schema. Defaults to the default schema.
            wb_name: The workbook file name. Defaults to `<label>.xlsx`.
            wb_directory: The output directory. Defaults to the configured export directory.

        Returns:
            The path of the written workbook.
        """
        wb_name = wb_name or f"{self.label}.xlsx"
        if not wb_name.endswith(".xlsx"):
            wb_name += ".xlsx"
        wb_directory = wb_directory if wb_directory is not None else get_export_directory()
        return self.write_tables_to_workbook(
            self.get_table_names(schema_name), os.path.join(wb_directory, wb_name), schema_name
        )

    def write_workbook_to_db(
        self,
        path: Union[str, os.PathLike],
        table_names: Optional[Sequence[str]] = None,
        skip_first_row: bool = True,
        schema_name: Optional[str] = None,
    ) -> Dict[str, int]:
        """
        Import workbook sheets into the tables of the same name.

        Sheets are imported in the given order, which must respect foreign keys since
        no ordering is worked out here. Each sheet is written in its own transaction.
        The workbook is opened read-only and is closed whether or not the import succeeds.

        A table whose name is longer than a sheet name allows is found under its
        truncated sheet name, as written by `write_tables_to_workbook`.

        Args:
            path: The path of the workbook.
            table_names: The sheets (and tables) to import. Defaults to every sheet in workbook order.
            skip_first_row: Whether the first row of each sheet is a header to skip.
            schema_name: The schema. Defaults to the default schema.

        Returns:
            The number of rows inserted per table.

        Raises:
            ConfigurationError: If a truncated sheet name matches more than one table.
        """
        schema = self._resolve_schema(schema_name)
        inserted: Dict[str, int] = {}
        with self._data_access(f"import workbook {path}"):
            workbook = open_workbook_read_only(expand_path(path))
            try:
                sheets = list(table_names) if table_names is not None else list(workbook.sheetnames)
                with self.connection() as conn:
                    for name in sheets:
                        sheet = self._sheet_for(workbook, name)
                        if sheet is None:
                            LOG.warning(f"The workbook {path} has no sheet named '{name}'. Skipping it.")
                            continue
                        table = self._table_for_sheet(conn, name, schema)
                        if table is None:
                            LOG.warning(f"The database {self.label} has no table named '{name}'. Skipping it.")
                            continue
                        inserted[table] = self._insert_sheet(conn, workbook[sheet], table, schema, skip_first_row)
            finally:
                workbook.close()
        LOG.info(f"Imported {sum(inserted.values())} rows from {path} into database {self.label}")
        return inserted

    @staticmethod
    def _sheet_for(workbook: Any, name: str) -> Optional[str]:
        for candidate in (name, name[:MAX_SHEET_NAME_LENGTH]):
            if candidate in workbook.sheetnames:
                return candidate
        return None

    def _table_for_sheet(self, conn: sqlite3.Connection, name: str, schema: Optional[str]) -> Optional[str]:
        table = self._find_table(conn, name, schema)
        if table is not None or len(name) < MAX_SHEET_NAME_LENGTH:
            return table
        # A full length sheet name may be a long table name cut down on export.
        prefix = name[:MAX_SHEET_NAME_LENGTH].lower()
        matches = [
            table_name
            for table_name in self.connection_source.list_tables(conn, schema)
            if table_name[:MAX_SHEET_NAME_LENGTH].lower() == prefix
        ]
        if len(matches) > 1:
            raise ConfigurationError(
                f"The sheet '{name}' matches more than one table of database {self.label}: {', '.join(matches)}"
            )
        return matches[0] if matches else None

    def _insert_sheet(
        self, conn: sqlite3.Connection, worksheet: Any, table: str, schema: Optional[str], skip_first_row: bool
    ) -> int:
        columns = [info[1] for info in self.connection_source.table_info(conn, table, schema)]
        statement = (
            f"INSERT INTO {self.connection_source.qualify(table, schema)} "
            f"({', '.join(quote_identifier(column) for column in columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})"
        )
        count = 0
        conn.execute("BEGIN")
        try:
            for row in read_sheet_rows(worksheet, skip_first_row):
                if len(row) > len(columns):
                    LOG.warning(f"Dropping {len(row) - len(columns)} extra cells of a row for table {table}.")
                values = (row + [None] * len(columns))[: len(columns)]
                conn.execute(statement, values)
                count += 1
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise
        LOG.debug(f"Inserted {count} rows into table {table}")
        return count

    ##################
    # Creation tasks #
    ##################

    def create_task(self) -> "DbCreateTask":
        """
        Start a one-shot task that creates tables and fills them.

        Returns:
            A new `DbCreateTask` bound to this database.
        """
        from simdb.db.create_task import DbCreateTask  # pylint: disable=import-outside-toplevel

        return DbCreateTask(self)
