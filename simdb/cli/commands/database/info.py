##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
This module defines the `DatabaseInfoCommand` class, which implements the
`database info` subcommand for the simdb CLI.

The subcommand prints the engine and location of a database followed by its
schemas, their tables and views, and row counts. With `--columns` it describes
the columns of one table instead.
"""

from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser, Namespace

from tabulate import tabulate

from simdb.cli.commands.command_entry_point import CommandEntryPoint
from simdb.cli.utils import add_engine_argument, open_database
from simdb.db.database import Database


class DatabaseInfoCommand(CommandEntryPoint):
    """
    Handles the `database info` subcommand.

    Methods:
        add_parser: Adds the `database info` command to the CLI parser.
        process_command: Processes the CLI input and dispatches the appropriate action.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `database info` subcommand parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `database info`
                subcommand parser will be added.
        """
        parser = subparsers.add_parser(
            "info",
            help="Print information about a database.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        parser.set_defaults(func=self.process_command)

        parser.add_argument("path", type=str, help="The path of the database.")
        add_engine_argument(parser, "The engine the database belongs to. Detected from the path when not given.")
        parser.add_argument(
            "--columns",
            type=str,
            default=None,
            metavar="TABLE",
            help="Describe the columns of this table instead of listing the tables.",
        )
        parser.add_argument("-s", "--schema", type=str, default=None, help="The schema of the table for --columns.")

    def _print_catalog(self, database: Database):
        tables = database.schema_table_map()
        views = database.schema_view_map()
        rows = []
        for schema, table_names in tables.items():
            for table in table_names:
                rows.append([schema, table, "table", database.row_count(table, schema)])
            for view in views.get(schema, []):
                rows.append([schema, view, "view", ""])
        if rows:
            print(tabulate(rows, headers=["Schema", "Name", "Type", "Rows"]))
        else:
            print("The database holds no tables or views.")

    def _print_columns(self, database: Database, table: str, schema: str):
        rows = [
            [column.name, column.type_name, column.nullable.name, column.read_only]
            for column in database.get_column_metadata(table, schema)
        ]
        print(tabulate(rows, headers=["Column", "Type", "Nullable", "Read Only"]))

    def process_command(self, args: Namespace):
        """
        Print information about the database to the console.

        Args:
            args: An argparse Namespace containing user arguments.
        """
        engine, database = open_database(args.path, args.engine)
        summary = [
            ("Label", database.label),
            ("Engine", engine.name),
            ("Path", database.connection_source.path),
            ("Default schema", database.default_schema_name),
        ]
        print(tabulate(summary, tablefmt="presto"))
        print()
        if args.columns is not None:
            self._print_columns(database, args.columns, args.schema)
        else:
            self._print_catalog(database)
