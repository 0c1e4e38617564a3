##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Implements the `database export` subcommand for the simdb CLI.

Supported formats:
- `csv`: one `<table>.csv` file per table and view, written to a directory.
- `text`, `json`, `markdown`, `insert`: one document written to a file or stdout.
- `xlsx`: one workbook with a sheet per table.
"""

import logging
import os
import sys
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser, Namespace
from contextlib import contextmanager
from typing import Iterator, List, Optional, TextIO

from simdb.cli.commands.command_entry_point import CommandEntryPoint
from simdb.cli.utils import add_engine_argument, open_database
from simdb.config.configfile import get_export_directory
from simdb.db.database import Database
from simdb.utils import ensure_directory_exists


LOG = logging.getLogger(__name__)

FORMATS = ["csv", "text", "json", "markdown", "insert", "xlsx"]


@contextmanager
def output_stream(output: Optional[str]) -> Iterator[TextIO]:
    """
    Yield a text sink for the output path, or stdout when there is none.

    Args:
        output: The output file path, or None for stdout.
    """
    if output is None:
        yield sys.stdout
        return
    ensure_directory_exists(os.path.dirname(os.path.abspath(output)))
    with open(output, "w", newline="") as sink:
        yield sink


class DatabaseExportCommand(CommandEntryPoint):
    """
    Handles the `database export` subcommand.

    Methods:
        add_parser: Adds the `database export` command to the CLI parser.
        process_command: Exports the requested tables in the requested format.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `database export` subcommand parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `database export`
                subcommand parser will be added.
        """
        parser = subparsers.add_parser(
            "export",
            help="Export tables of a database.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        parser.set_defaults(func=self.process_command)

        parser.add_argument("path", type=str, help="The path of the database.")
        add_engine_argument(parser, "The engine the database belongs to. Detected from the path when not given.")
        parser.add_argument("-f", "--format", type=str, default="csv", choices=FORMATS, help="The output format.")
        parser.add_argument("-s", "--schema", type=str, default=None, help="The schema to export.")
        parser.add_argument(
            "-t",
            "--tables",
            nargs="+",
            default=None,
            help="The tables to export. Defaults to every table (and view, except for insert and xlsx).",
        )
        parser.add_argument(
            "-o",
            "--output",
            type=str,
            default=None,
            help="Output directory for csv, output file for other formats. "
            "Defaults to the export directory for csv and xlsx, and to stdout otherwise.",
        )
        parser.add_argument("--no-header", action="store_true", help="Leave the header row out of csv files.")

    def _export_csv(self, database: Database, args: Namespace) -> List[str]:
        if args.tables is None:
            return database.write_all_tables_as_csv(args.output, args.schema, header=not args.no_header)
        directory = args.output or os.path.join(get_export_directory(), f"{database.label}_csv")
        ensure_directory_exists(directory)
        written = []
        for table in args.tables:
            path = os.path.join(directory, f"{table}.csv")
            with open(path, "w", newline="") as sink:
                database.write_table_as_csv(table, sink, args.schema, header=not args.no_header)
            written.append(path)
        return written

    def _export_xlsx(self, database: Database, args: Namespace) -> str:
        if args.tables is None:
            if args.output is None:
                return database.write_db_to_workbook(args.schema)
            return database.write_db_to_workbook(
                args.schema, wb_name=os.path.basename(args.output), wb_directory=os.path.dirname(args.output) or "."
            )
        path = args.output or os.path.join(get_export_directory(), f"{database.label}.xlsx")
        return database.write_tables_to_workbook(args.tables, path, args.schema)

    def _export_document(self, database: Database, args: Namespace, sink: TextIO):
        fmt = args.format
        if args.tables is None:
            if fmt == "text":
                database.write_all_tables_as_text(sink, args.schema)
            elif fmt == "json":
                database.write_all_tables_as_json(sink, args.schema)
            elif fmt == "insert":
                database.write_all_tables_as_insert_queries(sink, args.schema)
            else:
                names = database.get_table_names(args.schema) + database.get_view_names(args.schema)
                for table in names:
                    database.write_table_as_markdown(table, sink, args.schema)
                    sink.write("\n")
            return

        for table in args.tables:
            if fmt == "text":
                database.write_table_as_text(table, sink, args.schema)
            elif fmt == "json":
                database.write_table_as_json(table, sink, args.schema)
            elif fmt == "insert":
                database.write_insert_queries(table, sink, args.schema)
            else:
                database.write_table_as_markdown(table, sink, args.schema)
                sink.write("\n")

    def process_command(self, args: Namespace):
        """
        Export the database in the requested format.

        Args:
            args: An argparse Namespace containing user arguments.
        """
        _, database = open_database(args.path, args.engine)
        if args.format == "csv":
            written = self._export_csv(database, args)
            LOG.info(f"Exported {len(written)} tables as CSV")
        elif args.format == "xlsx":
            path = self._export_xlsx(database, args)
            LOG.info(f"Exported the tables of {database.label} to {path}")
        else:
            with output_stream(args.output) as sink:
                self._export_document(database, args, sink)
