##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Implements the `database import` subcommand, which loads workbook sheets into
the tables of the same name.
"""

import logging
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser, Namespace

from simdb.cli.commands.command_entry_point import CommandEntryPoint
from simdb.cli.utils import add_engine_argument, open_database


LOG = logging.getLogger(__name__)


class DatabaseImportCommand(CommandEntryPoint):
    """
    Handles the `database import` subcommand.

    Methods:
        add_parser: Adds the `database import` command to the CLI parser.
        process_command: Imports the workbook.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `database import` subcommand parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `database import`
                subcommand parser will be added.
        """
        parser = subparsers.add_parser(
            "import",
            help="Import the sheets of a workbook into the tables of the same name.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        parser.set_defaults(func=self.process_command)

        parser.add_argument("path", type=str, help="The path of the database.")
        parser.add_argument("workbook", type=str, help="The path of the .xlsx workbook.")
        add_engine_argument(parser, "The engine the database belongs to. Detected from the path when not given.")
        parser.add_argument(
            "-t",
            "--tables",
            nargs="+",
            default=None,
            help="The sheets to import, parents before children. Defaults to every sheet in workbook order.",
        )
        parser.add_argument("-s", "--schema", type=str, default=None, help="The schema holding the tables.")
        parser.add_argument(
            "--no-header",
            action="store_true",
            help="The first row of each sheet is data, not column names.",
        )

    def process_command(self, args: Namespace):
        """
        Import the workbook into the database.

        Args:
            args: An argparse Namespace containing user arguments.
        """
        _, database = open_database(args.path, args.engine)
        inserted = database.write_workbook_to_db(
            args.workbook, table_names=args.tables, skip_first_row=not args.no_header, schema_name=args.schema
        )
        for table, count in inserted.items():
            LOG.info(f"Imported {count} rows into {table}")
