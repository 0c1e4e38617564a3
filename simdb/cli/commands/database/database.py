##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
This module defines the `DatabaseCommand` class, which provides CLI subcommands
for working with embedded databases. The commands are registered under the
`database` top-level command.
"""

import logging
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser, Namespace

from simdb.cli.commands.command_entry_point import CommandEntryPoint
from simdb.cli.commands.database.create import DatabaseCreateCommand
from simdb.cli.commands.database.delete import DatabaseDeleteCommand
from simdb.cli.commands.database.engines import DatabaseEnginesCommand
from simdb.cli.commands.database.export import DatabaseExportCommand
from simdb.cli.commands.database.import_workbook import DatabaseImportCommand
from simdb.cli.commands.database.info import DatabaseInfoCommand


LOG = logging.getLogger(__name__)


class DatabaseCommand(CommandEntryPoint):
    """
    Handles `database` CLI commands.

    Attributes:
        subcommands (List[CommandEntryPoint]): The handlers of the `database` subcommands.

    Methods:
        add_parser: Adds the `database` command and its subcommands to the CLI parser.
        process_command: Processes the CLI input and dispatches the appropriate action.
    """

    def __init__(self):
        """
        Initialize the `DatabaseCommand` instance and its subcommand handlers.
        """
        self.subcommands = [
            DatabaseCreateCommand(),
            DatabaseDeleteCommand(),
            DatabaseEnginesCommand(),
            DatabaseExportCommand(),
            DatabaseImportCommand(),
            DatabaseInfoCommand(),
        ]

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `database` command parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `database` command parser will be added.
        """
        database: ArgumentParser = subparsers.add_parser(
            "database",
            help="Create, inspect, export, import, and delete embedded databases.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        database.set_defaults(func=self.process_command)

        database_commands: ArgumentParser = database.add_subparsers(dest="commands", required=True)
        for subcommand in self.subcommands:
            subcommand.add_parser(database_commands)

    def process_command(self, args: Namespace):
        """
        This method doesn't do anything as the subcommands each have logic
        for processing their respective commands. This still has to be implemented
        as we inherit from CommandEntryPoint.

        Args:
            args: An argparse Namespace containing user arguments.
        """
