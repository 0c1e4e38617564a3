##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Implements the `database engines` subcommand, which lists the registered engines.
"""

from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser, Namespace

from tabulate import tabulate

from simdb.cli.commands.command_entry_point import CommandEntryPoint
from simdb.engines.engine_factory import engine_factory


class DatabaseEnginesCommand(CommandEntryPoint):
    """
    Handles the `database engines` subcommand.

    Methods:
        add_parser: Adds the `database engines` command to the CLI parser.
        process_command: Prints the registered engines.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `database engines` subcommand parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `database engines`
                subcommand parser will be added.
        """
        parser = subparsers.add_parser(
            "engines",
            help="List the registered storage engines.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        parser.set_defaults(func=self.process_command)

    def process_command(self, args: Namespace):
        """
        Print one line per registered engine.

        Args:
            args: An argparse Namespace containing user arguments.
        """
        rows = []
        for name in engine_factory.list_available():
            engine_class = engine_factory.engine_class(name)
            description = (engine_class.__doc__ or "").strip().split("\n")[0]
            class_path = f"{engine_class.__module__}.{engine_class.__name__}"
            rows.append([name, engine_class.default_schema_name, class_path, description])
        print(tabulate(rows, headers=["Engine", "Default Schema", "Class", "Description"]))
