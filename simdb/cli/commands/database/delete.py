##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Implements the `database delete` subcommand for the simdb CLI.

Deleting is idempotent: a path that holds nothing is reported and left alone.
Unless `--force` is given the user is asked to confirm first.
"""

import logging
import os
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser, Namespace

from simdb.cli.commands.command_entry_point import CommandEntryPoint
from simdb.cli.utils import add_engine_argument, resolve_engine


LOG = logging.getLogger(__name__)


class DatabaseDeleteCommand(CommandEntryPoint):
    """
    Handles the `database delete` subcommand.

    Methods:
        add_parser: Adds the `database delete` command to the CLI parser.
        process_command: Deletes the database.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `database delete` subcommand parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `database delete`
                subcommand parser will be added.
        """
        parser = subparsers.add_parser(
            "delete",
            help="Delete a database.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        parser.set_defaults(func=self.process_command)

        parser.add_argument("path", type=str, help="The path of the database.")
        add_engine_argument(parser, "The engine the database belongs to. Detected from the path when not given.")
        parser.add_argument(
            "-f",
            "--force",
            action="store_true",
            help="Delete the database without confirmation.",
        )

    def process_command(self, args: Namespace):
        """
        Delete the database at the given path.

        Args:
            args: An argparse Namespace containing user arguments.
        """
        if not os.path.lexists(args.path):
            LOG.info(f"Nothing to delete at '{args.path}'.")
            return

        engine = resolve_engine(args.path, args.engine)
        if not args.force:
            answer = input(f"Delete the {engine.name} database at '{args.path}'? [y/N] ")
            if answer.strip().lower() not in ("y", "yes"):
                LOG.info("Deletion cancelled.")
                return

        engine.delete_database(args.path)
        LOG.info(f"Deleted the {engine.name} database at '{args.path}'.")
