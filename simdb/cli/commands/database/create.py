##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Implements the `database create` subcommand for the simdb CLI.

A database is always created fresh: an existing database with the same name in
the same directory is deleted first. The new database can be filled right away
from a SQL script or given the simulation tables.
"""

import logging
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser, Namespace

from simdb.cli.commands.command_entry_point import CommandEntryPoint
from simdb.cli.utils import add_engine_argument
from simdb.config.configfile import get_setting
from simdb.engines.engine_factory import engine_factory
from simdb.exceptions import DataAccessError
from simdb.simulation.simulation_database import SimulationDatabase


LOG = logging.getLogger(__name__)


class DatabaseCreateCommand(CommandEntryPoint):
    """
    Handles the `database create` subcommand.

    Methods:
        add_parser: Adds the `database create` command to the CLI parser.
        process_command: Creates the database.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `database create` subcommand parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `database create`
                subcommand parser will be added.
        """
        parser = subparsers.add_parser(
            "create",
            help="Create a fresh database, replacing any database with the same name.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        parser.set_defaults(func=self.process_command)

        parser.add_argument("name", type=str, help="The name of the database, e.g. results.db.")
        parser.add_argument(
            "-d",
            "--directory",
            type=str,
            default=None,
            help="The directory to create the database in. Defaults to the configured database directory.",
        )
        add_engine_argument(parser, "The engine to create the database with. Defaults to the configured engine.")
        contents = parser.add_mutually_exclusive_group()
        contents.add_argument("-s", "--script", type=str, default=None, help="A SQL script to run on the new database.")
        contents.add_argument(
            "--simulation",
            action="store_true",
            help="Create the tables and views that hold simulation output statistics.",
        )

    def process_command(self, args: Namespace):
        """
        Create the database and report where it lives.

        Args:
            args: An argparse Namespace containing user arguments.
        """
        engine_name = args.engine or get_setting("database", "engine", "sqlite")
        if args.simulation:
            database = SimulationDatabase.create(engine_name, args.name, args.directory).database
        else:
            database = engine_factory.create(engine_name).create_database(args.name, args.directory)
            if args.script is not None and not database.execute_script(args.script):
                raise DataAccessError(f"The script {args.script} failed on database {database.label}.")
        print(f"Created {engine_name} database '{database.label}' at {database.connection_source.path}")
