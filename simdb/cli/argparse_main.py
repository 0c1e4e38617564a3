##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Main CLI parser setup for the simdb command-line interface.

This module defines the primary argument parser for the `simdb` CLI tool,
including custom error handling and integration of all available subcommands.
"""

import sys
from argparse import ArgumentParser, RawDescriptionHelpFormatter

from simdb import VERSION
from simdb.cli.commands import ALL_COMMANDS


DESCRIPTION = "simdb: create, inspect, export, and import embedded simulation databases."


class HelpParser(ArgumentParser):
    """
    This class overrides the error message of the argument parser to
    print the help message when an error happens.

    Methods:
        error: Override the error message of the `ArgumentParser` class.
    """

    def error(self, message: str):
        """
        Override the error message of the `ArgumentParser` class.

        Args:
            message: The error message to log.
        """
        sys.stderr.write(f"error: {message}\n")
        self.print_help()
        sys.exit(2)


def build_main_parser() -> ArgumentParser:
    """
    Set up the command-line argument parser for the simdb package.

    Returns:
        An `ArgumentParser` object with every parser defined in simdb's codebase.
    """
    parser = HelpParser(
        prog="simdb",
        description=DESCRIPTION,
        formatter_class=RawDescriptionHelpFormatter,
        epilog="See simdb <command> --help for more info",
    )
    parser.add_argument("-v", "--version", action="version", version=VERSION)
    parser.add_argument(
        "-lvl",
        "--level",
        type=str,
        default=None,
        help="Set log level: DEBUG, INFO, WARNING, ERROR [Default: the configured logging level]",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        help="Directory holding the app.yaml configuration file to use.",
    )
    subparsers = parser.add_subparsers(dest="subparsers", required=True)

    for command in ALL_COMMANDS:
        command.add_parser(subparsers)

    return parser
