##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Fixtures for files in this `cli/` test directory.
"""

from argparse import ArgumentParser

import pytest

from simdb.cli.commands.command_entry_point import CommandEntryPoint
from simdb.cli.commands.database import DatabaseCommand
from tests.fixture_types import FixtureCallable


@pytest.fixture
def create_parser() -> FixtureCallable:
    """
    A fixture to help create a parser for any command.

    Returns:
        A function that creates a parser.
    """

    def _create_parser(cmd: CommandEntryPoint) -> ArgumentParser:
        """
        Returns an `ArgumentParser` configured with the `cmd` command and its subcommands.

        Returns:
            Parser with the `cmd` command and its subcommands registered.
        """
        parser = ArgumentParser()
        subparsers = parser.add_subparsers(dest="main_command")
        cmd.add_parser(subparsers)
        return parser

    return _create_parser


@pytest.fixture
def run_database_command(create_parser: FixtureCallable) -> FixtureCallable:
    """
    A fixture that parses and runs a `database` subcommand.

    Args:
        create_parser: A function that creates a parser.

    Returns:
        A function taking the arguments after `database` and returning the parsed namespace.
    """
    parser = create_parser(DatabaseCommand())

    def _run(*arguments: str):
        args = parser.parse_args(["database", *arguments])
        args.func(args)
        return args

    return _run
