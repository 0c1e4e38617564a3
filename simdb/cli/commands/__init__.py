##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
simdb CLI Commands Package.

Each module encapsulates the argument parsing and logic of one command, built
around the `CommandEntryPoint` interface.

Modules:
    command_entry_point: Defines the abstract base class `CommandEntryPoint` for all CLI commands.
    database: Implements the `database` command group (create, info, export, import, delete, engines).
"""

from simdb.cli.commands.database import DatabaseCommand


# Keep these in alphabetical order
ALL_COMMANDS = [
    DatabaseCommand(),
]
