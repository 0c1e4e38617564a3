##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
CLI command package for working with embedded databases.

This package defines and implements the `database` command group in the simdb CLI,
enabling users to create, inspect, export, import, and delete databases of any
registered engine.

Modules:
    database: Entry point for the `database` command group. Registers the subcommands.
    create: Defines the `database create` subcommand, which creates a fresh database.
    delete: Defines the `database delete` subcommand, which deletes a database.
    engines: Defines the `database engines` subcommand, which lists the registered engines.
    export: Defines the `database export` subcommand, which exports tables in several formats.
    import_workbook: Defines the `database import` subcommand, which loads workbook sheets into tables.
    info: Defines the `database info` subcommand, which summarizes schemas, tables, and views.
"""

from simdb.cli.commands.database.database import DatabaseCommand


__all__ = ["DatabaseCommand"]
