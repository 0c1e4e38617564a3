##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
simdb CLI Package.

This package defines the command-line interface of simdb: the entry point parser
of the `simdb` tool, its subcommands, and the helpers they share.

Subpackages:
    commands: Contains all command implementations for the simdb CLI.

Modules:
    argparse_main: Sets up the top-level argument parser and integrates all
        registered CLI subcommands into the `simdb` CLI interface.
    utils: Provides shared helpers for opening the database a command works on.
"""
