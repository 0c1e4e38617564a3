##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Main entry point into simdb's codebase.
"""

import logging
import sys
import traceback

from simdb.cli.argparse_main import build_main_parser
from simdb.config.configfile import get_setting, initialize_config
from simdb.log_formatter import setup_logging


LOG = logging.getLogger("simdb")


def main():
    """
    Entry point for the simdb command-line interface (CLI) operations.

    This function sets up the argument parser, handles command-line arguments,
    loads the configuration, initializes logging, and executes the appropriate
    function based on the provided command. Any exception raised by a command
    is logged and turned into exit status 1.
    """
    parser = build_main_parser()
    if len(sys.argv) == 1:
        parser.print_help(sys.stdout)
        return 1
    args = parser.parse_args()

    if args.config is not None:
        initialize_config(args.config)

    log_level = args.level or get_setting("logging", "level", "INFO")
    setup_logging(logger=LOG, log_level=log_level.upper(), colors=get_setting("logging", "colors", True))

    try:
        args.func(args)
        # pylint complains that this exception is too broad - being at the literal top of the program stack, it's ok.
    except Exception as excpt:  # pylint: disable=broad-except
        LOG.debug(traceback.format_exc())
        LOG.error(str(excpt))
        sys.exit(1)

    sys.exit()


if __name__ == "__main__":
    main()
