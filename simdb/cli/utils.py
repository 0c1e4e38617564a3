##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Utility functions to support simdb CLI command handlers.
"""

import logging
from argparse import ArgumentParser
from typing import Optional, Tuple

from simdb.db.database import Database
from simdb.engines.embedded_engine import EmbeddedEngine
from simdb.engines.engine_factory import engine_factory
from simdb.exceptions import ConfigurationError


LOG = logging.getLogger(__name__)


def add_engine_argument(parser: ArgumentParser, help_text: str):
    """
    Add the `-e/--engine` option shared by the database subcommands.

    Args:
        parser: The subcommand parser.
        help_text: The help message for the option.
    """
    parser.add_argument(
        "-e",
        "--engine",
        type=str,
        default=None,
        choices=engine_factory.list_available(),
        help=help_text,
    )


def resolve_engine(path: str, engine_name: Optional[str] = None) -> EmbeddedEngine:
    """
    Get the engine a database path belongs to.

    Args:
        path: The database path.
        engine_name: The engine to use. Detected from the path when not given.

    Returns:
        The engine.

    Raises:
        ConfigurationError: If no engine is given and none recognizes the path.
    """
    if engine_name is None:
        engine_name = engine_factory.detect(path)
        if engine_name is None:
            raise ConfigurationError(f"'{path}' is not a database of any registered engine.")
    LOG.debug(f"Using the {engine_name} engine for '{path}'")
    return engine_factory.create(engine_name)


def open_database(path: str, engine_name: Optional[str] = None) -> Tuple[EmbeddedEngine, Database]:
    """
    Open the database at a path.

    Args:
        path: The database path.
        engine_name: The engine to open it with. Detected from the path when not given.

    Returns:
        The engine and the open database.
    """
    engine = resolve_engine(path, engine_name)
    return engine, engine.open_database(path)
