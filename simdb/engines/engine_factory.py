##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Engine factory for selecting and instantiating embedded storage engines.

This module defines the `EngineFactory` class, which maps engine names and aliases
to `EmbeddedEngine` implementations, discovers third-party engines through the
`simdb.engines` entry point group, and can tell which engine a path belongs to.
"""

import logging
import os
from importlib.metadata import entry_points
from typing import Dict, List, Optional, Type, Union

from simdb.engines.directory.directory_engine import DirectoryEngine
from simdb.engines.embedded_engine import EmbeddedEngine
from simdb.engines.sqlite.sqlite_engine import SQLiteEngine
from simdb.exceptions import EngineNotSupportedError


LOG = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "simdb.engines"


class EngineFactory:
    """
    Registry of the embedded engines simdb can create.

    Engines installed by other distributions are found through the `simdb.engines`
    entry point group the first time the registry is consulted.

    Attributes:
        _engines (Dict[str, Type[EmbeddedEngine]]): Maps canonical engine names to engine classes.
        _aliases (Dict[str, str]): Maps alternate names to canonical engine names.
        _plugins_loaded (bool): Whether the entry point group has been read.

    Methods:
        register: Register an engine class and optional aliases.
        list_available: Return the canonical names of the registered engines.
        engine_class: Return the engine class registered under a name or alias.
        create: Instantiate an engine by name or alias.
        detect: Find the engine that accepts a path.
    """

    def __init__(self):
        self._engines: Dict[str, Type[EmbeddedEngine]] = {}
        self._aliases: Dict[str, str] = {}
        self._plugins_loaded = False
        self.register("sqlite", SQLiteEngine, aliases=["sqlite3", "file"])
        self.register("directory", DirectoryEngine, aliases=["segmented"])

    def _load_plugins(self):
        """
        Register the engines advertised under the `simdb.engines` entry point group.
        A plugin that fails to load is logged and skipped.
        """
        if self._plugins_loaded:
            return
        self._plugins_loaded = True

        for entry_point in entry_points(group=ENTRY_POINT_GROUP):
            try:
                self.register(entry_point.name, entry_point.load())
            except (ImportError, AttributeError, TypeError) as exc:
                LOG.warning(f"Skipping engine plugin '{entry_point.name}': {exc}")
            else:
                LOG.info(f"Loaded engine plugin '{entry_point.name}'")

    def register(self, name: str, engine_class: Type[EmbeddedEngine], aliases: List[str] = None):
        """
        Register an engine class.

        Args:
            name: Canonical name of the engine.
            engine_class: The `EmbeddedEngine` subclass to register.
            aliases: Alternate names for the engine.

        Raises:
            TypeError: If `engine_class` is not an `EmbeddedEngine` subclass.
        """
        if not isinstance(engine_class, type) or not issubclass(engine_class, EmbeddedEngine):
            raise TypeError(f"{engine_class} must inherit from EmbeddedEngine")

        self._engines[name] = engine_class
        for alias in aliases or []:
            self._aliases[alias] = name
        LOG.debug(f"Registered engine '{name}' (aliases: {aliases or []})")

    def list_available(self) -> List[str]:
        """
        Return the canonical names of the registered engines, built-in engines first.

        Returns:
            The engine names.
        """
        self._load_plugins()
        return list(self._engines)

    def engine_class(self, engine_name: str) -> Type[EmbeddedEngine]:
        """
        Look up the engine class registered under a name or alias.

        Args:
            engine_name: The engine name or alias.

        Returns:
            The engine class.

        Raises:
            EngineNotSupportedError: If no engine is registered under `engine_name`.
        """
        self._load_plugins()
        canonical_name = self._aliases.get(engine_name, engine_name)
        try:
            return self._engines[canonical_name]
        except KeyError:
            raise EngineNotSupportedError(
                f"Engine '{engine_name}' is not supported. Available engines: {', '.join(self._engines)}"
            ) from None

    def create(self, engine_name: str) -> EmbeddedEngine:
        """
        Instantiate the engine registered under a name or alias.

        Args:
            engine_name: The engine name or alias.

        Returns:
            A new engine.

        Raises:
            EngineNotSupportedError: If no engine is registered under `engine_name`.
        """
        return self.engine_class(engine_name)()

    def detect(self, path: Union[str, os.PathLike]) -> Optional[str]:
        """
        Find the first registered engine that accepts `path` as one of its databases.

        Args:
            path: The path to check.

        Returns:
            The canonical engine name, or None if no engine accepts the path.
        """
        for engine_name in self.list_available():
            if self.create(engine_name).is_database(path):
                LOG.debug(f"'{path}' is a {engine_name} database")
                return engine_name
        return None


engine_factory = EngineFactory()
