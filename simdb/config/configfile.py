##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
This module provides functionality for locating and loading the application
configuration file and filling in default settings for anything the file leaves out.

It houses the `CONFIG` object that's used throughout simdb's codebase.
"""
import logging
import os
from typing import Any, Dict, Optional

from simdb.config import Config
from simdb.config.config_filepaths import (
    APP_FILENAME,
    CONFIG_PATH_FILE,
    DEFAULT_DB_DIR,
    DEFAULT_EXPORT_DIR,
    SIMDB_HOME,
)
from simdb.utils import expand_path, load_yaml


LOG: logging.Logger = logging.getLogger(__name__)

CONFIG: Optional[Config] = None


def load_config(filepath: str) -> Dict:
    """
    Reads a simdb YAML configuration file and returns its contents as a dictionary.

    Args:
        filepath (str): The path to the YAML configuration file.

    Returns:
        A dictionary containing the contents of the YAML file or None if file doesn't exist.
    """
    if not os.path.isfile(filepath):
        LOG.info(f"No app config file at {filepath}")
        return None
    LOG.info(f"Reading app config from file {filepath}")
    return load_yaml(filepath) or {}


def find_config_file(path: str = None) -> str:
    """
    Locate the simdb application configuration file (`app.yaml`).

    This function searches for the configuration file based on a given directory or,
    if no directory is provided, uses a fallback sequence:
      1. Check for `app.yaml` in the current working directory.
      2. Check if `CONFIG_PATH_FILE` exists and points to a valid config file.
      3. Check for `app.yaml` in the `SIMDB_HOME` directory.

    Args:
        path (str, optional): A specific directory to look for `app.yaml`.

    Returns:
        The full path to the `app.yaml` file if found, otherwise `None`.
    """
    if path is None:
        local_app = os.path.join(os.getcwd(), APP_FILENAME)
        if os.path.isfile(local_app):
            return local_app

        if os.path.isfile(CONFIG_PATH_FILE):
            with open(CONFIG_PATH_FILE, "r") as f:
                config_path = f.read().strip()
            if os.path.isfile(config_path):
                return config_path

        path_app = os.path.join(SIMDB_HOME, APP_FILENAME)
        if os.path.isfile(path_app):
            return path_app

        return None

    app_path = os.path.join(path, APP_FILENAME)
    if os.path.exists(app_path):
        return app_path

    return None


def get_default_config() -> Dict:
    """
    Creates the default configuration used when no `app.yaml` is found.

    Returns:
        A configuration dictionary with every section filled in.
    """
    return {
        "database": {
            "engine": "sqlite",
            "directory": DEFAULT_DB_DIR,
            "journal_mode": "DELETE",
            "foreign_keys": True,
        },
        "export": {
            "directory": DEFAULT_EXPORT_DIR,
            "max_column_width": 30,
            "null_text": "NULL",
        },
        "logging": {
            "level": "INFO",
            "colors": True,
        },
    }


def load_defaults(config: Dict):
    """
    Fill in any section or key missing from `config` with its default value.

    Values the user supplied are never overwritten.

    Args:
        config (Dict): The configuration dictionary to be updated with default values.
    """
    for section, defaults in get_default_config().items():
        if not isinstance(config.get(section), dict):
            config[section] = {}
        for key, value in defaults.items():
            config[section].setdefault(key, value)


def get_config(path: Optional[str] = None) -> Dict:
    """
    Loads a simdb configuration file and returns a dictionary containing the configuration data.

    Args:
        path (str, optional): The directory path to search for the configuration file.
            If `None`, default search paths are used.

    Returns:
        A dictionary containing all the configuration data with defaults applied.

    Raises:
        ValueError: If the configuration file does not hold a mapping.
    """
    filepath: Optional[str] = find_config_file(path)
    if filepath is None:
        LOG.debug("No app.yaml found, using the default configuration")
        config: Dict = get_default_config()
    else:
        config = load_config(filepath)
        if not isinstance(config, dict):
            raise ValueError(f"The configuration file '{filepath}' must contain a mapping at the top level.")
    load_defaults(config)
    return config


def get_setting(section: str, key: str, default: Any = None) -> Any:
    """
    Read one setting from the active configuration.

    Args:
        section: The configuration section (e.g. "database").
        key: The key within that section.
        default: Returned when the section or key is missing.

    Returns:
        The configured value or `default`.
    """
    namespace = getattr(CONFIG, section, None)
    return getattr(namespace, key, default)


def get_database_directory() -> str:
    """
    Get the directory new databases are created in when no directory is given.

    Returns:
        The absolute path of the configured database directory.
    """
    return expand_path(get_setting("database", "directory", DEFAULT_DB_DIR))


def get_export_directory() -> str:
    """
    Get the directory that exports are written to when no directory is given.

    Returns:
        The absolute path of the configured export directory.
    """
    return expand_path(get_setting("export", "directory", DEFAULT_EXPORT_DIR))


def initialize_config(path: Optional[str] = None) -> Config:
    """
    Initializes and returns the simdb configuration.

    Args:
        path (Optional[str]): Directory to look for the configuration file in.

    Returns:
        The initialized configuration object.
    """
    global CONFIG  # pylint: disable=global-statement

    try:
        app_config = get_config(path)
        CONFIG = Config(app_config)
    except ValueError as e:
        LOG.warning(f"Error loading configuration: {e}. Falling back to default configuration.")
        CONFIG = Config(get_default_config())
    return CONFIG


initialize_config()
