##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Used to store the application configuration.

The `config` package loads the settings defined in an `app.yaml` file (or the
built-in defaults when there is none) and exposes them as namespaces.

Modules:
    config_filepaths.py: Constants for the locations simdb reads from and writes to.
    configfile.py: Handles locating, loading, and defaulting the configuration file.
"""
from copy import copy
from types import SimpleNamespace
from typing import Dict, List, Optional

from simdb.utils import nested_dict_to_namespaces


# Pylint complains that there's too few methods here but this class might
# be useful if we ever need to do extra stuff with the configuration so we'll
# ignore it for now
class Config:  # pylint: disable=R0903
    """
    The Config class, meant to store all simdb config settings in one place.

    Attributes:
        database (Optional[SimpleNamespace]): Default engine, database directory, and connection pragmas.
        export (Optional[SimpleNamespace]): Output directory and text rendering settings for exports.
        logging (Optional[SimpleNamespace]): Log level and color settings for the CLI.

    Methods:
        __copy__: Creates a shallow copy of the Config instance.
        __str__: Returns a formatted string representation of the Config instance.
        load_app_into_namespaces: Converts the provided configuration dictionary into namespaces
            and assigns them to the Config instance's attributes.
    """

    FIELDS: List[str] = ["database", "export", "logging"]

    def __init__(self, app_dict: Dict):
        """
        Initializes the Config instance with configuration data from a dictionary.

        Args:
            app_dict: A dictionary containing configuration data for the application.
                The keys "database", "export", and "logging" are each converted into a
                `SimpleNamespace` and assigned to the attribute of the same name.
        """
        self.database: Optional[SimpleNamespace] = None
        self.export: Optional[SimpleNamespace] = None
        self.logging: Optional[SimpleNamespace] = None
        self.load_app_into_namespaces(app_dict)

    def __copy__(self) -> "Config":
        """
        Creates a shallow copy of the Config instance.

        Returns:
            A new Config instance with copied `database`, `export`, and `logging` attributes.
        """
        cls = self.__class__
        result = cls.__new__(cls)
        result.__dict__.update({field: copy(self.__dict__[field]) for field in self.FIELDS})
        return result

    def __str__(self) -> str:
        """
        Returns a formatted string representation of the Config instance.

        Returns:
            A string containing the values of every configuration section.
        """
        formatted_str = "config:"
        for name in self.FIELDS:
            attr = getattr(self, name)
            if attr is not None:
                items = (f"    {k}: {v!r}" for k, v in attr.__dict__.items())
                joined_items = "\n".join(items)
                formatted_str += f"\n  {name}:\n{joined_items}"
            else:
                formatted_str += f"\n  {name}:\n    None"
        return formatted_str

    def load_app_into_namespaces(self, app_dict: Dict):
        """
        Converts the provided application dictionary into namespaces and assigns them
        to the Config instance's attributes.

        Args:
            app_dict: A dictionary containing configuration data for the application.
        """
        for field in self.FIELDS:
            try:
                setattr(self, field, nested_dict_to_namespaces(app_dict[field]))
            except KeyError:
                # The keywords are optional
                pass
