##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Module for project-wide utility functions.
"""

import logging
import os
from copy import deepcopy
from types import SimpleNamespace
from typing import Dict, Union

import yaml


LOG = logging.getLogger(__name__)


def load_yaml(filepath: str) -> Dict:
    """
    Safely read a YAML file and return its contents.

    Args:
        filepath: The file path to the YAML file to be read.

    Returns:
        A dict representing the contents of the YAML file.
    """
    with open(filepath, "r") as _file:
        return yaml.safe_load(_file)


def expand_path(path: Union[str, os.PathLike]) -> str:
    """
    Expand a user-supplied path (`~` and environment variables) into an absolute path.

    Args:
        path: The path to expand.

    Returns:
        The absolute, expanded version of `path`.
    """
    return os.path.abspath(os.path.expandvars(os.path.expanduser(os.fspath(path))))


def ensure_directory_exists(dirname: Union[str, os.PathLike]) -> bool:
    """
    Ensure that a directory exists, creating it and any parents if necessary.

    Args:
        dirname: The directory that needs to exist.

    Returns:
        True if the directory already existed. False otherwise.
    """
    if not os.path.exists(dirname):
        LOG.info(f"making directories to {dirname}.")
        os.makedirs(dirname)
        return False
    return True


def nested_dict_to_namespaces(dic: Dict) -> SimpleNamespace:
    """
    Convert a nested dictionary into a nested SimpleNamespace structure.

    This function recursively transforms a dictionary (which may contain other
    dictionaries) into a structure of SimpleNamespace objects. Each key in the
    dictionary becomes an attribute of a SimpleNamespace, allowing for attribute-style
    access to the data.

    Args:
        dic: The nested dictionary to be converted.

    Returns:
        A SimpleNamespace object representing the nested structure of the input dictionary.

    Raises:
        TypeError: If the input is not a dictionary.
    """

    def recurse(dic):
        if not isinstance(dic, dict):
            return dic
        for key, val in list(dic.items()):
            dic[key] = recurse(val)
        return SimpleNamespace(**dic)

    if not isinstance(dic, dict):
        raise TypeError(f"{dic} is not a dict")

    new_dic = deepcopy(dic)
    return recurse(new_dic)
