##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
This module contains pytest fixtures to be used throughout the entire test suite.
"""
import os
from glob import glob

import pytest

from tests.fixture_types import FixtureStr


#######################################
# Loading in Module Specific Fixtures #
#######################################

fixture_glob = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures", "**", "*.py")
pytest_plugins = [
    "tests.fixtures." + os.path.splitext(os.path.basename(fixture_file))[0]
    for fixture_file in sorted(glob(fixture_glob, recursive=True))
    if not fixture_file.endswith("__init__.py")
]


@pytest.fixture(scope="session")
def path_to_simdb_codebase() -> FixtureStr:
    """
    This fixture returns the absolute path to the 'simdb' directory at the
    root of this repository.

    Returns:
        The absolute path to the 'simdb' directory.
    """
    return os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, "simdb"))
