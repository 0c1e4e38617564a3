##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
This module stores constants representing file paths that will be needed for
simdb's configuration.
"""

import os


APP_FILENAME: str = "app.yaml"
USER_HOME: str = os.path.expanduser("~")
SIMDB_HOME: str = os.path.join(USER_HOME, ".simdb")
CONFIG_PATH_FILE: str = os.path.join(SIMDB_HOME, "config_path.txt")
DEFAULT_DB_DIR: str = os.path.join(SIMDB_HOME, "databases")
DEFAULT_EXPORT_DIR: str = os.path.join(SIMDB_HOME, "exports")
