##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Directory engine, storing one SQLite segment per schema inside a database directory.

Modules:
    directory_connection_source: Contains `DirectoryConnectionSource`, which attaches the segments.
    directory_engine: Contains `DirectoryEngine`, the lifecycle of directory databases.
"""
