##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Single-file SQLite engine.

Modules:
    sqlite_connection_source: Contains `SQLiteConnectionSource`, the connection source for one SQLite file.
    sqlite_engine: Contains `SQLiteEngine`, the lifecycle of SQLite database files.
"""
