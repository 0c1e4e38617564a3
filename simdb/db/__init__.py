##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
The `db` package holds the engine-independent database layer.

Modules:
    column_metadata: `ColumnMetaData`, `Nullability`, `ColumnAffinity`, and `DbSchemaInfo`.
    create_task: `DbCreateTask`, a one-shot builder that creates and fills tables.
    database: `Database`, the facade for inspecting, exporting, and importing a database.
    row_streamer: `RowStreamer`, lazy iteration over query results.
    sql_script: Splitting SQL scripts into statements.
"""
