##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
The `export` package renders rows into external formats.

Modules:
    formatters: Delimited text, formatted tables, JSON documents, and insert statements.
    workbook: Spreadsheet workbooks through openpyxl.
"""
