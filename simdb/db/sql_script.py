##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Splitting SQL scripts into individual statements.

Lines whose first non-blank characters are `--`, `//`, or `#` are comments. A
statement ends at a line whose last non-blank character is `;`; the `;` itself is
dropped. Text after the last `;` is kept as a final statement.
"""

import logging
import os
from typing import Iterable, List, Union


LOG = logging.getLogger(__name__)

COMMENT_PREFIXES = ("--", "//", "#")
STATEMENT_DELIMITER = ";"


def parse_queries(lines: Iterable[str]) -> List[str]:
    """
    Split the lines of a SQL script into statements.

    Args:
        lines: The lines of the script.

    Returns:
        The statements in script order, without their trailing `;`.
    """
    queries = []
    current: List[str] = []
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIXES):
            continue
        if stripped.endswith(STATEMENT_DELIMITER):
            current.append(stripped[: -len(STATEMENT_DELIMITER)].rstrip())
            statement = " ".join(part for part in current if part)
            if statement:
                queries.append(statement)
            current = []
        else:
            current.append(stripped)

    leftover = " ".join(current).strip()
    if leftover:
        queries.append(leftover)
    return queries


def parse_queries_in_sql_script(path: Union[str, os.PathLike]) -> List[str]:
    """
    Read a SQL script and split it into statements.

    Args:
        path: The path to the script.

    Returns:
        The statements in script order. An empty or missing file yields an empty list.
    """
    if not os.path.isfile(path):
        LOG.warning(f"The SQL script '{path}' does not exist.")
        return []
    with open(path, "r") as script:
        return parse_queries(script)
