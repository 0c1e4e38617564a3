##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Tests for the `sql_script.py` module.
"""

from simdb.db.sql_script import parse_queries, parse_queries_in_sql_script
from tests.fixture_types import FixtureStr


def test_parse_queries_skips_comments_and_joins_lines():
    """
    Test that comment lines are dropped and multi-line statements are joined.
    """
    lines = [
        "-- leading comment",
        "CREATE TABLE A",
        "(",
        "    X INTEGER",
        ");",
        "",
        "   // another comment",
        "# and another",
        "INSERT INTO A VALUES (1);",
    ]
    assert parse_queries(lines) == ["CREATE TABLE A ( X INTEGER )", "INSERT INTO A VALUES (1)"]


def test_parse_queries_keeps_trailing_statement():
    """
    Test that text after the last delimiter becomes a final statement.
    """
    assert parse_queries(["SELECT 1;", "SELECT", "2"]) == ["SELECT 1", "SELECT 2"]


def test_parse_queries_ignores_empty_statements():
    """
    Test that a delimiter on its own line does not produce an empty statement.
    """
    assert parse_queries([";", "SELECT 1;"]) == ["SELECT 1"]


def test_parse_queries_in_sql_script(databases_orders_script: FixtureStr):
    """
    Test that a script file yields its three statements.

    Args:
        databases_orders_script: The path of the script creating the order tables.
    """
    queries = parse_queries_in_sql_script(databases_orders_script)
    assert len(queries) == 3
    assert queries[0].startswith("CREATE TABLE Orders")
    assert queries[2].startswith("CREATE VIEW ORDER_TOTALS AS")


def test_parse_queries_in_missing_script(tmp_path):
    """
    Test that a missing script yields no statements.

    Args:
        tmp_path: PyTest tmp_path fixture.
    """
    assert parse_queries_in_sql_script(tmp_path / "missing.sql") == []
