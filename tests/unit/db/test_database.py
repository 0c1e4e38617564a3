##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Tests for the `database.py` module.
"""

import csv
import io
import json
import logging
import os
from datetime import date

import pytest
from _pytest.capture import CaptureFixture
from openpyxl import Workbook, load_workbook
from pytest_mock import MockerFixture

from simdb.db.column_metadata import DbSchemaInfo
from simdb.db.create_task import DbCreateTask
from simdb.engines.sqlite.sqlite_engine import SQLiteEngine
from simdb.exceptions import ConfigurationError, DataAccessError
from simdb.export.workbook import open_workbook_read_only
from tests.fixture_types import FixtureDatabase, FixtureDict, FixtureStr
from tests.fixtures.databases import ITEM_ROWS, ORDER_ROWS


class TestEndToEnd:
    """
    Tests that walk a database from creation through export and import.
    """

    def test_fresh_database_exports_header_only(self, tmp_path, databases_orders_script: FixtureStr):
        """
        Test that an empty table exports as the header row alone, or as nothing without a header.

        Args:
            tmp_path: PyTest tmp_path fixture.
            databases_orders_script: The path of the script creating the order tables.
        """
        engine = SQLiteEngine()
        database = engine.create_database("T1.db", str(tmp_path))
        assert engine.is_database(os.path.join(tmp_path, "T1.db"))
        assert engine.default_schema_name in database.schema_names
        assert database.execute_script(databases_orders_script)

        with_header = io.StringIO()
        assert database.write_table_as_csv("Orders", with_header, header=True) == 0
        assert with_header.getvalue().splitlines() == ["ID,CUSTOMER,PLACED"]

        without_header = io.StringIO()
        assert database.write_table_as_csv("Orders", without_header, header=False) == 0
        assert without_header.getvalue() == ""

    def test_workbook_import_then_csv_export(
        self, databases_sqlite: FixtureDatabase, databases_orders_workbook: FixtureStr
    ):
        """
        Test that importing a workbook and exporting a table gives one row per sheet row after the header.

        Args:
            databases_sqlite: The empty SQLite order database.
            databases_orders_workbook: The path of a workbook with `Orders` and `Items` sheets.
        """
        inserted = databases_sqlite.write_workbook_to_db(
            databases_orders_workbook, ["Orders", "Items"], skip_first_row=True
        )
        assert inserted == {"Orders": len(ORDER_ROWS), "Items": len(ITEM_ROWS)}

        sheet_rows = load_workbook(databases_orders_workbook)["Orders"].max_row
        out = io.StringIO()
        databases_sqlite.write_table_as_csv("Orders", out, header=False)
        assert len(out.getvalue().splitlines()) == sheet_rows - 1

    def test_directory_database_end_to_end(self, databases_directory: FixtureDatabase, databases_orders_workbook):
        """
        Test the same import and export on a directory database using its default schema.

        Args:
            databases_directory: A fresh directory database with the order tables.
            databases_orders_workbook: The path of a workbook with `Orders` and `Items` sheets.
        """
        assert databases_directory.default_schema_name == "APP"
        assert databases_directory.get_table_names() == ["Items", "Orders"]
        databases_directory.write_workbook_to_db(databases_orders_workbook, ["Orders", "Items"])
        assert databases_directory.row_count("Items", "app") == len(ITEM_ROWS)


class TestCatalog:
    """
    Tests for schema, table, and view discovery.
    """

    def test_schema_names(self, databases_sqlite: FixtureDatabase):
        """
        Test schema discovery and case-insensitive lookup.

        Args:
            databases_sqlite: The empty SQLite order database.
        """
        assert databases_sqlite.schema_names == ["main"]
        assert databases_sqlite.get_schema("MAIN") == "main"
        assert databases_sqlite.contains_schema("Main")
        assert databases_sqlite.get_schema("other") is None

    def test_tables_and_views(self, databases_sqlite: FixtureDatabase):
        """
        Test that tables and views are listed separately and looked up ignoring case.

        Args:
            databases_sqlite: The empty SQLite order database.
        """
        assert databases_sqlite.get_table_names() == ["Items", "Orders"]
        assert databases_sqlite.get_view_names() == ["ORDER_TOTALS"]
        assert databases_sqlite.schema_table_map() == {"main": ["Items", "Orders"]}
        assert databases_sqlite.schema_view_map() == {"main": ["ORDER_TOTALS"]}
        assert databases_sqlite.contains_table("orders")
        assert databases_sqlite.contains_table("order_totals")
        assert not databases_sqlite.contains_table("customers")

    def test_catalog_is_read_live(self, databases_sqlite: FixtureDatabase):
        """
        Test that a new table shows up without any refresh.

        Args:
            databases_sqlite: The empty SQLite order database.
        """
        assert databases_sqlite.execute_command("CREATE TABLE Notes (TEXT_VALUE TEXT)")
        assert "Notes" in databases_sqlite.get_table_names()
        assert "Notes" in databases_sqlite.schema_table_map()["main"]

    def test_unknown_schema_raises(self, databases_sqlite: FixtureDatabase):
        """
        Test that operations on a missing schema raise a ConfigurationError.

        Args:
            databases_sqlite: The empty SQLite order database.
        """
        with pytest.raises(ConfigurationError, match="schema 'nope' does not exist"):
            databases_sqlite.get_table_names("nope")

    def test_get_table_schema_info(self, databases_sqlite: FixtureDatabase):
        """
        Test that a table is located by catalog, schema, and exact name.

        Args:
            databases_sqlite: The empty SQLite order database.
        """
        assert databases_sqlite.get_table_schema_info("orders") == DbSchemaInfo("T1.db", "main", "Orders")
        with pytest.raises(ConfigurationError, match="does not exist"):
            databases_sqlite.get_table_schema_info("customers")

    def test_get_column_metadata(self, databases_sqlite: FixtureDatabase):
        """
        Test that column descriptors come from the table definition.

        Args:
            databases_sqlite: The empty SQLite order database.
        """
        columns = databases_sqlite.get_column_metadata("Orders")
        assert [column.name for column in columns] == ["ID", "CUSTOMER", "PLACED"]
        assert columns[0].auto_increment is True
        assert columns[2].class_name == "datetime.date"
        assert all(column.table_name == "Orders" for column in columns)


class TestQueriesAndCommands:
    """
    Tests for queries, commands, and scripts.
    """

    def test_select_all_streams_rows(self, databases_populated: FixtureDatabase):
        """
        Test that `select_all` streams every row with a matching column count.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        with databases_populated.select_all("Items") as rows:
            produced = list(rows)
            assert rows.closed
        assert len(produced) == len(ITEM_ROWS)
        assert all(len(row) == rows.column_count for row in produced)

    def test_select_all_missing_table(self, databases_populated: FixtureDatabase):
        """
        Test that selecting from a missing table raises a ConfigurationError.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        with pytest.raises(ConfigurationError):
            databases_populated.select_all("Customers")

    def test_fetch(self, databases_populated: FixtureDatabase):
        """
        Test streaming an arbitrary query with parameters.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        with databases_populated.fetch("SELECT NAME FROM Items WHERE PRICE > ? ORDER BY ID", (2.0,)) as rows:
            assert [row[0] for row in rows] == ["widget", "gadget", "widget"]

    def test_fetch_from_named_table_converts_cells(self, databases_populated: FixtureDatabase):
        """
        Test that naming the table a query reads converts its cells by declared type,
        while an anonymous query returns the stored values.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        query = "SELECT * FROM Orders WHERE ID < ? ORDER BY ID"
        with databases_populated.fetch(query, (3,), table_name="orders") as rows:
            assert rows.columns[2].table_name == "Orders"
            assert [row[2] for row in rows] == [date(2024, 1, 5), date(2024, 2, 11)]
        with databases_populated.fetch(query, (3,)) as rows:
            assert [row[2] for row in rows] == ["2024-01-05", "2024-02-11"]
        with pytest.raises(ConfigurationError, match="'Nowhere' does not exist"):
            databases_populated.fetch(query, (3,), table_name="Nowhere")

    def test_fetch_bad_sql(self, databases_populated: FixtureDatabase):
        """
        Test that a failing query raises a DataAccessError.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        with pytest.raises(DataAccessError):
            databases_populated.fetch("SELECT * FROM nowhere")

    def test_row_counts_and_emptiness(self, databases_sqlite: FixtureDatabase):
        """
        Test the row count and emptiness checks before and after data is added.

        Args:
            databases_sqlite: The empty SQLite order database.
        """
        assert databases_sqlite.has_tables()
        assert databases_sqlite.are_all_tables_empty()
        assert not databases_sqlite.has_data()
        assert databases_sqlite.execute_command("INSERT INTO Orders VALUES (?, ?, ?)", (7, "Barbara", None))
        assert databases_sqlite.row_count("Orders") == 1
        assert not databases_sqlite.is_table_empty("Orders")
        assert databases_sqlite.is_table_empty("Items")
        assert databases_sqlite.has_data()

    def test_delete_all_from(self, databases_populated: FixtureDatabase):
        """
        Test emptying tables children first.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        assert databases_populated.delete_all_from(["Items", "Orders"])
        assert databases_populated.are_all_tables_empty()

    def test_delete_all_from_wrong_order_rolls_back(self, databases_populated: FixtureDatabase):
        """
        Test that deleting a parent before its children fails and leaves the data untouched.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        assert not databases_populated.delete_all_from(["Orders", "Items"])
        assert databases_populated.row_count("Orders") == len(ORDER_ROWS)

    def test_execute_command_failure(self, databases_sqlite: FixtureDatabase, caplog: CaptureFixture):
        """
        Test that a failing command is logged and reported as False.

        Args:
            databases_sqlite: The empty SQLite order database.
            caplog: A built-in fixture from the pytest library to capture logs.
        """
        caplog.set_level(logging.ERROR)
        assert not databases_sqlite.execute_command("INSERT INTO Nowhere VALUES (1)")
        assert "Unable to execute command" in caplog.text

    def test_execute_commands_rolls_back(self, databases_sqlite: FixtureDatabase):
        """
        Test that one failing statement rolls back the ones before it.

        Args:
            databases_sqlite: The empty SQLite order database.
        """
        commands = [
            "INSERT INTO Orders VALUES (1, 'Ada', NULL)",
            "INSERT INTO Orders VALUES (1, 'Duplicate', NULL)",
        ]
        assert not databases_sqlite.execute_commands(commands)
        assert databases_sqlite.is_table_empty("Orders")

    def test_execute_empty_script(self, tmp_path, databases_sqlite: FixtureDatabase):
        """
        Test that a script without statements reports False.

        Args:
            tmp_path: PyTest tmp_path fixture.
            databases_sqlite: The empty SQLite order database.
        """
        script = tmp_path / "empty.sql"
        script.write_text("-- nothing here\n")
        assert not databases_sqlite.execute_script(script)

    def test_transaction_commits_and_rolls_back(self, databases_sqlite: FixtureDatabase):
        """
        Test that a transaction commits on success and rolls back when the block raises.

        Args:
            databases_sqlite: The empty SQLite order database.
        """
        with databases_sqlite.transaction() as conn:
            conn.execute("INSERT INTO Orders VALUES (1, 'Ada', NULL)")
        assert databases_sqlite.row_count("Orders") == 1

        with pytest.raises(RuntimeError):
            with databases_sqlite.transaction() as conn:
                conn.execute("INSERT INTO Orders VALUES (2, 'Grace', NULL)")
                raise RuntimeError("abort")
        assert databases_sqlite.row_count("Orders") == 1

    def test_transaction_wraps_engine_errors(self, databases_sqlite: FixtureDatabase):
        """
        Test that an engine error inside a transaction surfaces as a DataAccessError.

        Args:
            databases_sqlite: The empty SQLite order database.
        """
        with pytest.raises(DataAccessError):
            with databases_sqlite.transaction() as conn:
                conn.execute("INSERT INTO Nowhere VALUES (1)")

    def test_create_task(self, databases_sqlite: FixtureDatabase):
        """
        Test that a creation task is bound to the database.

        Args:
            databases_sqlite: The empty SQLite order database.
        """
        task = databases_sqlite.create_task()
        assert isinstance(task, DbCreateTask)
        assert task.database is databases_sqlite


class TestTextExports:
    """
    Tests for the CSV, text, markdown, JSON, and insert statement exports.
    """

    def test_write_table_as_csv(self, databases_populated: FixtureDatabase):
        """
        Test that NULL cells are empty fields and every row is written.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        out = io.StringIO()
        assert databases_populated.write_table_as_csv("Orders", out) == len(ORDER_ROWS)
        rows = list(csv.reader(io.StringIO(out.getvalue())))
        assert rows[0] == ["ID", "CUSTOMER", "PLACED"]
        assert rows[3] == ["3", "Linus", ""]

    def test_write_all_tables_as_csv(self, databases_populated: FixtureDatabase, config_dirs: FixtureDict[str, str]):
        """
        Test that every table and view gets its own file in the default export directory.

        Args:
            databases_populated: The SQLite order database with rows.
            config_dirs: Paths of the database and export directories used by the test configuration.
        """
        written = databases_populated.write_all_tables_as_csv()
        directory = os.path.join(config_dirs["export"], "T1_csv")
        assert sorted(written) == sorted(
            os.path.join(directory, f"{name}.csv") for name in ["Items", "Orders", "ORDER_TOTALS"]
        )
        with open(os.path.join(directory, "ORDER_TOTALS.csv")) as totals:
            assert totals.readline().strip() == "ORDER_ID,TOTAL"

    def test_write_table_as_text(self, databases_populated: FixtureDatabase):
        """
        Test that the text table is titled and shows NULL cells.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        out = io.StringIO()
        databases_populated.write_table_as_text("Orders", out)
        text = out.getvalue()
        assert text.startswith("Orders\n+")
        assert "Grace" in text
        assert "NULL" in text

    def test_write_all_tables_as_text(self, databases_populated: FixtureDatabase):
        """
        Test that every table and view is written into one sink.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        out = io.StringIO()
        databases_populated.write_all_tables_as_text(out)
        lines = out.getvalue().splitlines()
        assert {"Items", "Orders", "ORDER_TOTALS"} <= set(lines)

    def test_write_table_as_markdown(self, databases_populated: FixtureDatabase):
        """
        Test that the markdown export has a heading and a github table.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        out = io.StringIO()
        databases_populated.write_table_as_markdown("Items", out)
        lines = out.getvalue().splitlines()
        assert lines[0] == "## Items"
        assert lines[2].startswith("| ID")

    def test_write_table_as_json(self, databases_populated: FixtureDatabase):
        """
        Test the JSON document of one table.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        out = io.StringIO()
        databases_populated.write_table_as_json("Orders", out)
        document = json.loads(out.getvalue())
        assert document["table"] == "Orders"
        assert document["schema"] == "main"
        assert document["columns"] == ["ID", "CUSTOMER", "PLACED"]
        assert document["rows"][0] == {"ID": 1, "CUSTOMER": "Ada", "PLACED": "2024-01-05"}

    def test_write_all_tables_as_json(self, databases_populated: FixtureDatabase):
        """
        Test the aggregate JSON document of a schema.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        out = io.StringIO()
        databases_populated.write_all_tables_as_json(out)
        document = json.loads(out.getvalue())
        assert document["database"] == "T1"
        assert [table["table"] for table in document["tables"]] == ["Items", "Orders", "ORDER_TOTALS"]

    def test_insert_queries_recreate_rows(self, tmp_path, databases_populated: FixtureDatabase):
        """
        Test that the insert statements of a table rebuild its rows in another database.

        Args:
            tmp_path: PyTest tmp_path fixture.
            databases_populated: The SQLite order database with rows.
        """
        queries = databases_populated.get_insert_queries("Orders")
        assert len(queries) == len(ORDER_ROWS)
        assert queries[0] == (
            'INSERT INTO "main"."Orders" ("ID", "CUSTOMER", "PLACED") VALUES (1, \'Ada\', \'2024-01-05\');'
        )

        copy = SQLiteEngine().create_database("copy.db", str(tmp_path))
        assert copy.execute_command("CREATE TABLE Orders (ID INTEGER PRIMARY KEY, CUSTOMER TEXT, PLACED DATE)")
        assert copy.execute_commands([query.rstrip(";") for query in queries])
        assert copy.row_count("Orders") == len(ORDER_ROWS)

    def test_write_all_tables_as_insert_queries(self, databases_populated: FixtureDatabase):
        """
        Test that the insert script covers every table but no view.

        Args:
            databases_populated: The SQLite order database with rows.
        """
        out = io.StringIO()
        count = databases_populated.write_all_tables_as_insert_queries(out)
        assert count == len(ORDER_ROWS) + len(ITEM_ROWS)
        text = out.getvalue()
        assert "-- Items\n" in text
        assert "-- Orders\n" in text
        assert "ORDER_TOTALS" not in text

    def test_export_io_failure_raises(self, databases_populated: FixtureDatabase, mocker: MockerFixture):
        """
        Test that a sink failure in the middle of an export surfaces as a DataAccessError.

        Args:
            databases_populated: The SQLite order database with rows.
            mocker: PyTest mocker fixture.
        """
        sink = mocker.MagicMock()
        sink.write.side_effect = OSError("disk full")
        with pytest.raises(DataAccessError, match="disk full"):
            databases_populated.write_table_as_csv("Orders", sink)


class TestWorkbooks:
    """
    Tests for the workbook export and import.
    """

    def test_write_db_to_workbook(self, databases_populated: FixtureDatabase, config_dirs: FixtureDict[str, str]):
        """
        Test that every table becomes a sheet with a header row in the export directory.

        Args:
            databases_populated: The SQLite order database with rows.
            config_dirs: Paths of the database and export directories used by the test configuration.
        """
        path = databases_populated.write_db_to_workbook()
        assert path == os.path.join(config_dirs["export"], "T1.xlsx")
        workbook = load_workbook(path)
        assert workbook.sheetnames == ["Items", "Orders"]
        assert [cell.value for cell in workbook["Orders"][1]] == ["ID", "CUSTOMER", "PLACED"]
        assert workbook["Items"].max_row == len(ITEM_ROWS) + 1

    def test_write_tables_to_workbook(self, tmp_path, databases_populated: FixtureDatabase):
        """
        Test exporting chosen tables, including a view, to a named workbook.

        Args:
            tmp_path: PyTest tmp_path fixture.
            databases_populated: The SQLite order database with rows.
        """
        path = databases_populated.write_tables_to_workbook(["ORDER_TOTALS"], tmp_path / "out" / "totals.xlsx")
        workbook = load_workbook(path)
        assert workbook.sheetnames == ["ORDER_TOTALS"]
        assert workbook["ORDER_TOTALS"].max_row == 4

    def test_workbook_round_trip(self, tmp_path, databases_populated: FixtureDatabase):
        """
        Test that an exported workbook imports into an empty copy of the schema.

        Args:
            tmp_path: PyTest tmp_path fixture.
            databases_populated: The SQLite order database with rows.
        """
        path = databases_populated.write_db_to_workbook(wb_name="orders", wb_directory=tmp_path)
        assert path.endswith("orders.xlsx")
        assert databases_populated.delete_all_from(["Items", "Orders"])
        inserted = databases_populated.write_workbook_to_db(path, ["Orders", "Items"])
        assert inserted == {"Orders": 3, "Items": 4}

    def test_long_table_name_round_trip(self, tmp_path, databases_sqlite: FixtureDatabase):
        """
        Test that a table whose name is cut down to fit a sheet name imports back into
        itself, whether the import names the table or goes by the workbook's sheets.

        Args:
            tmp_path: PyTest tmp_path fixture.
            databases_sqlite: The empty SQLite order database.
        """
        table = "WITHIN_REPLICATION_COUNTER_SUMMARY"
        assert len(table) > 31
        assert databases_sqlite.execute_command(f"CREATE TABLE {table} (ID INTEGER, LABEL TEXT)")
        assert databases_sqlite.execute_command(f"INSERT INTO {table} VALUES (1, 'served')")

        path = databases_sqlite.write_tables_to_workbook([table], tmp_path / "long.xlsx")
        assert load_workbook(path).sheetnames == [table[:31]]

        assert databases_sqlite.delete_all_from([table])
        assert databases_sqlite.write_workbook_to_db(path, [table]) == {table: 1}
        assert databases_sqlite.delete_all_from([table])
        assert databases_sqlite.write_workbook_to_db(path) == {table: 1}
        with databases_sqlite.select_all(table) as rows:
            assert [tuple(row) for row in rows] == [(1, "served")]

    def test_export_rejects_sheet_name_collisions(self, tmp_path, databases_sqlite: FixtureDatabase):
        """
        Test that two tables sharing the first 31 characters of their names are not
        exported into one workbook, and that no file is written.

        Args:
            tmp_path: PyTest tmp_path fixture.
            databases_sqlite: The empty SQLite order database.
        """
        first = "WITHIN_REPLICATION_COUNTER_SUMMARY_A"
        second = "WITHIN_REPLICATION_COUNTER_SUMMARY_B"
        for table in (first, second):
            assert databases_sqlite.execute_command(f"CREATE TABLE {table} (ID INTEGER)")

        path = tmp_path / "collide.xlsx"
        match = "would both be written to sheet 'WITHIN_REPLICATION_COUNTER_SUMM'"
        with pytest.raises(ConfigurationError, match=match):
            databases_sqlite.write_tables_to_workbook([first, second], path)
        assert not path.exists()

    def test_import_rejects_ambiguous_sheet_names(self, tmp_path, databases_sqlite: FixtureDatabase):
        """
        Test that a truncated sheet name matching two tables is refused rather than guessed.

        Args:
            tmp_path: PyTest tmp_path fixture.
            databases_sqlite: The empty SQLite order database.
        """
        for table in ("WITHIN_REPLICATION_COUNTER_SUMMARY_A", "WITHIN_REPLICATION_COUNTER_SUMMARY_B"):
            assert databases_sqlite.execute_command(f"CREATE TABLE {table} (ID INTEGER)")
        workbook = Workbook()
        workbook.active.title = "WITHIN_REPLICATION_COUNTER_SUMM"
        workbook.active.append(["ID"])
        workbook.active.append([1])
        path = str(tmp_path / "ambiguous.xlsx")
        workbook.save(path)

        with pytest.raises(ConfigurationError, match="matches more than one table"):
            databases_sqlite.write_workbook_to_db(path)
        assert databases_sqlite.are_all_tables_empty()

    def test_import_skips_unknown_sheets_and_tables(
        self, tmp_path, databases_sqlite: FixtureDatabase, caplog: CaptureFixture
    ):
        """
        Test that missing sheets and sheets without a table are skipped with a warning.

        Args:
            tmp_path: PyTest tmp_path fixture.
            databases_sqlite: The empty SQLite order database.
            caplog: A built-in fixture from the pytest library to capture logs.
        """
        caplog.set_level(logging.WARNING)
        workbook = Workbook()
        workbook.active.title = "Customers"
        workbook.active.append(["ID"])
        workbook.active.append([1])
        path = str(tmp_path / "customers.xlsx")
        workbook.save(path)

        assert databases_sqlite.write_workbook_to_db(path, ["Customers", "Orders"]) == {}
        assert "has no table named 'Customers'" in caplog.text
        assert "has no sheet named 'Orders'" in caplog.text

    def test_import_without_header_pads_short_rows(self, tmp_path, databases_sqlite: FixtureDatabase):
        """
        Test importing a sheet without a header whose rows are shorter than the table.

        Args:
            tmp_path: PyTest tmp_path fixture.
            databases_sqlite: The empty SQLite order database.
        """
        workbook = Workbook()
        workbook.active.title = "Orders"
        workbook.active.append([10, "Edsger"])
        workbook.active.append([11, "Barbara"])
        path = str(tmp_path / "short.xlsx")
        workbook.save(path)

        assert databases_sqlite.write_workbook_to_db(path, skip_first_row=False) == {"Orders": 2}
        with databases_sqlite.fetch("SELECT PLACED FROM Orders") as rows:
            assert [row[0] for row in rows] == [None, None]

    def test_failed_sheet_rolls_back_and_closes_workbook(
        self, tmp_path, databases_sqlite: FixtureDatabase, mocker: MockerFixture
    ):
        """
        Test that a failing sheet leaves its table untouched, raises, and still closes the workbook.

        Args:
            tmp_path: PyTest tmp_path fixture.
            databases_sqlite: The empty SQLite order database.
            mocker: PyTest mocker fixture.
        """
        workbook = Workbook()
        workbook.active.title = "Items"
        workbook.active.append(["ID", "ORDER_ID", "NAME", "QUANTITY", "PRICE"])
        workbook.active.append([1, 99, "orphan", 1, 1.0])
        path = str(tmp_path / "orphans.xlsx")
        workbook.save(path)

        opened = []

        def open_and_track(workbook_path):
            loaded = open_workbook_read_only(workbook_path)
            mocker.spy(loaded, "close")
            opened.append(loaded)
            return loaded

        mocker.patch("simdb.db.database.open_workbook_read_only", side_effect=open_and_track)
        with pytest.raises(DataAccessError):
            databases_sqlite.write_workbook_to_db(path)
        assert databases_sqlite.is_table_empty("Items")
        opened[0].close.assert_called_once()
