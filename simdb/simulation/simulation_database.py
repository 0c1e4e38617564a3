##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Persistence of simulation output statistics.

`SimulationDatabase` stores the runs of simulation experiments in a database
built from the bundled `simulation_db.sql` script. A run is identified by its
(simulation name, experiment name) pair; its model elements and statistics are
stored as children of the run record.
"""

import logging
import os
import sqlite3
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Union

from simdb.config.configfile import get_setting
from simdb.db.database import Database
from simdb.engines.engine_factory import engine_factory
from simdb.exceptions import ConfigurationError, DataAccessError
from simdb.simulation.events import SimulationModel
from simdb.simulation.records import (
    AcrossRepStatRecord,
    BatchStatRecord,
    ModelElementRecord,
    SimulationRunRecord,
    TableRecord,
    WithinRepCounterRecord,
    WithinRepStatRecord,
)


LOG = logging.getLogger(__name__)

SIMULATION_SCRIPT = os.path.join(os.path.dirname(os.path.abspath(__file__)), "sql", "simulation_db.sql")
DEFAULT_DATABASE_NAME = "simulation.db"

# Children come before their parents so rows can be deleted without cascading.
TABLES_IN_DELETE_ORDER = [
    BatchStatRecord.TABLE_NAME,
    WithinRepCounterRecord.TABLE_NAME,
    AcrossRepStatRecord.TABLE_NAME,
    WithinRepStatRecord.TABLE_NAME,
    ModelElementRecord.TABLE_NAME,
    SimulationRunRecord.TABLE_NAME,
]


def _sql_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    return value


def _parameters(record: TableRecord, **overrides) -> Dict[str, Any]:
    values = record.to_dict()
    values.update({key.upper(): value for key, value in overrides.items()})
    return {key: _sql_value(value) for key, value in values.items()}


class SimulationDatabase:
    """
    Stores the output statistics of simulation runs.

    Attributes:
        database (Database): The database holding the simulation tables.
        schema_name (Optional[str]): The schema holding the simulation tables.

    Methods:
        create (classmethod): Create a fresh simulation database.
        validate: Check that the database holds the simulation tables.
        clear_all_data: Delete every run.
        does_run_record_exist: Check for a run with a given identity.
        get_run_record: Read the run record with a given identity.
        clear_simulation_data: Delete the run of a model's identity.
        before_experiment: Record the start of a model's experiment.
        after_replication: Record the statistics of a finished replication.
        after_experiment: Record the end of a model's experiment.
    """

    def __init__(self, database: Database, clear_all_data: bool = False, schema_name: Optional[str] = None):
        """
        Args:
            database: The database holding the simulation tables.
            clear_all_data: Whether to delete every stored run right away.
            schema_name: The schema holding the simulation tables. Defaults to the
                database's default schema.

        Raises:
            ConfigurationError: If the database does not hold the simulation tables.
        """
        self.database = database
        self.schema_name = schema_name if schema_name is not None else database.default_schema_name
        self.validate()
        if clear_all_data:
            self.clear_all_data()

    def __repr__(self) -> str:
        return f"SimulationDatabase(database={self.database.label!r}, schema_name={self.schema_name!r})"

    @classmethod
    def create(
        cls,
        engine_name: Optional[str] = None,
        name: str = DEFAULT_DATABASE_NAME,
        directory: Optional[Union[str, os.PathLike]] = None,
    ) -> "SimulationDatabase":
        """
        Create a fresh simulation database, replacing any database with the same name.

        Args:
            engine_name: The engine to create it with. Defaults to the configured engine.
            name: The name of the database.
            directory: The directory to create it in. Defaults to the configured database directory.

        Returns:
            A `SimulationDatabase` over the new database.

        Raises:
            DataAccessError: If the simulation tables cannot be created.
        """
        engine = engine_factory.create(engine_name or get_setting("database", "engine", "sqlite"))
        database = engine.create_database(name, directory)
        if not database.execute_script(SIMULATION_SCRIPT):
            raise DataAccessError(f"Unable to create the simulation tables in database {database.label}.")
        LOG.info(f"Created simulation database {database.label} with the {engine.name} engine.")
        return cls(database)

    def _table(self, table_name: str) -> str:
        return self.database.connection_source.qualify(table_name, self.schema_name)

    def validate(self):
        """
        Check that the database holds the simulation tables.

        Raises:
            ConfigurationError: If the `SIMULATION_RUN` table is missing.
        """
        if not self.database.contains_table(SimulationRunRecord.TABLE_NAME, self.schema_name):
            raise ConfigurationError(
                f"The database {self.database.label} does not hold the simulation tables. "
                f"Create it with the {os.path.basename(SIMULATION_SCRIPT)} script."
            )

    def clear_all_data(self):
        """
        Delete every run and all of its statistics.

        Raises:
            DataAccessError: If the rows cannot be deleted.
        """
        if not self.database.delete_all_from(TABLES_IN_DELETE_ORDER, self.schema_name):
            raise DataAccessError(f"Unable to clear the simulation data of database {self.database.label}.")
        LOG.info(f"Cleared all simulation data from database {self.database.label}")

    def _run_id(self, conn: sqlite3.Connection, simulation_name: str, experiment_name: str) -> Optional[int]:
        row = conn.execute(
            f"SELECT ID FROM {self._table(SimulationRunRecord.TABLE_NAME)} WHERE SIM_NAME = ? AND EXP_NAME = ?",
            (simulation_name, experiment_name),
        ).fetchone()
        return row[0] if row is not None else None

    def _require_run_id(self, conn: sqlite3.Connection, model: SimulationModel) -> int:
        run_id = self._run_id(conn, model.simulation_name, model.experiment_name)
        if run_id is None:
            raise DataAccessError(
                f"No run record exists for simulation '{model.simulation_name}' and experiment "
                f"'{model.experiment_name}'. Was before_experiment called?"
            )
        return run_id

    def does_run_record_exist(self, simulation_name: str, experiment_name: str) -> bool:
        """
        Check whether a run with the given identity is stored.

        Args:
            simulation_name: The simulation name.
            experiment_name: The experiment name.

        Returns:
            True if the run record exists.
        """
        with self.database.transaction() as conn:
            return self._run_id(conn, simulation_name, experiment_name) is not None

    def get_run_record(self, simulation_name: str, experiment_name: str) -> Optional[SimulationRunRecord]:
        """
        Read the run record with the given identity.

        Args:
            simulation_name: The simulation name.
            experiment_name: The experiment name.

        Returns:
            The run record, or None if there is none.
        """
        with self.database.fetch(
            f"SELECT * FROM {self._table(SimulationRunRecord.TABLE_NAME)} WHERE SIM_NAME = ? AND EXP_NAME = ?",
            (simulation_name, experiment_name),
            table_name=SimulationRunRecord.TABLE_NAME,
            schema_name=self.schema_name,
        ) as rows:
            for row in rows:
                return SimulationRunRecord.from_dict(dict(zip(rows.column_names, row)))
        return None

    def clear_simulation_data(self, model: SimulationModel):
        """
        Delete the run of the model's (simulation, experiment) identity with all its statistics.
        Runs of other experiments are kept.

        Args:
            model: The model whose run to delete.
        """
        with self.database.transaction() as conn:
            run_id = self._run_id(conn, model.simulation_name, model.experiment_name)
            if run_id is None:
                LOG.debug(f"No stored run for {model!r}; nothing to clear.")
                return
            for table in TABLES_IN_DELETE_ORDER[:-1]:
                conn.execute(f"DELETE FROM {self._table(table)} WHERE SIM_RUN_ID_FK = ?", (run_id,))
            conn.execute(f"DELETE FROM {self._table(SimulationRunRecord.TABLE_NAME)} WHERE ID = ?", (run_id,))
        LOG.info(
            f"Cleared the stored run of simulation '{model.simulation_name}', "
            f"experiment '{model.experiment_name}' from database {self.database.label}"
        )

    def _insert_all(self, conn: sqlite3.Connection, records: Iterable[TableRecord], **overrides) -> int:
        count = 0
        for record in records:
            conn.execute(record.insert_statement(self._table(record.TABLE_NAME)), _parameters(record, **overrides))
            count += 1
        return count

    def before_experiment(self, model: SimulationModel) -> int:
        """
        Record the start of the model's experiment: the run record and the model elements.

        Args:
            model: The model about to run.

        Returns:
            The id of the new run record.

        Raises:
            DataAccessError: If the run cannot be recorded, e.g. because a run with the
                same identity is already stored.
        """
        run = SimulationRunRecord(
            sim_name=model.simulation_name,
            model_name=model.model_name,
            exp_name=model.experiment_name,
            num_reps=model.number_of_replications,
            exp_start_time_stamp=datetime.now(),
            length_of_rep=model.length_of_replication,
            length_of_warm_up=model.length_of_warm_up,
            has_more_reps=model.has_more_replications,
            rep_allowed_exec_time=model.maximum_allowed_execution_time,
            rep_init_option=model.replication_initialization,
            reset_start_stream_option=model.reset_start_stream,
            antithetic_option=model.antithetic,
            adv_next_sub_stream_option=model.advance_next_sub_stream,
            num_stream_advances=model.number_of_stream_advances,
        )
        with self.database.transaction() as conn:
            cursor = conn.execute(run.insert_statement(self._table(run.TABLE_NAME)), _parameters(run))
            run_id = cursor.lastrowid
            elements = self._insert_all(conn, model.model_elements(), sim_run_id_fk=run_id)
        LOG.debug(f"Recorded run {run_id} of {model!r} with {elements} model elements")
        return run_id

    def after_replication(self, model: SimulationModel):
        """
        Record the statistics of the replication that just finished.

        Args:
            model: The model whose replication finished.
        """
        replication = model.current_replication
        with self.database.transaction() as conn:
            run_id = self._require_run_id(conn, model)
            count = self._insert_all(
                conn, model.within_replication_statistics(), sim_run_id_fk=run_id, rep_num=replication
            )
            count += self._insert_all(conn, model.counter_statistics(), sim_run_id_fk=run_id, rep_num=replication)
            count += self._insert_all(conn, model.batch_statistics(), sim_run_id_fk=run_id, rep_num=replication)
            conn.execute(
                f"UPDATE {self._table(SimulationRunRecord.TABLE_NAME)} "
                "SET LAST_REP = ?, HAS_MORE_REPS = ? WHERE ID = ?",
                (replication, model.has_more_replications, run_id),
            )
        LOG.debug(f"Recorded {count} statistics of replication {replication} of run {run_id}")

    def after_experiment(self, model: SimulationModel):
        """
        Record the end of the model's experiment and its across replication statistics.

        Args:
            model: The model whose experiment finished.
        """
        with self.database.transaction() as conn:
            run_id = self._require_run_id(conn, model)
            conn.execute(
                f"UPDATE {self._table(SimulationRunRecord.TABLE_NAME)} "
                "SET EXP_END_TIME_STAMP = ?, HAS_MORE_REPS = ? WHERE ID = ?",
                (_sql_value(datetime.now()), model.has_more_replications, run_id),
            )
            count = self._insert_all(conn, model.across_replication_statistics(), sim_run_id_fk=run_id)
        LOG.debug(f"Recorded {count} across replication statistics of run {run_id}")
