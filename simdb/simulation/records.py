##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
This module houses dataclasses that define the rows stored in the
simulation output tables.

Each record maps onto one table of `simulation_db.sql`. Field names are the
lower-case column names; `to_dict` uses the upper-case column names so that the
result can be bound directly to named SQL parameters.
"""

import logging
from dataclasses import dataclass
from dataclasses import fields as dataclass_fields
from datetime import datetime
from typing import ClassVar, Dict, List, Optional, Type, TypeVar


LOG = logging.getLogger(__name__)
T = TypeVar("T", bound="TableRecord")


@dataclass
class TableRecord:
    """
    A base class for dataclasses that represent one row of a table.

    Attributes:
        TABLE_NAME: The table the record is stored in. Defined by subclasses.
        GENERATED_COLUMNS: Columns filled in by the database on insert.

    Methods:
        to_dict: Convert the record to a dictionary keyed by column name.
        from_dict (classmethod): Create a record from a dictionary keyed by column name.
        column_names (classmethod): List the columns of the record's table.
        insert_statement (classmethod): Build the INSERT statement for the record's table.
    """

    TABLE_NAME: ClassVar[str] = ""
    GENERATED_COLUMNS: ClassVar[List[str]] = []

    def to_dict(self) -> Dict:
        """
        Convert the record to a dictionary.

        Returns:
            The record as a dictionary keyed by upper-case column name.
        """
        return {field.name.upper(): getattr(self, field.name) for field in dataclass_fields(self)}

    @classmethod
    def from_dict(cls: Type[T], data: Dict) -> T:
        """
        Create a record from a dictionary, such as a `sqlite3.Row` turned into a dict.

        Keys are matched to fields ignoring case; unknown keys are ignored and
        missing keys take the field's default.

        Args:
            data: A dictionary keyed by column name.

        Returns:
            An instance of the record class that called this.
        """
        by_lower = {key.lower(): value for key, value in data.items()}
        known = {field.name: by_lower[field.name] for field in dataclass_fields(cls) if field.name in by_lower}
        return cls(**known)

    @classmethod
    def column_names(cls) -> List[str]:
        """
        List the columns of the record's table.

        Returns:
            The upper-case column names in field order.
        """
        return [field.name.upper() for field in dataclass_fields(cls)]

    @classmethod
    def insert_statement(cls, qualified_table: Optional[str] = None) -> str:
        """
        Build an INSERT statement with named parameters for the record's table.
        Generated columns are left out.

        Args:
            qualified_table: The table name to insert into. Defaults to `TABLE_NAME`.

        Returns:
            The statement.
        """
        columns = [name for name in cls.column_names() if name not in cls.GENERATED_COLUMNS]
        placeholders = ", ".join(f":{name}" for name in columns)
        return f"INSERT INTO {qualified_table or cls.TABLE_NAME} ({', '.join(columns)}) VALUES ({placeholders})"


@dataclass
class SimulationRunRecord(TableRecord):  # pylint: disable=too-many-instance-attributes
    """
    One experiment of one simulation, with the options it ran under.
    """

    TABLE_NAME: ClassVar[str] = "SIMULATION_RUN"
    GENERATED_COLUMNS: ClassVar[List[str]] = ["ID"]

    sim_name: str = ""
    model_name: str = ""
    exp_name: str = ""
    num_reps: int = 1
    id: Optional[int] = None  # pylint: disable=invalid-name
    exp_start_time_stamp: Optional[datetime] = None
    exp_end_time_stamp: Optional[datetime] = None
    last_rep: Optional[int] = None
    length_of_rep: Optional[float] = None
    length_of_warm_up: Optional[float] = None
    has_more_reps: Optional[bool] = None
    rep_allowed_exec_time: Optional[int] = None
    rep_init_option: Optional[bool] = None
    reset_start_stream_option: Optional[bool] = None
    antithetic_option: Optional[bool] = None
    adv_next_sub_stream_option: Optional[bool] = None
    num_stream_advances: Optional[int] = None


@dataclass
class ModelElementRecord(TableRecord):
    """
    One element of the model hierarchy of a run, numbered in nested set order.
    """

    TABLE_NAME: ClassVar[str] = "MODEL_ELEMENT"

    element_id: int = 0
    element_name: str = ""
    class_name: str = ""
    left_count: int = 1
    right_count: int = 2
    sim_run_id_fk: Optional[int] = None
    parent_id_fk: Optional[int] = None
    parent_name: Optional[str] = None


@dataclass
class WithinRepStatRecord(TableRecord):  # pylint: disable=too-many-instance-attributes
    """
    Statistics of one response within one replication.
    """

    TABLE_NAME: ClassVar[str] = "WITHIN_REP_STAT"
    GENERATED_COLUMNS: ClassVar[List[str]] = ["ID"]

    element_id_fk: int = 0
    rep_num: int = 1
    stat_name: Optional[str] = None
    id: Optional[int] = None  # pylint: disable=invalid-name
    sim_run_id_fk: Optional[int] = None
    stat_count: Optional[float] = None
    average: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    weighted_sum: Optional[float] = None
    sum_of_weights: Optional[float] = None
    weighted_ssq: Optional[float] = None
    last_value: Optional[float] = None
    last_weight: Optional[float] = None


@dataclass
class WithinRepCounterRecord(TableRecord):
    """
    Final value of one counter within one replication.
    """

    TABLE_NAME: ClassVar[str] = "WITHIN_REP_COUNTER_STAT"
    GENERATED_COLUMNS: ClassVar[List[str]] = ["ID"]

    element_id_fk: int = 0
    rep_num: int = 1
    stat_name: Optional[str] = None
    last_value: Optional[float] = None
    id: Optional[int] = None  # pylint: disable=invalid-name
    sim_run_id_fk: Optional[int] = None


@dataclass
class AcrossRepStatRecord(TableRecord):  # pylint: disable=too-many-instance-attributes
    """
    Summary of one response across the replications of a run.
    """

    TABLE_NAME: ClassVar[str] = "ACROSS_REP_STAT"
    GENERATED_COLUMNS: ClassVar[List[str]] = ["ID"]

    element_id_fk: int = 0
    stat_name: Optional[str] = None
    id: Optional[int] = None  # pylint: disable=invalid-name
    sim_run_id_fk: Optional[int] = None
    stat_count: Optional[float] = None
    average: Optional[float] = None
    std_dev: Optional[float] = None
    std_err: Optional[float] = None
    half_width: Optional[float] = None
    conf_level: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    sum_of_obs: Optional[float] = None
    dev_ssq: Optional[float] = None
    last_value: Optional[float] = None
    kurtosis: Optional[float] = None
    skewness: Optional[float] = None
    lag1_cov: Optional[float] = None
    lag1_corr: Optional[float] = None
    von_neumann_lag1_stat: Optional[float] = None
    num_missing_obs: Optional[float] = None


@dataclass
class BatchStatRecord(AcrossRepStatRecord):  # pylint: disable=too-many-instance-attributes
    """
    Batch means summary of one response within one replication.
    """

    TABLE_NAME: ClassVar[str] = "BATCH_STAT"

    rep_num: int = 1
    min_batch_size: Optional[float] = None
    min_num_batches: Optional[float] = None
    max_num_batches_multiple: Optional[float] = None
    max_num_batches: Optional[float] = None
    num_rebatches: Optional[float] = None
    current_batch_size: Optional[float] = None
    amt_unbatched: Optional[float] = None
    total_num_obs: Optional[float] = None
