##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
An observer that saves the statistics of a simulation into a `SimulationDatabase`.

The observer attaches itself to a `SimulationModel` and forwards the model's
lifecycle events to the database. Before an experiment starts it makes sure the
run will not collide with a run already stored under the same (simulation,
experiment) identity.
"""

import logging

from simdb.exceptions import DataAccessError
from simdb.simulation.events import SimulationModel, SimulationObserver
from simdb.simulation.simulation_database import SimulationDatabase


LOG = logging.getLogger(__name__)


class SimulationDatabaseObserver(SimulationObserver):
    """
    Forwards the lifecycle events of a model to a `SimulationDatabase`.

    Attributes:
        simulation_db (SimulationDatabase): Where the statistics are stored.
        model (SimulationModel): The model being observed.
        clear_data_before_experiment (bool): Whether a stored run with the same
            identity is deleted before the experiment starts. When False such a run
            makes `before_experiment` fail.

    Methods:
        start_observing: Attach to the model.
        stop_observing: Detach from the model.
        is_observing: Whether the observer is attached to the model.
        before_experiment: Guard against a duplicate run and record the run's start.
        after_replication: Record the statistics of a replication.
        after_experiment: Record the end of the experiment.
    """

    def __init__(
        self, simulation_db: SimulationDatabase, model: SimulationModel, clear_data_before_experiment: bool = True
    ):
        """
        Create the observer and attach it to the model.

        Args:
            simulation_db: Where the statistics are stored.
            model: The model to observe.
            clear_data_before_experiment: Whether to delete a stored run with the same identity.
        """
        self.simulation_db = simulation_db
        self.model = model
        self.clear_data_before_experiment = clear_data_before_experiment
        self.start_observing()

    def __repr__(self) -> str:
        return (
            f"SimulationDatabaseObserver(simulation_db={self.simulation_db!r}, model={self.model!r}, "
            f"clear_data_before_experiment={self.clear_data_before_experiment})"
        )

    @property
    def is_observing(self) -> bool:
        """Whether the observer is attached to its model."""
        return self.model.is_observer_attached(self)

    def start_observing(self):
        """
        Attach to the model. Does nothing if already attached.
        """
        if self.is_observing:
            return
        self.model.attach_observer(self)
        LOG.debug(f"Started saving {self.model!r} to {self.simulation_db!r}")

    def stop_observing(self):
        """
        Detach from the model.
        """
        self.model.detach_observer(self)
        LOG.debug(f"Stopped saving {self.model!r} to {self.simulation_db!r}")

    def before_experiment(self, model: SimulationModel):
        """
        Make room for the run, then record its start.

        Args:
            model: The model about to run.

        Raises:
            DataAccessError: If a run with the same identity is stored and clearing is disabled.
        """
        if self.clear_data_before_experiment:
            self.simulation_db.clear_simulation_data(model)
        elif self.simulation_db.does_run_record_exist(model.simulation_name, model.experiment_name):
            LOG.error(
                f"The database {self.simulation_db.database.label} already holds a run for simulation "
                f"'{model.simulation_name}' and experiment '{model.experiment_name}'.\n"
                "The run was stopped before anything was written. To resolve this, either:\n"
                "  1. set clear_data_before_experiment to True to replace the stored run, or\n"
                "  2. give the experiment a new name so both runs are kept."
            )
            raise DataAccessError(
                f"A simulation run record already exists for simulation '{model.simulation_name}' "
                f"and experiment '{model.experiment_name}'."
            )
        self.simulation_db.before_experiment(model)

    def after_replication(self, model: SimulationModel):
        """
        Record the statistics of a replication.

        Args:
            model: The model whose replication finished.
        """
        self.simulation_db.after_replication(model)

    def after_experiment(self, model: SimulationModel):
        """
        Record the end of the experiment.

        Args:
            model: The model whose experiment finished.
        """
        self.simulation_db.after_experiment(model)
