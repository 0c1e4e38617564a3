##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Lifecycle events of a simulation run.

A simulation announces three events: before the experiment starts, after every
replication, and after the experiment ends. `SimulationEventSource` keeps the
observers and notifies them in attachment order. `SimulationModel` is the event
source a hosting simulation extends; it carries the run identity and hands out
snapshots of its statistics as records.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from simdb.simulation.records import (
    AcrossRepStatRecord,
    BatchStatRecord,
    ModelElementRecord,
    WithinRepCounterRecord,
    WithinRepStatRecord,
)


LOG = logging.getLogger(__name__)


class SimulationObserver:
    """
    Base class for objects that react to the lifecycle events of a simulation.
    Every hook does nothing by default.
    """

    def before_experiment(self, model: "SimulationModel"):
        """Called once before the first replication."""

    def after_replication(self, model: "SimulationModel"):
        """Called after every replication."""

    def after_experiment(self, model: "SimulationModel"):
        """Called once after the last replication."""


class SimulationEventSource:
    """
    Keeps the observers of a simulation and notifies them of lifecycle events.

    Attributes:
        observers (List[SimulationObserver]): The attached observers in attachment order.

    Methods:
        attach_observer: Attach an observer.
        detach_observer: Detach an observer.
        is_observer_attached: Check whether an observer is attached.
        notify_before_experiment: Call `before_experiment` on every observer.
        notify_after_replication: Call `after_replication` on every observer.
        notify_after_experiment: Call `after_experiment` on every observer.
    """

    def __init__(self):
        self.observers: List[SimulationObserver] = []

    def attach_observer(self, observer: SimulationObserver):
        """
        Attach an observer. Attaching one that is already attached does nothing.

        Args:
            observer: The observer to attach.
        """
        if self.is_observer_attached(observer):
            LOG.debug(f"{observer!r} is already attached.")
            return
        self.observers.append(observer)

    def detach_observer(self, observer: SimulationObserver):
        """
        Detach an observer. Detaching one that is not attached does nothing.

        Args:
            observer: The observer to detach.
        """
        if self.is_observer_attached(observer):
            self.observers.remove(observer)

    def is_observer_attached(self, observer: SimulationObserver) -> bool:
        """
        Check whether an observer is attached.

        Args:
            observer: The observer to look for.

        Returns:
            True if the observer is attached.
        """
        return any(attached is observer for attached in self.observers)

    # Notifications iterate over a copy so observers may detach while being notified.
    def notify_before_experiment(self):
        """Call `before_experiment` on every attached observer."""
        for observer in list(self.observers):
            observer.before_experiment(self)

    def notify_after_replication(self):
        """Call `after_replication` on every attached observer."""
        for observer in list(self.observers):
            observer.after_replication(self)

    def notify_after_experiment(self):
        """Call `after_experiment` on every attached observer."""
        for observer in list(self.observers):
            observer.after_experiment(self)


class SimulationModel(SimulationEventSource, ABC):  # pylint: disable=too-many-instance-attributes
    """
    A simulation that runs an experiment of independent replications.

    Subclasses implement `run_replication` and the statistic snapshots they
    collect. `run` drives the replications and announces the lifecycle events.

    Attributes:
        simulation_name (str): The name of the simulation.
        experiment_name (str): The name of the experiment. Together with the
            simulation name it identifies a run.
        model_name (str): The name of the model.
        number_of_replications (int): How many replications the experiment runs.
        current_replication (int): The replication that most recently finished, 0 before the first.
        length_of_replication (Optional[float]): The simulated time of one replication.
        length_of_warm_up (Optional[float]): The warm up period of one replication.
        maximum_allowed_execution_time (Optional[int]): The wall clock limit of one replication in milliseconds.
        replication_initialization (bool): Whether each replication starts from a fresh state.
        reset_start_stream (bool): Whether random streams are reset at the start of the experiment.
        antithetic (bool): Whether replications use antithetic streams.
        advance_next_sub_stream (bool): Whether streams advance to the next sub-stream between replications.
        number_of_stream_advances (int): How many sub-streams to advance before the first replication.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        simulation_name: str,
        experiment_name: str,
        model_name: Optional[str] = None,
        number_of_replications: int = 1,
        length_of_replication: Optional[float] = None,
        length_of_warm_up: Optional[float] = None,
        maximum_allowed_execution_time: Optional[int] = None,
        replication_initialization: bool = True,
        reset_start_stream: bool = True,
        antithetic: bool = False,
        advance_next_sub_stream: bool = True,
        number_of_stream_advances: int = 0,
    ):
        super().__init__()
        if number_of_replications < 1:
            raise ValueError("The number of replications must be at least 1.")
        self.simulation_name = simulation_name
        self.experiment_name = experiment_name
        self.model_name = model_name or simulation_name
        self.number_of_replications = number_of_replications
        self.current_replication = 0
        self.length_of_replication = length_of_replication
        self.length_of_warm_up = length_of_warm_up
        self.maximum_allowed_execution_time = maximum_allowed_execution_time
        self.replication_initialization = replication_initialization
        self.reset_start_stream = reset_start_stream
        self.antithetic = antithetic
        self.advance_next_sub_stream = advance_next_sub_stream
        self.number_of_stream_advances = number_of_stream_advances

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(simulation_name={self.simulation_name!r}, "
            f"experiment_name={self.experiment_name!r})"
        )

    @property
    def has_more_replications(self) -> bool:
        """Whether replications remain after the current one."""
        return self.current_replication < self.number_of_replications

    @abstractmethod
    def run_replication(self, replication: int):
        """
        Run one replication and update the statistics it collects.

        Args:
            replication: The replication number, starting at 1.
        """
        raise NotImplementedError("Subclasses of `SimulationModel` must implement a `run_replication` method.")

    def run(self):
        """
        Run every replication of the experiment, announcing the lifecycle events.
        """
        LOG.info(f"Running experiment {self.experiment_name} of simulation {self.simulation_name}")
        self.current_replication = 0
        self.notify_before_experiment()
        for replication in range(1, self.number_of_replications + 1):
            self.run_replication(replication)
            self.current_replication = replication
            self.notify_after_replication()
        self.notify_after_experiment()
        LOG.info(f"Finished {self.number_of_replications} replications of experiment {self.experiment_name}")

    def model_elements(self) -> List[ModelElementRecord]:
        """
        Describe the model element hierarchy. The default is a single root element.

        Returns:
            One record per model element, without the run id.
        """
        return [
            ModelElementRecord(
                element_id=1,
                element_name=self.model_name,
                class_name=type(self).__name__,
                left_count=1,
                right_count=2,
            )
        ]

    def within_replication_statistics(self) -> List[WithinRepStatRecord]:
        """Snapshot of the response statistics of the current replication."""
        return []

    def counter_statistics(self) -> List[WithinRepCounterRecord]:
        """Snapshot of the counter values of the current replication."""
        return []

    def batch_statistics(self) -> List[BatchStatRecord]:
        """Snapshot of the batch statistics of the current replication."""
        return []

    def across_replication_statistics(self) -> List[AcrossRepStatRecord]:
        """Snapshot of the response summaries across the finished replications."""
        return []
