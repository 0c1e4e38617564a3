##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Tests for the `events.py` module.
"""

from typing import List

import pytest

from simdb.simulation.events import SimulationEventSource, SimulationModel, SimulationObserver
from tests.fixture_types import FixtureCallable


class RecordingObserver(SimulationObserver):
    """An observer that writes down every event it sees."""

    def __init__(self, events: List, name: str = "recorder"):
        self.events = events
        self.name = name

    def before_experiment(self, model):
        self.events.append((self.name, "before", model.current_replication))

    def after_replication(self, model):
        self.events.append((self.name, "replication", model.current_replication, model.has_more_replications))

    def after_experiment(self, model):
        self.events.append((self.name, "after", model.current_replication))


class DetachingObserver(SimulationObserver):
    """An observer that detaches itself when the experiment starts."""

    def before_experiment(self, model):
        model.detach_observer(self)


class TestSimulationEventSource:
    """
    Tests for attaching, detaching, and notifying observers.
    """

    def test_attach_is_idempotent(self):
        """
        Test that attaching the same observer twice keeps one entry.
        """
        source = SimulationEventSource()
        observer = SimulationObserver()
        source.attach_observer(observer)
        source.attach_observer(observer)
        assert source.observers == [observer]
        assert source.is_observer_attached(observer)

    def test_detach(self):
        """
        Test that detaching removes the observer and detaching again does nothing.
        """
        source = SimulationEventSource()
        observer = SimulationObserver()
        source.attach_observer(observer)
        source.detach_observer(observer)
        source.detach_observer(observer)
        assert source.observers == []
        assert not source.is_observer_attached(observer)

    def test_multiple_observers_in_order(self):
        """
        Test that several observers are notified in attachment order.
        """
        events = []
        source = SimulationEventSource()
        source.current_replication = 0
        source.attach_observer(RecordingObserver(events, "first"))
        source.attach_observer(RecordingObserver(events, "second"))
        source.notify_before_experiment()
        assert [event[0] for event in events] == ["first", "second"]

    def test_detaching_during_notification(self):
        """
        Test that an observer detaching itself does not stop the others from being notified.
        """
        events = []
        source = SimulationEventSource()
        source.current_replication = 0
        detaching = DetachingObserver()
        source.attach_observer(detaching)
        source.attach_observer(RecordingObserver(events))
        source.notify_before_experiment()
        assert events == [("recorder", "before", 0)]
        assert not source.is_observer_attached(detaching)


class TestSimulationModel:
    """
    Tests for the `SimulationModel` base class.
    """

    def test_run_sends_events(self, simulation_model_factory: FixtureCallable):
        """
        Test the order of the events of a three replication run.

        Args:
            simulation_model_factory: A function that builds test models.
        """
        events = []
        model = simulation_model_factory()
        model.attach_observer(RecordingObserver(events))
        model.run()
        assert events == [
            ("recorder", "before", 0),
            ("recorder", "replication", 1, True),
            ("recorder", "replication", 2, True),
            ("recorder", "replication", 3, False),
            ("recorder", "after", 3),
        ]
        assert model.averages == [1.0, 2.0, 3.0]

    def test_invalid_replication_count(self, simulation_model_factory: FixtureCallable):
        """
        Test that a model needs at least one replication.

        Args:
            simulation_model_factory: A function that builds test models.
        """
        with pytest.raises(ValueError, match="at least 1"):
            simulation_model_factory(number_of_replications=0)

    def test_defaults(self):
        """
        Test the default model name, element hierarchy, and statistic snapshots.
        """

        class Minimal(SimulationModel):
            def run_replication(self, replication: int):
                pass

        model = Minimal("Sim", "Exp")
        assert model.model_name == "Sim"
        (root,) = model.model_elements()
        assert root.element_name == "Sim"
        assert root.class_name == "Minimal"
        assert root.parent_id_fk is None
        assert model.within_replication_statistics() == []
        assert model.counter_statistics() == []
        assert model.batch_statistics() == []
        assert model.across_replication_statistics() == []
        assert repr(model) == "Minimal(simulation_name='Sim', experiment_name='Exp')"
