##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
The `simulation` package saves the output statistics of simulation runs.

Modules:
    database_observer: `SimulationDatabaseObserver`, which saves a model's runs as they happen.
    events: The lifecycle event source and the `SimulationModel` base class.
    records: Dataclasses for the rows of the simulation tables.
    simulation_database: `SimulationDatabase`, the store for simulation runs.

The table definitions live in `sql/simulation_db.sql`.
"""
