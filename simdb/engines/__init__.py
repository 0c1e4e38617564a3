##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
The `engines` package holds the embedded storage engines simdb supports.

Every engine implements the `EmbeddedEngine` contract (validate, create, open,
copy, delete) and hands out `ConnectionSource` objects. Engines are looked up by
name through the `engine_factory` registry.

Subpackages:
    sqlite: Single-file SQLite databases.
    directory: Directory databases with one segment file per schema.

Modules:
    connection_source: The `ConnectionSource` contract and shared SQLite helpers.
    embedded_engine: The `EmbeddedEngine` contract.
    engine_factory: The `EngineFactory` registry and its `engine_factory` instance.
"""
