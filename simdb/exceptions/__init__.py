##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Module of all simdb-specific exception types.
"""

# Pylint complains that these exceptions are no different from Exception
# but we don't care, we just need new names for exceptions here
# pylint: disable=W0235

__all__ = (
    "ConfigurationError",
    "DataAccessError",
    "EngineNotSupportedError",
)


class ConfigurationError(Exception):
    """
    Exception to signal that a precondition on a database was not met,
    e.g. opening a path that is not a valid database for the engine or
    handing over structurally invalid parameters.
    """

    def __init__(self, message):
        super().__init__(message)


class DataAccessError(Exception):
    """
    Exception for any failure while talking to the underlying storage
    engine. This covers failed deletions, duplicate simulation runs, and
    I/O failures in the middle of an export or import.
    """

    def __init__(self, message):
        super().__init__(message)


class EngineNotSupportedError(Exception):
    """
    Exception to signal that the requested storage engine is not supported.
    """

    def __init__(self, message):
        super().__init__(message)
