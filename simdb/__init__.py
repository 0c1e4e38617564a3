##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
simdb: embedded databases for simulation output.

This package creates, opens, inspects, and exports embedded relational
databases and records simulation runs into them.
"""

__version__ = "0.4.0"
VERSION = __version__
