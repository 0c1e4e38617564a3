##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Fixture definitions shared by the whole test suite, loaded as pytest plugins by
`tests/conftest.py`.

Fixtures must start with the same name as the file they're defined in. For instance,
fixtures in `databases.py` start with "databases_".
"""
