##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Test the functionality of the Config object.
"""

from copy import copy
from types import SimpleNamespace

from simdb.config import Config


class TestConfig:
    """
    Class for testing the Config object. We'll store a valid `app_dict`
    as an attribute here so that each test doesn't have to redefine it
    each time.
    """

    app_dict = {
        "database": {"engine": "sqlite", "directory": "/tmp/dbs", "journal_mode": "DELETE"},
        "export": {"directory": "/tmp/exports", "max_column_width": 30},
        "logging": {"level": "INFO", "colors": False},
    }

    def test_config_creation(self):
        """
        Test the creation of the Config object. Each section should become a
        namespace saved to the attribute of the same name.
        """
        config = Config(self.app_dict)
        assert config.database == SimpleNamespace(**self.app_dict["database"])
        assert config.export == SimpleNamespace(**self.app_dict["export"])
        assert config.logging == SimpleNamespace(**self.app_dict["logging"])

    def test_config_creation_missing_section(self):
        """
        Test the creation of the Config object without the logging section. This should
        still work and just leave the logging attribute as None.
        """
        app_dict = {key: value for key, value in self.app_dict.items() if key != "logging"}
        config = Config(app_dict)
        assert config.database == SimpleNamespace(**self.app_dict["database"])
        assert config.logging is None

    def test_config_creation_ignores_unknown_sections(self):
        """
        Test that sections simdb doesn't know about are not loaded.
        """
        config = Config({**self.app_dict, "celery": {"override": 1}})
        assert "celery" not in dir(config)

    def test_config_copy(self):
        """
        Test the `__copy__` magic method of the Config object. Here we'll make sure
        each attribute was copied properly but the ids should be different.
        """
        orig_config = Config(self.app_dict)
        copied_config = copy(orig_config)

        assert orig_config.database == copied_config.database
        assert orig_config.export == copied_config.export
        assert orig_config.logging == copied_config.logging
        assert id(orig_config) != id(copied_config)
        assert id(orig_config.database) != id(copied_config.database)

    def test_config_str(self):
        """
        Test the `__str__` magic method of the Config object. This should just give us
        a formatted string of the attributes in the object.
        """
        config = Config(self.app_dict)
        config.logging = None

        expected = (
            "config:\n"
            "  database:\n"
            "    engine: 'sqlite'\n"
            "    directory: '/tmp/dbs'\n"
            "    journal_mode: 'DELETE'\n"
            "  export:\n"
            "    directory: '/tmp/exports'\n"
            "    max_column_width: 30\n"
            "  logging:\n"
            "    None"
        )
        assert str(config) == expected
