##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Tests for the configfile.py module.
"""

import logging
import os

import pytest
from _pytest.capture import CaptureFixture
from pytest_mock import MockerFixture

from simdb.config import Config
from simdb.config import configfile
from simdb.config.configfile import (
    find_config_file,
    get_config,
    get_database_directory,
    get_default_config,
    get_export_directory,
    get_setting,
    initialize_config,
    load_config,
    load_defaults,
)
from tests.fixture_types import FixtureDict, FixtureStr


def write_app_yaml(directory: str, contents: str) -> str:
    """
    Write an app.yaml file into a directory.

    Args:
        directory: The directory to write into.
        contents: The YAML text.

    Returns:
        The path of the file.
    """
    path = os.path.join(directory, "app.yaml")
    with open(path, "w") as app_yaml:
        app_yaml.write(contents)
    return path


def test_load_config(config_app_yaml_dir: FixtureStr):
    """
    Test that `load_config` reads the contents of a YAML file.

    Args:
        config_app_yaml_dir: The directory holding a test app.yaml.
    """
    contents = load_config(os.path.join(config_app_yaml_dir, "app.yaml"))
    assert contents == {"database": {"engine": "directory"}, "export": {"max_column_width": 12}}


def test_load_config_missing_file(tmp_path):
    """
    Test that `load_config` returns None when the file is not there.

    Args:
        tmp_path: PyTest tmp_path fixture.
    """
    assert load_config(os.path.join(tmp_path, "app.yaml")) is None


def test_load_config_empty_file(tmp_path):
    """
    Test that an empty file loads as an empty dictionary.

    Args:
        tmp_path: PyTest tmp_path fixture.
    """
    assert load_config(write_app_yaml(str(tmp_path), "")) == {}


def test_find_config_file_in_given_directory(config_app_yaml_dir: FixtureStr):
    """
    Test that `find_config_file` finds the app.yaml in a given directory.

    Args:
        config_app_yaml_dir: The directory holding a test app.yaml.
    """
    assert find_config_file(config_app_yaml_dir) == os.path.join(config_app_yaml_dir, "app.yaml")


def test_find_config_file_given_directory_without_file(tmp_path):
    """
    Test that `find_config_file` returns None for a directory without app.yaml.

    Args:
        tmp_path: PyTest tmp_path fixture.
    """
    assert find_config_file(str(tmp_path)) is None


def test_find_config_file_prefers_cwd(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """
    Test that, with no directory given, the current working directory is checked first.

    Args:
        tmp_path: PyTest tmp_path fixture.
        monkeypatch: PyTest monkeypatch fixture.
    """
    path = write_app_yaml(str(tmp_path), "logging:\n  level: DEBUG\n")
    monkeypatch.chdir(tmp_path)
    assert find_config_file() == path


def test_find_config_file_from_config_path_file(tmp_path, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch):
    """
    Test that the file named in the config path file is used when the working directory has none.

    Args:
        tmp_path: PyTest tmp_path fixture.
        mocker: PyTest mocker fixture.
        monkeypatch: PyTest monkeypatch fixture.
    """
    app_dir = tmp_path / "elsewhere"
    app_dir.mkdir()
    app_path = write_app_yaml(str(app_dir), "logging:\n  level: DEBUG\n")
    pointer = tmp_path / "config_path.txt"
    pointer.write_text(f"{app_path}\n")

    work_dir = tmp_path / "work"
    work_dir.mkdir()
    monkeypatch.chdir(work_dir)
    mocker.patch("simdb.config.configfile.CONFIG_PATH_FILE", str(pointer))
    mocker.patch("simdb.config.configfile.SIMDB_HOME", str(tmp_path / "home"))

    assert find_config_file() == app_path


def test_find_config_file_from_simdb_home(tmp_path, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch):
    """
    Test that the simdb home directory is the last place searched.

    Args:
        tmp_path: PyTest tmp_path fixture.
        mocker: PyTest mocker fixture.
        monkeypatch: PyTest monkeypatch fixture.
    """
    home = tmp_path / "home"
    home.mkdir()
    app_path = write_app_yaml(str(home), "logging:\n  level: DEBUG\n")
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    monkeypatch.chdir(work_dir)
    mocker.patch("simdb.config.configfile.CONFIG_PATH_FILE", str(tmp_path / "missing.txt"))
    mocker.patch("simdb.config.configfile.SIMDB_HOME", str(home))

    assert find_config_file() == app_path


def test_find_config_file_nothing_found(tmp_path, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch):
    """
    Test that `find_config_file` returns None when no location has an app.yaml.

    Args:
        tmp_path: PyTest tmp_path fixture.
        mocker: PyTest mocker fixture.
        monkeypatch: PyTest monkeypatch fixture.
    """
    monkeypatch.chdir(tmp_path)
    mocker.patch("simdb.config.configfile.CONFIG_PATH_FILE", str(tmp_path / "missing.txt"))
    mocker.patch("simdb.config.configfile.SIMDB_HOME", str(tmp_path / "home"))
    assert find_config_file() is None


def test_load_defaults_keeps_user_values():
    """
    Test that `load_defaults` fills in missing keys without overwriting the ones given.
    """
    config = {"database": {"engine": "directory"}, "logging": "not a section"}
    load_defaults(config)

    defaults = get_default_config()
    assert config["database"]["engine"] == "directory"
    assert config["database"]["journal_mode"] == defaults["database"]["journal_mode"]
    assert config["export"] == defaults["export"]
    assert config["logging"] == defaults["logging"]


def test_get_config_with_file(config_app_yaml_dir: FixtureStr):
    """
    Test that `get_config` merges the app.yaml contents over the defaults.

    Args:
        config_app_yaml_dir: The directory holding a test app.yaml.
    """
    config = get_config(config_app_yaml_dir)
    assert config["database"]["engine"] == "directory"
    assert config["export"]["max_column_width"] == 12
    assert config["export"]["null_text"] == "NULL"
    assert config["logging"]["level"] == "INFO"


def test_get_config_without_file(tmp_path):
    """
    Test that `get_config` returns the defaults when there's no app.yaml.

    Args:
        tmp_path: PyTest tmp_path fixture.
    """
    assert get_config(str(tmp_path)) == get_default_config()


def test_get_config_rejects_non_mapping(tmp_path):
    """
    Test that an app.yaml without a top-level mapping raises a ValueError.

    Args:
        tmp_path: PyTest tmp_path fixture.
    """
    write_app_yaml(str(tmp_path), "- just\n- a list\n")
    with pytest.raises(ValueError, match="must contain a mapping"):
        get_config(str(tmp_path))


def test_initialize_config(config_app_yaml_dir: FixtureStr):
    """
    Test that `initialize_config` replaces the active configuration.

    Args:
        config_app_yaml_dir: The directory holding a test app.yaml.
    """
    config = initialize_config(config_app_yaml_dir)
    assert isinstance(config, Config)
    assert configfile.CONFIG is config
    assert get_setting("database", "engine") == "directory"


def test_initialize_config_falls_back_to_defaults(tmp_path, caplog: CaptureFixture):
    """
    Test that a bad app.yaml logs a warning and falls back to the defaults.

    Args:
        tmp_path: PyTest tmp_path fixture.
        caplog: A built-in fixture from the pytest library to capture logs.
    """
    caplog.set_level(logging.WARNING)
    write_app_yaml(str(tmp_path), "42\n")
    config = initialize_config(str(tmp_path))
    assert config.database.engine == get_default_config()["database"]["engine"]
    assert "Falling back to default configuration" in caplog.text


def test_get_setting(config_isolated: Config):
    """
    Test reading existing and missing settings.

    Args:
        config_isolated: The configuration object in use for the test.
    """
    assert get_setting("database", "engine") == "sqlite"
    assert get_setting("database", "nope", "fallback") == "fallback"
    assert get_setting("nope", "engine") is None


def test_configured_directories(config_dirs: FixtureDict[str, str]):
    """
    Test that the database and export directories come from the active configuration.

    Args:
        config_dirs: Paths of the database and export directories used by the test configuration.
    """
    assert get_database_directory() == os.path.abspath(config_dirs["database"])
    assert get_export_directory() == os.path.abspath(config_dirs["export"])
