"""Tests for runtime configuration."""

import importlib.util
import logging
import os

import pytest

from carp_sensing import config as config_module
from carp_sensing.config import Config, configure_logging
from carp_sensing.domain import FileDataEndPoint, Study, create_registry
from carp_sensing.domain.study import DataEndPoint


def load_fresh_config(monkeypatch, **env):
    """Execute config.py again under the given environment, outside sys.modules."""
    for key, value in env.items():
        if value is None:
            monkeypatch.delenv(key, raising=False)
        else:
            monkeypatch.setenv(key, value)
    spec = importlib.util.spec_from_file_location("carp_sensing_config_copy", config_module.__file__)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.Config


class TestConfig:
    """Tests for Config defaults."""

    def test_types(self):
        """Test that numeric settings are parsed to int."""
        assert isinstance(Config.FILE_BUFFER_SIZE, int)
        assert isinstance(Config.LIGHT_SAMPLING_LEVEL, int)
        assert isinstance(Config.MINIMUM_SAMPLING_LEVEL, int)
        assert isinstance(Config.NO_SAMPLING_LEVEL, int)

    def test_directories_default_to_working_directory(self, monkeypatch):
        fresh = load_fresh_config(monkeypatch, CARP_DATA_DIR=None, CARP_STUDY_DIR=None)

        assert fresh.DATA_DIR == os.path.join(".", "data")
        assert fresh.STUDY_DIR == os.path.join(".", "studies")

    def test_environment_overrides(self, monkeypatch):
        fresh = load_fresh_config(monkeypatch, CARP_FILE_BUFFER_SIZE="1234", CARP_DATA_DIR="/srv/carp")

        assert fresh.FILE_BUFFER_SIZE == 1234
        assert fresh.DATA_DIR == "/srv/carp"


class TestConfigDefaultsInModel:
    """Tests that model defaults follow Config."""

    def test_file_buffer_size(self, monkeypatch):
        monkeypatch.setattr(Config, "FILE_BUFFER_SIZE", 1234)
        registry = create_registry()

        assert FileDataEndPoint().buffer_size == 1234
        assert registry.decode({"kind": "FileDataEndPoint"}, DataEndPoint).buffer_size == 1234
        assert "buffer_size" not in FileDataEndPoint().to_dict()

    def test_data_format(self, monkeypatch):
        monkeypatch.setattr(Config, "DEFAULT_DATA_FORMAT", "omh")

        assert Study().data_format == "omh"
        assert Study.from_dict({}, create_registry()).data_format == "omh"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_root_level(self, monkeypatch):
        """Test that the requested level reaches basicConfig."""
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

        configure_logging("debug")

        assert calls["level"] == logging.DEBUG
        assert calls["format"] == Config.LOG_FORMAT

    @pytest.mark.parametrize("level", ["chatty", "verbose"])
    def test_unknown_level_falls_back_to_info(self, monkeypatch, level):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

        configure_logging(level)

        assert calls["level"] == logging.INFO
