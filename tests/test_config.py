import logging

import pytest
from pydantic import ValidationError

from geomkit.config import GeometrySettings, configure_logging


class TestGeometrySettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GEOMKIT_PRECISION", raising=False)
        monkeypatch.delenv("GEOMKIT_LOG_LEVEL", raising=False)
        config = GeometrySettings(_env_file=None)
        assert config.precision == 1e-6
        assert config.log_level == "WARNING"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("GEOMKIT_PRECISION", "1e-9")
        monkeypatch.setenv("GEOMKIT_LOG_LEVEL", "debug")
        config = GeometrySettings(_env_file=None)
        assert config.precision == 1e-9
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("value", ["0", "-1", "inf"])
    def test_invalid_precision(self, monkeypatch, value):
        monkeypatch.setenv("GEOMKIT_PRECISION", value)
        with pytest.raises(ValidationError):
            GeometrySettings(_env_file=None)

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            GeometrySettings(_env_file=None, log_level="chatty")


class TestConfigureLogging:
    def test_sets_root_level(self, monkeypatch):
        root = logging.getLogger()
        monkeypatch.setattr(root, "handlers", [])
        monkeypatch.setattr(root, "level", root.level)
        configure_logging("debug")
        assert root.level == logging.DEBUG
        assert root.handlers
