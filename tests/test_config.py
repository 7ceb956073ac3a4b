"""
Unit tests for configuration models and loading.

Tests WorkspaceSettings validation, environment handling, and layered loading.
"""

import json
import logging
from pathlib import Path

import pytest

from config import ConfigurationLoader, configure_logging
from config.defaults import DEFAULT_SETTINGS, ENV_VAR_MAPPING
from core.models.config import WorkspaceSettings


class TestWorkspaceSettings:
    """Test WorkspaceSettings model"""

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for env_var in ENV_VAR_MAPPING:
            monkeypatch.delenv(env_var, raising=False)

    def test_defaults(self):
        """Test default settings"""
        settings = WorkspaceSettings()

        assert settings.workspace_dir == Path(".aios")
        assert settings.log_level == "INFO"
        assert settings.watch_interval == 2.0

    def test_derived_paths(self, tmp_path):
        """Test inventory, links and config paths"""
        settings = WorkspaceSettings(workspace_dir=tmp_path)

        assert settings.inventory_file == tmp_path / "projects" / "inventory.json"
        assert settings.links_dir == tmp_path / "projects" / "links"
        assert settings.config_file == tmp_path / "config.json"

    def test_workspace_dir_from_env(self, monkeypatch, tmp_path):
        """Test AIOS_WORKSPACE_DIR is honoured"""
        monkeypatch.setenv("AIOS_WORKSPACE_DIR", str(tmp_path))

        assert WorkspaceSettings().workspace_dir == tmp_path

    def test_empty_workspace_dir_env_uses_default(self, monkeypatch):
        """Test an empty AIOS_WORKSPACE_DIR falls back to ./.aios"""
        monkeypatch.setenv("AIOS_WORKSPACE_DIR", "")

        assert WorkspaceSettings().workspace_dir == Path(".aios")

    def test_log_level_validation(self):
        """Test log level normalization and validation"""
        assert WorkspaceSettings(log_level="debug").log_level == "DEBUG"

        with pytest.raises(ValueError, match="Log level must be one of"):
            WorkspaceSettings(log_level="verbose")

    @pytest.mark.parametrize("interval", [0, -1.5])
    def test_non_positive_interval_uses_default(self, interval):
        """Test non-positive watch intervals are promoted to the default"""
        assert WorkspaceSettings(watch_interval=interval).watch_interval == 2.0


class TestConfigurationLoader:
    """Test ConfigurationLoader layering"""

    def test_defaults_only(self, tmp_path):
        """Test loading with no file and no environment"""
        settings = ConfigurationLoader(environ={}).load(tmp_path)

        assert settings.workspace_dir == tmp_path
        assert settings.log_level == DEFAULT_SETTINGS["log_level"]
        assert settings.watch_interval == DEFAULT_SETTINGS["watch_interval"]

    def test_workspace_dir_from_environment(self, tmp_path):
        """Test the workspace root comes from the environment when not given"""
        loader = ConfigurationLoader(environ={"AIOS_WORKSPACE_DIR": str(tmp_path)})

        assert loader.load().workspace_dir == tmp_path

    def test_blank_environment_values_ignored(self):
        """Test whitespace-only environment values are ignored"""
        loader = ConfigurationLoader(environ={"AIOS_WORKSPACE_DIR": "  ", "AIOS_LOG_LEVEL": ""})
        settings = loader.load()

        assert settings.workspace_dir == Path(".aios")
        assert settings.log_level == "INFO"

    def test_config_file_overrides_defaults(self, tmp_path):
        """Test workspace config.json overrides defaults"""
        (tmp_path / "config.json").write_text(json.dumps({"log_level": "DEBUG", "watch_interval": 0.5}))

        settings = ConfigurationLoader(environ={}).load(tmp_path)

        assert settings.log_level == "DEBUG"
        assert settings.watch_interval == 0.5

    def test_environment_overrides_config_file(self, tmp_path):
        """Test environment variables win over the config file"""
        (tmp_path / "config.json").write_text(json.dumps({"watch_interval": 0.5}))
        loader = ConfigurationLoader(environ={"AIOS_WATCH_INTERVAL": "5"})

        assert loader.load(tmp_path).watch_interval == 5.0

    def test_explicit_overrides_win(self, tmp_path):
        """Test explicit arguments win over environment"""
        loader = ConfigurationLoader(environ={"AIOS_LOG_LEVEL": "ERROR"})

        assert loader.load(tmp_path, log_level="WARNING").log_level == "WARNING"
        assert loader.load(tmp_path, log_level=None).log_level == "ERROR"

    def test_malformed_config_file_ignored(self, tmp_path, caplog):
        """Test a broken config file falls back to defaults"""
        (tmp_path / "config.json").write_text("{not json")

        with caplog.at_level(logging.ERROR):
            settings = ConfigurationLoader(environ={}).load(tmp_path)

        assert settings.log_level == "INFO"
        assert "Failed to load config" in caplog.text

    def test_invalid_config_values_ignored(self, tmp_path, caplog):
        """Test values that fail validation are dropped, valid ones kept"""
        (tmp_path / "config.json").write_text(json.dumps({"log_level": "verbose", "watch_interval": 0.5}))

        with caplog.at_level(logging.ERROR):
            settings = ConfigurationLoader(environ={}).load(tmp_path)

        assert settings.log_level == "INFO"
        assert settings.watch_interval == 0.5
        assert "Ignoring invalid values" in caplog.text
        assert "log_level" in caplog.text

    def test_invalid_config_value_does_not_block_environment(self, tmp_path):
        """Test the environment still applies over an invalid file value"""
        (tmp_path / "config.json").write_text(json.dumps({"watch_interval": "soon"}))
        loader = ConfigurationLoader(environ={"AIOS_WATCH_INTERVAL": "3"})

        assert loader.load(tmp_path).watch_interval == 3.0

    def test_config_file_cannot_move_workspace(self, tmp_path):
        """Test the config file cannot redirect the workspace root"""
        (tmp_path / "config.json").write_text(json.dumps({"workspace_dir": "/elsewhere"}))

        settings = ConfigurationLoader(environ={}).load(tmp_path)

        assert settings.workspace_dir == tmp_path

    def test_save_round_trip(self, tmp_path):
        """Test saved settings are read back"""
        loader = ConfigurationLoader(environ={})
        settings = loader.load(tmp_path, log_level="DEBUG", watch_interval=1.5)

        config_file = loader.save(settings)

        assert json.loads(config_file.read_text()) == {"log_level": "DEBUG", "watch_interval": 1.5}
        reloaded = loader.load(tmp_path)
        assert reloaded.log_level == "DEBUG"
        assert reloaded.watch_interval == 1.5

    def test_configure_logging_level(self, tmp_path, monkeypatch):
        """Test configure_logging passes the configured level to basicConfig"""
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

        configure_logging(ConfigurationLoader(environ={}).load(tmp_path, log_level="DEBUG"))

        assert calls[0]["level"] == logging.DEBUG
