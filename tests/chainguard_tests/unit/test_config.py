"""
Tests for environment-driven checkpoint configuration
"""

import importlib
import os
import sys

import pytest

import chainguard.core
from chainguard.core.config import (
    Config,
    ConfigurationError,
    _get_bool,
    _get_log_level,
    _get_positive_float,
)
from chainguard.core.constants import DEFAULT_SIGCHECK_VERIFICATION_FACTOR


def _reload_config(monkeypatch, env: dict[str, str]):
    for key in list(os.environ.keys()):
        if key.startswith("CHAINGUARD_"):
            monkeypatch.delenv(key, raising=False)
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    # monkeypatch puts the original module back on teardown
    monkeypatch.setattr(chainguard.core, "config", sys.modules["chainguard.core.config"])
    monkeypatch.delitem(sys.modules, "chainguard.core.config")
    return importlib.import_module("chainguard.core.config")


class TestBooleanSettings:
    """Test parsing of the checkpoints-enabled flag"""

    @pytest.mark.parametrize("raw", ["1", "true", "TRUE", "yes", "on", " On "])
    def test_true_values(self, raw):
        assert _get_bool("CHAINGUARD_CHECKPOINTS", False, {"CHAINGUARD_CHECKPOINTS": raw}) is True

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off"])
    def test_false_values(self, raw):
        assert _get_bool("CHAINGUARD_CHECKPOINTS", True, {"CHAINGUARD_CHECKPOINTS": raw}) is False

    def test_unset_uses_default(self):
        assert _get_bool("CHAINGUARD_CHECKPOINTS", True, {}) is True
        assert _get_bool("CHAINGUARD_CHECKPOINTS", False, {"CHAINGUARD_CHECKPOINTS": "  "}) is False

    def test_invalid_value(self):
        with pytest.raises(ConfigurationError, match="CHAINGUARD_CHECKPOINTS"):
            _get_bool("CHAINGUARD_CHECKPOINTS", True, {"CHAINGUARD_CHECKPOINTS": "maybe"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("CHAINGUARD_CHECKPOINTS", "0")
        assert _get_bool("CHAINGUARD_CHECKPOINTS", True) is False


class TestFloatSettings:
    """Test parsing of the verification factor"""

    def test_parses_value(self):
        env = {"CHAINGUARD_SIGCHECK_FACTOR": "12.5"}
        assert _get_positive_float("CHAINGUARD_SIGCHECK_FACTOR", 5.0, env) == 12.5

    def test_unset_uses_default(self):
        assert _get_positive_float("CHAINGUARD_SIGCHECK_FACTOR", 5.0, {}) == 5.0

    @pytest.mark.parametrize("raw", ["abc", "0", "-1", "nan", "inf"])
    def test_invalid_values(self, raw):
        with pytest.raises(ConfigurationError):
            _get_positive_float("CHAINGUARD_SIGCHECK_FACTOR", 5.0, {"CHAINGUARD_SIGCHECK_FACTOR": raw})


class TestLogLevel:
    """Test parsing of the log level"""

    def test_normalizes_case(self):
        assert _get_log_level("CHAINGUARD_LOG_LEVEL", "INFO", {"CHAINGUARD_LOG_LEVEL": "debug"}) == "DEBUG"

    def test_default(self):
        assert _get_log_level("CHAINGUARD_LOG_LEVEL", "INFO", {}) == "INFO"

    def test_invalid_level(self):
        with pytest.raises(ConfigurationError):
            _get_log_level("CHAINGUARD_LOG_LEVEL", "INFO", {"CHAINGUARD_LOG_LEVEL": "chatty"})


class TestConfig:
    """Test resolved Config values"""

    def test_config_types(self):
        assert isinstance(Config.CHECKPOINTS_ENABLED, bool)
        assert isinstance(Config.SIGCHECK_VERIFICATION_FACTOR, float)
        assert Config.SIGCHECK_VERIFICATION_FACTOR > 0
        assert isinstance(Config.CHECKPOINTS_FILE, str)

    def test_default_verification_factor(self):
        assert DEFAULT_SIGCHECK_VERIFICATION_FACTOR == 5.0


class TestEnvironmentReload:
    """Test module-level settings resolved at import time"""

    def test_defaults_with_clean_environment(self, monkeypatch):
        config = _reload_config(monkeypatch, {})

        assert config.CHECKPOINTS_ENABLED is True
        assert config.SIGCHECK_VERIFICATION_FACTOR == DEFAULT_SIGCHECK_VERIFICATION_FACTOR
        assert config.CHECKPOINTS_FILE == ""
        assert config.LOG_LEVEL == "INFO"
        assert config.LOG_FILE == ""

    def test_overrides_flow_into_config_class(self, monkeypatch, tmp_path):
        checkpoints_file = str(tmp_path / "checkpoints.json")
        config = _reload_config(
            monkeypatch,
            {
                "CHAINGUARD_CHECKPOINTS": "off",
                "CHAINGUARD_SIGCHECK_FACTOR": "20",
                "CHAINGUARD_CHECKPOINTS_FILE": f"  {checkpoints_file}  ",
                "CHAINGUARD_LOG_LEVEL": "warning",
            },
        )

        assert config.Config.CHECKPOINTS_ENABLED is False
        assert config.Config.SIGCHECK_VERIFICATION_FACTOR == 20.0
        assert config.Config.CHECKPOINTS_FILE == checkpoints_file
        assert config.Config.LOG_LEVEL == "WARNING"

    @pytest.mark.parametrize(
        "env_var, raw",
        [
            ("CHAINGUARD_CHECKPOINTS", "sometimes"),
            ("CHAINGUARD_SIGCHECK_FACTOR", "-3"),
            ("CHAINGUARD_LOG_LEVEL", "loud"),
        ],
    )
    def test_invalid_environment_fails_import(self, monkeypatch, env_var, raw):
        with pytest.raises(Exception, match=env_var):
            _reload_config(monkeypatch, {env_var: raw})

    def test_disabling_checkpoints_logs_warning(self, monkeypatch, caplog):
        with caplog.at_level("WARNING", logger="chainguard.core.config"):
            _reload_config(monkeypatch, {"CHAINGUARD_CHECKPOINTS": "0"})

        assert any(
            getattr(r, "event", None) == "config.checkpoints_disabled" for r in caplog.records
        )

    def test_original_module_restored_after_reload(self):
        from chainguard.core import config

        assert config.Config is Config
