"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from uptime_monitor.config import Config, LoggingConfig, MonitoringConfig, StatsConfig, load_config


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run from an empty directory with no config-related variables set."""
    monkeypatch.chdir(tmp_path)
    for name in ("APP_ENV", "CONFIG_PATH", "LOG_LEVEL", "PROBE_INTERVAL", "PROBE_HALT_ON_ERROR"):
        # Teardown then also clears values written by load_dotenv
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return tmp_path


@pytest.mark.unit
class TestDefaults:
    """Test default configuration values."""

    def test_defaults(self):
        config = Config()

        assert config.monitoring.probe_interval == 60
        assert config.monitoring.request_timeout is None
        assert config.monitoring.halt_on_error is False
        assert config.stats.bucket_seconds == 3600
        assert config.stats.bucket_count == 24
        assert config.api.port == 3000

    def test_invalid_interval(self):
        with pytest.raises(ValidationError):
            MonitoringConfig(probe_interval=0)

    def test_invalid_timeout(self):
        with pytest.raises(ValidationError):
            MonitoringConfig(request_timeout=-1)

    def test_invalid_bucket_count(self):
        with pytest.raises(ValidationError):
            StatsConfig(bucket_count=0)

    def test_log_level_normalized(self):
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")


@pytest.mark.unit
class TestLoadConfig:
    """Test YAML loading and environment overrides."""

    def test_missing_file_in_development(self, clean_env):
        config = load_config()

        assert config.monitoring.probe_interval == 60

    def test_missing_file_in_production(self, clean_env, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")

        with pytest.raises(FileNotFoundError):
            load_config()

    def test_yaml_file(self, clean_env, monkeypatch):
        config_file = clean_env / "config.yaml"
        config_file.write_text(
            "monitoring:\n"
            "  probe_interval: 15\n"
            "  halt_on_error: true\n"
            "stats:\n"
            "  bucket_count: 12\n"
        )
        monkeypatch.setenv("CONFIG_PATH", str(config_file))

        config = load_config()

        assert config.monitoring.probe_interval == 15
        assert config.monitoring.halt_on_error is True
        assert config.stats.bucket_count == 12

    def test_invalid_yaml(self, clean_env, monkeypatch):
        config_file = clean_env / "config.yaml"
        config_file.write_text("monitoring: [unclosed\n")
        monkeypatch.setenv("CONFIG_PATH", str(config_file))

        with pytest.raises(ValueError):
            load_config()

    def test_environment_overrides(self, clean_env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("PROBE_INTERVAL", "5")
        monkeypatch.setenv("PROBE_HALT_ON_ERROR", "true")

        config = load_config()

        assert config.logging.level == "WARNING"
        assert config.monitoring.probe_interval == 5
        assert config.monitoring.halt_on_error is True

    def test_invalid_override_rejected(self, clean_env, monkeypatch):
        monkeypatch.setenv("PROBE_INTERVAL", "0")

        with pytest.raises(ValueError):
            load_config()

    def test_dotenv_file(self, clean_env):
        (clean_env / ".env").write_text("# local settings\nPROBE_INTERVAL=7\n")

        config = load_config()

        assert config.monitoring.probe_interval == 7
