"""Tests for logging setup."""

import json
import logging

import pytest

from uptime_monitor import __version__
from uptime_monitor.utils.logger import ContextAdapter, get_logger, setup_logging


@pytest.fixture
def restore_logging():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestSetupLogging:
    """Test logging configuration."""

    def test_json_file_output(self, tmp_path, restore_logging):
        log_file = tmp_path / "logs" / "monitor.log"
        setup_logging(level="INFO", log_format="json", log_file=str(log_file), console=False)

        get_logger("uptime_monitor.test").info("Probe completed", extra={"alias": "ex", "status_code": 200})
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["message"] == "Probe completed"
        assert record["alias"] == "ex"
        assert record["status_code"] == 200
        assert record["service"] == "uptime-monitor"
        assert record["version"] == __version__

    def test_text_format_and_level(self, tmp_path, restore_logging):
        log_file = tmp_path / "monitor.log"
        setup_logging(level="WARNING", log_format="text", log_file=str(log_file), console=False)

        logger = get_logger("uptime_monitor.test")
        logger.info("hidden")
        logger.warning("shown")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert "shown" in content
        assert "hidden" not in content
        assert "WARNING" in content

    def test_scheduler_logs_quieted(self, restore_logging):
        setup_logging(level="DEBUG", console=False)

        assert logging.getLogger("apscheduler").level == logging.WARNING

    def test_component_fields_merge_with_extra(self, tmp_path, restore_logging):
        log_file = tmp_path / "monitor.log"
        setup_logging(level="INFO", log_format="json", log_file=str(log_file), console=False)

        logger = get_logger("uptime_monitor.test.prober", component="prober")
        logger.info("Probe tick completed", extra={"sites": 2})
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["component"] == "prober"
        assert record["sites"] == 2


@pytest.mark.unit
def test_get_logger_without_fields_is_plain():
    assert isinstance(get_logger("uptime_monitor.test"), logging.Logger)
    assert isinstance(get_logger("uptime_monitor.test", component="registry"), ContextAdapter)
