"""Tests for structlog configuration."""

import json
import logging

import pytest
import structlog

from sysmon.config import Config
from sysmon.logging import configure


@pytest.fixture
def configured(tmp_path, monkeypatch):
    """Configure logging into a temporary home and restore defaults afterwards."""
    monkeypatch.setenv("HOME", str(tmp_path))
    config = Config()
    configure(config)
    yield config
    for handler in logging.getLogger().handlers:
        handler.close()
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


def _read_events(config: Config) -> list[dict]:
    for handler in logging.getLogger().handlers:
        handler.flush()
    return [json.loads(line) for line in config.log_path.read_text().splitlines()]


def test_configure_creates_log_file(configured):
    assert configured.state_dir.is_dir()
    assert configured.log_path.exists()


def test_events_written_as_json_lines(configured):
    structlog.get_logger().info("signal_sent", pid=42, signal="SIGTERM")

    (event,) = _read_events(configured)

    assert event["event"] == "signal_sent"
    assert event["pid"] == 42
    assert event["signal"] == "SIGTERM"
    assert event["level"] == "info"
    assert "ts" in event


def test_level_filtering(configured):
    structlog.get_logger().debug("noisy_detail")
    structlog.get_logger().warning("system_counters_unavailable", error="boom")

    events = _read_events(configured)

    assert [e["event"] for e in events] == ["system_counters_unavailable"]


def test_unknown_level_falls_back_to_info(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    try:
        configure(Config(log_level="chatty"))
        assert logging.getLogger().level == logging.INFO
    finally:
        for handler in logging.getLogger().handlers:
            handler.close()
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()
