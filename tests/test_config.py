"""Tests for configuration system."""

from pathlib import Path

import pytest

from sysmon.config import Config


def test_config_defaults():
    config = Config()

    assert config.refresh_interval == 2
    assert config.log_level == "info"
    assert config.log_max_bytes == 1024 * 1024
    assert config.log_backup_count == 2


def test_config_paths():
    config = Config()

    assert config.config_path == Path.home() / ".config" / "sysmon" / "config.toml"
    assert config.log_path == Path.home() / ".local" / "state" / "sysmon" / "sysmon.log"


def test_load_missing_file_returns_defaults(tmp_path: Path):
    assert Config.load(tmp_path / "missing.toml") == Config()


def test_load_partial_file(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text('refresh_interval = 5\nlog_level = "debug"\n')

    config = Config.load(path)

    assert config.refresh_interval == 5
    assert config.log_level == "debug"
    assert config.log_backup_count == Config().log_backup_count


def test_save_and_load(tmp_path: Path):
    path = tmp_path / "nested" / "config.toml"
    Config(refresh_interval=7, log_backup_count=5).save(path)

    config = Config.load(path)

    assert config.refresh_interval == 7
    assert config.log_backup_count == 5


def test_load_invalid_file(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("refresh_interval = = 3\n")

    with pytest.raises(ValueError, match="Failed to parse config file"):
        Config.load(path)


@pytest.mark.parametrize(
    "content",
    [
        "refresh_interval = [1]\n",
        "[refresh_interval]\nseconds = 3\n",
        'log_max_bytes = "big"\n',
    ],
)
def test_load_wrong_typed_value(tmp_path: Path, content):
    path = tmp_path / "config.toml"
    path.write_text(content)

    with pytest.raises(ValueError, match="Invalid config value"):
        Config.load(path)
