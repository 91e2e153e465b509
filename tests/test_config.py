"""Tests for task_watcher config module."""

import json
import pytest

from task_watcher.config import ConfigManager, ConfigError


class TestConfigManager:
    """Tests for ConfigManager class."""

    def test_missing_file_uses_defaults(self, temp_dir):
        """Test that a missing config file yields defaults."""
        config_file = temp_dir / "config.json"

        manager = ConfigManager(config_file)

        assert manager.config_file == config_file
        assert manager.config.settings.poll_interval == 5.0
        assert not config_file.exists()

    def test_load_config(self, temp_dir, watch_dir):
        """Test loading settings from a config file."""
        config_file = temp_dir / "config.json"
        config_file.write_text(json.dumps({
            "version": "1.0",
            "settings": {
                "watch_dir": str(watch_dir),
                "backend": "native",
                "poll_interval": 2
            }
        }))

        config = ConfigManager(config_file).config

        assert config.settings.watch_dir == str(watch_dir)
        assert config.settings.backend == "native"
        assert config.settings.poll_interval == 2.0
        assert config.settings.retry_interval == 15.0

    def test_invalid_json(self, temp_dir):
        """Test that malformed JSON raises ConfigError."""
        config_file = temp_dir / "config.json"
        config_file.write_text("{not json")

        with pytest.raises(ConfigError, match="Invalid config file"):
            ConfigManager(config_file)

    def test_invalid_settings(self, temp_dir):
        """Test that invalid settings raise ConfigError."""
        config_file = temp_dir / "config.json"
        config_file.write_text(json.dumps({"settings": {"poll_interval": -5}}))

        with pytest.raises(ConfigError):
            ConfigManager(config_file)

    def test_config_error_is_value_error(self):
        """Test ConfigError hierarchy."""
        assert issubclass(ConfigError, ValueError)

    def test_save_config(self, temp_dir, watch_dir):
        """Test saving creates parent directories and persists settings."""
        config_file = temp_dir / "nested" / "config.json"
        manager = ConfigManager(config_file)
        manager.set_watch_dir(str(watch_dir))

        manager.save_config()

        data = json.loads(config_file.read_text())
        assert data["version"] == "1.0"
        assert data["settings"]["watch_dir"] == str(watch_dir.resolve())
        assert ConfigManager(config_file).config.settings.watch_dir == str(watch_dir.resolve())
