#!/usr/bin/env python3
"""
Tests for SentinelConfig and ConfigManager.
"""

import pytest
import yaml

from sentinel.config_manager import ConfigManager, SentinelConfig
from sentinel.exceptions import ConfigError


class TestSentinelConfig:

    def test_defaults(self, default_config):
        assert default_config.learning_threshold == 0.80
        assert default_config.cache_key_mode == "full"
        assert default_config.cache_prefix_length == 100
        assert default_config.extended_rules is False
        assert default_config.report_format == "text"
        default_config.validate()

    @pytest.mark.parametrize("overrides", [
        {"learning_threshold": 1.5},
        {"cache_key_mode": "sha1"},
        {"cache_prefix_length": 0},
        {"max_workers": 0},
        {"report_format": "html"},
        {"log_level": "chatty"},
        {"pattern_weights": {"dos": 1.0}},
        {"pattern_weights": [1.5]},
        {"disabled_rules": "test_coverage"},
    ])
    def test_validate_rejects(self, overrides):
        with pytest.raises(ConfigError):
            SentinelConfig(**overrides).validate()


class TestConfigManagerFile:

    def test_missing_file_gives_defaults(self, config_manager):
        assert config_manager.config == SentinelConfig()

    def test_creates_parent_directory(self, tmp_path, quiet_console):
        path = tmp_path / "nested" / "dir" / "config.yaml"
        ConfigManager(str(path), console=quiet_console)
        assert path.parent.is_dir()

    def test_save_and_reload(self, tmp_path, quiet_console):
        path = tmp_path / "config.yaml"
        manager = ConfigManager(str(path), console=quiet_console)
        manager.config.extended_rules = True
        manager.config.pattern_weights = {"dos": 1.4}
        manager.save_config()
        assert "Configuration saved" in quiet_console.export_text()

        reloaded = ConfigManager(str(path), console=quiet_console)
        assert reloaded.config.extended_rules is True
        assert reloaded.config.pattern_weights == {"dos": 1.4}

    def test_unknown_keys_ignored(self, tmp_path, quiet_console):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"max_workers": 2, "api_key": "secret"}))
        manager = ConfigManager(str(path), console=quiet_console)
        assert manager.config.max_workers == 2
        assert not hasattr(manager.config, "api_key")

    @pytest.mark.parametrize("text", [
        "learning_threshold: [unclosed",
        "- just\n- a list\n",
        "learning_threshold: 3.0\n",
        "pattern_weights:\n  dos: 0.5\n",
        "pattern_weights: [1.5]\n",
        "disabled_rules: test_coverage\n",
    ])
    def test_invalid_file_keeps_defaults(self, tmp_path, quiet_console, text):
        path = tmp_path / "config.yaml"
        path.write_text(text)
        manager = ConfigManager(str(path), console=quiet_console)
        assert manager.config == SentinelConfig()
        assert "Warning: Could not load config file" in quiet_console.export_text()


class TestSetValue:

    @pytest.mark.parametrize("key,raw,expected", [
        ("parallel_rules", "yes", True),
        ("extended_rules", "off", False),
        ("max_workers", "8", 8),
        ("learning_threshold", "0.85", 0.85),
        ("disabled_rules", "test_coverage, l2_timing", ["test_coverage", "l2_timing"]),
        ("pattern_weights", "{dos: 1.5}", {"dos": 1.5}),
        ("cache_key_mode", "prefix", "prefix"),
    ])
    def test_coercion(self, config_manager, key, raw, expected):
        assert config_manager.set_value(key, raw) == expected
        assert getattr(config_manager.config, key) == expected

    def test_unknown_key(self, config_manager):
        with pytest.raises(ConfigError):
            config_manager.set_value("api_key", "x")

    @pytest.mark.parametrize("key,raw", [
        ("learning_threshold", "abc"),
        ("learning_threshold", "1.2"),
        ("parallel_rules", "maybe"),
        ("pattern_weights", "just text"),
        ("pattern_weights", "{dos: 0.9}"),
        ("report_format", "pdf"),
    ])
    def test_rejected_value_keeps_previous(self, config_manager, key, raw):
        before = getattr(config_manager.config, key)
        with pytest.raises(ConfigError):
            config_manager.set_value(key, raw)
        assert getattr(config_manager.config, key) == before


class TestDisplay:

    def test_show_config(self, config_manager, quiet_console):
        config_manager.show_config()
        output = quiet_console.export_text()
        assert "Weighted Detector" in output
        assert "learning_threshold" in output
        assert "disabled_rules" in output

    def test_output_path_is_absolute(self, config_manager):
        assert config_manager.get_output_path().is_absolute()
