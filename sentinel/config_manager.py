#!/usr/bin/env python3
"""
Configuration Manager for Stylus Sentinel

Manages detector tuning, rule selection and report preferences.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict, field, fields

from rich.console import Console

from sentinel.exceptions import ConfigError


REPORT_FORMATS = ("text", "json", "markdown")
CACHE_KEY_MODES = ("full", "prefix")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class SentinelConfig:
    """Main configuration for Stylus Sentinel."""

    # Weighted detector
    learning_threshold: float = 0.80
    pattern_weights: Dict[str, float] = field(default_factory=dict)  # overrides only
    cache_key_mode: str = "full"  # full, prefix
    cache_prefix_length: int = 100

    # Rule runner
    parallel_rules: bool = False
    max_workers: int = 4
    extended_rules: bool = False
    disabled_rules: List[str] = field(default_factory=list)

    # Reporting
    report_format: str = "text"  # text, json, markdown
    output_dir: str = "./output"
    log_level: str = "INFO"

    def validate(self) -> None:
        """Raise ConfigError if any value is out of range."""
        if not 0.0 <= float(self.learning_threshold) <= 1.0:
            raise ConfigError(f"learning_threshold must be within [0, 1], got {self.learning_threshold}")
        if self.cache_key_mode not in CACHE_KEY_MODES:
            raise ConfigError(f"cache_key_mode must be one of {CACHE_KEY_MODES}, got '{self.cache_key_mode}'")
        if int(self.cache_prefix_length) <= 0:
            raise ConfigError("cache_prefix_length must be positive")
        if int(self.max_workers) <= 0:
            raise ConfigError("max_workers must be positive")
        if self.report_format not in REPORT_FORMATS:
            raise ConfigError(f"report_format must be one of {REPORT_FORMATS}, got '{self.report_format}'")
        if str(self.log_level).upper() not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {LOG_LEVELS}, got '{self.log_level}'")
        if not isinstance(self.pattern_weights, dict):
            raise ConfigError(f"pattern_weights must be a mapping, got {type(self.pattern_weights).__name__}")
        if not isinstance(self.disabled_rules, list):
            raise ConfigError(f"disabled_rules must be a list, got {type(self.disabled_rules).__name__}")
        for key, weight in self.pattern_weights.items():
            if float(weight) <= 1.0:
                raise ConfigError(f"pattern weight '{key}' must be greater than 1.0, got {weight}")


class ConfigManager:
    """Manages Stylus Sentinel configuration."""

    def __init__(self, config_file: str = "~/.sentinel/config.yaml", console: Optional[Console] = None):
        self.config_file = Path(config_file).expanduser()
        self.console = console or Console()
        self.config = SentinelConfig()

        # Ensure config directory exists
        self.config_file.parent.mkdir(parents=True, exist_ok=True)

        self.load_config()

    def load_config(self) -> None:
        """Load configuration from file. Invalid files leave the defaults in place."""
        if not self.config_file.exists():
            return
        try:
            with open(self.config_file, 'r') as f:
                data = yaml.safe_load(f)

            if data:
                if not isinstance(data, dict):
                    raise ConfigError("top-level YAML value must be a mapping")
                loaded = SentinelConfig()
                for key, value in data.items():
                    if hasattr(loaded, key):
                        setattr(loaded, key, value)
                loaded.validate()
                self.config = loaded

        except (OSError, yaml.YAMLError, ConfigError, TypeError, ValueError) as e:
            self.console.print(f"[yellow]Warning: Could not load config file: {e}[/yellow]")
            self.config = SentinelConfig()

    def save_config(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_file, 'w') as f:
                yaml.dump(asdict(self.config), f, default_flow_style=False, indent=2)
            self.console.print(f"[green]✓ Configuration saved to {self.config_file}[/green]")
        except OSError as e:
            self.console.print(f"[red]✗ Failed to save config: {e}[/red]")

    def set_value(self, key: str, raw_value: Any) -> Any:
        """Set one setting, coercing strings to the setting's type.

        Returns the stored value. Raises ConfigError for unknown keys or
        values that fail validation; the previous value is kept in that case.
        """
        known = {f.name for f in fields(SentinelConfig)}
        if key not in known:
            raise ConfigError(f"Unknown setting '{key}'")

        current = getattr(self.config, key)
        value = _coerce(key, current, raw_value)

        setattr(self.config, key, value)
        try:
            self.config.validate()
        except ConfigError:
            setattr(self.config, key, current)
            raise
        return value

    def get_output_path(self) -> Path:
        """Get output path as Path object."""
        return Path(self.config.output_dir).expanduser().resolve()

    def show_config(self) -> None:
        """Display current configuration."""
        from rich.table import Table

        detector_table = Table(title="Weighted Detector")
        detector_table.add_column("Setting", style="cyan")
        detector_table.add_column("Value", style="green")
        detector_table.add_row("learning_threshold", str(self.config.learning_threshold))
        detector_table.add_row("cache_key_mode", self.config.cache_key_mode)
        detector_table.add_row("cache_prefix_length", str(self.config.cache_prefix_length))
        overrides = ", ".join(f"{k}={v}" for k, v in sorted(self.config.pattern_weights.items())) or "None"
        detector_table.add_row("pattern_weights", overrides)
        self.console.print(detector_table)

        runner_table = Table(title="Rules & Reporting")
        runner_table.add_column("Setting", style="cyan")
        runner_table.add_column("Value", style="green")
        runner_table.add_row("parallel_rules", "Yes" if self.config.parallel_rules else "No")
        runner_table.add_row("max_workers", str(self.config.max_workers))
        runner_table.add_row("extended_rules", "Yes" if self.config.extended_rules else "No")
        runner_table.add_row("disabled_rules", ", ".join(self.config.disabled_rules) or "None")
        runner_table.add_row("report_format", self.config.report_format)
        runner_table.add_row("output_dir", self.config.output_dir)
        runner_table.add_row("log_level", self.config.log_level)
        self.console.print(runner_table)

        self.console.print(f"\n[bold cyan]Config File:[/bold cyan] {self.config_file}")


def _coerce(key: str, current: Any, raw_value: Any) -> Any:
    if not isinstance(raw_value, str):
        return raw_value
    text = raw_value.strip()
    try:
        if isinstance(current, bool):
            lowered = text.lower()
            if lowered in ("true", "yes", "1", "on"):
                return True
            if lowered in ("false", "no", "0", "off"):
                return False
            raise ConfigError(f"'{key}' expects a boolean, got '{raw_value}'")
        if isinstance(current, int):
            return int(text)
        if isinstance(current, float):
            return float(text)
        if isinstance(current, list):
            return [item.strip() for item in text.split(",") if item.strip()]
        if isinstance(current, dict):
            parsed = yaml.safe_load(text)
            if not isinstance(parsed, dict):
                raise ConfigError(f"'{key}' expects a mapping, e.g. '{{memory_safety: 1.5}}'")
            return parsed
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Invalid value for '{key}': {e}") from e
    return text
