"""
Exception hierarchy for Stylus Sentinel.
"""

from typing import List, Optional


class SentinelError(Exception):
    """Base class for all Sentinel errors."""


class ParseError(SentinelError):
    """Raised when source text matches neither supported contract grammar."""

    def __init__(self, message: str, label: Optional[str] = None, causes: Optional[List[str]] = None):
        self.label = label
        self.causes = list(causes or [])
        prefix = f"{label}: " if label else ""
        super().__init__(f"{prefix}{message}")


class RuleError(SentinelError):
    """Raised by a detection rule that cannot complete its check."""

    def __init__(self, rule_name: str, message: str):
        self.rule_name = rule_name
        super().__init__(f"{rule_name}: {message}")


class ScaffoldError(SentinelError):
    """Raised when test scaffolding cannot be generated."""


class ConfigError(SentinelError):
    """Raised for invalid configuration values."""
