#!/usr/bin/env python3
"""
File Handler for Stylus Sentinel

Simple file operations for reading contract sources and writing reports.
"""

import os
from pathlib import Path

from sentinel.exceptions import SentinelError


SUPPORTED_EXTENSIONS = (".sol", ".rs")


class FileHandler:
    """Simple file handler for contract files."""

    def read_file(self, file_path: str) -> str:
        """Read a file and return its content."""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            raise FileNotFoundError(f"File not found: {file_path}")
        except (OSError, UnicodeDecodeError) as e:
            raise SentinelError(f"Error reading file {file_path}: {e}") from e

    def read_contract(self, file_path: str) -> str:
        """Read a Solidity or Rust contract source file."""
        if not self.is_supported(file_path):
            raise SentinelError(
                f"Unsupported contract file {file_path}: expected one of {', '.join(SUPPORTED_EXTENSIONS)}"
            )
        return self.read_file(file_path)

    def write_file(self, file_path: str, content: str) -> None:
        """Write content to a file, creating parent directories."""
        try:
            parent = os.path.dirname(file_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            raise SentinelError(f"Error writing file {file_path}: {e}") from e

    @staticmethod
    def is_supported(file_path: str) -> bool:
        return Path(file_path).suffix.lower() in SUPPORTED_EXTENSIONS
