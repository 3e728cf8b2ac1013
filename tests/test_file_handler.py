"""
Tests for FileHandler
"""

import pytest

from sentinel.exceptions import SentinelError
from sentinel.file_handler import FileHandler


@pytest.fixture
def handler():
    return FileHandler()


def test_read_contract(handler, tmp_contract_dir):
    assert "contract SimpleToken" in handler.read_contract(str(tmp_contract_dir / "SimpleToken.sol"))


def test_read_missing(handler, tmp_path):
    with pytest.raises(FileNotFoundError, match="File not found"):
        handler.read_file(str(tmp_path / "absent.sol"))


def test_read_binary_file(handler, tmp_path):
    path = tmp_path / "blob.rs"
    path.write_bytes(b"\xff\xfe\x00\x81")
    with pytest.raises(SentinelError):
        handler.read_contract(str(path))


@pytest.mark.parametrize("name,supported", [
    ("Token.sol", True),
    ("lib.rs", True),
    ("LIB.RS", True),
    ("Token.vy", False),
    ("README", False),
])
def test_is_supported(name, supported):
    assert FileHandler.is_supported(name) is supported


def test_write_creates_directories(handler, tmp_path):
    target = tmp_path / "a" / "b" / "report.md"
    handler.write_file(str(target), "# report")
    assert target.read_text() == "# report"
