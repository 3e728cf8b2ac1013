"""
Tests for the extended storage rules
"""

import pytest

from sentinel.storage_rules import StoragePatternRule, UnsafeCallRule, UnusedStorageRule
from sentinel.vulnerabilities import Severity


class TestUnusedStorageRule:

    def test_declared_but_never_set(self):
        findings = UnusedStorageRule().check("count: StorageU64, fn f(&self) { self.count.get() }")
        assert [f.name for f in findings] == ["Unused Storage Variable"]
        assert findings[0].severity == Severity.LOW

    def test_read_and_written(self):
        code = "total: StorageU256; self.total.set(self.total.get() + 1);"
        assert UnusedStorageRule().check(code) == []

    def test_no_scalar_storage(self):
        assert UnusedStorageRule().check("StorageMap<Address, U256>") == []


class TestUnsafeCallRule:

    @pytest.mark.parametrize("code", ["unsafe { x() }", "unsafe trait Marker {}"])
    def test_any_unsafe_keyword(self, code):
        findings = UnsafeCallRule().check(code)
        assert [f.name for f in findings] == ["Unsafe Block Usage"]
        assert findings[0].severity == Severity.HIGH

    def test_safe_code(self):
        assert UnsafeCallRule().check("fn f() {}") == []


class TestStoragePatternRule:

    def test_mutating_accessors_without_storage_attribute(self):
        code = "pub fn set_value(&mut self, v: u64) { self.value.set(v); } fn get_value(&self) {}"
        findings = StoragePatternRule().check(code)
        assert [f.name for f in findings] == ["Incorrect Storage Pattern"]
        assert findings[0].severity == Severity.MEDIUM

    def test_storage_attribute_present(self):
        code = "#[stylus_sdk::storage] struct S; fn set(&mut self) { self.v.get(); }"
        assert StoragePatternRule().check(code) == []

    def test_immutable_receiver(self):
        assert StoragePatternRule().check("fn get(&self) { self.v.set(1) }") == []
