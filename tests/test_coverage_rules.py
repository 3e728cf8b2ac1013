"""
Tests for the in-source testing coverage rule
"""

import pytest

from sentinel.coverage_rules import CoverageGapRule
from sentinel.vulnerabilities import Severity


@pytest.fixture
def rule():
    return CoverageGapRule()


def test_source_without_any_tests(rule):
    findings = rule.check("pub fn get(&self) -> u64 { 1 }")
    assert [f.name for f in findings] == [
        "Missing Test Module",
        "Missing Integration Tests",
        "Missing Fuzz Testing",
    ]
    assert [f.severity for f in findings] == [Severity.MEDIUM, Severity.LOW, Severity.LOW]


def test_tests_without_assertions_or_error_cases(rule):
    code = "#[cfg(test)] mod tests { #[test] fn t() { run(); } }"
    names = [f.name for f in rule.check(code)]
    assert "Missing Test Module" not in names
    assert "Missing Test Assertions" in names
    assert "Missing Error Case Tests" in names


def test_thorough_test_module(rule):
    code = """
    #[cfg(test)]
    mod tests {
        use proptest::prelude::*;
        #[test] fn integration_flow() { assert_eq!(1, 1); }
        #[test] #[should_panic] fn rejects() { panic!(); }
    }
    """
    assert rule.check(code) == []


def test_rule_identity(rule):
    assert rule.name == "Testing Pattern Analyzer"
    assert rule.rule_id == "test_coverage"
