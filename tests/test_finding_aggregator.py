"""
Tests for deduplication, risk scoring and action items.
"""

import pytest

from sentinel.contract_ir import Dialect
from sentinel.finding_aggregator import FindingAggregator, Report
from sentinel.vulnerabilities import AuditResult, Severity, Vulnerability


def vuln(name, severity=Severity.MEDIUM, rec=None, desc="d"):
    return Vulnerability(name, severity, desc, rec or f"fix {name}")


@pytest.fixture
def aggregator():
    return FindingAggregator()


class TestDeduplicate:

    def test_keeps_first_of_same_name_and_recommendation(self):
        first = vuln("Missing Event Emission", desc="first")
        second = vuln("Missing Event Emission", desc="second")
        assert FindingAggregator.deduplicate([first, second]) == [first]

    def test_different_recommendation_is_distinct(self):
        a = vuln("Unsafe Block Usage", rec="Remove unsafe blocks")
        b = vuln("Unsafe Block Usage", rec="Review unsafe blocks")
        assert FindingAggregator.deduplicate([a, b]) == [a, b]

    def test_preserves_order(self):
        items = [vuln("B"), vuln("A"), vuln("B"), vuln("C")]
        assert [v.name for v in FindingAggregator.deduplicate(items)] == ["B", "A", "C"]

    def test_summarize_is_idempotent(self, aggregator):
        result = AuditResult()
        result.extend([vuln("A"), vuln("A"), vuln("B", Severity.HIGH)])
        once = aggregator.summarize(result)
        again = AuditResult()
        again.extend(once.findings())
        twice = aggregator.summarize(again)
        assert once.findings() == twice.findings()
        assert once.risk_score == twice.risk_score


class TestRiskScore:

    @pytest.mark.parametrize("counts,expected", [
        ({}, 0.0),
        ({Severity.LOW: 1}, 1 / 3),
        ({Severity.MEDIUM: 3}, 4.0),
        ({Severity.CRITICAL: 1, Severity.HIGH: 1}, 17 / 3),
        ({Severity.CRITICAL: 3}, 10.0),
        ({Severity.CRITICAL: 5, Severity.LOW: 9}, 10.0),
    ])
    def test_weighted_and_clamped(self, counts, expected):
        assert FindingAggregator.calculate_risk_score(counts) == pytest.approx(expected)

    def test_score_uses_deduplicated_counts(self, aggregator):
        result = AuditResult()
        result.extend([vuln("X", Severity.CRITICAL)] * 3)
        report = aggregator.summarize(result)
        assert report.counts[Severity.CRITICAL] == 1
        assert report.risk_score == pytest.approx(10 / 3)

    @pytest.mark.parametrize("score,level", [
        (0.0, "none"),
        (0.5, "low"),
        (3.0, "medium"),
        (6.0, "high"),
        (8.0, "critical"),
        (10.0, "critical"),
    ])
    def test_risk_levels(self, score, level):
        assert Report(risk_score=score).risk_level == level


class TestSummarize:

    def test_empty_result(self, aggregator):
        report = aggregator.summarize(AuditResult(), label="a.sol", dialect=Dialect.SOLIDITY)
        assert report.total == 0
        assert report.risk_score == 0.0
        assert report.action_items == []
        assert report.label == "a.sol"
        assert report.dialect is Dialect.SOLIDITY

    def test_action_items_follow_severity_order(self, aggregator):
        result = AuditResult()
        result.extend([
            vuln("low one", Severity.LOW),
            vuln("crit one", Severity.CRITICAL),
            vuln("med one", Severity.MEDIUM),
            vuln("crit one", Severity.CRITICAL),
        ])
        report = aggregator.summarize(result)
        assert report.action_items == ["fix crit one", "fix med one", "fix low one"]
        assert len(report.action_items) == report.total

    def test_rule_errors_carried_over(self, aggregator):
        result = AuditResult()
        result.rule_errors.append(("Broken", "boom"))
        report = aggregator.summarize(result)
        assert report.rule_errors == [("Broken", "boom")]

    def test_counts_by_severity(self, aggregator):
        result = AuditResult()
        result.extend([vuln("a", Severity.HIGH), vuln("b", Severity.HIGH), vuln("c", Severity.LOW)])
        counts = aggregator.summarize(result).counts
        assert counts == {Severity.CRITICAL: 0, Severity.HIGH: 2, Severity.MEDIUM: 0, Severity.LOW: 1}
