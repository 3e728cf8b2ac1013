"""
Finding Aggregator and Risk Scorer

Consolidates raw rule output into a report: duplicates removed per
severity bucket, a bounded risk score and ranked action items.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from sentinel.contract_ir import Dialect
from sentinel.vulnerabilities import SEVERITY_ORDER, AuditResult, Severity, Vulnerability

logger = logging.getLogger(__name__)


MAX_RISK_SCORE = 10.0
RISK_NORMALIZER = 3.0


@dataclass
class Report:
    """Deduplicated, scored audit report."""
    critical: List[Vulnerability] = field(default_factory=list)
    high: List[Vulnerability] = field(default_factory=list)
    medium: List[Vulnerability] = field(default_factory=list)
    low: List[Vulnerability] = field(default_factory=list)
    risk_score: float = 0.0
    action_items: List[str] = field(default_factory=list)
    label: Optional[str] = None
    dialect: Optional[Dialect] = None
    rule_errors: List[Tuple[str, str]] = field(default_factory=list)

    def bucket(self, severity: Severity) -> List[Vulnerability]:
        return getattr(self, severity.value)

    @property
    def counts(self) -> Dict[Severity, int]:
        return {s: len(self.bucket(s)) for s in SEVERITY_ORDER}

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def risk_level(self) -> str:
        if self.risk_score >= 8:
            return "critical"
        if self.risk_score >= 6:
            return "high"
        if self.risk_score >= 3:
            return "medium"
        if self.risk_score > 0:
            return "low"
        return "none"

    def findings(self) -> List[Vulnerability]:
        """All findings, most severe first."""
        out: List[Vulnerability] = []
        for severity in SEVERITY_ORDER:
            out.extend(self.bucket(severity))
        return out


class FindingAggregator:
    """Deduplicates findings and scores the result."""

    def summarize(self, result: AuditResult, label: Optional[str] = None,
                  dialect: Optional[Dialect] = None) -> Report:
        report = Report(label=label, dialect=dialect, rule_errors=list(result.rule_errors))
        for severity in SEVERITY_ORDER:
            report.bucket(severity).extend(self.deduplicate(result.bucket(severity)))

        report.risk_score = self.calculate_risk_score(report.counts)
        report.action_items = self.build_action_items(report)

        removed = result.total_count - report.total
        if removed:
            logger.debug("Removed %d duplicate findings", removed)
        return report

    @staticmethod
    def deduplicate(vulnerabilities: List[Vulnerability]) -> List[Vulnerability]:
        """Keep the first occurrence of each (name, recommendation) pair."""
        seen = set()
        unique: List[Vulnerability] = []
        for vuln in vulnerabilities:
            if vuln.identity_key in seen:
                continue
            seen.add(vuln.identity_key)
            unique.append(vuln)
        return unique

    @staticmethod
    def calculate_risk_score(counts: Dict[Severity, int]) -> float:
        """Severity-weighted sum divided by 3, clamped to [0, 10]."""
        weighted = sum(severity.weight * counts.get(severity, 0) for severity in SEVERITY_ORDER)
        return min(MAX_RISK_SCORE, max(0.0, weighted / RISK_NORMALIZER))

    @staticmethod
    def build_action_items(report: Report) -> List[str]:
        """One item per unique finding, most severe first, using its recommendation."""
        return [vuln.recommendation for vuln in report.findings()]
