"""
Vulnerability records and the severity-bucketed audit result.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple


class Severity(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        """Contribution of one finding of this severity to the risk score."""
        return _SEVERITY_WEIGHTS[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()


_SEVERITY_WEIGHTS = {
    Severity.CRITICAL: 10,
    Severity.HIGH: 7,
    Severity.MEDIUM: 4,
    Severity.LOW: 1,
}

# Reporting order, most severe first
SEVERITY_ORDER: Tuple[Severity, ...] = (
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
)


@dataclass(frozen=True)
class Vulnerability:
    name: str
    severity: Severity
    risk_description: str
    recommendation: str

    @property
    def identity_key(self) -> Tuple[str, str]:
        """Key used for deduplication across rules."""
        return (self.name, self.recommendation)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'severity': self.severity.value,
            'risk_description': self.risk_description,
            'recommendation': self.recommendation,
        }


@dataclass
class AuditResult:
    """Raw rule output, bucketed by severity in emission order."""
    critical: List[Vulnerability] = field(default_factory=list)
    high: List[Vulnerability] = field(default_factory=list)
    medium: List[Vulnerability] = field(default_factory=list)
    low: List[Vulnerability] = field(default_factory=list)
    # (rule name, error message) for rules that failed during the run
    rule_errors: List[Tuple[str, str]] = field(default_factory=list, compare=False)

    def bucket(self, severity: Severity) -> List[Vulnerability]:
        return getattr(self, severity.value)

    def add(self, vulnerability: Vulnerability) -> None:
        self.bucket(vulnerability.severity).append(vulnerability)

    def extend(self, vulnerabilities) -> None:
        for vuln in vulnerabilities:
            self.add(vuln)

    def all_vulnerabilities(self) -> List[Vulnerability]:
        out: List[Vulnerability] = []
        for severity in SEVERITY_ORDER:
            out.extend(self.bucket(severity))
        return out

    @property
    def total_count(self) -> int:
        return sum(len(self.bucket(s)) for s in SEVERITY_ORDER)

    @property
    def is_empty(self) -> bool:
        return self.total_count == 0
