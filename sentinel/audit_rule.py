"""
Detection rule interface shared by every audit rule.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from sentinel.contract_ir import ParsedContract
from sentinel.vulnerabilities import Severity, Vulnerability

logger = logging.getLogger(__name__)


class AuditRule(ABC):
    """Abstract base class for all detection rules.

    Subclasses set ``name`` (shown in reports and logs) and ``rule_id``
    (the slug used by configuration to enable or disable the rule).
    """

    name: str = "Unnamed Rule"
    rule_id: str = "unnamed"

    @abstractmethod
    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        """Inspect ``content`` (and optionally its IR) and return findings."""
        pass

    def finding(self, name: str, severity: Severity, risk_description: str, recommendation: str) -> Vulnerability:
        """Build a finding and note it in the debug log."""
        logger.debug("%s fired: %s (%s)", self.name, name, severity.value)
        return Vulnerability(
            name=name,
            severity=severity,
            risk_description=risk_description,
            recommendation=recommendation,
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.rule_id}>"


def contains_any(content: str, *needles: str) -> bool:
    return any(n in content for n in needles)
