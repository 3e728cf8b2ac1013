"""
Checks for missing or shallow in-source tests.
"""

from typing import List, Optional

from sentinel.audit_rule import AuditRule, contains_any
from sentinel.contract_ir import ParsedContract
from sentinel.vulnerabilities import Severity, Vulnerability


class CoverageGapRule(AuditRule):
    name = "Testing Pattern Analyzer"
    rule_id = "test_coverage"

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        findings: List[Vulnerability] = []
        has_tests = "#[test]" in content

        if "#[cfg(test)]" not in content:
            findings.append(self.finding(
                "Missing Test Module",
                Severity.MEDIUM,
                "Untested code may contain bugs or vulnerabilities",
                "Add comprehensive test module with unit tests",
            ))

        if has_tests and "assert" not in content:
            findings.append(self.finding(
                "Missing Test Assertions",
                Severity.MEDIUM,
                "Tests without assertions may not verify functionality",
                "Add assertions to verify test outcomes",
            ))

        if not has_tests or "integration" not in content:
            findings.append(self.finding(
                "Missing Integration Tests",
                Severity.LOW,
                "Contract interactions may not be fully tested",
                "Add integration tests for contract interactions",
            ))

        if not contains_any(content, "quickcheck", "proptest"):
            findings.append(self.finding(
                "Missing Fuzz Testing",
                Severity.LOW,
                "Edge cases may not be discovered through regular testing",
                "Implement property-based testing using quickcheck or proptest",
            ))

        if has_tests and "should_panic" not in content:
            findings.append(self.finding(
                "Missing Error Case Tests",
                Severity.MEDIUM,
                "Error handling may not be properly tested",
                "Add tests for error cases using #[should_panic]",
            ))

        return findings
