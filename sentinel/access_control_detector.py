"""
Access Control Detector

Looks for externally callable functions that carry no owner or role check,
privileged roles that are never initialized and role systems with no way
to change membership after deployment.
"""

import re
from typing import List, Optional

from sentinel.audit_rule import AuditRule, contains_any
from sentinel.contract_ir import ParsedContract
from sentinel.vulnerabilities import Severity, Vulnerability


OWNER_CHECK_MARKERS = (
    "require!(msg.sender",
    "ensure!(is_owner",
    "only_owner",
    "onlyOwner",
    "require(msg.sender",
    "msg.sender ==",
)

ROLE_MANAGEMENT_MARKERS = ("grant_role", "revoke_role", "renounce_role")

_SOLIDITY_EXPOSED_FN = re.compile(r'function\s+\w*\s*\([^)]*\)[^{;]*\b(?:public|external)\b')


class AccessControlRule(AuditRule):
    name = "Access Control Pattern Analyzer"
    rule_id = "access_control"

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        findings: List[Vulnerability] = []

        if self._has_exposed_function(content, contract) and "#[access_control" not in content:
            if not contains_any(content, *OWNER_CHECK_MARKERS):
                findings.append(self.finding(
                    "Missing Access Control",
                    Severity.HIGH,
                    "Functions can be called by unauthorized users",
                    "Implement role-based access control using Stylus SDK",
                ))

        if contains_any(content, "admin", "owner"):
            if "initialize" not in content or "constructor" not in content:
                findings.append(self.finding(
                    "Uninitialized Admin Role",
                    Severity.CRITICAL,
                    "Contract may lack proper administrative controls",
                    "Initialize admin roles in constructor or initialization function",
                ))

        if contains_any(content, "role", "permission"):
            if not contains_any(content, *ROLE_MANAGEMENT_MARKERS):
                findings.append(self.finding(
                    "Incomplete Role Management",
                    Severity.MEDIUM,
                    "Unable to modify roles after deployment",
                    "Implement complete role management functionality",
                ))

        return findings

    @staticmethod
    def _has_exposed_function(content: str, contract: Optional[ParsedContract]) -> bool:
        if contract is not None and contract.functions:
            return bool(contract.public_functions())
        return "pub fn" in content or bool(_SOLIDITY_EXPOSED_FN.search(content))
