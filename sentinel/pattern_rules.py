"""
Pattern rules - substring co-occurrence checks for common L2 contract risks.

Each rule inspects the raw source only and emits findings of a fixed
severity when its condition holds.
"""

from typing import List, Optional

from sentinel.audit_rule import AuditRule, contains_any
from sentinel.contract_ir import ParsedContract
from sentinel.vulnerabilities import Severity, Vulnerability


class ReentrancyRule(AuditRule):
    name = "Reentrancy Pattern Checker"
    rule_id = "reentrancy"

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        if "external" in content and "call" in content:
            return [self.finding(
                "Potential Reentrancy",
                Severity.HIGH,
                "External call detected before state changes",
                "Implement checks-effects-interactions pattern",
            )]
        return []


class L2TimingRule(AuditRule):
    name = "L2-Specific Pattern Checker"
    rule_id = "l2_timing"

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        if contains_any(content, "block.number", "block.timestamp"):
            return [self.finding(
                "L2 Timing Assumptions",
                Severity.MEDIUM,
                "Usage of block.number or block.timestamp in L2 context",
                "Use L2-specific timing mechanisms or account for L2 block timing",
            )]
        return []


class StorageSecurityRule(AuditRule):
    name = "Storage Security Pattern Analyzer"
    rule_id = "storage_security"

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        findings: List[Vulnerability] = []
        if not contains_any(content, "StorageMap", "StorageVec"):
            return findings

        has_bounds_check = contains_any(content, ".get_or_default()", "if let Some")
        has_access_control = contains_any(content, "#[authorize", "require!(")

        if not has_bounds_check:
            findings.append(self.finding(
                "Unsafe Storage Access",
                Severity.HIGH,
                "Storage access without bounds checking",
                "Implement bounds checking with get_or_default() or Option handling",
            ))
        if not has_access_control:
            findings.append(self.finding(
                "Missing Storage Access Control",
                Severity.HIGH,
                "Storage modification without access control",
                "Add access control checks using authorize attribute or require macro",
            ))
        return findings


class StateTransitionRule(AuditRule):
    name = "State Transition Pattern Analyzer"
    rule_id = "state_transition"

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        findings: List[Vulnerability] = []
        # "mut self" also covers "&mut self"
        if not ("pub fn" in content and "mut self" in content):
            return findings

        if not contains_any(content, "ensure!(", "require!("):
            findings.append(self.finding(
                "Missing State Validation",
                Severity.MEDIUM,
                "State transition without proper validation",
                "Add state validation using ensure! or require! macros",
            ))
        if not contains_any(content, "emit!(", "log!("):
            findings.append(self.finding(
                "Missing Event Emission",
                Severity.LOW,
                "State change without event emission",
                "Emit events for all important state transitions",
            ))
        return findings


class CrossChainRule(AuditRule):
    name = "Cross-Chain Vulnerability Analyzer"
    rule_id = "cross_chain"

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        findings: List[Vulnerability] = []
        if not contains_any(content, "cross_chain", "bridge", "L1_to_L2"):
            return findings

        if not contains_any(content, "delay", "timelock"):
            findings.append(self.finding(
                "Missing Cross-Chain Delay",
                Severity.HIGH,
                "Cross-chain operation without delay mechanism",
                "Implement timelock or delay mechanism for cross-chain operations",
            ))
        if not contains_any(content, "verify_proof", "verify_message"):
            findings.append(self.finding(
                "Insufficient Cross-Chain Verification",
                Severity.CRITICAL,
                "Cross-chain message without proper verification",
                "Add proper verification for all cross-chain messages",
            ))
        return findings
