"""
Extended storage rules. Not part of the default rule set; enabled with
the ``extended_rules`` configuration flag or ``--extended``.
"""

from typing import List, Optional

from sentinel.audit_rule import AuditRule, contains_any
from sentinel.contract_ir import ParsedContract
from sentinel.vulnerabilities import Severity, Vulnerability


class UnusedStorageRule(AuditRule):
    name = "Unused Storage Detector"
    rule_id = "unused_storage"

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        if contains_any(content, "StorageU64", "StorageU256"):
            if ".get()" not in content or ".set(" not in content:
                return [self.finding(
                    "Unused Storage Variable",
                    Severity.LOW,
                    "Storage variable declared but never accessed",
                    "Remove unused storage variables or implement their usage",
                )]
        return []


class UnsafeCallRule(AuditRule):
    name = "Unsafe Code Detector"
    rule_id = "unsafe_call"

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        if "unsafe" in content:
            return [self.finding(
                "Unsafe Block Usage",
                Severity.HIGH,
                "Contract contains unsafe blocks that may lead to memory corruption",
                "Review and remove unsafe blocks if possible",
            )]
        return []


class StoragePatternRule(AuditRule):
    name = "Storage Pattern Analyzer"
    rule_id = "storage_pattern"

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        if "get" in content and "set" in content:
            if "&mut self" in content and "#[stylus_sdk::storage]" not in content:
                return [self.finding(
                    "Incorrect Storage Pattern",
                    Severity.MEDIUM,
                    "Storage pattern may not be optimal for L2 operations",
                    "Use Stylus SDK storage attributes and patterns",
                )]
        return []
