"""
Memory safety checks for Rust-dialect (Stylus) contracts.
"""

from typing import List, Optional

from sentinel.audit_rule import AuditRule, contains_any
from sentinel.contract_ir import ParsedContract
from sentinel.vulnerabilities import Severity, Vulnerability


class MemorySafetyRule(AuditRule):
    """Flags raw pointers, unsafe blocks, leaks and Stylus allocation hazards."""

    name = "Memory Safety Analyzer"
    rule_id = "memory_safety"

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        findings: List[Vulnerability] = []

        if contains_any(content, "*mut", "*const"):
            findings.append(self.finding(
                "Raw Pointer Usage",
                Severity.HIGH,
                "Raw pointers can lead to memory corruption and undefined behavior",
                "Use safe alternatives like references or smart pointers",
            ))

        if "unsafe" in content and "unsafe trait" not in content:
            findings.append(self.finding(
                "Unsafe Block Usage",
                Severity.CRITICAL,
                "Unsafe blocks can bypass Rust's memory safety guarantees",
                "Remove unsafe blocks or provide strong safety invariants",
            ))

        if contains_any(content, "Box::into_raw", "ManuallyDrop"):
            findings.append(self.finding(
                "Potential Memory Leak",
                Severity.HIGH,
                "Memory leaks can cause resource exhaustion and contract failure",
                "Ensure proper cleanup of resources and avoid manual memory management",
            ))

        if contains_any(content, "MaybeUninit", "std::mem::uninitialized"):
            findings.append(self.finding(
                "Uninitialized Memory Usage",
                Severity.CRITICAL,
                "Using uninitialized memory leads to undefined behavior",
                "Initialize all memory before use and avoid MaybeUninit when possible",
            ))

        if "'static" in content and "&mut" in content:
            findings.append(self.finding(
                "Suspicious Lifetime Usage",
                Severity.MEDIUM,
                "Improper lifetime usage can lead to memory safety issues",
                "Review lifetime annotations and ensure they are necessary",
            ))

        if "stylus_sdk" in content:
            findings.extend(self._check_stylus(content))

        return findings

    def _check_stylus(self, content: str) -> List[Vulnerability]:
        findings: List[Vulnerability] = []

        if "Vec::with_capacity" in content and ">1024" in content:
            findings.append(self.finding(
                "Large Memory Allocation",
                Severity.HIGH,
                "Large memory allocations can cause contract execution failures",
                "Use smaller, fixed-size allocations or paginate data",
            ))

        if "storage::" in content and "try_" not in content:
            findings.append(self.finding(
                "Unchecked Storage Access",
                Severity.MEDIUM,
                "Storage operations without error handling may fail silently",
                "Use try_ variants for storage operations and handle errors explicitly",
            ))

        if "external::" in content and "Result<" not in content:
            findings.append(self.finding(
                "Unchecked External Calls",
                Severity.HIGH,
                "External calls without proper error handling can lead to undefined state",
                "Always use Result for external calls and handle all error cases",
            ))

        return findings
