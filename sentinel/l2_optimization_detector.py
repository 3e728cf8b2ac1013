"""
L2 cost optimisation checks: batching, calldata size, storage packing,
event indexing and Stylus allocation patterns.
"""

from typing import List, Optional

from sentinel.audit_rule import AuditRule, contains_any
from sentinel.contract_ir import ParsedContract
from sentinel.vulnerabilities import Severity, Vulnerability


class L2OptimizationRule(AuditRule):
    name = "L2 Optimization Analyzer"
    rule_id = "l2_optimization"

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        findings: List[Vulnerability] = []

        if "loop" in content and "batch" not in content:
            findings.append(self.finding(
                "Missing Batch Operations",
                Severity.MEDIUM,
                "Non-batched operations may lead to higher gas costs on L2",
                "Implement batching for loop operations to optimize gas costs",
            ))

        if contains_any(content, "&[u8]", "Vec<u8>"):
            if not contains_any(content, "compression", "compact"):
                findings.append(self.finding(
                    "Unoptimized Calldata",
                    Severity.MEDIUM,
                    "Uncompressed calldata increases L1 posting costs",
                    "Implement calldata compression for large data structures",
                ))

        # "#[repr(packed)]" contains "packed"
        if contains_any(content, "StorageMap", "StorageVec") and "packed" not in content:
            findings.append(self.finding(
                "Unpacked Storage",
                Severity.LOW,
                "Inefficient storage slot usage increases gas costs",
                "Pack storage slots efficiently using appropriate data layouts",
            ))

        if contains_any(content, "emit!", "log!") and "indexed" not in content:
            findings.append(self.finding(
                "Unoptimized Event Indexing",
                Severity.LOW,
                "Non-indexed events may increase gas costs and reduce searchability",
                "Use indexed parameters for searchable event data",
            ))

        if "stylus_sdk" in content:
            if "prealloc" not in content and contains_any(content, "Vec::new", "String::new"):
                findings.append(self.finding(
                    "Non-preallocated Collections",
                    Severity.MEDIUM,
                    "Dynamic allocation in Stylus contracts can be expensive",
                    "Use preallocation for collections when size is known",
                ))
            if "call!" in content and "multicall" not in content:
                findings.append(self.finding(
                    "Unoptimized Cross-Contract Calls",
                    Severity.MEDIUM,
                    "Multiple separate calls increase L2 operation costs",
                    "Use multicall pattern for batching cross-contract interactions",
                ))

        return findings
