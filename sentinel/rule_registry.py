"""
Rule registry and runner.

AuditAnalyzer owns an ordered list of AuditRule instances and runs each one
over the same content. Rules are isolated: a rule that raises is logged and
recorded in the result, and the remaining rules still run. Findings are
always merged in registration order, including in parallel mode.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Tuple

from sentinel.access_control_detector import AccessControlRule
from sentinel.audit_rule import AuditRule
from sentinel.config_manager import SentinelConfig
from sentinel.contract_ir import ParsedContract
from sentinel.coverage_rules import CoverageGapRule
from sentinel.l2_optimization_detector import L2OptimizationRule
from sentinel.memory_safety_detector import MemorySafetyRule
from sentinel.pattern_rules import (
    CrossChainRule,
    L2TimingRule,
    ReentrancyRule,
    StateTransitionRule,
    StorageSecurityRule,
)
from sentinel.storage_rules import StoragePatternRule, UnsafeCallRule, UnusedStorageRule
from sentinel.vulnerabilities import AuditResult, Vulnerability
from sentinel.weighted_pattern_detector import WeightedPatternDetector

logger = logging.getLogger(__name__)


def create_default_rules(config: Optional[SentinelConfig] = None) -> List[AuditRule]:
    """Build a fresh, ordered rule set.

    Every call returns new instances, so no detector cache is carried over
    between audits.
    """
    config = config or SentinelConfig()

    rules: List[AuditRule] = [
        ReentrancyRule(),
        L2TimingRule(),
        StorageSecurityRule(),
        StateTransitionRule(),
        CrossChainRule(),
        MemorySafetyRule(),
        L2OptimizationRule(),
        AccessControlRule(),
        CoverageGapRule(),
        WeightedPatternDetector(
            pattern_weights=config.pattern_weights,
            learning_threshold=config.learning_threshold,
            cache_key_mode=config.cache_key_mode,
            cache_prefix_length=config.cache_prefix_length,
        ),
    ]

    if config.extended_rules:
        rules.extend([UnusedStorageRule(), UnsafeCallRule(), StoragePatternRule()])

    disabled = config.disabled_rules or []
    if isinstance(disabled, str):
        disabled = [disabled]
    disabled = set(disabled)
    if disabled:
        rules = [r for r in rules if r.rule_id not in disabled]

    return rules


class AuditAnalyzer:
    """Runs registered rules and collects their findings into an AuditResult."""

    def __init__(self, rules: Optional[Iterable[AuditRule]] = None, parallel: bool = False, max_workers: int = 4):
        self._rules: List[AuditRule] = list(rules) if rules is not None else create_default_rules()
        self.parallel = parallel
        self.max_workers = max_workers

    @property
    def rules(self) -> Tuple[AuditRule, ...]:
        return tuple(self._rules)

    def rule_names(self) -> List[str]:
        return [r.name for r in self._rules]

    def add_rule(self, rule: AuditRule) -> None:
        self._rules.append(rule)

    def remove_rule(self, rule_id: str) -> bool:
        """Remove every rule with ``rule_id``. Returns True if any was removed."""
        before = len(self._rules)
        self._rules = [r for r in self._rules if r.rule_id != rule_id]
        return len(self._rules) != before

    def analyze(self, content: str, contract: Optional[ParsedContract] = None) -> AuditResult:
        """Run every registered rule over ``content``."""
        result = AuditResult()
        if self.parallel and len(self._rules) > 1:
            outcomes = self._run_parallel(content, contract)
        else:
            outcomes = [self._run_rule(rule, content, contract) for rule in self._rules]

        for rule, findings, error in outcomes:
            if error is not None:
                result.rule_errors.append((rule.name, error))
                continue
            result.extend(findings)

        logger.info(
            "Ran %d rules: %d findings, %d rule errors",
            len(self._rules), result.total_count, len(result.rule_errors),
        )
        return result

    def _run_parallel(self, content: str, contract: Optional[ParsedContract]):
        workers = max(1, min(self.max_workers, len(self._rules)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self._run_rule, rule, content, contract) for rule in self._rules]
            # collected in submission order, not completion order
            return [f.result() for f in futures]

    @staticmethod
    def _run_rule(rule: AuditRule, content: str,
                  contract: Optional[ParsedContract]) -> Tuple[AuditRule, List[Vulnerability], Optional[str]]:
        try:
            findings = list(rule.check(content, contract) or [])
        except Exception as e:
            logger.error("Rule %s failed: %s", rule.name, e)
            return rule, [], str(e) or e.__class__.__name__
        return rule, findings, None
