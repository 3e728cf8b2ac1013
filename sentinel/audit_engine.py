#!/usr/bin/env python3
"""
Sentinel Audit Engine

Parses contract source into the IR, runs a freshly built rule set over it
and aggregates the findings into a scored report.
"""

import logging
from pathlib import Path
from typing import Optional

from sentinel.config_manager import SentinelConfig
from sentinel.contract_ir import ParsedContract
from sentinel.file_handler import FileHandler
from sentinel.finding_aggregator import FindingAggregator, Report
from sentinel.rule_registry import AuditAnalyzer, create_default_rules
from sentinel.source_parser import SourceIRBuilder

logger = logging.getLogger(__name__)


class SentinelAuditEngine:
    """End-to-end audit of a single contract."""

    def __init__(self, config: Optional[SentinelConfig] = None, builder: Optional[SourceIRBuilder] = None):
        self.config = config or SentinelConfig()
        self.builder = builder or SourceIRBuilder()
        self.aggregator = FindingAggregator()
        self.file_handler = FileHandler()

    def parse(self, source: str, label: Optional[str] = None) -> ParsedContract:
        """Parse only. Raises ParseError for source matching neither grammar."""
        return self.builder.build(source, label)

    def create_analyzer(self) -> AuditAnalyzer:
        return AuditAnalyzer(
            rules=create_default_rules(self.config),
            parallel=self.config.parallel_rules,
            max_workers=self.config.max_workers,
        )

    def audit_source(self, source: str, label: Optional[str] = None) -> Report:
        """Audit raw source text. ParseError propagates and no rule runs."""
        contract = self.parse(source, label)
        logger.info(
            "Auditing %s (%s): %d functions, %d structures",
            label or "<source>", contract.dialect.value, contract.function_count, contract.struct_count,
        )
        result = self.create_analyzer().analyze(source, contract)
        report = self.aggregator.summarize(result, label=label, dialect=contract.dialect)
        logger.info("Risk score %.2f (%s), %d unique findings", report.risk_score, report.risk_level, report.total)
        return report

    def audit_file(self, path: str) -> Report:
        source = self.file_handler.read_contract(str(path))
        return self.audit_source(source, label=str(Path(path)))
