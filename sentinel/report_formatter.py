#!/usr/bin/env python3
"""
Report Formatter

Formats audit reports as plain text, JSON and Markdown. Output carries no
terminal escape sequences; colour rendering lives in the CLI.
"""

import json
from typing import Any, Dict, List

from sentinel.finding_aggregator import Report
from sentinel.vulnerabilities import SEVERITY_ORDER, Severity, Vulnerability


_SECTION_TITLES = {
    Severity.CRITICAL: "Critical Findings",
    Severity.HIGH: "High Risk Findings",
    Severity.MEDIUM: "Medium Risk Findings",
    Severity.LOW: "Low Risk Findings",
}


class ReportFormatter:
    def format_for_display(self, report: Report) -> str:
        """Plain-text report with summary, findings and action items."""
        lines: List[str] = ["Smart Contract Security Audit Report", "=" * 50]
        if report.label:
            lines.append(f"Contract: {report.label}")
        if report.dialect is not None:
            lines.append(f"Dialect: {report.dialect.value}")
        lines.append("")

        lines.append("Summary")
        for severity in SEVERITY_ORDER:
            lines.append(f"{severity.label} Issues: {len(report.bucket(severity))}")
        lines.append(f"Risk Score: {report.risk_score:.2f}/10 ({report.risk_level})")

        for severity in SEVERITY_ORDER:
            bucket = report.bucket(severity)
            if not bucket:
                continue
            lines.append("")
            lines.append(_SECTION_TITLES[severity])
            for vuln in bucket:
                lines.append(f"- {vuln.name}")
                lines.append(f"  Risk: {vuln.risk_description}")
                lines.append(f"  Mitigation: {vuln.recommendation}")

        lines.append("")
        if report.total == 0:
            lines.append("No vulnerabilities found!")
        else:
            lines.append("Recommended Actions")
            for idx, item in enumerate(report.action_items, start=1):
                lines.append(f"{idx}. {item}")

        if report.rule_errors:
            lines.append("")
            lines.append("Rule Errors")
            for rule_name, message in report.rule_errors:
                lines.append(f"- {rule_name}: {message}")

        return "\n".join(lines) + "\n"

    def format_for_json(self, report: Report) -> Dict[str, Any]:
        return {
            'contract': report.label,
            'dialect': report.dialect.value if report.dialect is not None else None,
            'risk_score': round(report.risk_score, 2),
            'risk_level': report.risk_level,
            'total_findings': report.total,
            'counts': {s.value: n for s, n in report.counts.items()},
            'findings': {
                s.value: [v.to_dict() for v in report.bucket(s)] for s in SEVERITY_ORDER
            },
            'action_items': list(report.action_items),
            'rule_errors': [{'rule': name, 'error': msg} for name, msg in report.rule_errors],
        }

    def format_json_string(self, report: Report) -> str:
        return json.dumps(self.format_for_json(report), indent=2)

    def format_for_markdown(self, report: Report) -> str:
        title = f"# Security Audit Report: {report.label}" if report.label else "# Security Audit Report"
        md: List[str] = [title, ""]
        md.append(f"**Risk Score:** {report.risk_score:.2f}/10 ({report.risk_level})")
        if report.dialect is not None:
            md.append(f"**Dialect:** {report.dialect.value}")
        md.append("")

        md.append("## Summary")
        md.append("")
        md.append("| Severity | Count |")
        md.append("|----------|-------|")
        for severity in SEVERITY_ORDER:
            md.append(f"| {severity.label} | {len(report.bucket(severity))} |")
        md.append("")

        for severity in SEVERITY_ORDER:
            bucket = report.bucket(severity)
            if not bucket:
                continue
            md.append(f"## {_SECTION_TITLES[severity]}")
            md.append("")
            for vuln in bucket:
                md.extend(self._markdown_finding(vuln))

        if report.action_items:
            md.append("## Recommended Actions")
            md.append("")
            for idx, item in enumerate(report.action_items, start=1):
                md.append(f"{idx}. {item}")
            md.append("")
        else:
            md.append("No vulnerabilities found.")
            md.append("")

        if report.rule_errors:
            md.append("## Rule Errors")
            md.append("")
            for rule_name, message in report.rule_errors:
                md.append(f"- **{rule_name}**: {message}")
            md.append("")

        return "\n".join(md)

    @staticmethod
    def _markdown_finding(vuln: Vulnerability) -> List[str]:
        return [
            f"### {vuln.name}",
            "",
            f"- **Severity:** {vuln.severity.label}",
            f"- **Risk:** {vuln.risk_description}",
            f"- **Recommendation:** {vuln.recommendation}",
            "",
        ]

    def format(self, report: Report, fmt: str = "text") -> str:
        """Dispatch on ``fmt`` (text, json or markdown)."""
        if fmt == "json":
            return self.format_json_string(report)
        if fmt == "markdown":
            return self.format_for_markdown(report)
        if fmt == "text":
            return self.format_for_display(report)
        raise ValueError(f"Unknown report format '{fmt}'")
