#!/usr/bin/env python3
"""
Rich terminal rendering for Stylus Sentinel reports.
"""

from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from sentinel.finding_aggregator import Report
from sentinel.gas_analyzer import GasOptimization, MemoryAnalysis
from sentinel.vulnerabilities import SEVERITY_ORDER, Severity


SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "yellow",
    Severity.MEDIUM: "blue",
    Severity.LOW: "green",
}

RISK_LEVEL_STYLES = {
    "critical": "bold red",
    "high": "yellow",
    "medium": "blue",
    "low": "green",
    "none": "green",
}


class ReportRenderer:
    """Renders reports and gas findings to a rich console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render_report(self, report: Report) -> None:
        title = "Smart Contract Security Audit Report"
        if report.label:
            title += f": {escape(report.label)}"

        level_style = RISK_LEVEL_STYLES.get(report.risk_level, "white")
        summary = Table(show_header=False, box=None)
        summary.add_column("Severity", style="cyan")
        summary.add_column("Count")
        for severity in SEVERITY_ORDER:
            style = SEVERITY_STYLES[severity]
            summary.add_row(f"{severity.label} Issues", f"[{style}]{len(report.bucket(severity))}[/{style}]")
        summary.add_row("Risk Score", f"[{level_style}]{report.risk_score:.2f}/10 ({report.risk_level})[/{level_style}]")
        if report.dialect is not None:
            summary.add_row("Dialect", report.dialect.value)
        self.console.print(Panel(summary, title=title, border_style="bright_green"))

        if report.total == 0:
            self.console.print("[green]✅ No vulnerabilities found![/green]")
        else:
            findings = Table(title="Findings")
            findings.add_column("Severity", style="bold")
            findings.add_column("Name", style="white")
            findings.add_column("Risk", style="dim")
            findings.add_column("Recommendation", style="bright_green")
            for vuln in report.findings():
                style = SEVERITY_STYLES[vuln.severity]
                findings.add_row(
                    f"[{style}]{vuln.severity.label}[/{style}]",
                    escape(vuln.name),
                    escape(vuln.risk_description),
                    escape(vuln.recommendation),
                )
            self.console.print(findings)

            self.console.print("\n[bold cyan]Recommended Actions[/bold cyan]")
            for idx, item in enumerate(report.action_items, start=1):
                self.console.print(f"  {idx}. {escape(item)}")

        if report.rule_errors:
            self.console.print("\n[bold red]Rule Errors[/bold red]")
            for rule_name, message in report.rule_errors:
                self.console.print(f"  [red]✗[/red] {escape(rule_name)}: {escape(message)}")

    def render_gas(self, optimizations: List[GasOptimization],
                   memory: Optional[List[MemoryAnalysis]] = None) -> None:
        if not optimizations:
            self.console.print("[green]No gas optimizations found[/green]")
        else:
            table = Table(title="⛽ Gas Optimizations")
            table.add_column("Line", style="cyan", justify="right")
            table.add_column("Category", style="magenta")
            table.add_column("Issue", style="white")
            table.add_column("Suggestion", style="green")
            table.add_column("Est. Savings", style="yellow", justify="right")
            for opt in optimizations:
                table.add_row(str(opt.line), opt.category.value, escape(opt.description), escape(opt.suggestion),
                              str(opt.estimated_savings))
            self.console.print(table)
            total = sum(o.estimated_savings for o in optimizations)
            self.console.print(f"[bold]Total estimated savings:[/bold] {total} gas")

        if memory:
            table = Table(title="Memory Usage")
            table.add_column("Line", style="cyan", justify="right")
            table.add_column("Pattern", style="magenta")
            table.add_column("Issue", style="white")
            table.add_column("Suggestion", style="green")
            for item in memory:
                table.add_row(str(item.line), item.pattern_type.value, escape(item.description), escape(item.suggestion))
            self.console.print(table)

    def render_overview(self, functions: List[str], state_variables: List[str]) -> None:
        table = Table(title="Contract Overview")
        table.add_column("Public Functions", style="cyan")
        table.add_column("State Variables", style="green")
        for idx in range(max(len(functions), len(state_variables))):
            table.add_row(
                escape(functions[idx]) if idx < len(functions) else "",
                escape(state_variables[idx]) if idx < len(state_variables) else "",
            )
        self.console.print(table)

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗ {escape(message)}[/red]")

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓ {escape(message)}[/green]")
