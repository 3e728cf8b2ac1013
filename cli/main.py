"""
Main CLI implementation for Stylus Sentinel.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from rich.console import Console

from cli.console import ReportRenderer
from sentinel.audit_engine import SentinelAuditEngine
from sentinel.config_manager import ConfigManager
from sentinel.exceptions import ConfigError, ParseError, SentinelError
from sentinel.file_handler import FileHandler
from sentinel.gas_analyzer import StylusGasAnalyzer
from sentinel.report_formatter import ReportFormatter
from sentinel.scaffold_generator import ScaffoldGenerator
from sentinel.source_parser import SourceIRBuilder

logger = logging.getLogger(__name__)


class SentinelCLI:
    """Command implementations. Every ``run_*`` method returns an exit code."""

    def __init__(self, config_file: Optional[str] = None, console: Optional[Console] = None):
        self.version = "0.1.0"
        self.console = console or Console()
        self.file_handler = FileHandler()
        if config_file:
            self.config_manager = ConfigManager(config_file, console=self.console)
        else:
            self.config_manager = ConfigManager(console=self.console)
        self.renderer = ReportRenderer(self.console)
        self.formatter = ReportFormatter()

    def show_version(self) -> None:
        self.console.print(f"Stylus Sentinel v{self.version}")

    def resolve_output(self, output: str) -> str:
        """Relative output paths are placed under the configured output_dir."""
        path = Path(output).expanduser()
        if path.is_absolute():
            return str(path)
        return str(self.config_manager.get_output_path() / path)

    def run_audit(self, contract_path: str, output_format: Optional[str] = None,
                  output: Optional[str] = None, parallel: bool = False, extended: bool = False) -> int:
        config = self.config_manager.config
        if parallel:
            config.parallel_rules = True
        if extended:
            config.extended_rules = True
        fmt = output_format or config.report_format
        logger.debug("Audit of %s with %s", contract_path, config)

        engine = SentinelAuditEngine(config)
        try:
            report = engine.audit_file(contract_path)
        except FileNotFoundError as e:
            self.renderer.error(str(e))
            return 1
        except ParseError as e:
            self.renderer.error(f"Parse error: {e}")
            return 1
        except SentinelError as e:
            self.renderer.error(str(e))
            return 1

        if output:
            target = self.resolve_output(output)
            self.file_handler.write_file(target, self.formatter.format(report, fmt))
            self.renderer.success(f"Report written to {target}")
        elif fmt == "text":
            self.renderer.render_report(report)
        else:
            # plain print keeps JSON/Markdown free of rich markup processing
            print(self.formatter.format(report, fmt))

        return 0

    def run_gas(self, contract_path: str, detailed: bool = False) -> int:
        try:
            content = self.file_handler.read_contract(contract_path)
        except (FileNotFoundError, SentinelError) as e:
            self.renderer.error(str(e))
            return 1

        analyzer = StylusGasAnalyzer(content)
        self.renderer.render_overview(analyzer.extract_functions(), analyzer.extract_state_variables())
        self.renderer.render_gas(analyzer.analyze(), analyzer.analyze_memory_usage(detailed))
        return 0

    def run_generate_tests(self, contract_path: str, test_type: str = "both",
                           output: Optional[str] = None) -> int:
        try:
            content = self.file_handler.read_contract(contract_path)
            contract = SourceIRBuilder().build(content, label=contract_path)
            tests = ScaffoldGenerator(contract).generate(test_type)
        except (FileNotFoundError, SentinelError) as e:
            # ParseError and ScaffoldError both land here
            self.renderer.error(str(e))
            return 1

        if output:
            target = self.resolve_output(output)
            self.file_handler.write_file(target, tests)
            self.renderer.success(f"Tests written to {target}")
        else:
            print(tests)
        return 0

    def run_config(self, show: bool = False, set_pair: Optional[Tuple[str, str]] = None) -> int:
        if set_pair:
            key, value = set_pair
            try:
                stored = self.config_manager.set_value(key, value)
            except ConfigError as e:
                self.renderer.error(str(e))
                return 1
            self.config_manager.save_config()
            self.renderer.success(f"{key} = {stored}")
            return 0
        if show:
            self.config_manager.show_config()
            return 0
        self.console.print("Config commands: --show, --set KEY VALUE")
        return 1
