#!/usr/bin/env python3
"""
Stylus Sentinel: security and gas auditing for Solidity and Stylus contracts

Main entry point for the CLI interface.
"""

import argparse
import logging
import sys

from rich.logging import RichHandler

from cli.main import SentinelCLI


def setup_logging(level: str) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sentinel",
        description="Stylus Sentinel: security and gas auditing for Solidity and Stylus contracts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sentinel audit contracts/Token.sol --format markdown -o reports/token.md
  sentinel audit src/lib.rs --parallel --extended
  sentinel gas src/lib.rs --detailed
  sentinel generate-tests src/lib.rs --type fuzz
  sentinel config --set learning_threshold 0.85
        """
    )
    parser.add_argument('--config', help='Path to config YAML (default: ~/.sentinel/config.yaml)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Audit command
    audit_parser = subparsers.add_parser('audit', help='Run the detection rules and score the contract')
    audit_parser.add_argument('contract', help='Path to a .sol or .rs contract file')
    audit_parser.add_argument('--format', choices=['text', 'json', 'markdown'], help='Report format (default from config)')
    audit_parser.add_argument('--output', '-o', help='Write the report to this file (relative paths go under output_dir)')
    audit_parser.add_argument('--parallel', action='store_true', help='Run rules on a thread pool')
    audit_parser.add_argument('--extended', action='store_true', help='Also run the extended storage rules')
    audit_parser.add_argument('--config', dest='audit_config', help='Path to config YAML')
    audit_parser.add_argument('--verbose', '-v', action='store_true', dest='audit_verbose', help='Verbose output')

    # Gas command
    gas_parser = subparsers.add_parser('gas', help='Find gas and memory optimizations in Stylus code')
    gas_parser.add_argument('contract', help='Path to a .rs or .sol contract file')
    gas_parser.add_argument('--detailed', action='store_true', help='Include detailed memory patterns')

    # Test scaffold command
    gen_parser = subparsers.add_parser('generate-tests', help='Generate unit/fuzz test scaffolds')
    gen_parser.add_argument('contract', help='Path to a .sol or .rs contract file')
    gen_parser.add_argument('--type', choices=['unit', 'fuzz', 'both'], default='both', dest='test_type',
                            help='Kind of tests to generate (default: both)')
    gen_parser.add_argument('--output', '-o', help='Write the tests to this file (relative paths go under output_dir)')

    # Config command
    config_parser = subparsers.add_parser('config', help='Manage configuration settings')
    config_parser.add_argument('--show', action='store_true', help='Show current configuration')
    config_parser.add_argument('--set', nargs=2, metavar=('KEY', 'VALUE'), help='Set a configuration value')

    subparsers.add_parser('version', help='Show version information')

    return parser


def main(argv=None) -> int:
    """Main entry point for the Sentinel CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    verbose = args.verbose or getattr(args, 'audit_verbose', False)
    config_file = getattr(args, 'audit_config', None) or args.config

    try:
        cli = SentinelCLI(config_file=config_file)
        setup_logging("DEBUG" if verbose else cli.config_manager.config.log_level)

        if args.command == 'audit':
            return cli.run_audit(
                args.contract,
                output_format=args.format,
                output=args.output,
                parallel=args.parallel,
                extended=args.extended,
            )
        elif args.command == 'gas':
            return cli.run_gas(args.contract, detailed=args.detailed)
        elif args.command == 'generate-tests':
            return cli.run_generate_tests(args.contract, test_type=args.test_type, output=args.output)
        elif args.command == 'config':
            return cli.run_config(show=args.show, set_pair=tuple(args.set) if args.set else None)
        elif args.command == 'version':
            cli.show_version()
            return 0

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
