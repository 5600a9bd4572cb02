"""
pico-bootstrap CLI argument parser.

This module implements the command-line interface for pico-bootstrap using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from picobootstrap import __version__

logger = logging.getLogger(__name__)

LIST_KINDS = [
    "sdk-tags",
    "picotool-releases",
    "sdk-tools-releases",
    "toolchain-versions",
    "openocd-versions",
]


class CLI:
    """pico-bootstrap command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="pico-bootstrap",
            description=(
                "Download and install the Pico SDK, ARM toolchain and tools into "
                "a pico-vscode compatible layout (~/.pico-sdk by default)"
            ),
            epilog='Use "pico-bootstrap COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"pico-bootstrap {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./pico-bootstrap.yaml)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_resolve_command(subparsers)
        self._add_install_command(subparsers)
        self._add_list_command(subparsers)

        return parser

    def _add_common_options(self, parser):
        """Options shared by every subcommand."""
        parser.add_argument(
            "--root",
            metavar="PATH",
            help="Install root directory (default: ~/.pico-sdk)",
        )
        parser.add_argument(
            "--github-token",
            metavar="TOKEN",
            help="GitHub token, recommended to avoid API rate limits "
            "(default: $PICO_BOOTSTRAP_GITHUB_TOKEN or $GITHUB_TOKEN)",
        )

    def _add_version_options(self, parser):
        """Per-component version options of resolve and install."""
        group = parser.add_argument_group("component versions")
        group.add_argument("--sdk", metavar="VERSION", help="Pico SDK tag, e.g. 2.2.0")
        group.add_argument(
            "--toolchain",
            metavar="VERSION",
            help="ARM toolchain version in underscore format, e.g. 14_2_Rel1",
        )
        group.add_argument("--cmake", metavar="VERSION", help="CMake version, e.g. 3.31.5")
        group.add_argument("--ninja", metavar="VERSION", help="Ninja version, e.g. 1.12.1")
        group.add_argument(
            "--picotool",
            metavar="VERSION",
            help="picotool version without leading v, e.g. 2.2.0-a4",
        )
        group.add_argument(
            "--openocd", metavar="VERSION", help="OpenOCD version, e.g. 0.12.0+dev"
        )
        parser.add_argument(
            "--no-sdk-tools",
            dest="include_sdk_tools",
            action="store_const",
            const=False,
            default=None,
            help="Do not resolve the optional pico-sdk-tools bundle",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        parser = subparsers.add_parser(
            "resolve",
            help="Resolve an install plan without installing",
            description=(
                "Resolve versions, download URLs and install paths without "
                "installing anything; useful for building your own UI"
            ),
        )
        self._add_common_options(parser)
        self._add_version_options(parser)
        parser.add_argument(
            "--prefer-installed",
            action="store_true",
            help="Skip network lookups for components already present under --root",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print only the machine-readable JSON plan",
        )

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Resolve and install components",
            description="Install components for specific SDK, toolchain and tool versions",
        )
        self._add_common_options(parser)
        self._add_version_options(parser)
        parser.add_argument(
            "--no-prefer-installed",
            action="store_true",
            help="Resolve every component even if it is already installed",
        )

    def _add_list_command(self, subparsers):
        """Add 'list' subcommand."""
        parser = subparsers.add_parser(
            "list",
            help="Discover available versions",
            description="Discover what is available (best effort) to offer user options",
        )
        self._add_common_options(parser)
        parser.add_argument(
            "--kind",
            required=True,
            choices=LIST_KINDS,
            help="What to list",
        )
        parser.add_argument(
            "--limit",
            type=int,
            default=30,
            metavar="N",
            help="Limit results (default: 30)",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        # Command module mapping
        command_map = {
            "resolve": "picobootstrap.cli.commands.resolve",
            "install": "picobootstrap.cli.commands.install",
            "list": "picobootstrap.cli.commands.listing",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        import importlib

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
