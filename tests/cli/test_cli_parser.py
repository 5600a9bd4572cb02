"""
Tests for CLI argument parsing and command dispatch.
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from picobootstrap.cli.parser import CLI, LIST_KINDS, main


@pytest.fixture
def cli():
    return CLI()


class TestGlobalOptions:
    """Test options shared by every command."""

    def test_version(self, cli, capsys):
        """Test --version prints the program version and exits 0."""
        with pytest.raises(SystemExit) as exc_info:
            cli.parse_args(["--version"])

        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("pico-bootstrap ")

    def test_verbose_quiet_config(self, cli):
        """Test global flags precede the subcommand."""
        args = cli.parse_args(["-v", "--config", "custom.yaml", "list", "--kind", "sdk-tags"])

        assert args.verbose is True
        assert args.quiet is False
        assert args.config == Path("custom.yaml")

    def test_no_command_prints_help(self, cli, capsys):
        """Test running without a command shows help and fails."""
        assert cli.run([]) == 1
        assert "resolve" in capsys.readouterr().out


class TestResolveArguments:
    """Test 'resolve' option parsing."""

    def test_versions_and_flags(self, cli):
        """Test every version option and flag is parsed."""
        args = cli.parse_args(
            [
                "resolve",
                "--sdk", "2.2.0",
                "--toolchain", "14_2_Rel1",
                "--cmake", "3.31.5",
                "--ninja", "1.12.1",
                "--picotool", "2.2.0-a4",
                "--openocd", "0.12.0+dev",
                "--root", "/tmp/pico",
                "--github-token", "ghp_x",
                "--prefer-installed",
                "--json",
                "--no-sdk-tools",
            ]
        )

        assert args.command == "resolve"
        assert args.sdk == "2.2.0"
        assert args.toolchain == "14_2_Rel1"
        assert args.openocd == "0.12.0+dev"
        assert args.root == "/tmp/pico"
        assert args.github_token == "ghp_x"
        assert args.prefer_installed is True
        assert args.json is True
        assert args.include_sdk_tools is False

    def test_defaults(self, cli):
        """Test unset options stay None so config defaults can apply."""
        args = cli.parse_args(["resolve"])

        assert args.sdk is None
        assert args.include_sdk_tools is None
        assert args.prefer_installed is False
        assert args.json is False


class TestInstallArguments:
    """Test 'install' option parsing."""

    def test_no_prefer_installed(self, cli):
        """Test the opt-out flag."""
        args = cli.parse_args(["install", "--no-prefer-installed"])

        assert args.no_prefer_installed is True

    def test_prefer_installed_by_default(self, cli):
        """Test install prefers installed components unless told otherwise."""
        assert cli.parse_args(["install"]).no_prefer_installed is False


class TestListArguments:
    """Test 'list' option parsing."""

    @pytest.mark.parametrize("kind", LIST_KINDS)
    def test_kinds(self, cli, kind):
        """Test every supported kind parses."""
        assert cli.parse_args(["list", "--kind", kind]).kind == kind

    def test_kind_required(self, cli):
        """Test --kind is mandatory."""
        with pytest.raises(SystemExit) as exc_info:
            cli.parse_args(["list"])

        assert exc_info.value.code == 2

    def test_invalid_kind(self, cli):
        """Test unknown kinds are rejected by argparse."""
        with pytest.raises(SystemExit):
            cli.parse_args(["list", "--kind", "gcc-versions"])

    def test_limit(self, cli):
        """Test --limit default and override."""
        assert cli.parse_args(["list", "--kind", "sdk-tags"]).limit == 30
        assert cli.parse_args(["list", "--kind", "sdk-tags", "--limit", "5"]).limit == 5


class TestRun:
    """Test CLI.run() dispatch and exit codes."""

    @patch("picobootstrap.cli.commands.listing.run", return_value=0)
    def test_dispatch(self, mock_run, cli):
        """Test the command module's run() receives the parsed args."""
        assert cli.run(["list", "--kind", "openocd-versions"]) == 0

        args = mock_run.call_args[0][0]
        assert args.kind == "openocd-versions"

    @patch.object(CLI, "_configure_logging")
    @patch("picobootstrap.cli.commands.resolve.run", side_effect=RuntimeError("boom"))
    def test_error_exit_code(self, mock_run, mock_logging, cli, caplog):
        """Test exceptions are logged and map to exit code 1."""
        with caplog.at_level(logging.ERROR):
            assert cli.run(["resolve"]) == 1

        assert "Error: boom" in caplog.text

    @patch("picobootstrap.cli.commands.install.run", side_effect=KeyboardInterrupt)
    def test_interrupt_exit_code(self, mock_run, cli):
        """Test Ctrl-C maps to exit code 130."""
        assert cli.run(["install"]) == 130

    @patch("picobootstrap.cli.commands.resolve.run", side_effect=RuntimeError("boom"))
    def test_verbose_prints_traceback(self, mock_run, cli, capsys):
        """Test --verbose adds a traceback on failure."""
        assert cli.run(["-v", "resolve"]) == 1

        assert "Traceback" in capsys.readouterr().err

    @patch("picobootstrap.cli.commands.listing.run", return_value=0)
    def test_main_exits_with_code(self, mock_run):
        """Test main() passes the exit code to sys.exit."""
        with patch("sys.argv", ["pico-bootstrap", "list", "--kind", "sdk-tags"]):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 0
