#!/usr/bin/env python3
"""
Integration tests for CLI Main Entry Point

Tests end-to-end CLI command execution with real command invocation.
Focuses on meaningful workflows, not trivial code coverage.
"""

import pytest
from click.testing import CliRunner

from moneytrack.cli.main import main


@pytest.mark.integration
class TestCLIMainIntegration:
    """Test main CLI entry point with real command execution."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_help_command_lists_all_subcommands(self):
        """Test moneytrack --help shows all registered subcommands."""
        result = self.runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Personal Finance Tracker" in result.output

        expected_commands = ["accounts", "tx", "recurrents", "investments", "backup", "alerts", "search", "tags"]

        for command in expected_commands:
            assert command in result.output

    def test_version_command_shows_version_info(self):
        """Test moneytrack version displays version and author."""
        result = self.runner.invoke(main, ["version"])

        assert result.exit_code == 0
        assert "moneytrack v" in result.output
        assert "Author:" in result.output

    def test_config_command_shows_configuration(self):
        """Test moneytrack config displays current configuration."""
        result = self.runner.invoke(main, ["config"])

        assert result.exit_code == 0
        assert "Current Configuration:" in result.output
        assert "Environment: test" in result.output
        assert "Data Directory:" in result.output
        assert "Data File:" in result.output
        assert "Backup Directory:" in result.output
        assert "Backup Retention: 30 days" in result.output
        assert "Debug Mode:" in result.output
        assert "Log Level:" in result.output

    def test_invalid_command_shows_error(self):
        """Test that invalid command shows helpful error."""
        result = self.runner.invoke(main, ["invalid-command"])

        assert result.exit_code != 0
        assert "Error" in result.output or "No such" in result.output

    def test_verbose_flag_enables_verbose_output(self):
        """Test --verbose flag prints the environment and data file first."""
        result = self.runner.invoke(main, ["--verbose", "config"])

        assert result.exit_code == 0
        assert "Environment:" in result.output
        assert "Data file:" in result.output
        assert "Current Configuration:" in result.output

    def test_config_env_override_changes_environment(self, monkeypatch):
        """Test --config-env flag overrides environment."""
        monkeypatch.setenv("MONEYTRACK_ENV", "development")

        result = self.runner.invoke(main, ["--config-env", "test", "config"])

        assert result.exit_code == 0
        assert "Environment: test" in result.output

    def test_subcommand_help_accessible(self):
        """Test that subcommand help is accessible."""
        subcommands = ["accounts", "tx", "recurrents", "investments", "backup", "alerts", "search", "tags"]

        for subcommand in subcommands:
            result = self.runner.invoke(main, [subcommand, "--help"])
            assert result.exit_code == 0
            assert "Usage:" in result.output or "Commands:" in result.output

    def test_multiple_global_options(self):
        """Test combining multiple global options."""
        result = self.runner.invoke(main, ["--config-env", "test", "--verbose", "config"])

        assert result.exit_code == 0
        assert "Environment: test" in result.output
        assert "Data file:" in result.output
        assert "Current Configuration:" in result.output
