"""Smoke tests for the CLI entrypoint."""

from click.testing import CliRunner

import typesort
from typesort.cli import cli


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Typesort copies files" in result.output
    assert "org" in result.output
    assert "config" in result.output


def test_org_requires_a_source() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["org", "out"])

    assert result.exit_code != 0
    assert "SOURCES" in result.output


def test_version_option_reports_package_version() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert typesort.__version__ in result.output
