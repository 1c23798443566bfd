"""Tests for the fee command group."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from domainctl.cli import cli


@pytest.mark.usefixtures("_isolated_registry")
class TestFeeCommands:
    def test_show(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "fee", "show"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "1"

    def test_admin_sets_fee(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "--as", "admin", "fee", "set", "2"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"] == {"fee": 2, "previous_fee": 1}

    def test_non_admin_unauthorized(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--as", "mallory", "fee", "set", "0"])
        assert result.exit_code == 1
        assert "UNAUTHORIZED" in result.stderr
        shown = cli_runner.invoke(cli, ["-q", "fee", "show"])
        assert shown.stdout.strip() == "1"

    def test_registration_pays_current_fee_by_default(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["--as", "admin", "fee", "set", "3"])
        result = cli_runner.invoke(cli, ["--json", "--as", "alice", "register", "domain", "net"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["payment"] == 3
