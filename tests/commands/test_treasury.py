"""Tests for the treasury command group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from domainctl.cli import cli


@pytest.mark.usefixtures("_isolated_registry")
class TestTreasuryCommands:
    def test_balance(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["--as", "alice", "register", "domain", "com", "--payment", "4"])
        result = cli_runner.invoke(cli, ["-q", "treasury", "balance"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "4"

    def test_withdraw(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["--as", "alice", "register", "domain", "com", "--payment", "4"])
        result = cli_runner.invoke(
            cli, ["--json", "--as", "admin", "treasury", "withdraw", "0xRecipient"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["amount"] == 4
        assert data["receipt"].startswith("ledger-")

    def test_withdraw_unauthorized(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--as", "bob", "treasury", "withdraw", "0xabc"])
        assert result.exit_code == 1
        assert "UNAUTHORIZED" in result.stderr

    def test_withdraw_uses_configured_recipient(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        (tmp_path / "domainctl.toml").write_text(
            '[treasury]\nrecipient = "0xfeed"\n', encoding="utf-8"
        )
        cli_runner.invoke(cli, ["--as", "alice", "register", "domain", "com"])
        result = cli_runner.invoke(cli, ["--json", "--as", "admin", "treasury", "withdraw"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["recipient"] == "0xfeed"

    def test_withdraw_without_recipient(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--as", "admin", "treasury", "withdraw"])
        assert result.exit_code == 1
        assert "INVALID_RECIPIENT" in result.stderr
