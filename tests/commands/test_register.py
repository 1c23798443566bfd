"""Tests for the register command group."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from domainctl.cli import cli


@pytest.mark.usefixtures("_isolated_registry")
class TestRegisterDomain:
    def test_register_domain(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--as", "alice", "register", "domain", "com"])
        assert result.exit_code == 0
        assert "OK" in result.stdout
        assert "com" in result.stdout

    def test_register_domain_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "--as", "alice", "register", "domain", "com", "--payment", "3"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["op"] == "register_domain"
        assert data["data"]["controller"] == "alice"
        assert data["data"]["payment"] == 3

    def test_duplicate_exits_1(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["--as", "alice", "register", "domain", "com"])
        result = cli_runner.invoke(cli, ["--as", "bob", "register", "domain", "com"])
        assert result.exit_code == 1
        assert result.stdout == ""
        assert "ALREADY_REGISTERED" in result.stderr

    def test_dotted_name_rejected(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--as", "alice", "register", "domain", "business.com"])
        assert result.exit_code == 1
        assert "INVALID_NAME" in result.stderr

    def test_insufficient_payment(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--as", "alice", "register", "domain", "com", "--payment", "0"]
        )
        assert result.exit_code == 1
        assert "INSUFFICIENT_PAYMENT" in result.stderr

    def test_missing_identity(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["register", "domain", "com"])
        assert result.exit_code == 1
        assert "MISSING_IDENTITY" in result.stderr

    def test_identity_from_env(
        self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DOMAINCTL_IDENTITY", "carol")
        result = cli_runner.invoke(cli, ["--json", "register", "domain", "com"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["controller"] == "carol"


@pytest.mark.usefixtures("_isolated_registry")
class TestRegisterSubdomain:
    def test_register_subdomain(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["--as", "alice", "register", "domain", "com"])
        result = cli_runner.invoke(
            cli, ["--json", "--as", "bob", "register", "subdomain", "com", "test.com"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["full_name"] == "test.com"
        assert data["controller"] == "bob"

    def test_unknown_parent(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--as", "bob", "register", "subdomain", "com", "test"])
        assert result.exit_code == 1
        assert "UNKNOWN_PARENT" in result.stderr
