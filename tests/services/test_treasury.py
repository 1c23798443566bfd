"""Tests for TreasuryService: balance and withdrawal."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import select

from domainctl.config.settings import DomainSettings
from domainctl.infrastructure.database.schema import withdrawals
from domainctl.infrastructure.registry import Registry
from domainctl.plugins import hookimpl
from domainctl.services.treasury import TreasuryService
from tests.conftest import ADMIN, register_domain


class _PayoutPlugin:
    def __init__(self) -> None:
        self.transfers: list[tuple[str, int]] = []

    @hookimpl
    def transfer_funds(self, recipient: str, amount: int) -> str:
        self.transfers.append((recipient, amount))
        return "tx-0001"


class _FailingPayoutPlugin:
    @hookimpl
    def transfer_funds(self, recipient: str, amount: int) -> str:
        raise ConnectionError("node unreachable")


def _withdrawal_rows(registry: Registry) -> list:
    with registry.connect() as conn:
        return conn.execute(select(withdrawals)).fetchall()


class TestBalance:
    def test_balance_tracks_payments(self, registry: Registry) -> None:
        register_domain(registry, "com", payment=1)
        register_domain(registry, "ua", payment=3)
        assert TreasuryService(registry).balance().data == {"balance": 4}


class TestWithdraw:
    def test_non_admin_unauthorized_balance_unchanged(self, registry: Registry) -> None:
        register_domain(registry, "com", payment=2)
        result = TreasuryService(registry).withdraw("0xabc", caller="mallory")
        assert result.error is not None
        assert result.error.code == "UNAUTHORIZED"
        assert registry.state().balance == 2
        assert _withdrawal_rows(registry) == []

    def test_non_admin_without_recipient_unauthorized(self, registry: Registry) -> None:
        register_domain(registry, "com", payment=2)
        result = TreasuryService(registry).withdraw(None, caller="mallory")
        assert result.code == "UNAUTHORIZED"
        assert registry.state().balance == 2

    def test_ledger_withdrawal_without_plugin(self, registry: Registry) -> None:
        register_domain(registry, "com", payment=2)
        result = TreasuryService(registry).withdraw("0xABC", caller=ADMIN)
        assert result.ok
        assert result.data["recipient"] == "0xabc"
        assert result.data["amount"] == 2
        rows = _withdrawal_rows(registry)
        assert len(rows) == 1
        assert result.data["receipt"] == f"ledger-{rows[0].id}"
        assert registry.state().balance == 0

    def test_plugin_transfer(self, registry: Registry) -> None:
        register_domain(registry, "com", payment=5)
        pm = registry.init_plugins(load_entrypoints=False)
        plugin = _PayoutPlugin()
        pm.register_plugin(plugin)

        result = TreasuryService(registry).withdraw("0xabc", caller=ADMIN)
        assert result.ok
        assert result.data["receipt"] == "tx-0001"
        assert plugin.transfers == [("0xabc", 5)]
        assert registry.state().balance == 0

    def test_failed_transfer_keeps_balance(self, registry: Registry) -> None:
        register_domain(registry, "com", payment=5)
        pm = registry.init_plugins(load_entrypoints=False)
        pm.register_plugin(_FailingPayoutPlugin())

        result = TreasuryService(registry).withdraw("0xabc", caller=ADMIN)
        assert result.error is not None
        assert result.error.code == "TRANSFER_FAILED"
        assert "node unreachable" in result.error.message
        assert registry.state().balance == 5
        assert _withdrawal_rows(registry) == []

    def test_empty_treasury(self, registry: Registry) -> None:
        pm = registry.init_plugins(load_entrypoints=False)
        plugin = _PayoutPlugin()
        pm.register_plugin(plugin)

        result = TreasuryService(registry).withdraw("0xabc", caller=ADMIN)
        assert result.ok
        assert result.data["amount"] == 0
        assert result.warnings
        assert plugin.transfers == []
        assert _withdrawal_rows(registry) == []

    def test_second_withdrawal_is_empty(self, registry: Registry) -> None:
        register_domain(registry, "com", payment=2)
        svc = TreasuryService(registry)
        assert svc.withdraw("0xabc", caller=ADMIN).data["amount"] == 2
        assert svc.withdraw("0xabc", caller=ADMIN).data["amount"] == 0

    def test_missing_recipient(self, registry: Registry) -> None:
        result = TreasuryService(registry).withdraw(None, caller=ADMIN)
        assert result.error is not None
        assert result.error.code == "INVALID_RECIPIENT"

    def test_configured_recipient(self, tmp_path: Path) -> None:
        (tmp_path / "domainctl.toml").write_text(
            '[treasury]\nrecipient = "0xFeed"\n', encoding="utf-8"
        )
        registry = Registry(DomainSettings.from_cli(root=tmp_path))
        try:
            register_domain(registry, "com", payment=1)
            result = TreasuryService(registry).withdraw(caller=ADMIN)
            assert result.ok
            assert result.data["recipient"] == "0xfeed"
        finally:
            registry.close()
