"""Tests for FeeService and administrator access control."""

from __future__ import annotations

from sqlalchemy import select

from domainctl.infrastructure.database.schema import fee_changes
from domainctl.infrastructure.registry import Registry
from domainctl.services.access import is_admin, require_admin, resolve_caller
from domainctl.services.fees import FeeService
from tests.conftest import ADMIN


class TestAccess:
    def test_require_admin_passes_for_admin(self, registry: Registry) -> None:
        assert require_admin(registry.state(), ADMIN, "set_fee") is None

    def test_require_admin_rejects_others(self, registry: Registry) -> None:
        result = require_admin(registry.state(), "mallory", "set_fee")
        assert result is not None
        assert result.error is not None
        assert result.error.code == "UNAUTHORIZED"
        assert result.op == "set_fee"

    def test_admin_compared_after_normalization(self, registry: Registry) -> None:
        assert is_admin(registry.state(), "  admin ")

    def test_resolve_caller_missing(self) -> None:
        caller, denied = resolve_caller("", "op")
        assert caller is None
        assert denied is not None
        assert denied.error is not None
        assert denied.error.code == "MISSING_IDENTITY"


class TestFeeService:
    def test_current_fee(self, registry: Registry) -> None:
        assert FeeService(registry).current_fee().data == {"fee": 1}

    def test_admin_sets_fee(self, registry: Registry) -> None:
        result = FeeService(registry).set_fee(5, caller=ADMIN)
        assert result.ok
        assert result.data == {"fee": 5, "previous_fee": 1}
        assert FeeService(registry).current_fee().data["fee"] == 5

    def test_non_admin_unauthorized_fee_unchanged(self, registry: Registry) -> None:
        result = FeeService(registry).set_fee(0, caller="mallory")
        assert result.error is not None
        assert result.error.code == "UNAUTHORIZED"
        assert FeeService(registry).current_fee().data["fee"] == 1

    def test_non_admin_negative_fee_unauthorized(self, registry: Registry) -> None:
        result = FeeService(registry).set_fee(-1, caller="mallory")
        assert result.code == "UNAUTHORIZED"
        assert FeeService(registry).current_fee().data["fee"] == 1

    def test_negative_fee_invalid(self, registry: Registry) -> None:
        result = FeeService(registry).set_fee(-1, caller=ADMIN)
        assert result.error is not None
        assert result.error.code == "INVALID_AMOUNT"

    def test_zero_fee_allowed(self, registry: Registry) -> None:
        assert FeeService(registry).set_fee(0, caller=ADMIN).ok

    def test_fee_change_recorded(self, registry: Registry) -> None:
        FeeService(registry).set_fee(3, caller=ADMIN)
        FeeService(registry).set_fee(4, caller="mallory")
        with registry.connect() as conn:
            rows = conn.execute(select(fee_changes)).fetchall()
        assert len(rows) == 1
        assert (rows[0].old_fee, rows[0].new_fee, rows[0].caller) == (1, 3, ADMIN)
