"""FeeService: the registration fee policy."""

from __future__ import annotations

import logging

from domainctl.domain.identity import validate_amount
from domainctl.domain.types import ErrorCode
from domainctl.services._helpers import now_iso
from domainctl.services.access import require_admin, resolve_caller
from domainctl.services.base import BaseService
from domainctl.services.result import ServiceResult, failure
from domainctl.services.telemetry import traced

logger = logging.getLogger(__name__)


class FeeService(BaseService):
    """Reads and changes the fee charged for every registration."""

    @traced
    def current_fee(self) -> ServiceResult:
        return ServiceResult(
            ok=True,
            op="current_fee",
            data={"fee": self._registry.state().registration_fee},
        )

    @traced
    def set_fee(self, new_fee: int, *, caller: str | None) -> ServiceResult:
        """Replace the registration fee. Administrator only.

        Applies to registrations submitted after this call commits; records
        already registered are unaffected.
        """
        op = "set_fee"
        warnings: list[str] = []

        caller_id, denied = resolve_caller(caller, op)
        if denied is not None:
            return denied

        with self._registry.transaction() as txn:
            state = txn.state()
            denied = require_admin(state, caller_id, op)
            if denied is not None:
                logger.warning("Fee change denied for %s", caller_id)
                return denied
            try:
                validate_amount(new_fee)
            except ValueError as exc:
                return failure(op, ErrorCode.INVALID_AMOUNT, str(exc))
            old_fee = state.registration_fee
            txn.set_fee(new_fee)
            txn.record_fee_change(old_fee, new_fee, caller_id, now_iso())

        logger.info("Registration fee changed %d -> %d", old_fee, new_fee)
        self._notify_plugins(warnings, "post_set_fee", old_fee=old_fee, new_fee=new_fee)
        return ServiceResult(
            ok=True,
            op=op,
            data={"fee": new_fee, "previous_fee": old_fee},
            warnings=warnings,
        )
