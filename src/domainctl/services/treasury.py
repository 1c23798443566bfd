"""TreasuryService: custody of collected registration fees.

The balance grows only through registration (``RegistryTransaction.credit``)
and shrinks only through :meth:`TreasuryService.withdraw`.

Withdrawal ordering inside one serialized transaction:
  1. authorize the caller, then resolve the recipient
  2. perform the external transfer (``transfer_funds`` plugin hook)
  3. only after it returns: record the withdrawal, zero the balance

A transfer that raises leaves nothing written, so the balance is intact.
With no transfer plugin installed the withdrawal row itself is the payout
instruction (receipt ``ledger-<id>``) for an external settlement process.
"""

from __future__ import annotations

import logging

from domainctl.domain.identity import normalize_identity
from domainctl.domain.types import ErrorCode
from domainctl.services._helpers import now_iso
from domainctl.services.access import require_admin, resolve_caller
from domainctl.services.base import BaseService
from domainctl.services.result import ServiceResult, failure
from domainctl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class TreasuryService(BaseService):
    """Reads the treasury balance and withdraws it to a recipient."""

    @traced
    def balance(self) -> ServiceResult:
        return ServiceResult(
            ok=True,
            op="balance",
            data={"balance": self._registry.state().balance},
        )

    @traced
    def withdraw(self, recipient: str | None = None, *, caller: str | None) -> ServiceResult:
        """Transfer the entire balance to *recipient*. Administrator only.

        *recipient* defaults to ``[treasury] recipient`` from config.
        """
        op = "withdraw"
        warnings: list[str] = []

        caller_id, denied = resolve_caller(caller, op)
        if denied is not None:
            return denied

        with self._registry.transaction() as txn:
            state = txn.state()
            denied = require_admin(state, caller_id, op)
            if denied is not None:
                logger.warning("Withdrawal denied for %s", caller_id)
                return denied

            try:
                target = normalize_identity(
                    recipient or self._registry.settings.treasury.recipient or ""
                )
            except ValueError:
                return failure(
                    op,
                    ErrorCode.INVALID_RECIPIENT,
                    "No withdrawal recipient given and [treasury] recipient is not configured",
                )

            amount = state.balance
            if amount == 0:
                return ServiceResult(
                    ok=True,
                    op=op,
                    data={"recipient": target, "amount": 0, "receipt": None, "balance": 0},
                    warnings=["Treasury is empty; nothing was transferred"],
                )

            with trace_span("transfer"):
                try:
                    receipt = self._transfer(target, amount)
                except Exception as exc:
                    logger.warning("Transfer of %d to %s failed", amount, target, exc_info=True)
                    return failure(
                        op,
                        ErrorCode.TRANSFER_FAILED,
                        f"Transfer of {amount} to {target} failed: {exc}",
                        recipient=target,
                        amount=amount,
                    )

            withdrawal_id = txn.record_withdrawal(target, amount, caller_id, now_iso())
            receipt = receipt or f"ledger-{withdrawal_id}"
            txn.set_withdrawal_receipt(withdrawal_id, receipt)
            txn.reset_balance()

        logger.info("Withdrew %d to %s (receipt %s)", amount, target, receipt)
        self._notify_plugins(
            warnings, "post_withdraw", recipient=target, amount=amount, receipt=receipt
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={"recipient": target, "amount": amount, "receipt": receipt, "balance": 0},
            warnings=warnings,
        )

    def _transfer(self, recipient: str, amount: int) -> str | None:
        """Run the first ``transfer_funds`` implementation; None if there is none."""
        pm = self._registry.plugins
        if pm is None:
            return None
        receipt = pm.hook.transfer_funds(recipient=recipient, amount=amount)
        return str(receipt) if receipt is not None else None
