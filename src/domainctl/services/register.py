"""RegistrationService: the namespace store's write side.

Pipeline: VALIDATE → CHECK + PERSIST (one serialized transaction) → NOTIFY → RESPOND

Inside the transaction, in order: fee check, existence checks, timestamp
claim, record insert, event append, treasury credit. Every check runs
before the first write, so a rejected registration leaves no trace.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from domainctl.domain.identity import validate_amount
from domainctl.domain.names import (
    InvalidNameError,
    normalize_name,
    qualified_name,
    validate_domain_name,
    validate_subdomain_name,
)
from domainctl.domain.records import DomainRecord, SubdomainRecord
from domainctl.domain.types import ErrorCode, EventKind
from domainctl.services._helpers import now_iso
from domainctl.services.access import resolve_caller
from domainctl.services.base import BaseService
from domainctl.services.result import ServiceResult, failure
from domainctl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class RegistrationService(BaseService):
    """Registers top-level domains and subdomains for a fee."""

    @traced
    def register_domain(self, name: str, *, caller: str | None, payment: int) -> ServiceResult:
        """Claim the top-level domain *name* for *caller*."""
        op = "register_domain"
        warnings: list[str] = []

        # ── VALIDATE ──────────────────────────────────────────────
        with trace_span("validate"):
            controller, denied = resolve_caller(caller, op)
            if denied is not None:
                return denied
            try:
                domain_name = validate_domain_name(name)
            except InvalidNameError as exc:
                return failure(op, ErrorCode.INVALID_NAME, str(exc), name=name)
            invalid = _check_amount(op, payment)
            if invalid is not None:
                return invalid

        # ── CHECK + PERSIST ───────────────────────────────────────
        with trace_span("persist"):
            try:
                with self._registry.transaction() as txn:
                    fee = txn.state().registration_fee
                    if payment < fee:
                        return _insufficient(op, payment, fee)
                    if txn.find_domain(domain_name) is not None:
                        return _already_registered(op, domain_name)

                    registered_at = txn.next_timestamp(now_iso())
                    txn.insert_domain(domain_name, controller, registered_at, payment)
                    seq = txn.append_event(
                        EventKind.DOMAIN_REGISTERED,
                        domain_name,
                        controller,
                        payment,
                        registered_at,
                    )
                    txn.credit(payment)
            except IntegrityError:
                # Lost a race against a writer outside this process's lock.
                return _already_registered(op, domain_name)

        logger.info("Registered domain %s for %s (payment %d)", domain_name, controller, payment)
        record = DomainRecord(name=domain_name, controller=controller, registered_at=registered_at)

        self._notify_plugins(
            warnings,
            "post_register_domain",
            name=domain_name,
            controller=controller,
            payment=payment,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={**record.model_dump(exclude={"subdomains"}), "payment": payment, "seq": seq},
            warnings=warnings,
        )

    @traced
    def register_subdomain(
        self,
        parent: str,
        name: str,
        *,
        caller: str | None,
        payment: int,
    ) -> ServiceResult:
        """Claim the label *name* under the registered domain *parent*.

        *name* may be a bare label or qualified by its parent
        (``test`` or ``test.com`` under ``com``).
        """
        op = "register_subdomain"
        warnings: list[str] = []

        with trace_span("validate"):
            controller, denied = resolve_caller(caller, op)
            if denied is not None:
                return denied
            parent_name = normalize_name(parent)
            try:
                label = validate_subdomain_name(name, parent_name)
            except InvalidNameError as exc:
                return failure(op, ErrorCode.INVALID_NAME, str(exc), name=name)
            invalid = _check_amount(op, payment)
            if invalid is not None:
                return invalid

        with trace_span("persist"):
            try:
                with self._registry.transaction() as txn:
                    parent_row = txn.find_domain(parent_name)
                    if parent_row is None:
                        return failure(
                            op,
                            ErrorCode.UNKNOWN_PARENT,
                            f"Parent domain {parent_name!r} is not registered",
                            parent=parent_name,
                        )
                    fee = txn.state().registration_fee
                    if payment < fee:
                        return _insufficient(op, payment, fee)
                    if txn.find_subdomain(parent_row.id, label) is not None:
                        return _already_registered(op, qualified_name(label, parent_name))

                    registered_at = txn.next_timestamp(now_iso())
                    txn.insert_subdomain(parent_row.id, label, controller, registered_at, payment)
                    seq = txn.append_event(
                        EventKind.SUBDOMAIN_REGISTERED,
                        qualified_name(label, parent_name),
                        controller,
                        payment,
                        registered_at,
                        parent=parent_name,
                    )
                    txn.credit(payment)
            except IntegrityError:
                return _already_registered(op, qualified_name(label, parent_name))

        logger.info(
            "Registered subdomain %s for %s (payment %d)",
            qualified_name(label, parent_name),
            controller,
            payment,
        )
        record = SubdomainRecord(
            name=label,
            parent=parent_name,
            controller=controller,
            registered_at=registered_at,
        )

        self._notify_plugins(
            warnings,
            "post_register_subdomain",
            parent=parent_name,
            name=label,
            controller=controller,
            payment=payment,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                **record.model_dump(),
                "full_name": record.full_name,
                "payment": payment,
                "seq": seq,
            },
            warnings=warnings,
        )


# ---------------------------------------------------------------------------
# Failure builders
# ---------------------------------------------------------------------------


def _check_amount(op: str, payment: Any) -> ServiceResult | None:
    try:
        validate_amount(payment)
    except ValueError as exc:
        return failure(op, ErrorCode.INVALID_AMOUNT, str(exc))
    return None


def _insufficient(op: str, payment: int, fee: int) -> ServiceResult:
    logger.debug("Rejected registration: payment %d below fee %d", payment, fee)
    return failure(
        op,
        ErrorCode.INSUFFICIENT_PAYMENT,
        f"Payment {payment} is below the registration fee {fee}",
        payment=payment,
        fee=fee,
    )


def _already_registered(op: str, name: str) -> ServiceResult:
    logger.debug("Rejected registration: %s already registered", name)
    kind = "Subdomain" if "." in name else "Domain"
    return failure(op, ErrorCode.ALREADY_REGISTERED, f"{kind} already registered: {name}", name=name)
