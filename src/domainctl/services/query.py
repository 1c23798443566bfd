"""QueryService: read-only lookups over the namespace store and event log.

Every method opens a plain connection (no write lock) and reads one
committed snapshot. Name arguments are normalized the same way
registration normalizes them; a malformed name simply is not found.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from domainctl.domain.identity import normalize_identity
from domainctl.domain.names import SEPARATOR, normalize_name
from domainctl.domain.records import DomainRecord, RegistrationEvent, SubdomainRecord
from domainctl.domain.types import ErrorCode, EventKind
from domainctl.infrastructure.database.schema import (
    domains,
    registration_events,
    registry_state,
    subdomains,
)
from domainctl.services.base import BaseService
from domainctl.services.contracts import (
    DomainListResultData,
    EventsResultData,
    MetricsResultData,
    dump_validated,
)
from domainctl.services.result import ServiceResult, failure
from domainctl.services.telemetry import traced

if TYPE_CHECKING:
    from sqlalchemy import Connection, Row


class QueryService(BaseService):
    """Lookups, listings, event filtering and registry metrics."""

    # ------------------------------------------------------------------
    # get_controller / get_subdomain_controller
    # ------------------------------------------------------------------

    @traced
    def get_controller(self, name: str) -> ServiceResult:
        op = "get_controller"
        domain_name = normalize_name(name)
        with self._registry.connect() as conn:
            row = _domain_row(conn, domain_name)
        if row is None:
            return failure(op, ErrorCode.NOT_FOUND, f"Domain not registered: {domain_name}")
        return ServiceResult(
            ok=True,
            op=op,
            data={"name": row.name, "controller": row.controller},
        )

    @traced
    def get_subdomain_controller(self, parent: str, name: str) -> ServiceResult:
        op = "get_subdomain_controller"
        parent_name = normalize_name(parent)
        label = normalize_name(name)
        suffix = f"{SEPARATOR}{parent_name}"
        if label.endswith(suffix):
            label = label[: -len(suffix)]

        with self._registry.connect() as conn:
            row = conn.execute(
                select(subdomains.c.name, subdomains.c.controller)
                .join(domains, subdomains.c.domain_id == domains.c.id)
                .where(domains.c.name == parent_name, subdomains.c.name == label)
            ).first()
        full_name = f"{label}{suffix}"
        if row is None:
            return failure(op, ErrorCode.NOT_FOUND, f"Subdomain not registered: {full_name}")
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "name": row.name,
                "parent": parent_name,
                "full_name": full_name,
                "controller": row.controller,
            },
        )

    # ------------------------------------------------------------------
    # get_domain / list_domains
    # ------------------------------------------------------------------

    @traced
    def get_domain(self, name: str) -> ServiceResult:
        """Full record of one domain, subdomains in registration order."""
        op = "get_domain"
        domain_name = normalize_name(name)
        with self._registry.connect() as conn:
            row = _domain_row(conn, domain_name)
            if row is None:
                return failure(op, ErrorCode.NOT_FOUND, f"Domain not registered: {domain_name}")
            sub_rows = conn.execute(
                select(subdomains)
                .where(subdomains.c.domain_id == row.id)
                .order_by(subdomains.c.id)
            ).fetchall()

        record = DomainRecord(
            name=row.name,
            controller=row.controller,
            registered_at=row.registered_at,
            subdomains=[
                SubdomainRecord(
                    name=sub.name,
                    parent=row.name,
                    controller=sub.controller,
                    registered_at=sub.registered_at,
                )
                for sub in sub_rows
            ],
        )
        return ServiceResult(ok=True, op=op, data=record.model_dump())

    @traced
    def list_domains(self) -> ServiceResult:
        """All top-level domain names in registration order."""
        with self._registry.connect() as conn:
            names = list(conn.execute(select(domains.c.name).order_by(domains.c.id)).scalars())
        return ServiceResult(
            ok=True,
            op="list_domains",
            data=dump_validated(DomainListResultData, {"count": len(names), "items": names}),
        )

    # ------------------------------------------------------------------
    # filter_events
    # ------------------------------------------------------------------

    @traced
    def filter_events(
        self,
        *,
        kind: EventKind | str | None = None,
        controller: str | None = None,
        parent: str | None = None,
        limit: int | None = None,
    ) -> ServiceResult:
        """Registration events in emission order, optionally filtered.

        With *limit*, only the most recent ``limit`` matching events are
        returned, still oldest first.
        """
        op = "filter_events"
        stmt = select(registration_events)
        if kind is not None:
            stmt = stmt.where(registration_events.c.kind == str(kind))
        if controller is not None:
            try:
                controller = normalize_identity(controller)
            except ValueError:
                return failure(op, ErrorCode.MISSING_IDENTITY, "Controller filter is empty")
            stmt = stmt.where(registration_events.c.controller == controller)
        if parent is not None:
            stmt = stmt.where(registration_events.c.parent == normalize_name(parent))

        if limit is not None:
            if limit < 0:
                return failure(op, ErrorCode.INVALID_AMOUNT, f"Limit must be >= 0, got {limit}")
            stmt = stmt.order_by(registration_events.c.seq.desc()).limit(limit)
            with self._registry.connect() as conn:
                rows = list(reversed(conn.execute(stmt).fetchall()))
        else:
            with self._registry.connect() as conn:
                rows = conn.execute(stmt.order_by(registration_events.c.seq)).fetchall()

        items = [_event_from_row(row).to_payload() for row in rows]
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(EventsResultData, {"count": len(items), "items": items}),
        )

    # ------------------------------------------------------------------
    # metrics
    # ------------------------------------------------------------------

    @traced
    def metrics(self, controller: str | None = None) -> ServiceResult:
        """Registration totals, current fee and treasury balance.

        With *controller*, also the names that identity registered.
        """
        op = "metrics"
        data: dict[str, Any] = {}
        with self._registry.connect() as conn:
            state = conn.execute(
                select(registry_state.c.registration_fee, registry_state.c.balance).where(
                    registry_state.c.id == 1
                )
            ).one()
            data["total_registrations"] = _count(conn, registration_events.c.seq)
            data["domain_count"] = _count(conn, domains.c.id)
            data["subdomain_count"] = _count(conn, subdomains.c.id)
            data["fee"] = state.registration_fee
            data["balance"] = state.balance

            if controller is not None:
                try:
                    owner = normalize_identity(controller)
                except ValueError:
                    return failure(op, ErrorCode.MISSING_IDENTITY, "Controller filter is empty")
                data["controller"] = owner
                data["owned_domains"] = list(
                    conn.execute(
                        select(domains.c.name)
                        .where(domains.c.controller == owner)
                        .order_by(domains.c.id)
                    ).scalars()
                )
                sub_rows = conn.execute(
                    select(subdomains.c.name, domains.c.name.label("parent"))
                    .join(domains, subdomains.c.domain_id == domains.c.id)
                    .where(subdomains.c.controller == owner)
                    .order_by(subdomains.c.id)
                ).fetchall()
                data["owned_subdomains"] = [f"{r.name}{SEPARATOR}{r.parent}" for r in sub_rows]

        return ServiceResult(ok=True, op=op, data=dump_validated(MetricsResultData, data))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _domain_row(conn: Connection, name: str) -> Row[Any] | None:
    return conn.execute(select(domains).where(domains.c.name == name)).first()


def _count(conn: Connection, column: Any) -> int:
    return int(conn.execute(select(func.count(column))).scalar_one())


def _event_from_row(row: Row[Any]) -> RegistrationEvent:
    return RegistrationEvent(
        seq=row.seq,
        kind=EventKind(row.kind),
        name=row.name,
        parent=row.parent,
        controller=row.controller,
        payment=row.payment,
        timestamp=row.timestamp,
    )
