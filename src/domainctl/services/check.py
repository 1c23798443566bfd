"""CheckService: integrity and reconciliation.

Single command following the linter pattern. Four categories:
schema integrity, treasury reconciliation, event-log consistency and
name validity. Also owns the database backups taken before upgrades.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from domainctl.domain.names import is_valid_label, qualified_name
from domainctl.domain.types import ErrorCode, EventKind
from domainctl.infrastructure.database.schema import (
    domains,
    registration_events,
    registry_state,
    subdomains,
    withdrawals,
)
from domainctl.services._helpers import now_compact
from domainctl.services.base import BaseService
from domainctl.services.result import ServiceResult, failure
from domainctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from sqlalchemy import Connection

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Issue severity and category constants
# ---------------------------------------------------------------------------

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"

CAT_SCHEMA = "schema_integrity"
CAT_TREASURY = "treasury_reconciliation"
CAT_EVENTS = "event_log"
CAT_NAMES = "name_validity"

_SEVERITY_RANK = {SEVERITY_WARNING: 0, SEVERITY_ERROR: 1}

BACKUP_PREFIX = "registry-"


def _issue(category: str, severity: str, message: str, name: str | None = None) -> dict[str, Any]:
    return {"category": category, "severity": severity, "name": name, "message": message}


# ---------------------------------------------------------------------------
# CheckService
# ---------------------------------------------------------------------------


class CheckService(BaseService):
    """Handles registry integrity checking, backup and rollback."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def check(self, *, min_severity: str = SEVERITY_WARNING) -> ServiceResult:
        """Report integrity issues without modifying anything."""
        issues: list[dict[str, Any]] = []
        with self._registry.connect() as conn:
            with trace_span("schema_integrity"):
                issues.extend(self._check_schema_integrity(conn))
            with trace_span("treasury_reconciliation"):
                issues.extend(self._check_treasury(conn))
            with trace_span("event_log"):
                issues.extend(self._check_event_log(conn))
            with trace_span("name_validity"):
                issues.extend(self._check_names(conn))

        threshold = _SEVERITY_RANK[min_severity]
        issues = [i for i in issues if _SEVERITY_RANK[i["severity"]] >= threshold]
        error_count = sum(1 for i in issues if i["severity"] == SEVERITY_ERROR)
        if error_count:
            logger.warning("Integrity check found %d error(s)", error_count)

        return ServiceResult(
            ok=True,
            op="check",
            data={"issues": issues, "count": len(issues), "error_count": error_count},
        )

    @traced
    def rollback(self) -> ServiceResult:
        """Restore DB from latest backup."""
        backup_dir = self._backup_dir()
        backups = sorted(backup_dir.glob(f"{BACKUP_PREFIX}*.db")) if backup_dir.exists() else []
        if not backups:
            return failure("rollback", ErrorCode.NO_BACKUPS, "No backup files found")

        latest = backups[-1]
        db_path = self._registry.db_path

        # Dispose the engine to release file locks before copying
        self._registry.engine.dispose()
        for suffix in ("-wal", "-shm"):
            Path(f"{db_path}{suffix}").unlink(missing_ok=True)
        shutil.copy2(str(latest), str(db_path))
        logger.info("Restored %s from %s", db_path, latest)

        return ServiceResult(
            ok=True,
            op="rollback",
            data={
                "backup_file": latest.name,
                "restored_from": str(latest),
            },
        )

    # ------------------------------------------------------------------
    # Backup helpers
    # ------------------------------------------------------------------

    def _backup_dir(self) -> Path:
        return self._registry.settings.state_dir / "backups"

    def _backup_db(self) -> Path:
        """Create a timestamped backup of the database."""
        backup_dir = self._backup_dir()
        backup_dir.mkdir(parents=True, exist_ok=True)

        # Fold the WAL into the main file so the copy is complete
        raw = self._registry.engine.raw_connection()
        try:
            raw.cursor().execute("PRAGMA wal_checkpoint(TRUNCATE)")
        finally:
            raw.close()

        backup_path = backup_dir / f"{BACKUP_PREFIX}{now_compact()}.db"
        shutil.copy2(str(self._registry.db_path), str(backup_path))

        self._prune_backups(backup_dir)
        return backup_path

    def _prune_backups(self, backup_dir: Path) -> None:
        """Remove old backups exceeding retention settings."""
        max_count = self._registry.settings.backup.max_count
        backups = sorted(backup_dir.glob(f"{BACKUP_PREFIX}*.db"))

        # Enforce max count (keep newest)
        if len(backups) > max_count:
            for old in backups[: len(backups) - max_count]:
                old.unlink(missing_ok=True)

    # ------------------------------------------------------------------
    # Check categories (read-only)
    # ------------------------------------------------------------------

    def _check_schema_integrity(self, conn: Connection) -> list[dict[str, Any]]:
        """Category 1: SQLite page integrity and the single state row."""
        issues: list[dict[str, Any]] = []

        result = conn.exec_driver_sql("PRAGMA integrity_check").scalar()
        if result != "ok":
            issues.append(_issue(CAT_SCHEMA, SEVERITY_ERROR, f"SQLite integrity_check: {result}"))

        state_rows = conn.execute(select(registry_state.c.id)).fetchall()
        if len(state_rows) != 1:
            issues.append(
                _issue(
                    CAT_SCHEMA,
                    SEVERITY_ERROR,
                    f"Expected exactly one registry_state row, found {len(state_rows)}",
                )
            )
        return issues

    def _check_treasury(self, conn: Connection) -> list[dict[str, Any]]:
        """Category 2: balance == payments collected - amounts withdrawn."""
        issues: list[dict[str, Any]] = []
        state = conn.execute(
            select(registry_state.c.registration_fee, registry_state.c.balance).where(
                registry_state.c.id == 1
            )
        ).first()
        if state is None:
            return issues

        if state.registration_fee < 0:
            issues.append(
                _issue(
                    CAT_TREASURY,
                    SEVERITY_ERROR,
                    f"Registration fee is negative: {state.registration_fee}",
                )
            )

        collected = sum(conn.execute(select(domains.c.payment)).scalars()) + sum(
            conn.execute(select(subdomains.c.payment)).scalars()
        )
        withdrawn = sum(conn.execute(select(withdrawals.c.amount)).scalars())
        expected = collected - withdrawn
        if state.balance != expected:
            issues.append(
                _issue(
                    CAT_TREASURY,
                    SEVERITY_ERROR,
                    (
                        f"Treasury balance {state.balance} does not match "
                        f"payments {collected} minus withdrawals {withdrawn} ({expected})"
                    ),
                )
            )
        return issues

    def _check_event_log(self, conn: Connection) -> list[dict[str, Any]]:
        """Category 3: exactly one event per record, no orphan events."""
        issues: list[dict[str, Any]] = []

        records: dict[tuple[str, str], str] = {}
        for row in conn.execute(select(domains.c.name, domains.c.controller)):
            records[(EventKind.DOMAIN_REGISTERED, row.name)] = row.controller
        sub_rows = conn.execute(
            select(subdomains.c.name, subdomains.c.controller, domains.c.name.label("parent"))
            .join(domains, subdomains.c.domain_id == domains.c.id)
        )
        for row in sub_rows:
            full = qualified_name(row.name, row.parent)
            records[(EventKind.SUBDOMAIN_REGISTERED, full)] = row.controller

        seen: dict[tuple[str, str], int] = {}
        for event in conn.execute(
            select(
                registration_events.c.kind,
                registration_events.c.name,
                registration_events.c.controller,
            ).order_by(registration_events.c.seq)
        ):
            key = (event.kind, event.name)
            seen[key] = seen.get(key, 0) + 1
            if key not in records:
                issues.append(
                    _issue(
                        CAT_EVENTS,
                        SEVERITY_ERROR,
                        f"{event.kind} event for {event.name!r} has no matching record",
                        event.name,
                    )
                )
            elif records[key] != event.controller:
                issues.append(
                    _issue(
                        CAT_EVENTS,
                        SEVERITY_ERROR,
                        f"Event controller {event.controller!r} differs from record "
                        f"controller {records[key]!r}",
                        event.name,
                    )
                )

        for key in records:
            count = seen.get(key, 0)
            if count != 1:
                issues.append(
                    _issue(
                        CAT_EVENTS,
                        SEVERITY_ERROR,
                        f"Expected one {key[0]} event for {key[1]!r}, found {count}",
                        key[1],
                    )
                )
        return issues

    def _check_names(self, conn: Connection) -> list[dict[str, Any]]:
        """Category 4: stored names still satisfy the label rule."""
        issues: list[dict[str, Any]] = []
        for name in conn.execute(select(domains.c.name)).scalars():
            if not is_valid_label(name):
                issues.append(
                    _issue(CAT_NAMES, SEVERITY_WARNING, f"Domain name {name!r} is not valid", name)
                )
        for row in conn.execute(
            select(subdomains.c.name, domains.c.name.label("parent")).join(
                domains, subdomains.c.domain_id == domains.c.id
            )
        ):
            if not is_valid_label(row.name):
                full = qualified_name(row.name, row.parent)
                issues.append(
                    _issue(CAT_NAMES, SEVERITY_WARNING, f"Subdomain name {full!r} is not valid", full)
                )
        return issues
