"""Registry: repository pattern with serialized write transactions.

The Registry is the single dependency injected into every service. It
owns the database engine and the plugin manager. The :meth:`transaction`
context manager is the registry's atomic-per-operation boundary:

- **Serialization**: a process-wide re-entrant lock per database file,
  plus ``BEGIN IMMEDIATE`` so other processes wait for the write lock.
  Two registrations of one name can never both observe "unregistered".
- **Atomicity**: native SQLAlchemy transaction; every write in the block
  commits together or rolls back together.
- **Reads**: :meth:`connect` opens a plain connection; under WAL it sees
  the last committed snapshot and never blocks on a writer.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from domainctl.infrastructure.database.engine import IMMEDIATE_OPTION, init_database
from domainctl.infrastructure.database.schema import (
    domains,
    fee_changes,
    registration_events,
    registry_state,
    subdomains,
    withdrawals,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy import Connection, Row
    from sqlalchemy.engine import Engine

    from domainctl.config.settings import DomainSettings
    from domainctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

_LOCKS: dict[str, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(db_path: Path) -> threading.RLock:
    """Return the process-wide write lock for *db_path*."""
    key = str(db_path.resolve())
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = threading.RLock()
            _LOCKS[key] = lock
        return lock


@dataclass(frozen=True)
class RegistryState:
    """Snapshot of the single ``registry_state`` row."""

    admin: str
    registration_fee: int
    balance: int
    last_registered_at: str | None


# ---------------------------------------------------------------------------
# RegistryTransaction: yielded to callers within transaction()
# ---------------------------------------------------------------------------


@dataclass
class RegistryTransaction:
    """Active write transaction with the registry's data-access helpers.

    All registry mutations go through these helpers so that the
    record, its event, and the treasury credit land in one commit.
    """

    conn: Connection
    _registry: Registry

    # ------------------------------------------------------------------
    # State (admin, fee, balance)
    # ------------------------------------------------------------------

    def state(self) -> RegistryState:
        return _read_state(self.conn)

    def set_fee(self, new_fee: int) -> None:
        self.conn.execute(
            update(registry_state).where(registry_state.c.id == 1).values(registration_fee=new_fee)
        )

    def credit(self, amount: int) -> int:
        """Add *amount* to the treasury balance. Returns the new balance."""
        balance = self.state().balance + amount
        self.conn.execute(
            update(registry_state).where(registry_state.c.id == 1).values(balance=balance)
        )
        return balance

    def reset_balance(self) -> None:
        self.conn.execute(update(registry_state).where(registry_state.c.id == 1).values(balance=0))

    def next_timestamp(self, now: str) -> str:
        """Claim a registration timestamp that never precedes the previous one."""
        last = self.state().last_registered_at
        stamp = last if last is not None and last > now else now
        self.conn.execute(
            update(registry_state)
            .where(registry_state.c.id == 1)
            .values(last_registered_at=stamp)
        )
        return stamp

    # ------------------------------------------------------------------
    # Namespace store
    # ------------------------------------------------------------------

    def find_domain(self, name: str) -> Row[Any] | None:
        return self.conn.execute(select(domains).where(domains.c.name == name)).first()

    def find_subdomain(self, domain_id: int, name: str) -> Row[Any] | None:
        return self.conn.execute(
            select(subdomains).where(
                subdomains.c.domain_id == domain_id,
                subdomains.c.name == name,
            )
        ).first()

    def insert_domain(self, name: str, controller: str, registered_at: str, payment: int) -> int:
        result = self.conn.execute(
            insert(domains).values(
                name=name,
                controller=controller,
                registered_at=registered_at,
                payment=payment,
            )
        )
        assert result.inserted_primary_key is not None
        return int(result.inserted_primary_key[0])

    def insert_subdomain(
        self,
        domain_id: int,
        name: str,
        controller: str,
        registered_at: str,
        payment: int,
    ) -> int:
        result = self.conn.execute(
            insert(subdomains).values(
                domain_id=domain_id,
                name=name,
                controller=controller,
                registered_at=registered_at,
                payment=payment,
            )
        )
        assert result.inserted_primary_key is not None
        return int(result.inserted_primary_key[0])

    # ------------------------------------------------------------------
    # Append-only logs
    # ------------------------------------------------------------------

    def append_event(
        self,
        kind: str,
        name: str,
        controller: str,
        payment: int,
        timestamp: str,
        *,
        parent: str | None = None,
    ) -> int:
        """Append one registration event. Returns its sequence number."""
        result = self.conn.execute(
            insert(registration_events).values(
                kind=kind,
                name=name,
                parent=parent,
                controller=controller,
                payment=payment,
                timestamp=timestamp,
            )
        )
        assert result.inserted_primary_key is not None
        return int(result.inserted_primary_key[0])

    def record_fee_change(self, old_fee: int, new_fee: int, caller: str, timestamp: str) -> None:
        self.conn.execute(
            insert(fee_changes).values(
                old_fee=old_fee,
                new_fee=new_fee,
                caller=caller,
                timestamp=timestamp,
            )
        )

    def record_withdrawal(
        self,
        recipient: str,
        amount: int,
        caller: str,
        timestamp: str,
    ) -> int:
        result = self.conn.execute(
            insert(withdrawals).values(
                recipient=recipient,
                amount=amount,
                caller=caller,
                timestamp=timestamp,
            )
        )
        assert result.inserted_primary_key is not None
        return int(result.inserted_primary_key[0])

    def set_withdrawal_receipt(self, withdrawal_id: int, receipt: str) -> None:
        self.conn.execute(
            update(withdrawals).where(withdrawals.c.id == withdrawal_id).values(receipt=receipt)
        )


def _read_state(conn: Connection) -> RegistryState:
    row = conn.execute(select(registry_state).where(registry_state.c.id == 1)).one()
    return RegistryState(
        admin=row.admin,
        registration_fee=row.registration_fee,
        balance=row.balance,
        last_registered_at=row.last_registered_at,
    )


# ---------------------------------------------------------------------------
# Registry: the repository
# ---------------------------------------------------------------------------


class Registry:
    """Repository encapsulating database access and plugin dispatch.

    Constructed once at CLI startup from :class:`DomainSettings` and stored
    in ``click.Context.obj``. Services receive the Registry via their
    :class:`BaseService` constructor.
    """

    def __init__(self, settings: DomainSettings) -> None:
        from domainctl.domain.identity import normalize_identity
        from domainctl.services._helpers import now_iso

        self._settings = settings
        self._engine: Engine = init_database(
            self.root,
            admin=normalize_identity(settings.registry.admin),
            initial_fee=settings.registry.initial_fee,
            created=now_iso(),
            auto_upgrade=settings.registry.auto_upgrade,
        )
        self._lock = _lock_for(self.db_path)
        self._active = threading.local()
        self._plugins: PluginManager | None = None

    @property
    def root(self) -> Path:
        """The registry root directory."""
        return self._settings.root

    @property
    def db_path(self) -> Path:
        return self._settings.db_path

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> DomainSettings:
        """The resolved settings for this registry."""
        return self._settings

    @property
    def plugins(self) -> PluginManager | None:
        """The plugin manager (None if not initialized)."""
        return self._plugins

    def init_plugins(self, *, load_entrypoints: bool = True) -> PluginManager:
        """Create the plugin manager and discover entry-point plugins.

        Called by AppContext when the registry is first accessed.
        """
        from domainctl.plugins.manager import PluginManager

        pm = PluginManager()
        if load_entrypoints:
            pm.discover_and_load(local_dir=self._settings.state_dir / "plugins")
        self._plugins = pm
        return pm

    def state(self) -> RegistryState:
        """Read the committed registry state."""
        with self._engine.connect() as conn:
            return _read_state(conn)

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Read-only connection on the last committed snapshot."""
        with self._engine.connect() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[RegistryTransaction]:
        """Serialized write transaction: one registry operation.

        Commits when the block exits normally, rolls back on any
        exception. A nested call on the same registry and thread joins the
        open transaction: the outermost block decides commit or rollback.

        Usage::

            with registry.transaction() as txn:
                if txn.find_domain(name) is None:
                    txn.insert_domain(...)
                    txn.append_event(...)
                    txn.credit(payment)
        """
        current: RegistryTransaction | None = getattr(self._active, "txn", None)
        if current is not None:
            yield current
            return
        with self._lock:
            with self._engine.connect() as conn:
                conn.execution_options(**{IMMEDIATE_OPTION: True})
                with conn.begin():
                    self._active.txn = RegistryTransaction(conn=conn, _registry=self)
                    try:
                        yield self._active.txn
                    finally:
                        self._active.txn = None

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self._engine.dispose()
