"""Database engine setup for SQLite with WAL mode.

SQLite is the persistence layer: WAL mode so readers see the last
committed snapshot while a writer is active, ACID transactions for the
registry's atomic-per-operation transitions. The DB is stored at
``{root}/.domainctl/registry.db``.

The pysqlite driver's own transaction handling is disabled so that
SQLAlchemy emits ``BEGIN`` itself. Connections carrying the
``sqlite_immediate`` execution option start with ``BEGIN IMMEDIATE``,
taking the database write lock up front; writers are serialized across
processes, not just threads.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, insert, select
from sqlalchemy.engine import Connection, Engine

from domainctl.config.discovery import DB_FILENAME, STATE_DIRNAME
from domainctl.infrastructure.database.schema import metadata, registry_state

IMMEDIATE_OPTION = "sqlite_immediate"


def create_db_engine(db_path: Path, *, busy_timeout: float = 30.0) -> Engine:
    """Create a SQLite engine with WAL mode and foreign keys enabled."""
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"timeout": busy_timeout, "check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin(conn: Connection) -> None:
        if conn.get_execution_options().get(IMMEDIATE_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")

    return engine


def init_database(
    root: Path,
    *,
    admin: str,
    initial_fee: int = 0,
    created: str,
    auto_upgrade: bool = True,
) -> Engine:
    """Initialize the registry database at ``{root}/.domainctl/registry.db``.

    A fresh database gets all tables from :data:`schema.metadata` and is
    stamped at the Alembic head revision. An existing database behind head
    is migrated in place when *auto_upgrade* is set; its records are kept
    as they are.

    The single ``registry_state`` row is seeded with *admin* and
    *initial_fee* only if it does not exist yet. Idempotent: safe to call
    on an existing registry.

    Returns the engine ready for use.
    """
    state_dir = root / STATE_DIRNAME
    state_dir.mkdir(parents=True, exist_ok=True)
    (state_dir / "backups").mkdir(exist_ok=True)

    db_path = state_dir / DB_FILENAME
    fresh = not db_path.exists()
    engine = create_db_engine(db_path)

    from domainctl.infrastructure.database.migrations import (
        has_pending_migrations,
        stamp_head,
        upgrade_head,
    )

    if fresh:
        metadata.create_all(engine)
        stamp_head(db_path)
    elif auto_upgrade and has_pending_migrations(engine, db_path):
        upgrade_head(db_path)

    _seed_state(engine, admin=admin, initial_fee=initial_fee, created=created)
    return engine


def _seed_state(engine: Engine, *, admin: str, initial_fee: int, created: str) -> None:
    """Insert the registry_state row if it doesn't exist."""
    with engine.begin() as conn:
        row = conn.execute(select(registry_state.c.id).where(registry_state.c.id == 1)).first()
        if row is None:
            conn.execute(
                insert(registry_state).values(
                    id=1,
                    admin=admin,
                    registration_fee=initial_fee,
                    balance=0,
                    created=created,
                )
            )
