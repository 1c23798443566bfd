"""Alembic runtime for the registry database.

Migrations always run online against the SQLite file named by
``sqlalchemy.url``; :func:`build_config` supplies it in code. Each
revision commits on its own, so an interrupted upgrade leaves the
database at the last revision that completed.
"""

from __future__ import annotations

from typing import Any

from alembic import context
from sqlalchemy import create_engine, event, pool

from domainctl.infrastructure.database.schema import metadata


def _on_connect(dbapi_conn: Any, _record: Any) -> None:
    cursor = dbapi_conn.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
        # Wait for a registry writer instead of failing with "database is locked".
        cursor.execute("PRAGMA busy_timeout=30000")
    finally:
        cursor.close()


def _migrate() -> None:
    url = context.config.get_main_option("sqlalchemy.url")
    if url is None:
        raise RuntimeError("Alembic config has no sqlalchemy.url")

    engine = create_engine(url, poolclass=pool.NullPool)
    event.listen(engine, "connect", _on_connect)
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=metadata,
                render_as_batch=True,
                transaction_per_migration=True,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


_migrate()
