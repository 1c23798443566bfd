"""SQLite database engine, schema, and migrations via SQLAlchemy Core."""

from domainctl.infrastructure.database.engine import create_db_engine, init_database
from domainctl.infrastructure.database.schema import (
    domains,
    fee_changes,
    metadata,
    registration_events,
    registry_state,
    subdomains,
    withdrawals,
)

__all__ = [
    "create_db_engine",
    "domains",
    "fee_changes",
    "init_database",
    "metadata",
    "registration_events",
    "registry_state",
    "subdomains",
    "withdrawals",
]
