"""SQLAlchemy Core table definitions for the registry database.

Two-level namespace: ``domains`` holds globally unique top-level names and
``subdomains`` holds labels unique per parent. The UNIQUE constraints are
the final arbiter of "at most one winner" under contention.

Amounts are stored through :class:`Amount` (decimal text) so that
base-unit values beyond 64 bits survive the round trip.

Schema evolution rule: add tables and nullable/defaulted columns only,
never repurpose an existing column. Every change ships as an Alembic
revision under ``migrations/versions``.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.types import TypeDecorator


class Amount(TypeDecorator[int]):
    """Non-negative arbitrary-precision integer persisted as decimal text."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> str | None:
        if value is None:
            return None
        return str(int(value))

    def process_result_value(self, value: Any, dialect: Any) -> int | None:
        if value is None:
            return None
        return int(value)


metadata = MetaData()

# Single-row table (id = 1): administrator, fee policy, treasury balance.
registry_state = Table(
    "registry_state",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("admin", Text, nullable=False),
    Column("registration_fee", Amount, nullable=False, server_default="0"),
    Column("balance", Amount, nullable=False, server_default="0"),
    Column("last_registered_at", Text),
    Column("created", Text, nullable=False),
)

domains = Table(
    "domains",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False, unique=True),
    Column("controller", Text, nullable=False),
    Column("registered_at", Text, nullable=False),
    Column("payment", Amount, nullable=False, server_default="0"),
)

subdomains = Table(
    "subdomains",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("domain_id", Integer, ForeignKey("domains.id"), nullable=False),
    Column("name", Text, nullable=False),
    Column("controller", Text, nullable=False),
    Column("registered_at", Text, nullable=False),
    Column("payment", Amount, nullable=False, server_default="0"),
    UniqueConstraint("domain_id", "name"),
)

registration_events = Table(
    "registration_events",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("kind", Text, nullable=False),
    Column("name", Text, nullable=False),
    Column("controller", Text, nullable=False),
    Column("payment", Amount, nullable=False, server_default="0"),
    Column("timestamp", Text, nullable=False),
    Column("parent", Text),  # added in 002_subdomains
)

withdrawals = Table(
    "withdrawals",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("recipient", Text, nullable=False),
    Column("amount", Amount, nullable=False),
    Column("receipt", Text),
    Column("caller", Text, nullable=False),
    Column("timestamp", Text, nullable=False),
)

fee_changes = Table(
    "fee_changes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("old_fee", Amount, nullable=False),
    Column("new_fee", Amount, nullable=False),
    Column("caller", Text, nullable=False),
    Column("timestamp", Text, nullable=False),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("ix_domains_controller", domains.c.controller)
Index("ix_events_kind", registration_events.c.kind)
Index("ix_events_controller", registration_events.c.controller)
