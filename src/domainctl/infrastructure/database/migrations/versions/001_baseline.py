"""Baseline schema: top-level domains only.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-03-02

The first released registry: a flat set of top-level domains, the fee
policy and treasury balance, and the DomainRegistered event log.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "registry_state",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("admin", sa.Text, nullable=False),
        sa.Column("registration_fee", sa.Text, nullable=False, server_default="0"),
        sa.Column("balance", sa.Text, nullable=False, server_default="0"),
        sa.Column("last_registered_at", sa.Text),
        sa.Column("created", sa.Text, nullable=False),
    )

    op.create_table(
        "domains",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False, unique=True),
        sa.Column("controller", sa.Text, nullable=False),
        sa.Column("registered_at", sa.Text, nullable=False),
        sa.Column("payment", sa.Text, nullable=False, server_default="0"),
    )
    op.create_index("ix_domains_controller", "domains", ["controller"])

    op.create_table(
        "registration_events",
        sa.Column("seq", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("kind", sa.Text, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("controller", sa.Text, nullable=False),
        sa.Column("payment", sa.Text, nullable=False, server_default="0"),
        sa.Column("timestamp", sa.Text, nullable=False),
    )
    op.create_index("ix_events_kind", "registration_events", ["kind"])
    op.create_index("ix_events_controller", "registration_events", ["controller"])


def downgrade() -> None:
    op.drop_table("registration_events")
    op.drop_table("domains")
    op.drop_table("registry_state")
