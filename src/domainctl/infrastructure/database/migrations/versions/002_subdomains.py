"""Add per-domain subdomains.

Revision ID: 002_subdomains
Revises: 001_baseline
Create Date: 2026-04-14

Existing domains keep their rows untouched; only a new table and a
nullable event column are introduced. Pre-existing events are all
DomainRegistered, so their ``parent`` stays NULL.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "002_subdomains"
down_revision: str | None = "001_baseline"
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "subdomains",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("domain_id", sa.Integer, sa.ForeignKey("domains.id"), nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("controller", sa.Text, nullable=False),
        sa.Column("registered_at", sa.Text, nullable=False),
        sa.Column("payment", sa.Text, nullable=False, server_default="0"),
        sa.UniqueConstraint("domain_id", "name"),
    )
    op.add_column("registration_events", sa.Column("parent", sa.Text(), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("registration_events") as batch:
        batch.drop_column("parent")
    op.drop_table("subdomains")
