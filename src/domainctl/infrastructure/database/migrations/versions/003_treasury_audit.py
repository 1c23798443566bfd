"""Record withdrawals and fee changes.

Revision ID: 003_treasury_audit
Revises: 002_subdomains
Create Date: 2026-06-08
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "003_treasury_audit"
down_revision: str | None = "002_subdomains"
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "withdrawals",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("recipient", sa.Text, nullable=False),
        sa.Column("amount", sa.Text, nullable=False),
        sa.Column("receipt", sa.Text),
        sa.Column("caller", sa.Text, nullable=False),
        sa.Column("timestamp", sa.Text, nullable=False),
    )
    op.create_table(
        "fee_changes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("old_fee", sa.Text, nullable=False),
        sa.Column("new_fee", sa.Text, nullable=False),
        sa.Column("caller", sa.Text, nullable=False),
        sa.Column("timestamp", sa.Text, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("fee_changes")
    op.drop_table("withdrawals")
