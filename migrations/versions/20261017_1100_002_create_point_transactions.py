"""Create point transaction history table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17 11:00:00.000000

Creates the following tables:
- point_transactions: Signed point balance changes (awards, redemptions, refunds)
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "point_transactions",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        # Owner
        sa.Column("user_id", sa.String(128), nullable=False),
        # Change details
        sa.Column("points", sa.BigInteger(), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("redemption_id", sa.BigInteger(), nullable=True),
        # Timestamps
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        # Constraints
        sa.PrimaryKeyConstraint("id", name="pk_point_transactions"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["user_accounts.id"],
            name="fk_point_transactions_user_id_user_accounts",
        ),
        sa.ForeignKeyConstraint(
            ["redemption_id"],
            ["redemption_records.id"],
            name="fk_point_transactions_redemption_id_redemption_records",
        ),
        sa.CheckConstraint("points <> 0", name="ck_point_transactions_points_non_zero"),
        sa.CheckConstraint(
            "type IN ('points_awarded', 'points_redeemed', 'points_refunded')",
            name="ck_point_transactions_type",
        ),
    )
    op.create_index("ix_point_transactions_user_id", "point_transactions", ["user_id"])
    op.create_index("ix_point_transactions_type", "point_transactions", ["type"])


def downgrade() -> None:
    op.drop_table("point_transactions")
