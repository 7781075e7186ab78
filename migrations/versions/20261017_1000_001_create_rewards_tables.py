"""Create point account, reward catalog and redemption ledger tables

Revision ID: 001
Revises:
Create Date: 2026-10-17 10:00:00.000000

Creates the following tables:
- user_accounts: Point balance per user
- reward_listings: Reward catalog with cost and stock
- redemption_records: Point-for-reward exchange ledger

Every table carries a version column used for optimistic concurrency.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ========================================
    # 1. user_accounts table
    # ========================================
    op.create_table(
        "user_accounts",
        sa.Column("id", sa.String(128), nullable=False),
        sa.Column("point_balance", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False),
        # Timestamps
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        # Constraints
        sa.PrimaryKeyConstraint("id", name="pk_user_accounts"),
        sa.CheckConstraint(
            "point_balance >= 0",
            name="ck_user_accounts_point_balance_non_negative",
        ),
    )

    # ========================================
    # 2. reward_listings table
    # ========================================
    op.create_table(
        "reward_listings",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        # Pricing and inventory
        sa.Column("cost", sa.BigInteger(), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        # Display metadata
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("details", JSONB, nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        # Timestamps
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        # Constraints
        sa.PrimaryKeyConstraint("id", name="pk_reward_listings"),
        sa.CheckConstraint("cost > 0", name="ck_reward_listings_cost_positive"),
        sa.CheckConstraint("stock >= 0", name="ck_reward_listings_stock_non_negative"),
    )
    op.create_index("ix_reward_listings_category", "reward_listings", ["category"])

    # ========================================
    # 3. redemption_records table
    # ========================================
    op.create_table(
        "redemption_records",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        # References
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("reward_id", sa.BigInteger(), nullable=False),
        # Exchange details
        sa.Column("cost_snapshot", sa.BigInteger(), nullable=False),
        sa.Column("code", sa.String(32), nullable=False),
        # Status info
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        # Timestamps
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        # Constraints
        sa.PrimaryKeyConstraint("id", name="pk_redemption_records"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["user_accounts.id"],
            name="fk_redemption_records_user_id_user_accounts",
        ),
        sa.ForeignKeyConstraint(
            ["reward_id"],
            ["reward_listings.id"],
            name="fk_redemption_records_reward_id_reward_listings",
        ),
        sa.UniqueConstraint("code", name="uq_redemption_records_code"),
        sa.CheckConstraint(
            "status IN ('pending', 'completed', 'cancelled')",
            name="ck_redemption_records_status",
        ),
        sa.CheckConstraint(
            "cost_snapshot > 0",
            name="ck_redemption_records_cost_snapshot_positive",
        ),
    )
    op.create_index("ix_redemption_records_user_id", "redemption_records", ["user_id"])
    op.create_index("ix_redemption_records_reward_id", "redemption_records", ["reward_id"])
    op.create_index("ix_redemption_records_status", "redemption_records", ["status"])


def downgrade() -> None:
    op.drop_table("redemption_records")
    op.drop_table("reward_listings")
    op.drop_table("user_accounts")
